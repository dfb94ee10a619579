"""
Database models package.
"""

from app.models.job import Job
from app.models.bid import Bid, BidStatus

__all__ = ["Job", "Bid", "BidStatus"]
