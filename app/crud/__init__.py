"""
CRUD operations (Create, Read, Update, Delete) for the document collections.

This layer provides a clean separation between API routes and store operations,
following the Repository pattern.
"""

from app.crud import bid, job

__all__ = ["bid", "job"]
