"""
Bid database model.

A bid is a proposal placed by a user (email) against a job (job_id).
The job reference is advisory: there is no foreign key, and deleting a job
leaves its bids in place.
"""

import enum
from typing import Any, Dict, Optional

from sqlalchemy import Column, String, DateTime, Enum, JSON, UniqueConstraint
from app.core.database import Base
from app.models.job import new_document_id, utcnow


class BidStatus(str, enum.Enum):
    """
    Bid status lifecycle:

    PENDING -> ACCEPTED
            -> REJECTED

    ACCEPTED and REJECTED are terminal.
    """
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"

    def can_transition_to(self, target: "BidStatus") -> bool:
        return target in BID_TRANSITIONS[self]


BID_TRANSITIONS = {
    BidStatus.PENDING: frozenset({BidStatus.ACCEPTED, BidStatus.REJECTED}),
    BidStatus.ACCEPTED: frozenset(),
    BidStatus.REJECTED: frozenset(),
}


class Bid(Base):
    __tablename__ = "bids"
    __table_args__ = (
        # One bid per user per job, even when two submissions race
        UniqueConstraint("email", "job_id", name="uq_bids_email_job_id"),
    )

    # Keys the document renders itself; never stored as free-form fields
    RESERVED_KEYS = frozenset(
        {"_id", "id", "email", "jobId", "job_id", "status", "buyer", "buyer_email", "extra", "created_at", "updated_at"}
    )

    id = Column(String(36), primary_key=True, default=new_document_id)
    email = Column(String, nullable=False, index=True)
    job_id = Column(String, nullable=False, index=True)
    status = Column(Enum(BidStatus), default=BidStatus.PENDING, nullable=False, index=True)

    # Job owner sub-document plus its lower-cased email for owner queries
    buyer = Column(JSON, nullable=True)
    buyer_email = Column(String, nullable=True, index=True)

    extra = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    def set_buyer(self, buyer: Optional[Dict[str, Any]]) -> None:
        self.buyer = buyer
        email = (buyer or {}).get("email")
        self.buyer_email = email.lower() if email else None

    def merge_extra(self, data: Dict[str, Any]) -> bool:
        """Merge free-form fields into the document; True if anything changed."""
        extra = dict(self.extra or {})
        changed = False
        for key, value in data.items():
            if key in self.RESERVED_KEYS:
                continue
            if extra.get(key, object()) != value:
                extra[key] = value
                changed = True
        self.extra = extra
        return changed

    def to_document(self) -> Dict[str, Any]:
        document = dict(self.extra or {})
        document.update(
            {
                "_id": self.id,
                "email": self.email,
                "jobId": self.job_id,
                "status": self.status,
                "buyer": self.buyer,
                "created_at": self.created_at,
            }
        )
        return document

    def __repr__(self):
        return f"<Bid(id={self.id}, email='{self.email}', job_id={self.job_id}, status={self.status.value})>"
