"""
CRUD operations for the bids collection.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.database import parse_document_id, store_operation
from app.core.exceptions import ConflictError
from app.models.bid import Bid
from app.schemas.bid import BidCreateRequest, BidStatusUpdate

logger = logging.getLogger(__name__)

DUPLICATE_BID_MESSAGE = "You have already placed a bid on this job"


@store_operation("bids.create")
def create(db: Session, bid_data: BidCreateRequest, buyer: Optional[Dict[str, Any]] = None) -> Bid:
    """
    Insert a bid unless the user already bid on the same job.

    The lookup answers the common case; the unique (email, job_id)
    constraint catches two identical submissions racing past it.

    Args:
        db: Database session
        bid_data: Validated bid payload
        buyer: Job owner sub-document (overrides bid_data.buyer when given)

    Raises:
        ConflictError: If a bid for (email, job_id) already exists
    """
    email = str(bid_data.email).lower()

    existing = db.query(Bid).filter(Bid.email == email, Bid.job_id == bid_data.job_id).first()
    if existing:
        raise ConflictError(DUPLICATE_BID_MESSAGE, context={"bid_id": existing.id})

    data = bid_data.model_dump(exclude={"email", "job_id", "status", "buyer"})
    if buyer is None and bid_data.buyer is not None:
        buyer = bid_data.buyer.model_dump()

    db_bid = Bid(email=email, job_id=bid_data.job_id, status=bid_data.status)
    db_bid.extra = {}
    db_bid.merge_extra(data)
    db_bid.set_buyer(buyer)

    db.add(db_bid)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"Concurrent duplicate bid rejected for {email} on job {bid_data.job_id}")
        raise ConflictError(DUPLICATE_BID_MESSAGE)

    db.refresh(db_bid)
    return db_bid


@store_operation("bids.get_by_id")
def get_by_id(db: Session, bid_id: str) -> Optional[Bid]:
    return db.query(Bid).filter(Bid.id == parse_document_id(bid_id)).first()


@store_operation("bids.get_by_bidder")
def get_by_bidder(db: Session, email: str) -> List[Bid]:
    """Bids placed by `email`."""
    return (
        db.query(Bid)
        .filter(Bid.email == email.strip().lower())
        .order_by(Bid.created_at.asc(), Bid.id.asc())
        .all()
    )


@store_operation("bids.get_by_owner")
def get_by_owner(db: Session, email: str) -> List[Bid]:
    """Bids whose embedded buyer (the job owner) is `email`."""
    return (
        db.query(Bid)
        .filter(Bid.buyer_email == email.strip().lower())
        .order_by(Bid.created_at.asc(), Bid.id.asc())
        .all()
    )


@store_operation("bids.update_status")
def update_status(db: Session, bid_id: str, patch: BidStatusUpdate) -> Optional[Tuple[Bid, bool]]:
    """
    Move a bid to a new status and merge any other supplied fields.

    Returns:
        (bid, modified) if found, None otherwise

    Raises:
        ConflictError: If the status change is not an allowed transition
    """
    bid = db.query(Bid).filter(Bid.id == parse_document_id(bid_id)).first()
    if not bid:
        return None

    if not bid.status.can_transition_to(patch.status):
        raise ConflictError(
            f"Cannot change bid status from '{bid.status.value}' to '{patch.status.value}'",
            context={"bid_id": bid.id},
        )

    bid.status = patch.status
    bid.merge_extra(patch.model_dump(exclude={"status"}))
    db.commit()
    db.refresh(bid)

    return bid, True
