"""
Bid endpoints.

- POST /bid: place a bid (one per user per job)
- PATCH /bid/{bid_id}: move a bid through pending -> accepted/rejected
- GET /my-bids/{email}: bids placed by the caller
- GET /bid-request/{email}: bids received on the caller's jobs
"""

import logging
from typing import Any, Dict, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.database import get_db
from app.core.deps import ensure_owner, get_current_identity
from app.core.exceptions import InvalidIdentifierError, NotFoundError
from app.crud import bid as bid_crud
from app.crud import job as job_crud
from app.schemas.auth import TokenIdentity
from app.schemas.bid import BidCreateRequest, BidResponse, BidStatusUpdate
from app.schemas.common import InsertResult, UpdateResult

router = APIRouter(tags=["Bids"])
logger = logging.getLogger(__name__)


def _job_owner(db: Session, job_id: str) -> Optional[Dict[str, Any]]:
    """Buyer sub-document of the referenced job, if it can be found."""
    try:
        job = job_crud.get_by_id(db, job_id)
    except InvalidIdentifierError:
        return None
    return job.buyer if job else None


@router.post("/bid", status_code=201, response_model=InsertResult)
def create_bid(request: BidCreateRequest, db: Session = Depends(get_db)):
    """
    Place a bid on a job.

    The job reference is not enforced. When the payload has no buyer, the
    referenced job's buyer is copied so the owner sees the bid request.
    Returns 409 if this user already bid on this job.
    """
    buyer = None if request.buyer is not None else _job_owner(db, request.job_id)

    new_bid = bid_crud.create(db, request, buyer=buyer)
    logger.info(f"Bid {new_bid.id} placed by {new_bid.email} on job {new_bid.job_id}")
    return InsertResult(inserted_id=new_bid.id)


@router.patch("/bid/{bid_id}", response_model=UpdateResult)
def update_bid_status(bid_id: str, request: BidStatusUpdate, db: Session = Depends(get_db)):
    """
    Change a bid's status.

    Only pending bids can change, and only to accepted or rejected;
    anything else is a 409.
    """
    result = bid_crud.update_status(db, bid_id, request)

    if result is None:
        raise NotFoundError("bid", bid_id)

    bid, modified = result
    logger.info(f"Bid {bid.id} moved to {bid.status.value}")
    return UpdateResult(matched_count=1, modified_count=int(modified))


@router.get("/my-bids/{email}", response_model=list[BidResponse])
def list_my_bids(
    email: str,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Bids placed by `email`."""
    ensure_owner(identity, email)
    return [bid.to_document() for bid in bid_crud.get_by_bidder(db, email)]


@router.get("/bid-request/{email}", response_model=list[BidResponse])
def list_bid_requests(
    email: str,
    identity: TokenIdentity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Bids placed on jobs owned by `email`."""
    ensure_owner(identity, email)
    return [bid.to_document() for bid in bid_crud.get_by_owner(db, email)]
