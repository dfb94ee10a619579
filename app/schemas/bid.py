"""
Pydantic schemas for bids.
"""

from datetime import datetime
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator

from app.models.bid import BidStatus
from app.schemas.common import BuyerInfo, DocumentResponse, lowercase_enum_value


class BidCreateRequest(BaseModel):
    """
    Request schema for placing a bid.

    `buyer` may be omitted; it is then copied from the referenced job.
    Extra fields (price, comment, deadline, ...) are stored untouched.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    email: EmailStr
    job_id: str = Field(..., min_length=1, validation_alias=AliasChoices("jobId", "job_id"))
    status: BidStatus = BidStatus.PENDING
    buyer: Optional[BuyerInfo] = None

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return lowercase_enum_value(v)

    @field_validator("status")
    @classmethod
    def must_start_pending(cls, v: BidStatus) -> BidStatus:
        if v is not BidStatus.PENDING:
            raise ValueError("New bids must start in the 'pending' status")
        return v


class BidStatusUpdate(BaseModel):
    """Status change for a bid; other supplied fields are merged in."""
    model_config = ConfigDict(extra="allow")

    status: BidStatus

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        return lowercase_enum_value(v)


class BidResponse(DocumentResponse):
    email: str
    job_id: str = Field(..., alias="jobId")
    status: BidStatus
    buyer: Optional[dict] = None
    created_at: Optional[datetime] = None
