"""
Response schemas shared by the job and bid endpoints.

Write results mirror the acknowledgement documents the frontend already
understands (insertedId, matchedCount, ...).
"""

from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class BuyerInfo(BaseModel):
    """Job owner sub-document embedded in jobs and bids."""
    model_config = ConfigDict(extra="allow")

    email: EmailStr
    name: Optional[str] = None
    photo: Optional[str] = None


class InsertResult(BaseModel):
    acknowledged: bool = True
    inserted_id: str = Field(..., serialization_alias="insertedId")


class UpdateResult(BaseModel):
    acknowledged: bool = True
    matched_count: int = Field(..., serialization_alias="matchedCount")
    modified_count: int = Field(..., serialization_alias="modifiedCount")
    upserted_id: Optional[str] = Field(None, serialization_alias="upsertedId")


class DeleteResult(BaseModel):
    acknowledged: bool = True
    deleted_count: int = Field(..., serialization_alias="deletedCount")


class CountResponse(BaseModel):
    count: int


class AckResponse(BaseModel):
    success: bool = True


def lowercase_enum_value(value: Any) -> Any:
    """Accept 'Pending' / 'PENDING' for enum values stored lower-case."""
    if isinstance(value, str):
        return value.strip().lower()
    return value


def date_part(value: Any) -> Any:
    """Accept full ISO timestamps where a calendar date is expected."""
    if isinstance(value, str) and "T" in value:
        return value.split("T", 1)[0]
    return value


class DocumentResponse(BaseModel):
    """Base for stored documents: `_id` plus any free-form fields."""
    model_config = ConfigDict(extra="allow", populate_by_name=True, from_attributes=True)

    id: str = Field(..., alias="_id")

