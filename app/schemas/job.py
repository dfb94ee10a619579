from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional
from datetime import date, datetime
from enum import Enum

from app.schemas.common import BuyerInfo, DocumentResponse, date_part


class SortOrder(str, Enum):
    """Deadline ordering for job search ('dsc' is what the web client sends)"""
    ASC = "asc"
    DESC = "desc"
    DSC = "dsc"

    @property
    def ascending(self) -> bool:
        return self is SortOrder.ASC


class JobFields(BaseModel):
    """Posting fields shared by create and update payloads"""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    category: Optional[str] = Field(None, max_length=100)
    deadline: Optional[date] = None
    description: Optional[str] = None
    min_price: Optional[float] = Field(None, ge=0)
    max_price: Optional[float] = Field(None, ge=0)

    @field_validator("deadline", mode="before")
    @classmethod
    def parse_deadline(cls, v):
        return date_part(v)

    @model_validator(mode="after")
    def check_price_range(self):
        if self.min_price is not None and self.max_price is not None and self.min_price > self.max_price:
            raise ValueError("min_price cannot exceed max_price")
        return self


class JobCreateRequest(JobFields):
    """Schema for creating a new job; unknown posting fields are kept as-is"""
    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices("title", "job_title"),
    )
    buyer: BuyerInfo


class JobUpdateRequest(JobFields):
    """Merge-patch for a job: only the supplied fields are written"""
    title: Optional[str] = Field(
        None,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices("title", "job_title"),
    )
    buyer: Optional[BuyerInfo] = None

    @field_validator("title", "buyer", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        # Omitting the field keeps the stored value; null would erase it
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class JobResponse(DocumentResponse):
    """Schema for job response"""
    title: str
    category: Optional[str] = None
    deadline: Optional[date] = None
    description: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    buyer: Optional[dict] = None
    created_at: Optional[datetime] = None
