"""
Pydantic schemas for session token issuance.
"""

from typing import Any, Dict
from pydantic import BaseModel, ConfigDict, EmailStr, Field


class TokenRequest(BaseModel):
    """Identity payload signed into the session token; extra claims are kept."""
    model_config = ConfigDict(extra="allow")

    email: EmailStr


class TokenIdentity(BaseModel):
    """Verified contents of a session token."""
    email: str
    claims: Dict[str, Any] = Field(default_factory=dict)
