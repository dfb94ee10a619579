import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import Column, String, Text, Float, Date, DateTime, JSON
from app.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_document_id() -> str:
    return str(uuid.uuid4())


class Job(Base):
    """
    A job posting in the marketplace.

    Well-known posting fields have their own columns so they can be
    searched and sorted; any other posting field the client sends is kept
    in the `extra` JSON document and returned flattened alongside them.
    """
    __tablename__ = "jobs"

    # Columns addressable by a merge-patch, in addition to `buyer`
    PATCHABLE_COLUMNS = ("title", "category", "deadline", "description", "min_price", "max_price")
    # Keys the document renders itself; never stored as free-form fields
    RESERVED_KEYS = frozenset({"_id", "id", "buyer_email", "extra", "created_at", "updated_at"})

    id = Column(String(36), primary_key=True, default=new_document_id)
    title = Column(String, nullable=False, index=True)
    category = Column(String, nullable=True, index=True)
    deadline = Column(Date, nullable=True, index=True)
    description = Column(Text, nullable=True)
    min_price = Column(Float, nullable=True)
    max_price = Column(Float, nullable=True)

    # Owner sub-document plus its lower-cased email for owner queries
    buyer = Column(JSON, nullable=True)
    buyer_email = Column(String, nullable=True, index=True)

    extra = Column(JSON, nullable=False, default=dict)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
    updated_at = Column(DateTime(timezone=True), onupdate=utcnow)

    def apply_patch(self, data: Dict[str, Any]) -> bool:
        """
        Merge `data` into the document, field by field.

        Returns:
            True if any stored value changed
        """
        changed = False
        extra = dict(self.extra or {})

        for key, value in data.items():
            if key in self.RESERVED_KEYS:
                continue
            if key in self.PATCHABLE_COLUMNS:
                if getattr(self, key) != value:
                    setattr(self, key, value)
                    changed = True
            elif key == "buyer":
                if self.buyer != value:
                    self.set_buyer(value)
                    changed = True
            elif extra.get(key, object()) != value:
                extra[key] = value
                changed = True

        # Reassign so SQLAlchemy notices the JSON mutation
        self.extra = extra
        return changed

    def set_buyer(self, buyer: Optional[Dict[str, Any]]) -> None:
        self.buyer = buyer
        email = (buyer or {}).get("email")
        self.buyer_email = email.lower() if email else None

    def has_valid_price_range(self) -> bool:
        if self.min_price is None or self.max_price is None:
            return True
        return self.min_price <= self.max_price

    def to_document(self) -> Dict[str, Any]:
        document = dict(self.extra or {})
        document.update(
            {
                "_id": self.id,
                "title": self.title,
                "category": self.category,
                "deadline": self.deadline,
                "description": self.description,
                "min_price": self.min_price,
                "max_price": self.max_price,
                "buyer": self.buyer,
                "created_at": self.created_at,
            }
        )
        return document

    def __repr__(self):
        return f"<Job(id={self.id}, title='{self.title}', category={self.category})>"
