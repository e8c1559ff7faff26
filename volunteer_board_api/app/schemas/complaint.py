"""
Pydantic schemas for general complaints.

A complaint is feedback about the platform itself rather than about a
particular user.  It may come from a signed-in user or from a visitor
who leaves an e‑mail address.  Administrators resolve complaints; a
resolved complaint stays in the collection.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import RecordModel, as_utc


class ComplaintStatus(str, Enum):
    open = "open"
    resolved = "resolved"


class Complaint(RecordModel):
    """A stored complaint."""

    id: str
    category: str
    description: str
    reported_by_user_id: Optional[str] = None
    reporter_email: Optional[str] = None
    created_at: datetime
    status: ComplaintStatus = ComplaintStatus.open
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @field_validator("created_at", "resolved_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class ComplaintCreate(RecordModel):
    category: str = Field(..., description="e.g. 'Bug', 'Content', 'Other'")
    description: str = Field(..., max_length=2000)
    reporter_email: Optional[str] = Field(None, description="Contact address for visitors")

    @field_validator("category", "description")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v
