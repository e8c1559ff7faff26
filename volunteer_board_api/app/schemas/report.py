"""
Pydantic schemas for user reports.

A report is filed by one user against another and reviewed by
administrators.  ``status`` is a closed set; a new report is always
``pending``.  The creation ``timestamp`` never changes; the moderation
fields record who changed the status last and when.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import RecordModel, as_utc


class ReportStatus(str, Enum):
    pending = "pending"
    reviewed = "reviewed"
    resolved = "resolved"
    dismissed = "dismissed"


class Report(RecordModel):
    """A stored report."""

    id: str
    reporter_id: str
    reporter_name: str
    reported_user_id: str
    reason: str
    details: Optional[str] = None
    status: ReportStatus = ReportStatus.pending
    timestamp: datetime
    admin_notes: Optional[str] = None
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None

    @field_validator("timestamp", "resolved_at")
    @classmethod
    def normalize_timestamps(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)


class ReportCreate(RecordModel):
    """Schema for filing a report through the API."""

    reported_user_id: str = Field(..., description="Identifier of the reported user")
    reason: str = Field(..., description="Category or short reason, e.g. 'Spam'")
    details: Optional[str] = Field(None, description="Optional free text details")

    @field_validator("reason")
    @classmethod
    def require_reason(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("A reason is required")
        return v

    @field_validator("details")
    @classmethod
    def sanitize_details(cls, v: Optional[str]) -> Optional[str]:
        """Trim whitespace from the details and enforce a maximum length."""
        if v is None:
            return None
        v = v.strip()
        if len(v) > 2000:
            raise ValueError("Details must be 2000 characters or fewer")
        return v or None


class ReportStatusUpdate(RecordModel):
    """Schema for moderating a report."""

    status: ReportStatus
    admin_notes: Optional[str] = None


class ReportView(Report):
    """A report enriched with display names for the moderation queue."""

    reporter_display_name: str
    reported_user_display_name: str
