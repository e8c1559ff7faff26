"""
Pydantic schemas for in‑app notifications.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, field_validator

from .base import RecordModel, as_utc


class UserNotification(RecordModel):
    """A stored notification owned by ``user_id``."""

    id: str
    user_id: str
    message: str
    link: Optional[str] = None
    is_read: bool = False
    timestamp: datetime

    @field_validator("timestamp")
    @classmethod
    def normalize_timestamp(cls, v: datetime) -> datetime:
        return as_utc(v)


class NotificationCreate(RecordModel):
    """Schema for sending a notification through the API (admins only)."""

    user_id: str = Field(..., description="Recipient user id")
    message: str = Field(..., min_length=1, description="Notification text")
    link: Optional[str] = Field(None, description="Optional link, e.g. to a conversation")
