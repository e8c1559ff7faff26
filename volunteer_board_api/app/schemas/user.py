"""
Pydantic models for user profiles.

Profiles are stored in the ``users`` collection as a mapping from user
id to record.  Other parts of the application keep additional fields
on the same records (credentials, provider data), so ``UserProfile``
preserves unknown keys when a record is loaded and written back.
``UserRead`` is the public shape returned by the API and never carries
those extra fields.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .base import RecordModel, as_utc


class UserRole(str, Enum):
    volunteer = "volunteer"
    organization = "organization"
    admin = "admin"


# Older records and some clients use the job-board naming.
ROLE_ALIASES = {
    "employee": UserRole.volunteer.value,
    "company": UserRole.organization.value,
}


def normalize_role(value: Any) -> Any:
    if isinstance(value, str):
        value = value.strip().lower()
        return ROLE_ALIASES.get(value, value)
    return value


class VolunteerStats(RecordModel):
    points: int = 0
    hours: float = 0
    badges: List[str] = Field(default_factory=list)


class UserBase(RecordModel):
    email: Optional[str] = Field(None, examples=["volunteer@example.com"])
    display_name: str = Field("", examples=["Jane Doe"])
    role: Optional[UserRole] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    causes: List[str] = Field(default_factory=list)
    profile_picture_url: Optional[str] = None
    onboarding_completed: bool = False

    @field_validator("role", mode="before")
    @classmethod
    def map_role_alias(cls, v: Any) -> Any:
        return normalize_role(v)


class UserProfile(UserBase):
    """A stored user profile.

    ``blocked_user_ids`` behaves as an insertion ordered set and never
    contains the profile's own id.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: str
    blocked_user_ids: List[str] = Field(default_factory=list)
    is_suspended: bool = False
    stats: Optional[VolunteerStats] = None
    created_at: Optional[datetime] = None

    @field_validator("created_at")
    @classmethod
    def normalize_created_at(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v)

    @model_validator(mode="after")
    def check_invariants(self) -> "UserProfile":
        seen = []
        for blocked_id in self.blocked_user_ids:
            if blocked_id != self.id and blocked_id not in seen:
                seen.append(blocked_id)
        self.blocked_user_ids = seen
        if self.role == UserRole.volunteer and self.stats is None:
            self.stats = VolunteerStats()
        return self


class UserCreate(UserBase):
    """Schema for registering a profile.

    ``id`` is normally the identifier issued by the authentication
    provider; a random id is generated when it is omitted.  New
    profiles can never be created with the admin role.
    """

    id: Optional[str] = None

    @field_validator("role")
    @classmethod
    def reject_admin(cls, v: Optional[UserRole]) -> Optional[UserRole]:
        if v == UserRole.admin:
            raise ValueError("Admin accounts cannot be self-registered")
        return v


class UserUpdate(RecordModel):
    """Profile fields a user may change.  Only provided values are applied."""

    display_name: Optional[str] = None
    role: Optional[UserRole] = None
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    causes: Optional[List[str]] = None
    profile_picture_url: Optional[str] = None
    onboarding_completed: Optional[bool] = None

    @field_validator("role", mode="before")
    @classmethod
    def map_role_alias(cls, v: Any) -> Any:
        return normalize_role(v)

    @field_validator("role")
    @classmethod
    def reject_admin(cls, v: Optional[UserRole]) -> Optional[UserRole]:
        if v == UserRole.admin:
            raise ValueError("The admin role cannot be self-assigned")
        return v


class UserRead(UserBase):
    """Schema for reading a profile from the API."""

    id: str
    blocked_user_ids: List[str] = Field(default_factory=list)
    is_suspended: bool = False
    stats: Optional[VolunteerStats] = None
    created_at: Optional[datetime] = None


class PublicProfileFilters(RecordModel):
    """Filters for the public profile directory.

    ``sort_by`` is one of ``points_desc`` (default), ``points_asc``,
    ``hours_desc``, ``hours_asc``, ``name_asc`` or ``name_desc``.
    """

    keywords: Optional[str] = None
    role: Optional[UserRole] = None
    sort_by: Optional[str] = None

    @field_validator("role", mode="before")
    @classmethod
    def map_role_alias(cls, v: Any) -> Any:
        return normalize_role(v)


class SuspensionUpdate(RecordModel):
    suspended: bool


class PublicProfile(RecordModel):
    """A profile as shown to other users.

    Leaves out the e‑mail address, the block list and the suspension
    flag.
    """

    id: str
    display_name: str = ""
    role: Optional[UserRole] = None
    bio: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    causes: List[str] = Field(default_factory=list)
    profile_picture_url: Optional[str] = None
    stats: Optional[VolunteerStats] = None
    created_at: Optional[datetime] = None
