"""
Business logic for user profiles.

Profiles live in the ``users`` collection, a mapping from user id to
record.  Besides lookups this service owns the per-user block lists,
the public profile directory and admin suspension.  Every write goes
through ``JsonStore.edit`` so concurrent requests cannot overwrite
each other's changes.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from volunteer_board_api.app.core.errors import InvalidOperationError, NotFoundError, UnauthorizedError
from volunteer_board_api.app.core.store import get_store
from volunteer_board_api.app.schemas.base import utc_now
from volunteer_board_api.app.schemas.user import (
    PublicProfileFilters,
    UserCreate,
    UserProfile,
    UserRole,
    UserUpdate,
    normalize_role,
)


USERS = "users"

DEFAULT_SORT = "points_desc"


def _find_key(records: Dict[str, Any], user_id: str) -> Optional[str]:
    """Return the mapping key holding the record with ``id == user_id``.

    Records are keyed by id, but records written by older versions
    were keyed by e‑mail, so fall back to a scan.
    """
    record = records.get(user_id)
    if isinstance(record, dict) and record.get("id") == user_id:
        return user_id
    for key, record in records.items():
        if isinstance(record, dict) and record.get("id") == user_id:
            return key
    return None


def _sort_key(sort_by: str):
    if sort_by.startswith("points"):
        return lambda p: p.stats.points if p.stats else 0
    if sort_by.startswith("hours"):
        return lambda p: p.stats.hours if p.stats else 0
    return lambda p: p.display_name.lower()


def _matches_keywords(profile: UserProfile, keywords: str) -> bool:
    needle = keywords.lower()
    haystack = [profile.display_name, profile.bio or ""] + profile.skills + profile.causes
    return any(needle in text.lower() for text in haystack)


class UserService:
    """Service for user profiles, block lists and suspension."""

    @classmethod
    async def _load_profiles(cls) -> List[UserProfile]:
        logger = logging.getLogger(__name__)
        records = await get_store().load(USERS, {})
        profiles = []
        for key, record in records.items():
            try:
                profiles.append(UserProfile.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping malformed user record %s: %s", key, e.error_count())
        return profiles

    @classmethod
    async def create_user(cls, data: UserCreate) -> UserProfile:
        """Register a new profile.

        Rejects duplicate ids and duplicate e‑mail addresses (compared
        case-insensitively).
        """
        logger = logging.getLogger(__name__)
        user_id = data.id or uuid.uuid4().hex
        async with get_store().edit(USERS, {}) as session:
            if _find_key(session.data, user_id) is not None:
                raise InvalidOperationError(f"User {user_id} already exists.")
            if data.email:
                email = data.email.lower()
                for record in session.data.values():
                    if isinstance(record, dict) and (record.get("email") or "").lower() == email:
                        raise InvalidOperationError("A user with this e-mail already exists.")
            profile = UserProfile(
                id=user_id,
                created_at=utc_now(),
                **data.model_dump(exclude={"id"}),
            )
            session.data[user_id] = profile.to_record()
            session.mark_changed()
        logger.info("Registered user %s with role %s", user_id, profile.role.value if profile.role else None)
        return profile

    @classmethod
    async def find_by_id(cls, user_id: str) -> Optional[UserProfile]:
        """Return the profile with ``user_id`` or ``None``."""
        records = await get_store().load(USERS, {})
        key = _find_key(records, user_id)
        if key is None:
            return None
        try:
            return UserProfile.model_validate(records[key])
        except ValidationError:
            logging.getLogger(__name__).warning("User record %s is malformed", user_id)
            return None

    @classmethod
    async def update_profile(cls, user_id: str, data: UserUpdate) -> UserProfile:
        """Apply the provided profile fields and return the updated profile."""
        logger = logging.getLogger(__name__)
        changes = data.model_dump(exclude_unset=True)
        async with get_store().edit(USERS, {}) as session:
            key = _find_key(session.data, user_id)
            if key is None:
                raise NotFoundError("User not found.")
            profile = UserProfile.model_validate(session.data[key])
            if changes:
                profile = UserProfile.model_validate({**profile.to_record(), **data.model_dump(by_alias=True, exclude_unset=True)})
                session.data[key] = profile.to_record()
                session.mark_changed()
        if changes:
            logger.info("Updated profile of user %s: %s", user_id, sorted(changes))
        return profile

    @classmethod
    async def verify_admin(cls, user_id: str) -> bool:
        """Return ``True`` iff exactly one profile has this id and the admin role.

        This is a linear scan over the whole collection.
        """
        if not user_id:
            return False
        records = await get_store().load(USERS, {})
        matches = 0
        for record in records.values():
            if not isinstance(record, dict):
                continue
            if record.get("id") == user_id and normalize_role(record.get("role")) == UserRole.admin.value:
                matches += 1
        return matches == 1

    @classmethod
    async def block_user(cls, blocker_id: str, target_id: str) -> UserProfile:
        """Add ``target_id`` to the block list of ``blocker_id``.

        Blocking someone who is already blocked succeeds without a
        write.
        """
        logger = logging.getLogger(__name__)
        if blocker_id == target_id:
            logger.warning("User %s tried to block themself", blocker_id)
            raise InvalidOperationError("You cannot block yourself.")
        async with get_store().edit(USERS, {}) as session:
            blocker_key = _find_key(session.data, blocker_id)
            if blocker_key is None or _find_key(session.data, target_id) is None:
                raise NotFoundError("User not found.")
            blocker = UserProfile.model_validate(session.data[blocker_key])
            if target_id in blocker.blocked_user_ids:
                logger.info("User %s already blocked %s", blocker_id, target_id)
                return blocker
            blocker.blocked_user_ids.append(target_id)
            session.data[blocker_key] = blocker.to_record()
            session.mark_changed()
        logger.info("User %s blocked user %s", blocker_id, target_id)
        return blocker

    @classmethod
    async def unblock_user(cls, blocker_id: str, target_id: str) -> UserProfile:
        """Remove ``target_id`` from the block list of ``blocker_id``."""
        logger = logging.getLogger(__name__)
        async with get_store().edit(USERS, {}) as session:
            blocker_key = _find_key(session.data, blocker_id)
            if blocker_key is None:
                raise NotFoundError("User not found.")
            blocker = UserProfile.model_validate(session.data[blocker_key])
            if target_id not in blocker.blocked_user_ids:
                raise NotFoundError(f"User {target_id} is not in your block list.")
            blocker.blocked_user_ids.remove(target_id)
            session.data[blocker_key] = blocker.to_record()
            session.mark_changed()
        logger.info("User %s unblocked user %s", blocker_id, target_id)
        return blocker

    @classmethod
    async def find_visible_profile(cls, viewer_id: str, user_id: str) -> UserProfile:
        """Return the profile ``user_id`` as seen by ``viewer_id``.

        A suspended profile, or one where either user blocked the
        other, is reported as not found, the same as in the directory.
        Users always see their own profile.
        """
        logger = logging.getLogger(__name__)
        target = await cls.find_by_id(user_id)
        if target is None:
            raise NotFoundError("User not found.")
        if viewer_id == user_id:
            return target
        viewer = await cls.find_by_id(viewer_id)
        hidden = (
            target.is_suspended
            or viewer_id in target.blocked_user_ids
            or (viewer is not None and user_id in viewer.blocked_user_ids)
        )
        if hidden:
            logger.info("Profile %s is hidden from user %s", user_id, viewer_id)
            raise NotFoundError("User not found.")
        return target

    @classmethod
    async def list_blocked_users(cls, user_id: str) -> List[UserProfile]:
        """Return the profiles ``user_id`` has blocked, in blocking order."""
        profiles = {p.id: p for p in await cls._load_profiles()}
        user = profiles.get(user_id)
        if user is None:
            raise NotFoundError("User not found.")
        return [profiles[i] for i in user.blocked_user_ids if i in profiles]

    @classmethod
    async def list_public_profiles(
        cls,
        filters: Optional[PublicProfileFilters] = None,
        exclude_user_id: Optional[str] = None,
    ) -> List[UserProfile]:
        """Return the public profile directory as seen by ``exclude_user_id``.

        Leaves out the requester, anyone who blocked the requester,
        anyone the requester blocked and suspended profiles, then
        applies the role and keyword filters and sorts by
        ``filters.sort_by`` (``points_desc`` when missing or unknown).
        """
        logger = logging.getLogger(__name__)
        filters = filters or PublicProfileFilters()
        profiles = await cls._load_profiles()

        blocked_by_requester = set()
        if exclude_user_id:
            for profile in profiles:
                if profile.id == exclude_user_id:
                    blocked_by_requester = set(profile.blocked_user_ids)
                    break

        visible = []
        for profile in profiles:
            if profile.is_suspended:
                continue
            if exclude_user_id and (profile.id == exclude_user_id or exclude_user_id in profile.blocked_user_ids):
                continue
            if profile.id in blocked_by_requester:
                continue
            if filters.role is not None and profile.role != filters.role:
                continue
            if filters.keywords and not _matches_keywords(profile, filters.keywords):
                continue
            visible.append(profile)

        sort_by = filters.sort_by if filters.sort_by in {
            "points_desc", "points_asc", "hours_desc", "hours_asc", "name_asc", "name_desc",
        } else DEFAULT_SORT
        visible.sort(key=_sort_key(sort_by), reverse=sort_by.endswith("_desc"))
        logger.info("Returning %s public profiles for user %s", len(visible), exclude_user_id)
        return visible

    @classmethod
    async def set_suspended(cls, admin_id: str, user_id: str, suspended: bool) -> UserProfile:
        """Suspend or reinstate a user.  Administrators only."""
        logger = logging.getLogger(__name__)
        if not await cls.verify_admin(admin_id):
            logger.warning("User %s is not allowed to change suspensions", admin_id)
            raise UnauthorizedError("Only administrators can suspend users.")
        if admin_id == user_id:
            raise InvalidOperationError("You cannot suspend yourself.")
        async with get_store().edit(USERS, {}) as session:
            key = _find_key(session.data, user_id)
            if key is None:
                raise NotFoundError("User not found.")
            profile = UserProfile.model_validate(session.data[key])
            if profile.is_suspended != suspended:
                profile.is_suspended = suspended
                session.data[key] = profile.to_record()
                session.mark_changed()
        logger.info("Admin %s set suspended=%s for user %s", admin_id, suspended, user_id)
        return profile

    @classmethod
    async def list_suspended_users(cls) -> List[UserProfile]:
        return [p for p in await cls._load_profiles() if p.is_suspended]
