"""
User endpoints for API v1.

Profile registration and editing, the public profile directory,
personal block lists and admin suspension.  The authenticated user is
taken from the bearer token; block list endpoints always act on that
user.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from volunteer_board_api.app import actions
from volunteer_board_api.app.api.v1.results import raise_for_result
from volunteer_board_api.app.core.security import get_current_user, require_roles
from volunteer_board_api.app.schemas.user import (
    PublicProfile,
    PublicProfileFilters,
    SuspensionUpdate,
    UserCreate,
    UserRead,
    UserRole,
    UserUpdate,
)


router = APIRouter()


@router.post("/", response_model=UserRead, status_code=status.HTTP_201_CREATED)
async def register_user(user: UserCreate) -> UserRead:
    """Create a profile for a user signed in with the external auth provider.

    The admin role cannot be requested here.
    """
    result = raise_for_result(await actions.create_user(user))
    return result.user


@router.get("/", response_model=List[PublicProfile])
async def list_public_profiles(
    keywords: Optional[str] = Query(None, description="Search in name, bio, skills and causes"),
    role: Optional[UserRole] = Query(None, description="Restrict to one role"),
    sort_by: Optional[str] = Query(None, description="points_desc, points_asc, hours_desc, hours_asc, name_asc or name_desc"),
    current_user: dict = Depends(get_current_user),
) -> List[PublicProfile]:
    """Browse public profiles.

    Users who blocked the caller, users the caller blocked and
    suspended users are never listed.
    """
    filters = PublicProfileFilters(keywords=keywords, role=role, sort_by=sort_by)
    result = raise_for_result(await actions.list_public_profiles(filters, current_user["user_id"]))
    return result.users


@router.get("/me", response_model=UserRead)
async def read_me(current_user: dict = Depends(get_current_user)) -> UserRead:
    result = raise_for_result(await actions.find_user(current_user["user_id"]))
    return result.user


@router.put("/me", response_model=UserRead)
async def update_me(data: UserUpdate, current_user: dict = Depends(get_current_user)) -> UserRead:
    """Update the caller's own profile fields."""
    result = raise_for_result(await actions.update_profile(current_user["user_id"], data))
    return result.user


@router.get("/me/blocked", response_model=List[PublicProfile])
async def list_my_blocked_users(current_user: dict = Depends(get_current_user)) -> List[PublicProfile]:
    result = raise_for_result(await actions.list_blocked_users(current_user["user_id"]))
    return result.users


@router.post("/me/blocked/{target_id}", response_model=UserRead)
async def block_user(target_id: str, current_user: dict = Depends(get_current_user)) -> UserRead:
    """Block another user.  Blocking an already blocked user is not an error."""
    result = raise_for_result(await actions.block_user(current_user["user_id"], target_id))
    return result.user


@router.delete("/me/blocked/{target_id}", response_model=UserRead)
async def unblock_user(target_id: str, current_user: dict = Depends(get_current_user)) -> UserRead:
    result = raise_for_result(await actions.unblock_user(current_user["user_id"], target_id))
    return result.user


@router.get("/suspended", response_model=List[UserRead])
async def list_suspended_users(current_user: dict = Depends(require_roles("admin"))) -> List[UserRead]:
    result = raise_for_result(await actions.list_suspended_users())
    return result.users


@router.put("/{user_id}/suspension", response_model=UserRead)
async def set_suspension(
    user_id: str,
    body: SuspensionUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> UserRead:
    """Suspend or reinstate a user.  Administrators only."""
    result = raise_for_result(
        await actions.set_user_suspended(current_user["user_id"], user_id, body.suspended)
    )
    return result.user


@router.get("/{user_id}", response_model=PublicProfile)
async def read_user(user_id: str, current_user: dict = Depends(get_current_user)) -> PublicProfile:
    """Public view of another user's profile.

    Returns 404 for suspended users and when either user blocked the
    other.
    """
    result = raise_for_result(await actions.view_profile(current_user["user_id"], user_id))
    return result.user
