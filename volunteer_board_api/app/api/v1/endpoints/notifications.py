"""
API endpoints for in‑app notifications.

Users read and acknowledge their own notifications.  Administrators
can send a notification to any user.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, status

from volunteer_board_api.app import actions
from volunteer_board_api.app.api.v1.results import raise_for_result
from volunteer_board_api.app.core.security import get_current_user, require_roles
from volunteer_board_api.app.schemas.notification import NotificationCreate, UserNotification


router = APIRouter()


@router.get("/", response_model=List[UserNotification])
async def list_notifications(
    include_read: bool = Query(False, description="Also return notifications already read"),
    current_user: dict = Depends(get_current_user),
) -> List[UserNotification]:
    """Return the caller's notifications, most recent first."""
    result = raise_for_result(await actions.list_notifications(current_user["user_id"], include_read))
    return result.notifications


@router.post("/", response_model=UserNotification, status_code=status.HTTP_201_CREATED)
async def create_notification(
    data: NotificationCreate,
    current_user: dict = Depends(require_roles("admin")),
) -> UserNotification:
    result = raise_for_result(await actions.create_notification(data.user_id, data.message, data.link))
    return result.notification


@router.put("/read-all")
async def mark_all_read(current_user: dict = Depends(get_current_user)) -> dict:
    """Mark all of the caller's notifications as read."""
    result = raise_for_result(await actions.mark_all_notifications_read(current_user["user_id"]))
    return {"count": result.count}


@router.put("/{notification_id}/read", response_model=UserNotification)
async def mark_read(notification_id: str, current_user: dict = Depends(get_current_user)) -> UserNotification:
    """Mark one notification as read.

    Returns 404 when the notification does not exist or belongs to
    another user.
    """
    result = raise_for_result(await actions.mark_notification_read(notification_id, current_user["user_id"]))
    return result.notification
