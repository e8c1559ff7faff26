"""
Request-facing actions.

Each action performs one service operation and reports the outcome as
an ``ActionResult`` with a human readable message.  Domain errors
(not found, unauthorized, invalid operation, storage failure) become
failed results and are never raised to the caller, so a request
handler can show ``result.message`` as it is.
"""

import logging
from typing import Any, Awaitable, Optional, Tuple

from volunteer_board_api.app.core.errors import ServiceError, StorageError
from volunteer_board_api.app.schemas.common import ActionResult
from volunteer_board_api.app.schemas.user import PublicProfileFilters, UserCreate, UserUpdate
from volunteer_board_api.app.services.complaint_service import ComplaintService
from volunteer_board_api.app.services.notification_service import NotificationService
from volunteer_board_api.app.services.report_service import ReportService
from volunteer_board_api.app.services.user_service import UserService


logger = logging.getLogger(__name__)


async def _attempt(what: str, operation: Awaitable[Any]) -> Tuple[Any, Optional[ActionResult]]:
    """Await ``operation`` and return ``(value, None)`` or ``(None, failure)``."""
    try:
        return await operation, None
    except ServiceError as e:
        logger.info("Could not %s: %s", what, e.message)
        return None, ActionResult(success=False, message=e.message, error=e.code)
    except Exception:
        logger.exception("Unexpected error while trying to %s", what)
        return None, ActionResult(success=False, message=f"Failed to {what}.", error=StorageError.code)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

async def find_user(user_id: str) -> ActionResult:
    user, failure = await _attempt("load the user", UserService.find_by_id(user_id))
    if failure:
        return failure
    if user is None:
        return ActionResult(success=False, message="User not found.", error="not_found")
    return ActionResult(success=True, message="User found.", user=user)


async def view_profile(viewer_id: str, user_id: str) -> ActionResult:
    user, failure = await _attempt("load the profile", UserService.find_visible_profile(viewer_id, user_id))
    if failure:
        return failure
    return ActionResult(success=True, message="User found.", user=user)


async def create_user(data: UserCreate) -> ActionResult:
    user, failure = await _attempt("register the user", UserService.create_user(data))
    if failure:
        return failure
    return ActionResult(success=True, message="Profile created.", user=user)


async def update_profile(user_id: str, data: UserUpdate) -> ActionResult:
    user, failure = await _attempt("update the profile", UserService.update_profile(user_id, data))
    if failure:
        return failure
    return ActionResult(success=True, message="Profile updated.", user=user)


async def verify_admin(user_id: str) -> ActionResult:
    is_admin, failure = await _attempt("verify the admin role", UserService.verify_admin(user_id))
    if failure:
        return failure
    message = "User is an administrator." if is_admin else "User is not an administrator."
    return ActionResult(success=True, message=message, is_admin=is_admin)


async def block_user(blocker_id: str, target_id: str) -> ActionResult:
    logger.info("User %s attempting to block user %s", blocker_id, target_id)
    user, failure = await _attempt("block the user", UserService.block_user(blocker_id, target_id))
    if failure:
        return failure
    return ActionResult(success=True, message=f"User {target_id} has been blocked.", user=user)


async def unblock_user(blocker_id: str, target_id: str) -> ActionResult:
    logger.info("User %s attempting to unblock user %s", blocker_id, target_id)
    user, failure = await _attempt("unblock the user", UserService.unblock_user(blocker_id, target_id))
    if failure:
        return failure
    return ActionResult(success=True, message=f"User {target_id} has been unblocked.", user=user)


async def list_blocked_users(user_id: str) -> ActionResult:
    users, failure = await _attempt("list blocked users", UserService.list_blocked_users(user_id))
    if failure:
        return failure
    return ActionResult(success=True, message=f"{len(users)} blocked users.", users=users)


async def list_public_profiles(
    filters: Optional[PublicProfileFilters] = None,
    exclude_user_id: Optional[str] = None,
) -> ActionResult:
    users, failure = await _attempt(
        "list public profiles", UserService.list_public_profiles(filters, exclude_user_id)
    )
    if failure:
        return failure
    return ActionResult(success=True, message=f"{len(users)} profiles found.", users=users)


async def set_user_suspended(admin_id: str, user_id: str, suspended: bool) -> ActionResult:
    user, failure = await _attempt(
        "change the suspension", UserService.set_suspended(admin_id, user_id, suspended)
    )
    if failure:
        return failure
    message = f"User {user_id} has been suspended." if suspended else f"User {user_id} has been reinstated."
    return ActionResult(success=True, message=message, user=user)


async def list_suspended_users() -> ActionResult:
    users, failure = await _attempt("list suspended users", UserService.list_suspended_users())
    if failure:
        return failure
    return ActionResult(success=True, message=f"{len(users)} suspended users.", users=users)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------

async def submit_report(
    reporter_id: str,
    reporter_name: str,
    reported_user_id: str,
    reason: str,
    details: Optional[str] = None,
) -> ActionResult:
    report, failure = await _attempt(
        "submit the report",
        ReportService.submit_report(reporter_id, reporter_name, reported_user_id, reason, details),
    )
    if failure:
        return failure
    return ActionResult(success=True, message="Report submitted successfully.", report=report)


async def list_all_reports() -> ActionResult:
    reports, failure = await _attempt("list reports", ReportService.list_all_reports())
    if failure:
        return failure
    return ActionResult(success=True, message=f"{len(reports)} reports.", reports=reports)


async def list_reports_for_review() -> ActionResult:
    views, failure = await _attempt("load the moderation queue", ReportService.list_reports_for_review())
    if failure:
        return failure
    return ActionResult(success=True, message=f"{len(views)} reports.", report_views=views)


async def update_report_status(
    report_id: str,
    new_status: str,
    acting_admin_id: str,
    admin_notes: Optional[str] = None,
) -> ActionResult:
    report, failure = await _attempt(
        "update the report",
        ReportService.update_report_status(report_id, new_status, acting_admin_id, admin_notes),
    )
    if failure:
        return failure
    return ActionResult(
        success=True, message=f"Report marked as {report.status.value}.", report=report
    )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

async def create_notification(user_id: str, message: str, link: Optional[str] = None) -> ActionResult:
    notification, failure = await _attempt(
        "create the notification", NotificationService.create(user_id, message, link)
    )
    if failure:
        return failure
    return ActionResult(success=True, message="Notification created.", notification=notification)


async def list_notifications(user_id: str, include_read: bool = False) -> ActionResult:
    """List a user's notifications; unread only unless ``include_read``."""
    notifications, failure = await _attempt(
        "load notifications", NotificationService.list_for_user(user_id, include_read)
    )
    if failure:
        return failure
    return ActionResult(
        success=True, message=f"{len(notifications)} notifications.", notifications=notifications
    )


async def mark_notification_read(notification_id: str, user_id: str) -> ActionResult:
    notification, failure = await _attempt(
        "mark the notification as read", NotificationService.mark_read(notification_id, user_id)
    )
    if failure:
        return failure
    return ActionResult(success=True, message="Notification marked as read.", notification=notification)


async def mark_all_notifications_read(user_id: str) -> ActionResult:
    count, failure = await _attempt(
        "mark notifications as read", NotificationService.mark_all_read(user_id)
    )
    if failure:
        return ActionResult(success=False, message=failure.message, error=failure.error, count=0)
    return ActionResult(success=True, message=f"Marked {count} notifications as read.", count=count)


# ---------------------------------------------------------------------------
# Complaints
# ---------------------------------------------------------------------------

async def submit_complaint(
    category: str,
    description: str,
    reported_by_user_id: Optional[str] = None,
    reporter_email: Optional[str] = None,
) -> ActionResult:
    complaint, failure = await _attempt(
        "submit the complaint",
        ComplaintService.submit_complaint(category, description, reported_by_user_id, reporter_email),
    )
    if failure:
        return failure
    return ActionResult(success=True, message="Complaint submitted successfully.", complaint=complaint)


async def list_complaints(include_resolved: bool = False) -> ActionResult:
    complaints, failure = await _attempt("list complaints", ComplaintService.list_complaints(include_resolved))
    if failure:
        return failure
    return ActionResult(success=True, message=f"{len(complaints)} complaints.", complaints=complaints)


async def resolve_complaint(complaint_id: str, acting_admin_id: str) -> ActionResult:
    complaint, failure = await _attempt(
        "resolve the complaint", ComplaintService.resolve_complaint(complaint_id, acting_admin_id)
    )
    if failure:
        return failure
    return ActionResult(success=True, message="Complaint marked as resolved.", complaint=complaint)
