"""
Business logic for in‑app notifications.

Notifications are kept in the ``notifications`` collection.  A
notification belongs to exactly one user; asking for someone else's
notification behaves as if it did not exist.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from volunteer_board_api.app.core.errors import NotFoundError
from volunteer_board_api.app.core.store import get_store
from volunteer_board_api.app.schemas.base import new_record_id, utc_now
from volunteer_board_api.app.schemas.notification import UserNotification


NOTIFICATIONS = "notifications"


class NotificationService:
    """Service for creating, listing and reading notifications."""

    @classmethod
    async def _load_all(cls) -> List[UserNotification]:
        logger = logging.getLogger(__name__)
        notifications = []
        for record in await get_store().load(NOTIFICATIONS, []):
            try:
                notifications.append(UserNotification.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping malformed notification record: %s errors", e.error_count())
        return notifications

    @classmethod
    async def create(cls, user_id: str, message: str, link: Optional[str] = None) -> UserNotification:
        """Create an unread notification for ``user_id``."""
        logger = logging.getLogger(__name__)
        notification = UserNotification(
            id=new_record_id("notif"),
            user_id=user_id,
            message=message,
            link=link,
            is_read=False,
            timestamp=utc_now(),
        )
        async with get_store().edit(NOTIFICATIONS, []) as session:
            session.data.append(notification.to_record())
            session.mark_changed()
        logger.info("Notification %s created for user %s", notification.id, user_id)
        return notification.model_copy()

    @classmethod
    async def list_for_user(cls, user_id: str, include_read: bool = True) -> List[UserNotification]:
        """Return the user's notifications, most recent first."""
        logger = logging.getLogger(__name__)
        notifications = [
            n for n in await cls._load_all()
            if n.user_id == user_id and (include_read or not n.is_read)
        ]
        notifications.sort(key=lambda n: n.timestamp, reverse=True)
        logger.debug("Found %s notifications for user %s", len(notifications), user_id)
        return notifications

    @classmethod
    async def unread_count(cls, user_id: str) -> int:
        return len(await cls.list_for_user(user_id, include_read=False))

    @classmethod
    async def mark_read(cls, notification_id: str, user_id: str) -> UserNotification:
        """Mark one of the user's notifications as read.

        Marking an already read notification returns it unchanged and
        writes nothing.
        """
        logger = logging.getLogger(__name__)
        async with get_store().edit(NOTIFICATIONS, []) as session:
            for index, record in enumerate(session.data):
                if isinstance(record, dict) and record.get("id") == notification_id and record.get("userId") == user_id:
                    break
            else:
                logger.info("Notification %s not found for user %s", notification_id, user_id)
                raise NotFoundError("Notification not found.")
            notification = UserNotification.model_validate(session.data[index])
            if not notification.is_read:
                notification.is_read = True
                session.data[index] = notification.to_record()
                session.mark_changed()
                logger.info("Notification %s marked as read for user %s", notification_id, user_id)
        return notification

    @classmethod
    async def mark_all_read(cls, user_id: str) -> int:
        """Mark every unread notification of the user as read.

        Returns the number of notifications that changed; the
        collection is written at most once.
        """
        logger = logging.getLogger(__name__)
        updated = 0
        async with get_store().edit(NOTIFICATIONS, []) as session:
            for record in session.data:
                if isinstance(record, dict) and record.get("userId") == user_id and not record.get("isRead"):
                    record["isRead"] = True
                    updated += 1
            if updated:
                session.mark_changed()
        if updated:
            logger.info("Marked %s notifications as read for user %s", updated, user_id)
        return updated
