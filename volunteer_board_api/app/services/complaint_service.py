"""
Business logic for general complaints.

Complaints are kept in the ``complaints`` collection.  Anyone can file
one; only administrators can list and resolve them.
"""

import logging
from typing import List, Optional

from pydantic import ValidationError

from volunteer_board_api.app.core.errors import InvalidOperationError, NotFoundError, UnauthorizedError
from volunteer_board_api.app.core.store import get_store
from volunteer_board_api.app.schemas.base import new_record_id, utc_now
from volunteer_board_api.app.schemas.complaint import Complaint, ComplaintStatus
from volunteer_board_api.app.services.user_service import UserService


COMPLAINTS = "complaints"


class ComplaintService:
    """Service for filing and resolving general complaints."""

    @classmethod
    async def submit_complaint(
        cls,
        category: str,
        description: str,
        reported_by_user_id: Optional[str] = None,
        reporter_email: Optional[str] = None,
    ) -> Complaint:
        """File an ``open`` complaint.

        Visitors who are not signed in must leave an e‑mail address.
        """
        logger = logging.getLogger(__name__)
        if not category or not category.strip() or not description or not description.strip():
            raise InvalidOperationError("Category and description are required.")
        if not reported_by_user_id and not reporter_email:
            raise InvalidOperationError("An e-mail address is required when you are not signed in.")
        complaint = Complaint(
            id=new_record_id("complaint"),
            category=category.strip(),
            description=description.strip(),
            reported_by_user_id=reported_by_user_id,
            reporter_email=reporter_email,
            created_at=utc_now(),
        )
        async with get_store().edit(COMPLAINTS, []) as session:
            session.data.append(complaint.to_record())
            session.mark_changed()
        logger.info("Complaint %s filed (%s) by %s", complaint.id, complaint.category,
                    reported_by_user_id or reporter_email)
        return complaint

    @classmethod
    async def list_complaints(cls, include_resolved: bool = False) -> List[Complaint]:
        """Return complaints newest first, open ones only unless ``include_resolved``."""
        logger = logging.getLogger(__name__)
        records = await get_store().load(COMPLAINTS, [])
        complaints = []
        for record in records:
            try:
                complaints.append(Complaint.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping malformed complaint record: %s errors", e.error_count())
        if not include_resolved:
            complaints = [c for c in complaints if c.status == ComplaintStatus.open]
        complaints.sort(key=lambda c: c.created_at, reverse=True)
        return complaints

    @classmethod
    async def resolve_complaint(cls, complaint_id: str, acting_admin_id: str) -> Complaint:
        """Mark a complaint as resolved.  Resolving it twice writes nothing."""
        logger = logging.getLogger(__name__)
        if not await UserService.verify_admin(acting_admin_id):
            logger.warning("User %s is not allowed to resolve complaint %s", acting_admin_id, complaint_id)
            raise UnauthorizedError("Only administrators can resolve complaints.")
        async with get_store().edit(COMPLAINTS, []) as session:
            for index, record in enumerate(session.data):
                if isinstance(record, dict) and record.get("id") == complaint_id:
                    break
            else:
                raise NotFoundError("Complaint not found.")
            complaint = Complaint.model_validate(session.data[index])
            if complaint.status == ComplaintStatus.resolved:
                return complaint
            complaint.status = ComplaintStatus.resolved
            complaint.resolved_by = acting_admin_id
            complaint.resolved_at = utc_now()
            session.data[index] = complaint.to_record()
            session.mark_changed()
        logger.info("Admin %s resolved complaint %s", acting_admin_id, complaint_id)
        return complaint
