"""
Business logic for user reports.

Users file reports against other users; administrators review them and
move them between the statuses ``pending``, ``reviewed``, ``resolved``
and ``dismissed``.  Reports are kept in the ``reports`` collection in
the order they were filed and are never deleted.

Status changes are not restricted to forward moves: any status may
replace any other (a resolved report can be reopened as pending).
"""

import logging
from typing import Dict, List, Optional

from pydantic import ValidationError

from volunteer_board_api.app.core.errors import InvalidOperationError, NotFoundError, UnauthorizedError
from volunteer_board_api.app.core.store import get_store
from volunteer_board_api.app.schemas.base import new_record_id, utc_now
from volunteer_board_api.app.schemas.report import Report, ReportStatus, ReportView
from volunteer_board_api.app.services.user_service import USERS, UserService


REPORTS = "reports"


def _fallback_name(user_id: str) -> str:
    return f"User ({user_id[:4]})"


class ReportService:
    """Service for filing and moderating reports."""

    @classmethod
    async def submit_report(
        cls,
        reporter_id: str,
        reporter_name: str,
        reported_user_id: str,
        reason: str,
        details: Optional[str] = None,
    ) -> Report:
        """File a new ``pending`` report and return it.

        A user cannot report themself; such a request is rejected
        before anything is written.
        """
        logger = logging.getLogger(__name__)
        if reporter_id == reported_user_id:
            logger.warning("User %s tried to report themself", reporter_id)
            raise InvalidOperationError("You cannot report yourself.")
        if not reason or not reason.strip():
            raise InvalidOperationError("A reason is required.")
        report = Report(
            id=new_record_id("report"),
            reporter_id=reporter_id,
            reporter_name=reporter_name,
            reported_user_id=reported_user_id,
            reason=reason.strip(),
            details=details,
            status=ReportStatus.pending,
            timestamp=utc_now(),
        )
        async with get_store().edit(REPORTS, []) as session:
            session.data.append(report.to_record())
            session.mark_changed()
        logger.info(
            "User %s (%s) reported user %s: %s", reporter_id, reporter_name, reported_user_id, report.reason
        )
        return report

    @classmethod
    async def list_all_reports(cls) -> List[Report]:
        """Return every report in filing order.

        Timestamps are always ``datetime`` values, whatever form the
        stored record uses.
        """
        logger = logging.getLogger(__name__)
        records = await get_store().load(REPORTS, [])
        reports = []
        for record in records:
            try:
                reports.append(Report.model_validate(record))
            except ValidationError as e:
                logger.warning("Skipping malformed report record: %s errors", e.error_count())
        return reports

    @classmethod
    async def list_reports_against(cls, user_id: str) -> List[Report]:
        return [r for r in await cls.list_all_reports() if r.reported_user_id == user_id]

    @classmethod
    async def list_reports_for_review(cls) -> List[ReportView]:
        """Return the moderation queue.

        Reports carry the current display names of both parties (or
        ``User (abcd)`` when a profile is gone) and are ordered with
        pending reports first, newest first within each group.
        """
        logger = logging.getLogger(__name__)
        reports = await cls.list_all_reports()
        users = await get_store().load(USERS, {})
        names: Dict[str, str] = {}
        for record in users.values():
            if isinstance(record, dict) and record.get("id") and record.get("displayName"):
                names[record["id"]] = record["displayName"]
        views = [
            ReportView(
                **report.model_dump(),
                reporter_display_name=names.get(report.reporter_id, _fallback_name(report.reporter_id)),
                reported_user_display_name=names.get(report.reported_user_id, _fallback_name(report.reported_user_id)),
            )
            for report in reports
        ]
        views.sort(key=lambda v: v.timestamp, reverse=True)
        views.sort(key=lambda v: v.status != ReportStatus.pending)
        logger.info("Found %s reports for review", len(views))
        return views

    @classmethod
    async def update_report_status(
        cls,
        report_id: str,
        new_status: str,
        acting_admin_id: str,
        admin_notes: Optional[str] = None,
    ) -> Report:
        """Set the status of a report.  Administrators only.

        The acting user is re-verified against the ``users`` collection
        even when the request layer already checked the role.
        """
        logger = logging.getLogger(__name__)
        if not await UserService.verify_admin(acting_admin_id):
            logger.warning("User %s is not allowed to update report %s", acting_admin_id, report_id)
            raise UnauthorizedError("Only administrators can update reports.")
        try:
            status = ReportStatus(new_status)
        except ValueError:
            raise InvalidOperationError(f"Unknown report status: {new_status}")
        async with get_store().edit(REPORTS, []) as session:
            for index, record in enumerate(session.data):
                if isinstance(record, dict) and record.get("id") == report_id:
                    break
            else:
                raise NotFoundError("Report not found.")
            report = Report.model_validate(session.data[index])
            report.status = status
            report.resolved_by = acting_admin_id
            report.resolved_at = utc_now()
            if admin_notes is not None:
                report.admin_notes = admin_notes
            session.data[index] = report.to_record()
            session.mark_changed()
        logger.info("Admin %s set report %s to %s", acting_admin_id, report_id, status.value)
        return report
