"""
API endpoints for user reports.

Any signed-in user can report another user.  Administrators list the
reports, work through the moderation queue and change report
statuses.  The service re-checks the admin role on every status
change, in addition to the role dependency used here.
"""

from typing import List

from fastapi import APIRouter, Depends, status

from volunteer_board_api.app import actions
from volunteer_board_api.app.api.v1.results import raise_for_result
from volunteer_board_api.app.core.security import get_current_user, require_roles
from volunteer_board_api.app.schemas.report import Report, ReportCreate, ReportStatusUpdate, ReportView


router = APIRouter()


@router.post(
    "/",
    response_model=Report,
    status_code=status.HTTP_201_CREATED,
    summary="Report a user",
)
async def submit_report(data: ReportCreate, current_user: dict = Depends(get_current_user)) -> Report:
    """File a report against another user.

    The new report is ``pending``.  Reporting yourself returns 400.
    """
    result = raise_for_result(
        await actions.submit_report(
            current_user["user_id"],
            current_user.get("display_name") or "",
            data.reported_user_id,
            data.reason,
            data.details,
        )
    )
    return result.report


@router.get("/", response_model=List[Report], summary="List all reports")
async def list_reports(current_user: dict = Depends(require_roles("admin"))) -> List[Report]:
    """Return every report in filing order.  Administrators only."""
    result = raise_for_result(await actions.list_all_reports())
    return result.reports


@router.get("/review", response_model=List[ReportView], summary="Moderation queue")
async def list_reports_for_review(current_user: dict = Depends(require_roles("admin"))) -> List[ReportView]:
    """Pending reports first, newest first, with display names."""
    result = raise_for_result(await actions.list_reports_for_review())
    return result.report_views


@router.put("/{report_id}/status", response_model=Report, summary="Change a report's status")
async def update_report_status(
    report_id: str,
    data: ReportStatusUpdate,
    current_user: dict = Depends(require_roles("admin")),
) -> Report:
    result = raise_for_result(
        await actions.update_report_status(
            report_id, data.status.value, current_user["user_id"], data.admin_notes
        )
    )
    return result.report
