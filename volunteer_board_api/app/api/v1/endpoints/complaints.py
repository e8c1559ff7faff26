"""
API endpoints for general complaints about the platform.

Filing a complaint does not require an account: visitors leave an
e‑mail address instead.  Listing and resolving are for administrators.
"""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from volunteer_board_api.app import actions
from volunteer_board_api.app.api.v1.results import raise_for_result
from volunteer_board_api.app.core.security import get_optional_user, require_roles
from volunteer_board_api.app.schemas.complaint import Complaint, ComplaintCreate


router = APIRouter()


@router.post("/", response_model=Complaint, status_code=status.HTTP_201_CREATED)
async def submit_complaint(
    data: ComplaintCreate,
    current_user: Optional[Dict] = Depends(get_optional_user),
) -> Complaint:
    """File a complaint.  Returns 400 for a visitor without an e‑mail address."""
    user_id = current_user["user_id"] if current_user else None
    result = raise_for_result(
        await actions.submit_complaint(data.category, data.description, user_id, data.reporter_email)
    )
    return result.complaint


@router.get("/", response_model=List[Complaint])
async def list_complaints(
    include_resolved: bool = Query(False, description="Also return resolved complaints"),
    current_user: dict = Depends(require_roles("admin")),
) -> List[Complaint]:
    result = raise_for_result(await actions.list_complaints(include_resolved))
    return result.complaints


@router.put("/{complaint_id}/resolve", response_model=Complaint)
async def resolve_complaint(
    complaint_id: str,
    current_user: dict = Depends(require_roles("admin")),
) -> Complaint:
    result = raise_for_result(await actions.resolve_complaint(complaint_id, current_user["user_id"]))
    return result.complaint
