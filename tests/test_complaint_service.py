from datetime import datetime, timezone

import pytest

from volunteer_board_api.app import actions
from volunteer_board_api.app.core.errors import InvalidOperationError, NotFoundError, UnauthorizedError
from volunteer_board_api.app.schemas.complaint import ComplaintStatus
from volunteer_board_api.app.services.complaint_service import ComplaintService


@pytest.mark.asyncio
async def test_submit_and_resolve_complaint(users, store):
    complaint = await ComplaintService.submit_complaint("Bug", "  Search is broken  ", reported_by_user_id="u1")
    assert complaint.id.startswith("complaint-")
    assert complaint.status == ComplaintStatus.open
    assert complaint.description == "Search is broken"

    assert [c.id for c in await ComplaintService.list_complaints()] == [complaint.id]

    resolved = await ComplaintService.resolve_complaint(complaint.id, "admin1")
    assert resolved.status == ComplaintStatus.resolved
    assert resolved.resolved_by == "admin1"

    assert await ComplaintService.list_complaints() == []
    assert [c.id for c in await ComplaintService.list_complaints(include_resolved=True)] == [complaint.id]


@pytest.mark.asyncio
async def test_visitors_must_leave_an_email(store):
    with pytest.raises(InvalidOperationError):
        await ComplaintService.submit_complaint("Other", "Hello")
    with pytest.raises(InvalidOperationError):
        await ComplaintService.submit_complaint(" ", "Hello", reporter_email="a@example.com")

    complaint = await ComplaintService.submit_complaint("Other", "Hello", reporter_email="a@example.com")
    assert complaint.reported_by_user_id is None


@pytest.mark.asyncio
async def test_only_admins_resolve(users, store):
    complaint = await ComplaintService.submit_complaint("Bug", "Broken", reported_by_user_id="u1")
    before = store.path_for("complaints").read_text(encoding="utf-8")

    with pytest.raises(UnauthorizedError):
        await ComplaintService.resolve_complaint(complaint.id, "u1")
    with pytest.raises(NotFoundError):
        await ComplaintService.resolve_complaint("complaint-missing", "admin1")

    assert store.path_for("complaints").read_text(encoding="utf-8") == before


@pytest.mark.asyncio
async def test_resolving_twice_writes_once(users, store, monkeypatch):
    complaint = await ComplaintService.submit_complaint("Bug", "Broken", reported_by_user_id="u1")
    first = await ComplaintService.resolve_complaint(complaint.id, "admin1")

    writes = []
    monkeypatch.setattr(store, "_write", lambda name, data: writes.append(name))
    second = await ComplaintService.resolve_complaint(complaint.id, "admin1")

    assert writes == []
    assert second.status == ComplaintStatus.resolved and second.resolved_at == first.resolved_at


@pytest.mark.asyncio
async def test_complaints_are_listed_newest_first(write_collection):
    write_collection("complaints", [
        {"id": "c1", "category": "Bug", "description": "old", "reporterEmail": "a@example.com",
         "createdAt": datetime(2024, 1, 1, tzinfo=timezone.utc), "status": "open"},
        {"id": "c2", "category": "Bug", "description": "new", "reportedByUserId": "u1",
         "createdAt": datetime(2024, 2, 1, tzinfo=timezone.utc), "status": "open"},
        {"id": "broken"},
    ])

    assert [c.id for c in await ComplaintService.list_complaints()] == ["c2", "c1"]


@pytest.mark.asyncio
async def test_complaint_actions(users):
    anonymous = await actions.submit_complaint("Other", "Hello")
    assert (anonymous.success, anonymous.error) == (False, "invalid_operation")

    submitted = await actions.submit_complaint("Bug", "Broken", "u1")
    assert submitted.message == "Complaint submitted successfully."

    forbidden = await actions.resolve_complaint(submitted.complaint.id, "u2")
    assert (forbidden.success, forbidden.error) == (False, "unauthorized")

    resolved = await actions.resolve_complaint(submitted.complaint.id, "admin1")
    assert resolved.success and resolved.complaint.status == ComplaintStatus.resolved
    assert (await actions.list_complaints()).complaints == []
