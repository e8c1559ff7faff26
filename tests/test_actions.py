import pytest

from volunteer_board_api.app import actions
from volunteer_board_api.app.schemas.user import PublicProfileFilters


@pytest.mark.asyncio
async def test_report_scenario(users):
    submitted = await actions.submit_report("u1", "Bob Builder", "u2", "Spam")
    assert submitted.success is True
    assert submitted.error is None
    assert submitted.report.status.value == "pending"

    updated = await actions.update_report_status(submitted.report.id, "resolved", "admin1")
    assert updated.success is True
    assert updated.message == "Report marked as resolved."

    listed = await actions.list_all_reports()
    assert [r.status.value for r in listed.reports] == ["resolved"]


@pytest.mark.asyncio
async def test_failures_are_results_not_exceptions(users):
    self_report = await actions.submit_report("u1", "Bob Builder", "u1", "Spam")
    assert (self_report.success, self_report.error) == (False, "invalid_operation")
    assert self_report.message == "You cannot report yourself."

    report = (await actions.submit_report("u1", "Bob Builder", "u2", "Spam")).report
    forbidden = await actions.update_report_status(report.id, "resolved", "u3")
    assert (forbidden.success, forbidden.error) == (False, "unauthorized")

    missing = await actions.update_report_status("nope", "resolved", "admin1")
    assert (missing.success, missing.error) == (False, "not_found")

    self_block = await actions.block_user("u1", "u1")
    assert (self_block.success, self_block.error) == (False, "invalid_operation")


@pytest.mark.asyncio
async def test_storage_failure_on_write_is_reported(users, store):
    store.path_for("reports").write_text("not json", encoding="utf-8")

    result = await actions.submit_report("u1", "Bob Builder", "u2", "Spam")

    assert (result.success, result.error) == (False, "storage_failure")
    assert store.path_for("reports").read_text(encoding="utf-8") == "not json"

    listed = await actions.list_all_reports()
    assert listed.success is True and listed.reports == []


@pytest.mark.asyncio
async def test_verify_admin_and_find_user(users):
    assert (await actions.verify_admin("admin1")).is_admin is True
    assert (await actions.verify_admin("u1")).is_admin is False

    found = await actions.find_user("u2")
    assert found.success and found.user.display_name == "Carol Singer"
    missing = await actions.find_user("ghost")
    assert (missing.success, missing.error) == (False, "not_found")


@pytest.mark.asyncio
async def test_block_unblock_and_directory(users):
    blocked = await actions.block_user("u1", "u3")
    assert blocked.success and blocked.user.blocked_user_ids == ["u3"]
    assert blocked.message == "User u3 has been blocked."

    directory = await actions.list_public_profiles(PublicProfileFilters(role="volunteer"), "u3")
    assert [u.id for u in directory.users] == ["u2"]

    unblocked = await actions.unblock_user("u1", "u3")
    assert unblocked.success and unblocked.user.blocked_user_ids == []
    again = await actions.unblock_user("u1", "u3")
    assert (again.success, again.error) == (False, "not_found")


@pytest.mark.asyncio
async def test_notification_actions(store):
    created = await actions.create_notification("u1", "Hello")
    assert created.success

    unread = await actions.list_notifications("u1")
    assert [n.is_read for n in unread.notifications] == [False]

    marked = await actions.mark_all_notifications_read("u1")
    assert (marked.success, marked.count) == (True, 1)

    assert (await actions.list_notifications("u1")).notifications == []
    everything = await actions.list_notifications("u1", include_read=True)
    assert [n.is_read for n in everything.notifications] == [True]

    foreign = await actions.mark_notification_read(created.notification.id, "u2")
    assert (foreign.success, foreign.error) == (False, "not_found")


@pytest.mark.asyncio
async def test_timestamp_like_reason_can_be_moderated(users):
    submitted = await actions.submit_report("u1", "Bob Builder", "u2", "2024-01-01T00:00:00Z")

    updated = await actions.update_report_status(submitted.report.id, "resolved", "admin1")

    assert (updated.success, updated.error) == (True, None)
    assert updated.report.reason == "2024-01-01T00:00:00Z"
