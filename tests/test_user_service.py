import json

import pytest

from volunteer_board_api.app.core.errors import InvalidOperationError, NotFoundError, UnauthorizedError
from volunteer_board_api.app.schemas.user import PublicProfileFilters, UserCreate, UserRole, UserUpdate
from volunteer_board_api.app.services.user_service import UserService

from conftest import make_user


def _ids(profiles):
    return [p.id for p in profiles]


@pytest.mark.asyncio
async def test_find_by_id(users, store):
    profile = await UserService.find_by_id("u1")
    assert profile.display_name == "Bob Builder"
    assert profile.role == UserRole.volunteer
    assert await UserService.find_by_id("nobody") is None


@pytest.mark.asyncio
async def test_find_by_id_handles_email_keyed_records(write_collection):
    write_collection("users", {"legacy@example.com": make_user("legacy")})
    profile = await UserService.find_by_id("legacy")
    assert profile is not None and profile.id == "legacy"


@pytest.mark.asyncio
async def test_verify_admin(users):
    assert await UserService.verify_admin("admin1") is True
    assert await UserService.verify_admin("u1") is False
    assert await UserService.verify_admin("missing") is False
    assert await UserService.verify_admin("") is False


@pytest.mark.asyncio
async def test_verify_admin_requires_exactly_one_match(write_collection):
    write_collection("users", {
        "admin1": make_user("admin1", role="admin"),
        "admin1@example.com": make_user("admin1", role="admin"),
    })
    assert await UserService.verify_admin("admin1") is False


@pytest.mark.asyncio
async def test_role_aliases_are_accepted(write_collection):
    write_collection("users", {
        "e1": make_user("e1", role="employee"),
        "c1": make_user("c1", role="company"),
    })
    assert (await UserService.find_by_id("e1")).role == UserRole.volunteer
    assert (await UserService.find_by_id("c1")).role == UserRole.organization


@pytest.mark.asyncio
async def test_create_user(store):
    profile = await UserService.create_user(
        UserCreate(id="new1", email="New@Example.com", display_name="Newbie", role="volunteer")
    )
    assert profile.created_at is not None
    assert profile.stats is not None and profile.stats.points == 0

    stored = json.loads(store.path_for("users").read_text(encoding="utf-8"))
    assert stored["new1"]["displayName"] == "Newbie"

    with pytest.raises(InvalidOperationError):
        await UserService.create_user(UserCreate(id="new1", display_name="Again"))
    with pytest.raises(InvalidOperationError):
        await UserService.create_user(UserCreate(id="new2", email="new@example.com"))


def test_admin_role_cannot_be_self_registered():
    with pytest.raises(ValueError):
        UserCreate(id="x", role="admin")


@pytest.mark.asyncio
async def test_update_profile(users):
    profile = await UserService.update_profile("u1", UserUpdate(bio="Now a roofer", onboarding_completed=True))
    assert profile.bio == "Now a roofer"
    assert profile.onboarding_completed is True
    assert profile.display_name == "Bob Builder"

    with pytest.raises(NotFoundError):
        await UserService.update_profile("ghost", UserUpdate(bio="x"))


@pytest.mark.asyncio
async def test_block_self_is_rejected(users):
    with pytest.raises(InvalidOperationError):
        await UserService.block_user("u1", "u1")


@pytest.mark.asyncio
async def test_block_requires_both_users(users):
    with pytest.raises(NotFoundError):
        await UserService.block_user("u1", "ghost")
    with pytest.raises(NotFoundError):
        await UserService.block_user("ghost", "u1")


@pytest.mark.asyncio
async def test_block_and_unblock(users, store, monkeypatch):
    profile = await UserService.block_user("u1", "u2")
    assert profile.blocked_user_ids == ["u2"]

    writes = []
    original_write = store._write
    monkeypatch.setattr(store, "_write", lambda name, data: (writes.append(name), original_write(name, data)))
    again = await UserService.block_user("u1", "u2")
    assert again.blocked_user_ids == ["u2"]
    assert writes == []

    profile = await UserService.unblock_user("u1", "u2")
    assert profile.blocked_user_ids == []
    assert writes == ["users"]

    with pytest.raises(NotFoundError):
        await UserService.unblock_user("u1", "u2")


@pytest.mark.asyncio
async def test_block_keeps_unknown_fields(write_collection, store):
    write_collection("users", {
        "u1": make_user("u1", passwordHash="secret"),
        "u2": make_user("u2"),
    })
    await UserService.block_user("u1", "u2")
    stored = json.loads(store.path_for("users").read_text(encoding="utf-8"))
    assert stored["u1"]["passwordHash"] == "secret"
    assert stored["u1"]["blockedUserIds"] == ["u2"]


@pytest.mark.asyncio
async def test_own_id_never_ends_up_in_block_list(write_collection):
    write_collection("users", {"u1": make_user("u1", blockedUserIds=["u1", "u2", "u2"])})
    profile = await UserService.find_by_id("u1")
    assert profile.blocked_user_ids == ["u2"]


@pytest.mark.asyncio
async def test_list_blocked_users(users):
    await UserService.block_user("u1", "u3")
    await UserService.block_user("u1", "org1")
    assert _ids(await UserService.list_blocked_users("u1")) == ["u3", "org1"]


@pytest.mark.asyncio
async def test_blocking_hides_users_from_each_other(users):
    await UserService.block_user("u1", "u2")

    seen_by_u1 = _ids(await UserService.list_public_profiles(PublicProfileFilters(), "u1"))
    seen_by_u2 = _ids(await UserService.list_public_profiles(PublicProfileFilters(), "u2"))

    assert "u2" not in seen_by_u1 and "u1" not in seen_by_u1
    assert "u1" not in seen_by_u2 and "u2" not in seen_by_u2
    assert "u3" in seen_by_u1 and "u3" in seen_by_u2


@pytest.mark.asyncio
async def test_public_profiles_filters_and_sorting(users):
    volunteers = PublicProfileFilters(role="volunteer")
    assert _ids(await UserService.list_public_profiles(volunteers)) == ["u2", "u1", "u3"]

    by_hours = PublicProfileFilters(role="volunteer", sort_by="hours_desc")
    assert _ids(await UserService.list_public_profiles(by_hours)) == ["u3", "u1", "u2"]

    by_name = PublicProfileFilters(role="volunteer", sort_by="name_desc")
    assert _ids(await UserService.list_public_profiles(by_name)) == ["u3", "u2", "u1"]

    unknown_sort = PublicProfileFilters(role="volunteer", sort_by="shoe_size")
    assert _ids(await UserService.list_public_profiles(unknown_sort)) == ["u2", "u1", "u3"]

    music = PublicProfileFilters(keywords="MUSIC")
    assert _ids(await UserService.list_public_profiles(music)) == ["u2"]

    seniors = PublicProfileFilters(keywords="senior")
    assert _ids(await UserService.list_public_profiles(seniors)) == ["u3"]


@pytest.mark.asyncio
async def test_suspension(users):
    with pytest.raises(UnauthorizedError):
        await UserService.set_suspended("u1", "u2", True)
    with pytest.raises(InvalidOperationError):
        await UserService.set_suspended("admin1", "admin1", True)
    with pytest.raises(NotFoundError):
        await UserService.set_suspended("admin1", "ghost", True)

    profile = await UserService.set_suspended("admin1", "u2", True)
    assert profile.is_suspended is True
    assert _ids(await UserService.list_suspended_users()) == ["u2"]
    assert "u2" not in _ids(await UserService.list_public_profiles())

    await UserService.set_suspended("admin1", "u2", False)
    assert await UserService.list_suspended_users() == []


@pytest.mark.asyncio
async def test_timestamp_like_profile_text_is_kept(write_collection, store):
    write_collection("users", {
        "u1": make_user(
            "u1",
            displayName="2024-05-01T10:00:00.000Z",
            bio="2024-05-01T10:00:00Z",
            skills=["2024-05-01T10:00:00Z", "music"],
        ),
        "u2": make_user("u2"),
    })

    profile = await UserService.find_by_id("u1")
    assert profile.display_name == "2024-05-01T10:00:00.000Z"
    assert profile.bio == "2024-05-01T10:00:00Z"
    assert profile.skills == ["2024-05-01T10:00:00Z", "music"]
    assert "u1" in _ids(await UserService.list_public_profiles())

    await UserService.block_user("u1", "u2")
    stored = json.loads(store.path_for("users").read_text(encoding="utf-8"))["u1"]
    assert stored["displayName"] == "2024-05-01T10:00:00.000Z"
    assert stored["skills"] == ["2024-05-01T10:00:00Z", "music"]


@pytest.mark.asyncio
async def test_find_visible_profile(users):
    assert (await UserService.find_visible_profile("u1", "u2")).id == "u2"

    await UserService.block_user("u2", "u1")
    with pytest.raises(NotFoundError):
        await UserService.find_visible_profile("u1", "u2")
    with pytest.raises(NotFoundError):
        await UserService.find_visible_profile("u2", "u1")
    assert (await UserService.find_visible_profile("u1", "u1")).id == "u1"

    await UserService.set_suspended("admin1", "u3", True)
    with pytest.raises(NotFoundError):
        await UserService.find_visible_profile("u1", "u3")
