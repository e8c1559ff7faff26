import pytest

from volunteer_board_api.app.core.store import JsonStore, encode, set_store


def make_user(user_id, role="volunteer", **fields):
    """Build a stored user record (camelCase keys, as on disk)."""
    record = {
        "id": user_id,
        "email": f"{user_id}@example.com",
        "displayName": fields.pop("displayName", user_id.upper()),
        "role": role,
        "blockedUserIds": [],
    }
    record.update(fields)
    return record


@pytest.fixture
def store(tmp_path):
    """A JsonStore in a temporary directory, installed as the process store."""
    s = JsonStore(tmp_path / "data")
    set_store(s)
    yield s
    set_store(None)


@pytest.fixture
def write_collection(store):
    """Write a collection file directly, bypassing the store's locking."""
    def _write(name, data):
        store.ensure_data_dir()
        store.path_for(name).write_text(encode(data), encoding="utf-8")
        return data
    return _write


@pytest.fixture
def users(write_collection):
    """Seed a small user base: one admin, three volunteers and one organization."""
    records = {
        "admin1": make_user("admin1", role="admin", displayName="Alice Admin"),
        "u1": make_user(
            "u1",
            displayName="Bob Builder",
            bio="Weekend carpenter",
            skills=["woodwork"],
            causes=["Community Development"],
            stats={"points": 30, "hours": 5, "badges": []},
        ),
        "u2": make_user(
            "u2",
            displayName="Carol Singer",
            skills=["music"],
            causes=["Arts & Culture"],
            stats={"points": 80, "hours": 2, "badges": ["First Steps"]},
        ),
        "u3": make_user(
            "u3",
            displayName="Dan Driver",
            causes=["Seniors"],
            stats={"points": 10, "hours": 12, "badges": []},
        ),
        "org1": make_user("org1", role="organization", displayName="Green Earth"),
    }
    return write_collection("users", records)
