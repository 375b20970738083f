"""
Name: Client Session Tests

Responsibilities:
  - Wire keys (loggedIn, token, role, username, displayName)
  - In-memory and JSON file stores
  - Corrupt session files start logged out
  - Session files are owner-only and written without leftovers
"""

import json
import os
import stat
import sys

import pytest

from portal_auth.client.session import (
    SESSION_KEYS,
    ClientSession,
    InMemorySessionStore,
    JsonFileSessionStore,
)
from portal_auth.identity.users import UserRole

SESSION = ClientSession(
    logged_in=True,
    token="tok",
    role="doctor",
    username="doctor",
    display_name="Doctor User",
)


@pytest.mark.unit
class TestClientSession:
    def test_wire_keys(self):
        assert tuple(SESSION.to_dict()) == SESSION_KEYS
        assert SESSION.to_dict()["displayName"] == "Doctor User"

    def test_from_dict_accepts_string_flag(self):
        session = ClientSession.from_dict({"loggedIn": "true", "role": "staff"})
        assert session.logged_in is True
        assert session.user_role is UserRole.STAFF

    def test_from_empty(self):
        assert ClientSession.from_dict(None) == ClientSession()

    def test_unknown_role(self):
        assert ClientSession(role="nurse").user_role is None


@pytest.mark.unit
class TestInMemorySessionStore:
    def test_save_load_clear(self):
        store = InMemorySessionStore()
        store.save(SESSION)
        assert store.load() == SESSION
        assert store.raw()["loggedIn"] is True
        store.clear()
        assert store.load().logged_in is False
        assert store.raw() == {}


@pytest.mark.unit
class TestJsonFileSessionStore:
    def test_persists_to_disk(self, tmp_path):
        path = tmp_path / "portal" / "session.json"
        JsonFileSessionStore(path).save(SESSION)

        assert json.loads(path.read_text())["token"] == "tok"
        assert JsonFileSessionStore(path).load() == SESSION

    def test_clear_removes_file(self, tmp_path):
        path = tmp_path / "session.json"
        store = JsonFileSessionStore(path)
        store.save(SESSION)
        store.clear()
        store.clear()
        assert not path.exists()

    def test_missing_file(self, tmp_path):
        assert JsonFileSessionStore(tmp_path / "none.json").load() == ClientSession()

    def test_corrupt_file(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{not json")
        assert JsonFileSessionStore(path).load().logged_in is False

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    def test_file_is_owner_only(self, tmp_path):
        path = tmp_path / "session.json"
        path.write_text("{}")
        os.chmod(path, 0o644)

        JsonFileSessionStore(path).save(SESSION)

        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert [p.name for p in tmp_path.iterdir()] == ["session.json"]

    def test_failed_write_keeps_previous_session(self, tmp_path, monkeypatch):
        path = tmp_path / "session.json"
        store = JsonFileSessionStore(path)
        store.save(SESSION)

        def _boom(*_args, **_kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("portal_auth.client.session.os.replace", _boom)
        with pytest.raises(OSError):
            store.save(ClientSession())

        assert store.load() == SESSION
        assert [p.name for p in tmp_path.iterdir()] == ["session.json"]
