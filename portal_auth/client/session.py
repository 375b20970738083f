"""
===============================================================================
CRC CARD — client/session.py
===============================================================================

Classes:
    - ClientSession (value object persisted by the client)
    - SessionStore (port) with InMemorySessionStore / JsonFileSessionStore

Responsibilities:
    - Keep the client's view of the login: loggedIn, token, role, username,
      displayName.
    - Persist it between runs (JSON file) or per process (dict).
    - The JSON file is owner-only and replaced atomically on save.
    - Logout clears every key.

Collaborators:
    - client/api_client.PortalClient (writes on login, clears on logout)
    - client/navigation.guard_navigation (reads)
===============================================================================
"""

from __future__ import annotations

import json
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Protocol

from ..crosscutting.logger import logger
from ..identity.users import UserRole

# Wire keys, as stored by the browser client.
KEY_LOGGED_IN = "loggedIn"
KEY_TOKEN = "token"
KEY_ROLE = "role"
KEY_USERNAME = "username"
KEY_DISPLAY_NAME = "displayName"

SESSION_KEYS = (KEY_LOGGED_IN, KEY_TOKEN, KEY_ROLE, KEY_USERNAME, KEY_DISPLAY_NAME)


@dataclass(frozen=True, slots=True)
class ClientSession:
    logged_in: bool = False
    token: str = ""
    role: str = ""
    username: str = ""
    display_name: str = ""

    @property
    def user_role(self) -> UserRole | None:
        return UserRole.parse(self.role) if self.role else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            KEY_LOGGED_IN: self.logged_in,
            KEY_TOKEN: self.token,
            KEY_ROLE: self.role,
            KEY_USERNAME: self.username,
            KEY_DISPLAY_NAME: self.display_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "ClientSession":
        data = data or {}
        logged_in = data.get(KEY_LOGGED_IN)
        return cls(
            logged_in=logged_in is True or str(logged_in).lower() == "true",
            token=str(data.get(KEY_TOKEN) or ""),
            role=str(data.get(KEY_ROLE) or ""),
            username=str(data.get(KEY_USERNAME) or ""),
            display_name=str(data.get(KEY_DISPLAY_NAME) or ""),
        )


class SessionStore(Protocol):
    def load(self) -> ClientSession: ...

    def save(self, session: ClientSession) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore:
    """Per-process session (tests, scripts)."""

    def __init__(self) -> None:
        self._lock = Lock()
        self._data: Dict[str, Any] = {}

    def load(self) -> ClientSession:
        with self._lock:
            return ClientSession.from_dict(dict(self._data))

    def save(self, session: ClientSession) -> None:
        with self._lock:
            self._data = session.to_dict()

    def clear(self) -> None:
        with self._lock:
            self._data = {}

    def raw(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._data)


class JsonFileSessionStore:
    """Session persisted as a small JSON document (e.g. ~/.portal/session.json)."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def load(self) -> ClientSession:
        if not self._path.exists():
            return ClientSession()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(
                "client session file unreadable; starting logged out",
                extra={"path": str(self._path), "error": str(exc)},
            )
            return ClientSession()
        return ClientSession.from_dict(data if isinstance(data, dict) else None)

    def save(self, session: ClientSession) -> None:
        """Atomically replace the file; it holds a bearer token, so owner-only (0600)."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # mkstemp creates the file with mode 0600.
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(session.to_dict(), fh)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)
