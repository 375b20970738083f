"""
===============================================================================
CRC CARD — client/api_client.py
===============================================================================

Class:
    PortalClient

Responsibilities:
    - Log in / log out against the portal API and keep the ClientSession in
      its SessionStore.
    - Attach `Authorization: Bearer <token>` to every authenticated call.
    - Turn RFC 7807 error responses into PortalClientError.
    - Drop the stored session when the server answers 401 to a bearer call.
    - Gate page navigation with the shared role guard (can_open).

Collaborators:
    - httpx.Client (injectable; fastapi.testclient.TestClient works too)
    - client/session.SessionStore, client/navigation.guard_navigation
===============================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from ..crosscutting.logger import logger
from .navigation import NavigationDecision, guard_navigation
from .session import ClientSession, InMemorySessionStore, SessionStore

DEFAULT_BASE_URL = "http://localhost:8000"


class PortalClientError(Exception):
    """Non-2xx answer from the portal API."""

    def __init__(self, status_code: int, code: str, detail: str):
        super().__init__(f"{status_code} {code}: {detail}")
        self.status_code = status_code
        self.code = code
        self.detail = detail


class PortalClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        session_store: SessionStore | None = None,
        http_client: httpx.Client | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        self._store = session_store or InMemorySessionStore()
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout_s)

    # =========================================================
    # Session
    # =========================================================
    @property
    def session(self) -> ClientSession:
        return self._store.load()

    def can_open(self, path: str) -> NavigationDecision:
        return guard_navigation(self.session, path)

    def login(self, username: str, password: str) -> ClientSession:
        data = self._send(
            "POST",
            "/api/auth/login",
            json={"username": username, "password": password},
            authenticated=False,
        )
        session = ClientSession(
            logged_in=True,
            token=data["token"],
            role=data["role"],
            username=data["username"],
            display_name=data.get("display_name") or data["username"],
        )
        self._store.save(session)
        return session

    def logout(self) -> None:
        """Always clears the local session, even if the server call fails."""
        try:
            self._send("POST", "/api/auth/logout", authenticated=False)
        except (httpx.HTTPError, PortalClientError) as exc:
            logger.warning("logout call failed; clearing session anyway", extra={"error": str(exc)})
        finally:
            self._store.clear()

    # =========================================================
    # Own account
    # =========================================================
    def get_profile(self) -> Dict[str, Any]:
        return self._send("GET", "/api/user/profile")

    def update_profile(self, username: str) -> Dict[str, Any]:
        return self._send("PUT", "/api/user/profile", json={"username": username})

    def change_password(self, current_password: str, new_password: str) -> Dict[str, Any]:
        return self._send(
            "PUT",
            "/api/user/change-password",
            json={"currentPassword": current_password, "newPassword": new_password},
        )

    # =========================================================
    # Administration
    # =========================================================
    def list_users(self) -> List[Dict[str, Any]]:
        return self._send("GET", "/api/user/users")["users"]

    def create_user(self, username: str, password: str, role: str) -> int:
        data = self._send(
            "POST",
            "/api/user/users",
            json={"username": username, "password": password, "role": role},
        )
        return int(data["user_id"])

    def update_user(self, user_id: int, username: str) -> Dict[str, Any]:
        return self._send("PUT", f"/api/user/users/{user_id}", json={"username": username})

    def delete_user(self, user_id: int) -> Dict[str, Any]:
        return self._send("DELETE", f"/api/user/users/{user_id}")

    # =========================================================
    # Transport
    # =========================================================
    def _send(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        authenticated: bool = True,
    ) -> Dict[str, Any]:
        headers: Dict[str, str] = {}
        if authenticated:
            token = self._store.load().token
            if token:
                headers["Authorization"] = f"Bearer {token}"

        response = self._http.request(method, path, json=json, headers=headers)

        if response.status_code == 401 and authenticated:
            self._store.clear()

        if response.is_error:
            raise self._to_error(response)

        return response.json() if response.content else {}

    @staticmethod
    def _to_error(response: httpx.Response) -> PortalClientError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        return PortalClientError(
            status_code=response.status_code,
            code=str(body.get("code") or "HTTP_ERROR"),
            detail=str(body.get("detail") or response.reason_phrase),
        )

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "PortalClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
