"""
===============================================================================
CRC CARD — client/navigation.py
===============================================================================

Responsibilities:
    - Map client page paths to role guard operations.
    - guard_navigation(session, path): allow, or redirect to HOME_PATH when
      the session is not logged in or its role is not allowed.

Collaborators:
    - identity.role_guard (same policy table as the server)
    - client/session.ClientSession

Notes:
    - Paths are matched case-insensitively, ignoring a trailing slash.
    - Paths without an entry are public.
===============================================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from ..identity.role_guard import Operation, is_allowed
from .session import ClientSession

HOME_PATH = "/"

PAGE_OPERATIONS: Mapping[str, Operation] = MappingProxyType(
    {
        "/adminpage": Operation.OPEN_ADMIN_PAGE,
        "/staffpage": Operation.OPEN_STAFF_PAGE,
        "/doctorpage": Operation.OPEN_DOCTOR_PAGE,
        "/profile": Operation.VIEW_OWN_PROFILE,
    }
)


@dataclass(frozen=True, slots=True)
class NavigationDecision:
    allowed: bool
    redirect_to: str | None = None


def _normalize(path: str) -> str:
    path = (path or HOME_PATH).split("?", 1)[0].split("#", 1)[0]
    path = path.lower()
    if len(path) > 1:
        path = path.rstrip("/")
    return path or HOME_PATH


def guard_navigation(session: ClientSession, path: str) -> NavigationDecision:
    operation = PAGE_OPERATIONS.get(_normalize(path))
    if operation is None:
        return NavigationDecision(allowed=True)

    if not session.logged_in or not is_allowed(session.role, operation):
        return NavigationDecision(allowed=False, redirect_to=HOME_PATH)

    return NavigationDecision(allowed=True)
