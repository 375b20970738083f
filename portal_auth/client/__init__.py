"""
Client-side session handling for the portal UI.

The session is advisory: it drives navigation only. The server trusts the
bearer token alone.
"""

from .api_client import PortalClient, PortalClientError
from .navigation import HOME_PATH, NavigationDecision, guard_navigation
from .session import (
    ClientSession,
    InMemorySessionStore,
    JsonFileSessionStore,
    SessionStore,
)

__all__ = [
    "PortalClient",
    "PortalClientError",
    "HOME_PATH",
    "NavigationDecision",
    "guard_navigation",
    "ClientSession",
    "SessionStore",
    "InMemorySessionStore",
    "JsonFileSessionStore",
]
