"""
===============================================================================
CRC CARD — api/auth_routes.py (login / logout)
===============================================================================

Responsibilities:
  - POST /api/auth/login: run the LoginAuthenticator and return the token
    plus the fields the client stores in its session.
  - POST /api/auth/logout: stateless acknowledgement; the client discards
    its token.

Collaborators:
  - identity.authenticator.LoginAuthenticator (via PortalContainer)
  - api/exception_handlers (BadRequest / InvalidCredentials / Internal)
===============================================================================
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..container import PortalContainer
from ..crosscutting.error_responses import OPENAPI_ERROR_RESPONSES
from .dependencies import get_container
from .schemas import LoginRequest, LoginResponse

router = APIRouter(prefix="/api/auth", tags=["auth"], responses=OPENAPI_ERROR_RESPONSES)


@router.post("/login", response_model=LoginResponse)
def login(req: LoginRequest, container: PortalContainer = Depends(get_container)):
    """
    Exchange username/password for a signed session token.

    Demo accounts are checked before stored records.
    """
    result = container.authenticator.login(req.username, req.password)
    return LoginResponse(
        token=result.token,
        expires_in=result.expires_in,
        role=result.role,
        username=result.username,
        display_name=result.display_name,
    )


@router.post("/logout")
def logout():
    """Tokens are stateless; logout is idempotent and needs no authentication."""
    return {"ok": True}
