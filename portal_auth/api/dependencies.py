"""
===============================================================================
CRC CARD — api/dependencies.py
===============================================================================

Module:
    FastAPI dependencies (container access + authentication + role guard)

Responsibilities:
    - Expose the PortalContainer stored on app.state.
    - require_principal(): verify the bearer token and attach the Principal
      to request.state.principal (and the logging context).
    - require_operation(op): require_principal + role guard for `op`.

Collaborators:
    - identity.authorization.Authorizer
    - identity.role_guard (Operation, authorize)
    - context (subject_var, role_var)

Notes:
    - Failures raise the identity error taxonomy; api/exception_handlers
      renders them as RFC 7807.
===============================================================================
"""

from __future__ import annotations

from typing import Callable

from fastapi import Depends, Header, Request

from ..container import PortalContainer
from ..context import role_var, subject_var
from ..crosscutting.metrics import record_authorization_denial
from ..identity.authorization import Principal
from ..identity.errors import ForbiddenError
from ..identity.role_guard import Operation, authorize


def get_container(request: Request) -> PortalContainer:
    return request.app.state.container


def require_principal() -> Callable:
    """Dependency: the request must carry a valid `Authorization: Bearer` token."""

    async def dependency(
        request: Request,
        authorization: str | None = Header(None, alias="Authorization"),
    ) -> Principal:
        container = get_container(request)
        principal = container.authorizer.authenticate_header(authorization)

        request.state.principal = principal
        subject_var.set(principal.subject_id)
        role_var.set(principal.role.value)
        return principal

    return dependency


def require_operation(operation: Operation) -> Callable:
    """Dependency: authenticated, and the role is allowed to perform `operation`."""
    op = Operation(operation)

    async def dependency(
        principal: Principal = Depends(require_principal()),
    ) -> Principal:
        try:
            authorize(principal.role, op)
        except ForbiddenError:
            record_authorization_denial(op.value)
            raise
        return principal

    return dependency
