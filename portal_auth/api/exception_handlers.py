"""
===============================================================================
CRC CARD — api/exception_handlers.py (centralized exception mapping)
===============================================================================

Responsibilities:
  - Translate the identity error taxonomy into RFC 7807 responses:
      BadRequestError         -> 400 BAD_REQUEST
      InvalidCredentialsError -> 401 INVALID_CREDENTIALS
      UnauthenticatedError    -> 401 UNAUTHORIZED (+ WWW-Authenticate)
      ForbiddenError          -> 403 FORBIDDEN
      NotFoundError           -> 404 NOT_FOUND
      DuplicateIdentityError  -> 409 CONFLICT
      DatabaseError / InternalError / PortalError -> 500 INTERNAL_ERROR
  - Request body validation failures -> 400 BAD_REQUEST.
  - Log with request_id + error_id; never leak internals on 5xx.

Collaborators:
  - crosscutting.error_responses (AppHTTPException + factories)
  - crosscutting.exceptions / identity.errors
  - crosscutting.config.get_settings (detail level for unhandled errors)
===============================================================================
"""

from __future__ import annotations

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..crosscutting.config import get_settings
from ..crosscutting.error_responses import (
    AppHTTPException,
    ErrorCode,
    app_exception_handler,
    bad_request,
    conflict,
    forbidden,
    invalid_credentials,
    unauthorized,
)
from ..crosscutting.exceptions import PortalError
from ..crosscutting.logger import logger
from ..identity.errors import (
    BadRequestError,
    DuplicateIdentityError,
    ForbiddenError,
    InvalidCredentialsError,
    NotFoundError,
    UnauthenticatedError,
)

_INTERNAL_DETAIL = "Internal server error"


def _request_id_from(request: Request) -> str | None:
    return getattr(getattr(request, "state", None), "request_id", None)


async def bad_request_handler(request: Request, exc: BadRequestError) -> JSONResponse:
    return await app_exception_handler(request, bad_request(exc.message))


async def invalid_credentials_handler(
    request: Request, exc: InvalidCredentialsError
) -> JSONResponse:
    return await app_exception_handler(request, invalid_credentials(exc.message))


async def unauthenticated_handler(
    request: Request, exc: UnauthenticatedError
) -> JSONResponse:
    return await app_exception_handler(request, unauthorized(exc.message))


async def forbidden_handler(request: Request, exc: ForbiddenError) -> JSONResponse:
    logger.info(
        "request forbidden",
        extra={"request_id": _request_id_from(request), "reason": exc.message},
    )
    return await app_exception_handler(request, forbidden(exc.message))


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return await app_exception_handler(
        request, AppHTTPException(404, ErrorCode.NOT_FOUND, exc.message)
    )


async def duplicate_identity_handler(
    request: Request, exc: DuplicateIdentityError
) -> JSONResponse:
    return await app_exception_handler(request, conflict(exc.message))


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    """DatabaseError, InternalError and any untyped PortalError -> 500."""
    request_id = _request_id_from(request)
    logger.error(
        "service error",
        extra={
            "code": exc.error_code,
            "error_id": exc.error_id,
            "detail": exc.message,
            "request_id": request_id,
        },
    )
    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=_INTERNAL_DETAIL,
        errors=[{"error_id": exc.error_id, "request_id": request_id}],
    )
    return await app_exception_handler(request, app_exc)


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Only location and message: raw inputs may carry passwords.
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())), "msg": err.get("msg")}
        for err in exc.errors()
    ]
    return await app_exception_handler(
        request, bad_request("Invalid request body", errors=errors)
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback for untyped exceptions: full log, generic response."""
    request_id = _request_id_from(request)
    settings = get_settings()

    logger.error(
        "unhandled exception",
        exc_info=True,
        extra={"request_id": request_id, "error": str(exc)},
    )

    detail = str(exc) if not settings.is_production() else _INTERNAL_DETAIL

    app_exc = AppHTTPException(
        status_code=500,
        code=ErrorCode.INTERNAL_ERROR,
        detail=detail,
        errors=[{"request_id": request_id}],
    )
    return await app_exception_handler(request, app_exc)


def register_exception_handlers(app) -> None:
    """
    Register handlers on the FastAPI app.

    Specific PortalError subclasses before the PortalError fallback; the
    generic Exception handler last.
    """
    app.add_exception_handler(BadRequestError, bad_request_handler)
    app.add_exception_handler(InvalidCredentialsError, invalid_credentials_handler)
    app.add_exception_handler(UnauthenticatedError, unauthenticated_handler)
    app.add_exception_handler(ForbiddenError, forbidden_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(DuplicateIdentityError, duplicate_identity_handler)
    app.add_exception_handler(PortalError, portal_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(AppHTTPException, app_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


__all__ = ["register_exception_handlers"]
