"""
===============================================================================
MODULE: Standard error responses (RFC 7807 / Problem Details)
===============================================================================

Goal
----
Make every HTTP error uniform so that:
- clients can branch on "code"
- logs can be correlated by request_id / error_id
- credential failures are indistinguishable from each other

-------------------------------------------------------------------------------
CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  AppHTTPException + handlers

Responsibilities:
  - Define the error code catalog (ErrorCode)
  - Build RFC 7807 payloads (ErrorDetail)
  - Provide factories for frequent errors
  - Provide the FastAPI handler returning application/problem+json

Collaborators:
  - crosscutting/middleware.py (request_id)
  - api/exception_handlers.py (maps internal errors)
===============================================================================
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel


class ErrorCode(str, Enum):
    # 4xx
    BAD_REQUEST = "BAD_REQUEST"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"

    # 5xx
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorDetail(BaseModel):
    """
    RFC 7807 model (Problem Details).

    Extra fields:
    - code: stable error code for clients
    - errors: optional list of details (e.g. [{"field": "x", "msg": "..."}])
    """

    type: str = "about:blank"
    title: str
    status: int
    detail: str
    code: ErrorCode
    instance: str | None = None
    errors: list[dict[str, Any]] | None = None


PROBLEM_JSON_MEDIA_TYPE = "application/problem+json"
ERROR_TYPE_BASE_URL = "https://api.portal.local/errors/"

_OPENAPI_ERROR_CONTENT = {
    PROBLEM_JSON_MEDIA_TYPE: {"schema": {"$ref": "#/components/schemas/ErrorDetail"}}
}

OPENAPI_ERROR_RESPONSES = {
    str(status): {
        "description": f"{title} (RFC7807)",
        "model": ErrorDetail,
        "content": _OPENAPI_ERROR_CONTENT,
    }
    for status, title in (
        (400, "Bad Request"),
        (401, "Unauthorized"),
        (403, "Forbidden"),
        (404, "Not Found"),
        (409, "Conflict"),
    )
}


class AppHTTPException(HTTPException):
    """HTTPException carrying a stable application error code."""

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        detail: str,
        errors: list[dict[str, Any]] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.code = code
        self.errors = errors


# Factories
def bad_request(
    detail: str, errors: list[dict[str, Any]] | None = None
) -> AppHTTPException:
    return AppHTTPException(400, ErrorCode.BAD_REQUEST, detail, errors)


def invalid_credentials(detail: str) -> AppHTTPException:
    return AppHTTPException(401, ErrorCode.INVALID_CREDENTIALS, detail)


def unauthorized(detail: str = "Authentication required") -> AppHTTPException:
    return AppHTTPException(
        401, ErrorCode.UNAUTHORIZED, detail, headers={"WWW-Authenticate": "Bearer"}
    )


def forbidden(detail: str = "Access denied") -> AppHTTPException:
    return AppHTTPException(403, ErrorCode.FORBIDDEN, detail)


def not_found(resource: str, identifier: str) -> AppHTTPException:
    return AppHTTPException(
        404, ErrorCode.NOT_FOUND, f"{resource} '{identifier}' not found"
    )


def conflict(detail: str) -> AppHTTPException:
    return AppHTTPException(409, ErrorCode.CONFLICT, detail)


def internal_error(detail: str = "An unexpected error occurred") -> AppHTTPException:
    return AppHTTPException(500, ErrorCode.INTERNAL_ERROR, detail)


async def app_exception_handler(
    request: Request, exc: AppHTTPException
) -> JSONResponse:
    """Render an AppHTTPException as application/problem+json."""
    error = ErrorDetail(
        type=f"{ERROR_TYPE_BASE_URL}{exc.code.value.lower()}",
        title=exc.code.value.replace("_", " ").title(),
        status=exc.status_code,
        detail=exc.detail,
        code=exc.code,
        instance=str(request.url.path),
        errors=exc.errors,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error.model_dump(mode="json", exclude_none=True),
        headers=exc.headers,
        media_type=PROBLEM_JSON_MEDIA_TYPE,
    )
