"""
===============================================================================
MODULE: HTTP middleware (request context)
===============================================================================

CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  RequestContextMiddleware

Responsibilities:
  - Accept a well-formed X-Request-Id or mint one; echo it on the response
  - Bind method/path/request_id to the log context for the request
  - One access log line per request, tagged with the authenticated subject
    when the route resolved one
  - Mark auth and user API responses as non-cacheable (they carry tokens
    and profile data)
  - Record HTTP metrics labelled by the matched route template (never the
    raw path, which any client controls)
  - Always clear_context()

Collaborators:
  - portal_auth/context.py
  - crosscutting/metrics.record_request_metrics
  - crosscutting/logger
  - api/dependencies.require_principal (sets request.state.principal)
===============================================================================
"""

from __future__ import annotations

import re
import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from ..context import clear_context, http_method_var, http_path_var, request_id_var
from .logger import logger
from .metrics import record_request_metrics

REQUEST_ID_HEADER = "X-Request-Id"

# Printable token characters only; anything else is replaced, never echoed.
_REQUEST_ID_PATTERN = re.compile(r"^[A-Za-z0-9._:\-]{1,128}$")

_NO_STORE_PREFIXES = ("/api/auth", "/api/user")

_QUIET_PATHS = frozenset({"/healthz", "/readyz", "/metrics"})


def resolve_request_id(incoming: str | None) -> str:
    candidate = (incoming or "").strip()
    if _REQUEST_ID_PATTERN.match(candidate):
        return candidate
    return str(uuid.uuid4())


def _route_template(request: Request) -> str | None:
    # Set on the shared scope by the router once a route matches.
    route = request.scope.get("route")
    return getattr(route, "path", None)


def _principal_fields(request: Request) -> dict:
    principal = getattr(request.state, "principal", None)
    if principal is None:
        return {}
    return {
        "subject_id": principal.subject_id,
        "role": principal.role.value,
        "demo": principal.is_demo,
    }


class RequestContextMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        path = request.url.path

        request_id_var.set(request_id)
        http_method_var.set(request.method)
        http_path_var.set(path)
        request.state.request_id = request_id

        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception:
            logger.exception(
                "request failed",
                extra={"status_code": status_code, **_principal_fields(request)},
            )
            raise
        else:
            response.headers[REQUEST_ID_HEADER] = request_id
            if path.startswith(_NO_STORE_PREFIXES):
                response.headers["Cache-Control"] = "no-store"
            return response
        finally:
            latency = time.perf_counter() - start
            record_request_metrics(
                endpoint=_route_template(request),
                method=request.method,
                status_code=status_code,
                latency_seconds=latency,
            )
            if path not in _QUIET_PATHS:
                logger.info(
                    "request completed",
                    extra={
                        "status_code": status_code,
                        "latency_ms": round(latency * 1000, 2),
                        **_principal_fields(request),
                    },
                )
            clear_context()
