"""
===============================================================================
FILE: crosscutting/metrics.py
===============================================================================

CRC CARD (Module)
-------------------------------------------------------------------------------
Name:
    Metrics (Prometheus)

Responsibilities:
    - Define Prometheus metrics on a dedicated registry.
    - Provide small, stable helpers to record events and durations.
    - Keep cardinality low (NO subject ids, NO usernames, NO raw SQL).
    - Build the /metrics response.

Collaborators:
    - crosscutting.middleware: HTTP latency and counts.
    - identity.authenticator: login attempts by branch/outcome.
    - api.dependencies: authorization denials by operation.
    - infrastructure.db.instrumentation: DB query durations.
===============================================================================
"""

from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

_registry = CollectorRegistry()

# Endpoint label for requests that matched no route (404 scans).
UNMATCHED_ENDPOINT = "unmatched"
_HTTP_METHODS = frozenset(
    {"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"}
)

# ------------------------
# HTTP
# ------------------------
_requests_total = Counter(
    "portal_requests_total",
    "Total HTTP requests",
    ["endpoint", "method", "status"],
    registry=_registry,
)

_request_latency = Histogram(
    "portal_request_latency_seconds",
    "HTTP request latency (seconds)",
    ["endpoint", "method"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=_registry,
)

# ------------------------
# Authentication / authorization
# ------------------------
_login_attempts_total = Counter(
    "portal_login_attempts_total",
    "Login attempts by branch and outcome",
    ["branch", "outcome"],
    registry=_registry,
)

_token_rejections_total = Counter(
    "portal_token_rejections_total",
    "Bearer tokens rejected by reason",
    ["reason"],
    registry=_registry,
)

_authorization_denials_total = Counter(
    "portal_authorization_denials_total",
    "Role guard denials by operation",
    ["operation"],
    registry=_registry,
)

# ------------------------
# DB
# ------------------------
_db_query_duration = Histogram(
    "portal_db_query_duration_seconds",
    "DB query duration (seconds)",
    ["kind"],
    buckets=(0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
    registry=_registry,
)


def record_request_metrics(
    endpoint: str | None,
    method: str,
    status_code: int,
    latency_seconds: float,
) -> None:
    """Record HTTP metrics.

    - endpoint is the matched route template ("/api/user/users/{user_id}"),
      or UNMATCHED_ENDPOINT; raw paths are never used as labels.
    - method outside the standard verbs is recorded as "OTHER".
    - status is bucketed as 2xx/4xx/5xx.
    """
    label = endpoint or UNMATCHED_ENDPOINT
    verb = method.upper() if method.upper() in _HTTP_METHODS else "OTHER"
    _requests_total.labels(
        endpoint=label,
        method=verb,
        status=_status_bucket(status_code),
    ).inc()
    _request_latency.labels(endpoint=label, method=verb).observe(latency_seconds)


def record_login_attempt(branch: str, outcome: str) -> None:
    """Count a login attempt.

    Args:
        branch: "demo" | "store" | "none"
        outcome: "success" | "invalid_credentials" | "bad_request" | "error"
    """
    _login_attempts_total.labels(branch=branch, outcome=outcome).inc()


def record_token_rejection(reason: str) -> None:
    """Count a rejected bearer token ("missing" | "invalid" | "expired")."""
    _token_rejections_total.labels(reason=reason).inc()


def record_authorization_denial(operation: str) -> None:
    """Count a role guard denial."""
    _authorization_denials_total.labels(operation=operation).inc()


def observe_db_query_duration(kind: str, seconds: float) -> None:
    """Observe a DB query duration.

    `kind` must stay low cardinality (SELECT/INSERT/UPDATE/...).
    """
    _db_query_duration.labels(kind=(kind or "UNKNOWN").upper()).observe(seconds)


def get_metrics_response() -> tuple[bytes, str]:
    """Return (body_bytes, content_type) for /metrics."""
    return generate_latest(_registry), CONTENT_TYPE_LATEST


def _status_bucket(code: int) -> str:
    if 200 <= code < 300:
        return "2xx"
    if 300 <= code < 400:
        return "3xx"
    if 400 <= code < 500:
        return "4xx"
    if 500 <= code < 600:
        return "5xx"
    return "other"
