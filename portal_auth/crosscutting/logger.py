"""
===============================================================================
MODULE: Structured logger (JSON) with request context
===============================================================================

CRC (Component Card)
-------------------------------------------------------------------------------
Component:
  JSONFormatter + redact() + setup_logger()

Responsibilities:
  - Render each record as one JSON line
  - Merge the request context (request_id, method, path, subject_id, role)
  - Keep credentials out of the logs: secrets, tokens, password digests and
    plaintext identities are masked by key, bearer tokens by pattern
  - Honor LOG_LEVEL / LOG_JSON from Settings

Collaborators:
  - portal_auth/context.py (ContextVars)
  - crosscutting/config.py (level and format)

Notes:
  - `extra` keys must not collide with LogRecord attributes ("message",
    "args", ...); stdlib logging raises KeyError on those.
===============================================================================
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import traceback
from datetime import datetime, timezone
from typing import Any

LOGGER_NAME = "portal-auth"
REDACTED = "***REDACTED***"

_MAX_STRING = 4_000
_MAX_DEPTH = 4

# Attributes every LogRecord carries; anything else came in through `extra`.
_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}

# Masked wherever they appear as keys (case-insensitive).
_SENSITIVE_KEYS: frozenset[str] = frozenset(
    {
        "authorization",
        "credential",
        "identity",
        "identity_ciphertext",
        "identity_lookup",
        "password",
        "password_hash",
        "secret",
        "token",
        "username",
    }
)
_SENSITIVE_SUFFIXES = ("_password", "_secret", "_token", "_key")

_BEARER_PATTERN = re.compile(r"(?i)\bbearer\s+[A-Za-z0-9\-_.=+/]+")


def _is_sensitive(key: str | None) -> bool:
    if not key:
        return False
    lowered = key.lower()
    return lowered in _SENSITIVE_KEYS or lowered.endswith(_SENSITIVE_SUFFIXES)


def redact(value: Any, *, key: str | None = None, depth: int = 0) -> Any:
    """JSON-safe copy of `value` with sensitive content masked."""
    if _is_sensitive(key):
        return REDACTED
    if depth > _MAX_DEPTH:
        return "***TRUNCATED***"

    if isinstance(value, str):
        value = _BEARER_PATTERN.sub(f"Bearer {REDACTED}", value)
        if len(value) > _MAX_STRING:
            return value[:_MAX_STRING] + "...(truncated)"
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return f"<bytes {len(value)}B>"
    if isinstance(value, dict):
        return {str(k): redact(v, key=str(k), depth=depth + 1) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [redact(v, key=key, depth=depth + 1) for v in value]
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return str(value)


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": redact(record.getMessage()),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "pid": os.getpid(),
        }

        from ..context import get_context_dict

        payload.update(get_context_dict())

        for attr, value in record.__dict__.items():
            if attr not in _RECORD_ATTRIBUTES:
                payload[attr] = redact(value, key=attr)

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc, tb = record.exc_info
            payload["exception"] = {
                "type": exc_type.__name__,
                "message": redact(str(exc)),
                "stacktrace": traceback.format_exception(exc_type, exc, tb),
            }

        return json.dumps(payload, ensure_ascii=False, default=str, separators=(",", ":"))


def _settings_level_and_format() -> tuple[str, bool]:
    # Invalid env must not break logging; Settings errors surface at startup.
    try:
        from .config import get_settings

        settings = get_settings()
        return (settings.log_level or "INFO").upper(), bool(settings.log_json)
    except Exception:
        return "INFO", True


def setup_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Configure the package logger once (re-imports keep a single handler)."""
    log = logging.getLogger(name)
    level, use_json = _settings_level_and_format()
    log.setLevel(getattr(logging, level, logging.INFO))

    if not log.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            JSONFormatter() if use_json else logging.Formatter("%(levelname)s %(name)s %(message)s")
        )
        log.addHandler(handler)

    return log


logger = setup_logger()
