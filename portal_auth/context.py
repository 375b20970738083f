"""
Name: Request Context (ContextVars)

Responsibilities:
  - Store request-scoped data (request_id, method, path, subject)
  - Provide async-safe context without parameter passing
  - Enable structured logging with request correlation

Collaborators:
  - crosscutting/middleware.py: sets context at request start
  - crosscutting/logger.py: reads context for log enrichment
  - api/dependencies.py: sets the authenticated subject and role

Constraints:
  - Only primitive types (str) for safety
  - Default empty string (never None) for JSON serialization
"""

from contextvars import ContextVar

# R: Request identifier (UUID) - set by middleware
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

# R: HTTP method - set by middleware
http_method_var: ContextVar[str] = ContextVar("http_method", default="")

# R: Request path - set by middleware
http_path_var: ContextVar[str] = ContextVar("http_path", default="")

# R: Authenticated subject id and role - set after token verification
subject_var: ContextVar[str] = ContextVar("subject", default="")
role_var: ContextVar[str] = ContextVar("role", default="")


def get_context_dict() -> dict:
    """
    R: Get current context as dict for log enrichment.

    Returns:
        Dict with non-empty context values only
    """
    ctx = {}

    if val := request_id_var.get():
        ctx["request_id"] = val
    if val := http_method_var.get():
        ctx["method"] = val
    if val := http_path_var.get():
        ctx["path"] = val
    if val := subject_var.get():
        ctx["subject_id"] = val
    if val := role_var.get():
        ctx["role"] = val

    return ctx


def clear_context() -> None:
    """R: Reset all context vars (called at request end)."""
    request_id_var.set("")
    http_method_var.set("")
    http_path_var.set("")
    subject_var.set("")
    role_var.set("")
