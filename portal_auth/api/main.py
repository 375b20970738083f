"""
Name: FastAPI Application Factory

Responsibilities:
  - Build the FastAPI app around a PortalContainer (one per app)
  - Configure middleware (request context, CORS)
  - Mount the auth and user routers
  - Expose /healthz, /readyz and /metrics
  - Run the optional dev admin seed and close the pool on shutdown

Collaborators:
  - container.PortalContainer
  - crosscutting.middleware.RequestContextMiddleware
  - api.auth_routes / api.user_routes
  - api.exception_handlers.register_exception_handlers
  - application.dev_seed_admin.ensure_dev_admin

Notes:
  - Middleware order matters: RequestContext wraps CORS wraps routes
  - Settings are validated when the container is built (production refuses
    insecure fallbacks)
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Header, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..application.dev_seed_admin import ensure_dev_admin
from ..container import PortalContainer
from ..crosscutting.logger import logger
from ..crosscutting.metrics import get_metrics_response, record_authorization_denial
from ..crosscutting.middleware import RequestContextMiddleware
from ..identity.errors import ForbiddenError
from ..identity.role_guard import Operation, authorize
from .auth_routes import router as auth_router
from .dependencies import get_container
from .exception_handlers import register_exception_handlers
from .user_routes import router as user_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle: dev seed, then close the container on exit."""
    container: PortalContainer = app.state.container
    settings = container.settings

    try:
        ensure_dev_admin(settings, store=container.store, hasher=container.hasher)

        logger.info(
            "Portal auth API starting up",
            extra={
                "app_env": settings.app_env,
                "store_backend": settings.store_backend,
                "password_scheme": settings.password_scheme,
                "identity_cipher_mode": settings.identity_cipher_mode,
                "demo_identities_enabled": settings.demo_identities_enabled,
                "db_pool_max": settings.db_pool_max_size,
            },
        )

        yield

    finally:
        container.close()
        logger.info("Portal auth API shutting down")


async def _require_metrics_access(
    request: Request,
    authorization: str | None = Header(None, alias="Authorization"),
) -> None:
    """Admin token required for /metrics when METRICS_REQUIRE_AUTH=true."""
    container = get_container(request)
    if not container.settings.metrics_require_auth:
        return None
    principal = container.authorizer.authenticate_header(authorization)
    try:
        authorize(principal.role, Operation.VIEW_METRICS)
    except ForbiddenError:
        record_authorization_denial(Operation.VIEW_METRICS.value)
        raise
    return None


def create_app(container: PortalContainer | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        container: pre-wired container (tests inject one with an in-memory
            store); built from environment settings when omitted.
    """
    container = container or PortalContainer()
    settings = container.settings

    app = FastAPI(
        title="Portal Auth API",
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[
            {"name": "auth", "description": "Login / logout (JWT bearer tokens)"},
            {"name": "users", "description": "Own profile and user administration"},
        ],
    )
    app.state.container = container

    # R: Last added runs first: RequestContext -> CORS -> routes.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins_list(),
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Request-Id"],
    )
    app.add_middleware(RequestContextMiddleware)

    app.include_router(auth_router)
    app.include_router(user_router)

    register_exception_handlers(app)

    @app.get("/healthz", tags=["health"])
    def healthz(request: Request):
        """Liveness plus store connectivity."""
        store_ok = container.store.ping()
        return {
            "ok": store_ok,
            "db": "connected" if store_ok else "disconnected",
            "request_id": getattr(request.state, "request_id", None),
        }

    @app.get("/readyz", tags=["health"])
    def readyz(response: Response):
        """Ready only when the credential store answers."""
        if not container.store.ping():
            response.status_code = 503
            return {"ready": False}
        return {"ready": True}

    @app.get("/metrics", tags=["metrics"], dependencies=[Depends(_require_metrics_access)])
    def metrics():
        body, content_type = get_metrics_response()
        return Response(content=body, media_type=content_type)

    return app
