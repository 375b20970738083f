"""
Name: Application Configuration (Settings)

Responsibilities:
  - Centralized, typed configuration using pydantic-settings
  - Validate environment variables at startup
  - Resolve insecure fallbacks explicitly (and loudly) instead of silently

Collaborators:
  - container.py: reads settings to build the store, hasher, cipher and tokens
  - api/main.py: reads settings for CORS and metrics protection
  - crosscutting/logger.py: reads log level / format

Constraints:
  - Lives in API/infrastructure layer, NOT in identity/application
  - No business logic: pure configuration

Notes:
  - Singleton via lru_cache
  - Fallback values for the signing secret and the store credentials are
    publicly known; they are refused when APP_ENV=production
"""

from functools import lru_cache
from urllib.parse import quote

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# R: Publicly known fallbacks. Using any of these is logged at WARNING.
INSECURE_JWT_SECRET = "DLWQ12"
INSECURE_IDENTITY_KEY = "HMS-identity-key"
FALLBACK_DB_HOST = "localhost"
FALLBACK_DB_USER = "admin_user"
FALLBACK_DB_PASSWORD = "AdminPassword123!"
FALLBACK_DB_NAME = "HMS"

_PASSWORD_SCHEMES = {"sha256", "argon2"}
_CIPHER_MODES = {"deterministic", "keyed"}
_STORE_BACKENDS = {"postgres", "memory"}


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_env: Application environment (development/local/test/production)
        allowed_origins: Comma-separated CORS origins
        log_level: Root log level (default: INFO)
        log_json: Emit JSON logs (default: True)
        jwt_secret: Secret for signing access tokens (empty -> insecure fallback)
        jwt_access_ttl_minutes: Access token TTL in minutes (default: 60)
        password_scheme: sha256 (legacy, unsalted) | argon2
        identity_cipher_mode: deterministic (legacy) | keyed
        identity_encryption_key: Store-wide key for identity encryption
        demo_identities_enabled: Accept the built-in demo accounts (default: True)
        store_backend: postgres | memory
        database_url: Full PostgreSQL DSN (overrides db_* fields)
        db_host/db_port/db_user/db_password/db_name: Store connection parameters
        db_pool_min_size/db_pool_max_size: Pool bounds (max default: 10)
        db_pool_max_waiting: Queued callers allowed when the pool is exhausted (0 = unbounded)
        db_pool_timeout_seconds: Max wait for a connection before failing
        db_statement_timeout_ms: Server-side statement timeout
        metrics_require_auth: Require an admin token for /metrics
        cors_allow_credentials: Allow cookies cross-origin (default: False)
    """

    # Environment
    app_env: str = "development"

    # CORS configuration
    allowed_origins: str = "http://localhost:3000"
    cors_allow_credentials: bool = False

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    # Security - Tokens
    jwt_secret: str = ""
    jwt_access_ttl_minutes: int = 60

    # Security - Credentials
    password_scheme: str = "sha256"
    identity_cipher_mode: str = "deterministic"
    identity_encryption_key: str = ""
    demo_identities_enabled: bool = True

    # Security - Hardening
    metrics_require_auth: bool = False

    # Store
    store_backend: str = "postgres"
    database_url: str = ""
    db_host: str = ""
    db_port: int = 5432
    db_user: str = ""
    db_password: str = ""
    db_name: str = ""

    # Database - Connection Pool
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10
    db_pool_max_waiting: int = 0
    db_pool_timeout_seconds: float = 30.0
    db_statement_timeout_ms: int = 30000  # 30 seconds

    # Dev Tools
    dev_seed_admin: bool = False
    dev_seed_admin_username: str = "admin_local"
    dev_seed_admin_password: str = "admin"
    dev_seed_admin_role: str = "admin"
    dev_seed_admin_force_reset: bool = False

    @field_validator("password_scheme")
    @classmethod
    def password_scheme_valid(cls, v: str) -> str:
        scheme = (v or "sha256").strip().lower()
        if scheme not in _PASSWORD_SCHEMES:
            raise ValueError("password_scheme must be sha256 or argon2")
        return scheme

    @field_validator("identity_cipher_mode")
    @classmethod
    def identity_cipher_mode_valid(cls, v: str) -> str:
        mode = (v or "deterministic").strip().lower()
        if mode not in _CIPHER_MODES:
            raise ValueError("identity_cipher_mode must be deterministic or keyed")
        return mode

    @field_validator("store_backend")
    @classmethod
    def store_backend_valid(cls, v: str) -> str:
        backend = (v or "postgres").strip().lower()
        if backend not in _STORE_BACKENDS:
            raise ValueError("store_backend must be postgres or memory")
        return backend

    @field_validator("jwt_access_ttl_minutes")
    @classmethod
    def ttl_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("jwt_access_ttl_minutes must be greater than 0")
        return v

    @field_validator("db_pool_max_size")
    @classmethod
    def pool_max_must_be_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("db_pool_max_size must be greater than 0")
        return v

    @field_validator("db_pool_max_waiting")
    @classmethod
    def pool_max_waiting_non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError("db_pool_max_waiting must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_pool_bounds(self):
        if self.db_pool_min_size < 0 or self.db_pool_min_size > self.db_pool_max_size:
            raise ValueError(
                f"db_pool_min_size ({self.db_pool_min_size}) must be between 0 and "
                f"db_pool_max_size ({self.db_pool_max_size})"
            )
        return self

    @model_validator(mode="after")
    def validate_security_requirements(self):
        if not self.is_production():
            return self

        insecure_secrets = {INSECURE_JWT_SECRET, "changeme", "change-me", "password"}
        jwt_secret = (self.jwt_secret or "").strip()
        if not jwt_secret or jwt_secret in insecure_secrets:
            raise ValueError(
                "JWT_SECRET must be set to a strong, non-default value in production"
            )
        if len(jwt_secret) < 32:
            raise ValueError("JWT_SECRET must be at least 32 characters in production")

        identity_key = (self.identity_encryption_key or "").strip()
        if not identity_key or identity_key == INSECURE_IDENTITY_KEY:
            raise ValueError("IDENTITY_ENCRYPTION_KEY must be set in production")

        if self.store_backend == "postgres" and not self.database_url.strip():
            if not self.db_password or self.db_password == FALLBACK_DB_PASSWORD:
                raise ValueError(
                    "DB_PASSWORD (or DATABASE_URL) must be set in production"
                )

        if not self.metrics_require_auth:
            raise ValueError("METRICS_REQUIRE_AUTH must be true in production")

        return self

    def is_production(self) -> bool:
        return self.app_env.strip().lower() == "production"

    def get_allowed_origins_list(self) -> list[str]:
        """Parse comma-separated origins into a list."""
        return [
            origin.strip()
            for origin in self.allowed_origins.split(",")
            if origin.strip()
        ]

    def resolved_jwt_secret(self) -> str:
        """Signing secret, or the publicly known fallback (logged)."""
        secret = (self.jwt_secret or "").strip()
        if secret:
            return secret
        _warn_fallback("JWT_SECRET", "tokens are signed with a publicly known secret")
        return INSECURE_JWT_SECRET

    def resolved_identity_key(self) -> str:
        """Identity encryption key, or the publicly known fallback (logged)."""
        key = (self.identity_encryption_key or "").strip()
        if key:
            return key
        _warn_fallback(
            "IDENTITY_ENCRYPTION_KEY",
            "stored identities are encrypted with a publicly known key",
        )
        return INSECURE_IDENTITY_KEY

    def resolved_database_url(self) -> str:
        """
        Build the PostgreSQL DSN.

        DATABASE_URL wins when present; otherwise each missing db_* field
        falls back to the historical hardcoded value and is logged.
        """
        if self.database_url.strip():
            return self.database_url.strip()

        host = self.db_host or _fallback("DB_HOST", FALLBACK_DB_HOST)
        user = self.db_user or _fallback("DB_USER", FALLBACK_DB_USER)
        password = self.db_password or _fallback("DB_PASSWORD", FALLBACK_DB_PASSWORD)
        name = self.db_name or _fallback("DB_NAME", FALLBACK_DB_NAME)

        return (
            f"postgresql://{quote(user, safe='')}:{quote(password, safe='')}"
            f"@{host}:{self.db_port}/{quote(name, safe='')}"
        )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # Ignore unknown env vars
    )


def _fallback(env_name: str, value: str) -> str:
    _warn_fallback(env_name, "using hardcoded store connection default")
    return value


def _warn_fallback(env_name: str, consequence: str) -> None:
    # Lazy import: logger reads settings on setup
    from .logger import logger

    logger.warning(
        "INSECURE FALLBACK: %s is not set; %s",
        env_name,
        consequence,
        extra={"setting": env_name},
    )


@lru_cache
def get_settings() -> Settings:
    """
    Get singleton Settings instance.

    Raises:
        ValidationError: If env vars are invalid
    """
    return Settings()
