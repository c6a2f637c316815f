import logging
from typing import Any, ClassVar, FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict

_logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=True, extra="ignore"
    )

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./readyforms.db"

    # Database pool (applies to client/server DBs like Postgres; SQLite uses NullPool)
    DB_POOL_PRE_PING: bool = True
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT_SECONDS: int = 30
    DB_POOL_RECYCLE_SECONDS: int = 1800

    # Applied for Postgres connections only.
    # Versioned writes rely on the conditional UPDATE/DELETE re-checking its
    # predicate after a concurrent commit, which READ COMMITTED provides.
    DB_POSTGRES_ISOLATION_LEVEL: str = "READ COMMITTED"

    # Redis (optional backend for rate limiting and token revocation)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = False

    # JWT
    # NOTE: This default is intentionally insecure and must never be used outside dev/test.
    DEFAULT_JWT_SECRET: ClassVar[str] = "dev-secret-change-me-please-32chars!!"
    JWT_SECRET: str = DEFAULT_JWT_SECRET
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = 7

    # Passwords
    BCRYPT_ROUNDS: int = 12

    # Registration: allow self-service admin accounts (dev convenience).
    ALLOW_ADMIN_CREATION: bool = False

    # Application
    LOG_LEVEL: str = "INFO"
    DEBUG: bool = False

    # Environment
    # Used for guardrails (e.g. dev-only helpers). Suggested values: dev|staging|prod.
    ENV: str = "dev"

    # Comma-separated list of allowed browser origins. Empty = localhost only.
    CORS_ORIGINS: str = ""

    # Rate limiting (in-memory, best-effort; Redis-backed when REDIS_ENABLED)
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_REQUESTS_PER_WINDOW: int = 300

    # Observability
    METRICS_ENABLED: bool = True

    # Listing
    DEFAULT_PAGE_SIZE: int = 20
    MAX_PAGE_SIZE: int = 100

    # --- Guardrails ---
    _SAFE_ENVS: ClassVar[FrozenSet[str]] = frozenset({"dev", "development", "test", "testing"})
    _UNSAFE_PLACEHOLDERS: ClassVar[FrozenSet[str]] = frozenset(
        {
            "change-me-in-production",
            "change-me",
            "changeme",
            "",
        }
    )

    def model_post_init(self, __context: Any) -> None:
        self._guardrail_default_secrets()

    @property
    def is_dev(self) -> bool:
        return (self.ENV or "").strip().lower() in {"dev", "development"}

    def cors_origins(self) -> list[str]:
        return [o.strip() for o in (self.CORS_ORIGINS or "").split(",") if o.strip()]

    def _guardrail_default_secrets(self) -> None:
        env = (self.ENV or "").strip().lower()
        if env in self._SAFE_ENVS:
            return

        jwt_secret = (self.JWT_SECRET or "").strip()
        vl = jwt_secret.lower()
        if (
            jwt_secret == self.DEFAULT_JWT_SECRET
            or vl in self._UNSAFE_PLACEHOLDERS
            or "change-me" in vl
        ):
            raise RuntimeError(
                "Refusing to start with insecure default/placeholder secrets outside dev/test: "
                "JWT_SECRET. "
                f"Got ENV={self.ENV!r}. "
                "Set a secure value via the JWT_SECRET environment variable, "
                "or run with ENV=dev/test."
            )


settings = Settings()


def get_settings() -> Settings:
    """Return the process settings instance.

    The application itself is built from an explicit ``Settings`` object
    (see ``readyforms.main.create_app``); this accessor only serves the
    module-level ``app`` used by ``uvicorn readyforms.main:app``.
    """
    return settings
