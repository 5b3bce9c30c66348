# passvault/app/core/config.py
"""
Application configuration using pydantic-settings.

Security considerations:
- SECRET_KEY and INTEGRITY_HASH_KEY must be set via env in production
- CORS_ORIGINS parsed from comma-separated env var, never defaults to "*"
- Database URLs normalized for async drivers automatically
- Debug/echo modes disabled by default
"""
from functools import lru_cache
from typing import List

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

INSECURE_SECRET_KEY = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"
INSECURE_INTEGRITY_KEY = "INSECURE_DEV_INTEGRITY_KEY"


class Settings(BaseSettings):
    """
    Strictly typed application settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values (lowest priority, dev-safe only)
    """

    # ─────────────────────────────────────────────────────────────
    # Application metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "PassVault"
    PROJECT_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    ENVIRONMENT: str = "development"

    # ─────────────────────────────────────────────────────────────
    # Security: JWT Configuration
    # ─────────────────────────────────────────────────────────────
    SECRET_KEY: str = INSECURE_SECRET_KEY
    ALGORITHM: str = "HS256"
    TOKEN_ISSUER: str = "passvault"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ─────────────────────────────────────────────────────────────
    # Security: request body integrity (HMAC-SHA256)
    # Shared with clients; authenticates transport, not the user.
    # ─────────────────────────────────────────────────────────────
    INTEGRITY_HASH_KEY: str = INSECURE_INTEGRITY_KEY
    HASHER_POOL_SIZE: int = 16

    # ─────────────────────────────────────────────────────────────
    # Database Configuration
    # Priority: DATABASE_URL env var → SQLite fallback for local dev
    # ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./passvault.db"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """
        Normalize database URLs for async SQLAlchemy compatibility.

        Conversions:
        - postgres://     → postgresql+asyncpg://
        - postgresql://   → postgresql+asyncpg://
        - sqlite:///      → sqlite+aiosqlite:///
        """
        if v is None:
            return "sqlite+aiosqlite:///./passvault.db"

        url = v.strip()

        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)

        if url.startswith("postgresql://") and "+asyncpg" not in url:
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)

        if url.startswith("sqlite:///") and "+aiosqlite" not in url:
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        return url

    # MUST be False in production to prevent SQL query exposure
    DATABASE_ECHO: bool = False

    # ─────────────────────────────────────────────────────────────
    # Transport
    # ─────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:8080,http://127.0.0.1:8080"
    GZIP_MINIMUM_SIZE: int = 1024
    # Upper bound for a gzip request body after inflation
    MAX_INFLATED_BODY_SIZE: int = 10 * 1024 * 1024
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    LOG_LEVEL: str = "INFO"

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        """
        Parse CORS_ORIGINS string into a list of allowed origins.

        Empty string returns empty list, NOT wildcard "*".
        """
        if not self.CORS_ORIGINS or not self.CORS_ORIGINS.strip():
            return []

        return [
            origin.strip()
            for origin in self.CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    @model_validator(mode="after")
    def reject_insecure_keys_in_production(self) -> "Settings":
        if self.is_production:
            if self.SECRET_KEY == INSECURE_SECRET_KEY:
                raise ValueError("SECRET_KEY must be set in production")
            if self.INTEGRITY_HASH_KEY == INSECURE_INTEGRITY_KEY:
                raise ValueError("INTEGRITY_HASH_KEY must be set in production")
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Extra fields in .env are ignored (prevents config injection)
        extra="ignore",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.ENVIRONMENT.lower() == "production"

    @property
    def is_sqlite(self) -> bool:
        """Check if using SQLite database (local development)."""
        return "sqlite" in self.DATABASE_URL.lower()


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Settings are loaded once and shared across the application.
    """
    return Settings()


settings = get_settings()
