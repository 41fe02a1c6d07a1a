# =============================================================================
# foodapi/config.py - Application Settings
# =============================================================================
# This module loads configuration from environment variables using pydantic-settings.
# It provides a single Settings class with all configuration values.
#
# Usage:
#   from foodapi.config import get_settings
#   settings = get_settings()
#   print(settings.PORT)
#
# Environment variables are loaded from:
# 1. System environment variables
# 2. .env file in project root (if exists)
# =============================================================================

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Origins the frontend dev servers run on (CRA and Vite)
DEVELOPMENT_ORIGINS = ["http://localhost:3000", "http://localhost:5173"]


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Everything except the database URI has a working default, so the API
    can boot locally with an empty environment. A missing MONGODB_URI is
    reported by the database connector, not here.
    """

    # -------------------------------------------------------------------------
    # Server
    # -------------------------------------------------------------------------

    HOST: str = Field(
        default="0.0.0.0",
        description="Host to bind the API server to"
    )

    PORT: int = Field(
        default=5000,
        ge=1,
        le=65535,
        description="Port for the API server"
    )

    NODE_ENV: Literal["development", "production", "test"] = Field(
        default="development",
        description="Current environment (controls logging and CORS)"
    )

    # -------------------------------------------------------------------------
    # MongoDB
    # -------------------------------------------------------------------------

    MONGODB_URI: str | None = Field(
        default=None,
        description="MongoDB connection string (required to serve data)"
    )

    MONGODB_DB_NAME: str = Field(
        default="sbfoods",
        description="Database used when the URI does not name one"
    )

    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = Field(
        default=30000,
        ge=1,
        description="How long the initial connect waits for a server"
    )

    # -------------------------------------------------------------------------
    # Security
    # -------------------------------------------------------------------------

    # Production origins (comma-separated string that gets parsed)
    FRONTEND_URL: str = Field(
        default="",
        description="Allowed CORS origins in production (comma-separated)"
    )

    RATE_LIMIT_WINDOW_MS: int = Field(
        default=15 * 60 * 1000,
        ge=1,
        description="Rate limiting window in milliseconds"
    )

    RATE_LIMIT_MAX: int = Field(
        default=100,
        ge=1,
        description="Requests allowed per client IP per window"
    )

    TRUST_PROXY: bool = Field(
        default=False,
        description="Take the client IP from X-Forwarded-For"
    )

    # -------------------------------------------------------------------------
    # Request Bodies and Uploads
    # -------------------------------------------------------------------------

    BODY_LIMIT_MB: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Maximum JSON / URL-encoded body size in MB"
    )

    UPLOAD_DIR: str = Field(
        default="uploads",
        description="Directory served under /uploads"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        case_sensitive=True,
        extra="ignore",
    )

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def cors_origins_list(self) -> list[str]:
        """
        Origins allowed to make credentialed cross-origin requests.

        Production uses FRONTEND_URL; every other environment gets the
        local dev servers.
        Example: "https://sbfoods.com, https://admin.sbfoods.com" -> ["https://sbfoods.com", "https://admin.sbfoods.com"]
        """
        if not self.is_production:
            return list(DEVELOPMENT_ORIGINS)
        return [origin.strip() for origin in self.FRONTEND_URL.split(",") if origin.strip()]

    @property
    def body_limit_bytes(self) -> int:
        """Convert MB to bytes for body size checks."""
        return self.BODY_LIMIT_MB * 1024 * 1024

    @property
    def rate_limit_window_seconds(self) -> float:
        return self.RATE_LIMIT_WINDOW_MS / 1000

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.NODE_ENV == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.NODE_ENV == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    Using lru_cache ensures we only parse .env and validate once,
    not on every access.

    Returns:
        Settings: The application settings instance
    """
    return Settings()
