"""
Unified configuration for the reportvault service.

This module provides a single Settings class for every environment variable
the service reads. Values come from the .env file at the project root and can
be overridden by actual environment variables.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Determine project root for .env file loading (allows running from any CWD)
PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """
    Settings for the reportvault service.

    Environment variables are loaded from .env file and can be overridden
    by actual environment variables.
    """

    # Service identification
    SERVICE_NAME: str = "reportvault"

    # App host/port
    APP_HOST: str = "127.0.0.1"
    APP_PORT: int = 3001

    LOG_LEVEL: str = "INFO"

    # CORS: a single frontend origin, GET and POST only
    CORS_ALLOWED_ORIGIN: str = "http://localhost:5173"
    CORS_MAX_AGE: int = 3600

    # IPFS HTTP API (content-addressable storage backend)
    IPFS_API_URL: str = "http://127.0.0.1:5001"
    IPFS_ADD_PATH: str = "/api/v0/add"
    # None keeps the upstream call unbounded
    STORAGE_TIMEOUT_SECONDS: float | None = None
    # None leaves the connection pool uncapped so uploads never wait for a slot
    STORAGE_MAX_CONNECTIONS: int | None = None

    # Telemetry
    ENABLE_TELEMETRY: bool = False
    OTEL_EXPORTER_OTLP_ENDPOINT: str | None = None

    model_config = SettingsConfigDict(
        env_file=PROJECT_ROOT / ".env",
        extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore
