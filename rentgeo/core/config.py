"""Application configuration using Pydantic Settings.

This module provides type-safe environment variable management
for the database, the spatial store backend, the geocoding provider
and the search defaults.
"""

from functools import lru_cache
from typing import List, Literal, Optional

from pydantic import computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Attributes:
        APP_ENV: Application environment (development, staging, production).
        DEBUG: Enable debug mode.
        LOG_LEVEL: Minimum level for the loguru sink.
        LOG_JSON: Emit serialized JSON records; defaults to on in production.
        API_PREFIX: Prefix for all API routes.
        POSTGRES_USER: PostgreSQL username.
        POSTGRES_PASSWORD: PostgreSQL password.
        POSTGRES_DB: PostgreSQL database name.
        POSTGRES_HOST: PostgreSQL host address.
        POSTGRES_PORT: PostgreSQL port number.
        STATEMENT_TIMEOUT_MS: Server-side statement timeout for spatial queries.
        CORS_ORIGINS: Comma-separated list of allowed CORS origins.
        STORE_BACKEND: Spatial engine behind the search service.
        GEOCODER_PROVIDER: Address resolution backend.
        GEOCODER_BASE_URL: Base URL of the HTTP geocoder.
        GEOCODER_TIMEOUT_SECONDS: Timeout for HTTP geocoder requests.
        GEOCODER_JITTER_DEGREES: Maximum per-axis offset added to table hits.
        GEOCODER_DETERMINISTIC_JITTER: Seed the offset from the address.
        NEAR_POINT_DEFAULT_LIMIT: Page size for near-point searches.
        MAX_SEARCH_LIMIT: Upper bound accepted for any page size.
        NEAREST_DEFAULT_RADIUS_KM: Radius for nearest-to-property lookups.
        NEAREST_DEFAULT_LIMIT: Result count for nearest-to-property lookups.
        TEXT_SEARCH_DEFAULT_LIMIT: Page size for text location searches.
        DISTANCE_LENIENT_ON_ERROR: Report 0 meters instead of failing.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Application
    APP_ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: Optional[str] = None
    LOG_JSON: Optional[bool] = None
    API_PREFIX: str = "/api"

    # Database
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "rentgeo"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    STATEMENT_TIMEOUT_MS: int = 10000

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000"

    # Spatial store
    STORE_BACKEND: Literal["postgis", "memory"] = "postgis"

    # Geocoding
    GEOCODER_PROVIDER: Literal["static", "http"] = "static"
    GEOCODER_BASE_URL: Optional[str] = None
    GEOCODER_TIMEOUT_SECONDS: float = 10.0
    GEOCODER_JITTER_DEGREES: float = 0.005
    GEOCODER_DETERMINISTIC_JITTER: bool = False

    # Search defaults
    NEAR_POINT_DEFAULT_LIMIT: int = 50
    MAX_SEARCH_LIMIT: int = 500
    NEAREST_DEFAULT_RADIUS_KM: float = 5.0
    NEAREST_DEFAULT_LIMIT: int = 5
    TEXT_SEARCH_DEFAULT_LIMIT: int = 20
    DISTANCE_LENIENT_ON_ERROR: bool = False

    @computed_field  # type: ignore[misc]
    @property
    def SQLALCHEMY_DATABASE_URI(self) -> str:
        """Construct the async PostgreSQL database URI.

        Returns:
            Async database connection string for SQLAlchemy.
        """
        return (
            f"postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from comma-separated string.

        Returns:
            List of allowed origin URLs.
        """
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Singleton Settings instance.
    """
    return Settings()


settings = get_settings()
