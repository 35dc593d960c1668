"""
app/core/config.py

Purpose: Application configuration

- Loads environment variables
- Centralizes config values (storage backend, session cookie, paging)
- Validates configuration on startup
- Environment-specific settings
"""

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.
    Validates all required configs on startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Environment
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"

    # Storage substrate
    STORAGE_BACKEND: Literal["memory", "mongo"] = Field(
        default="memory",
        description="Key/value backend holding the persisted collections"
    )
    MONGODB_URL: str = Field(
        default="mongodb://localhost:27017",
        description="MongoDB connection URI"
    )
    MONGODB_DB_NAME: str = Field(
        default="admin_dashboard",
        description="MongoDB database name"
    )
    MONGODB_STORAGE_COLLECTION: str = Field(
        default="local_storage",
        description="Collection holding one document per storage key"
    )

    # Session
    SESSION_COOKIE_NAME: str = Field(
        default="session",
        description="Name of the session cookie"
    )
    SESSION_MAX_AGE_SECONDS: int = Field(
        default=86400,
        description="Session cookie lifetime in seconds"
    )

    # Listing
    DEFAULT_PAGE_SIZE: int = Field(
        default=10,
        description="Page size used when a list request does not give one"
    )
    MAX_PAGE_SIZE: int = Field(
        default=100,
        description="Upper bound for requested page sizes"
    )

    # Accounts
    PASSWORD_MIN_LENGTH: int = Field(
        default=6,
        description="Minimum length of a new password"
    )
    SEED_PASSWORD: str = Field(
        default="password123",
        description="Password given to the seeded demo identities"
    )
    SEED_PRODUCT_COUNT: int = Field(
        default=10,
        description="Number of demo products written on an empty store"
    )

    # Application
    DEBUG: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    API_PREFIX: str = Field(
        default="/api/v1",
        description="API route prefix"
    )
    CORS_ORIGINS: list = Field(
        default=["*"],
        description="Allowed CORS origins"
    )

    # Security
    SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Application secret key"
    )

    @field_validator("SECRET_KEY")
    @classmethod
    def validate_secret_key(cls, v: str, info: ValidationInfo):
        """Ensure secret key is changed in production."""
        if info.data.get("ENVIRONMENT") == "production" and v == "change-me-in-production":
            raise ValueError("SECRET_KEY must be changed in production environment")
        return v

    @field_validator("DEFAULT_PAGE_SIZE", "MAX_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v: int):
        if v < 1:
            raise ValueError("page sizes must be positive")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.ENVIRONMENT == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.ENVIRONMENT == "production"


# Global settings instance
settings = Settings()


def validate_settings():
    """
    Validates critical settings on application startup.
    Raises ValueError if any required setting is missing or invalid.
    """
    errors = []

    if settings.STORAGE_BACKEND == "mongo":
        if not settings.MONGODB_URL:
            errors.append("MONGODB_URL is required for the mongo storage backend")
        if not settings.MONGODB_DB_NAME:
            errors.append("MONGODB_DB_NAME is required for the mongo storage backend")

    if settings.DEFAULT_PAGE_SIZE > settings.MAX_PAGE_SIZE:
        errors.append("DEFAULT_PAGE_SIZE cannot exceed MAX_PAGE_SIZE")

    if not settings.SESSION_COOKIE_NAME:
        errors.append("SESSION_COOKIE_NAME is required")

    # Production-specific validations
    if settings.is_production and settings.STORAGE_BACKEND == "memory":
        errors.append("STORAGE_BACKEND=memory does not persist across restarts in production")

    if errors:
        raise ValueError(f"Configuration validation failed: {', '.join(errors)}")

    return True
