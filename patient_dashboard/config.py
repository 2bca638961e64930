"""Application configuration module."""

import sys
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from patient_dashboard.common.auth.jwt import parse_duration
from patient_dashboard.common.logger import app_logger

logger = app_logger.getChild("config")

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_ENVIRONMENTS = ("development", "production", "test")

# Minimum recommended HMAC secret length in bytes
RECOMMENDED_SECRET_BYTES = 32


class Settings(BaseSettings):
    """Application settings, read once from the environment at startup."""

    # Server settings
    ENV: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = Field(default=8000, ge=1, le=65535)
    API_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Patient Dashboard API"

    # Database settings
    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./patient_dashboard.db", min_length=1)
    SQL_ECHO: bool = False
    DB_POOL_SIZE: int = Field(default=10, gt=0)
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0)
    DB_POOL_TIMEOUT: int = Field(default=30, gt=0)
    DB_CONNECT_TIMEOUT: float = Field(default=10.0, gt=0)
    DB_SOCKET_TIMEOUT: float = Field(default=45.0, gt=0)
    DB_MAX_RETRIES: int = Field(default=5, gt=0)
    DB_RETRY_DELAY: float = Field(default=5.0, ge=0)
    DB_RETRY_BACKOFF: float = Field(default=2.0, ge=1)

    # Token settings
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    JWT_ISSUER: str = "patient-dashboard"
    JWT_EXPIRES_IN: str = "1h"
    REFRESH_TOKEN_EXPIRES_IN: str = "7d"

    # Password hashing work factor
    BCRYPT_SALT_ROUNDS: int = Field(default=12, ge=10, le=15)

    # Rate limiting
    RATE_LIMIT_WINDOW_MS: int = Field(default=900000, gt=0)
    RATE_LIMIT_MAX_REQUESTS: int = Field(default=100, gt=0)
    REDIS_URL: Optional[str] = None

    # CORS
    ALLOWED_ORIGINS: str = "http://localhost:8080,http://localhost:5173"

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    # Access policy
    SHIPMENTS_ADMIN_ONLY: bool = False
    ALLOW_ROLE_SELF_ASSIGNMENT: bool = False

    # Feature flags
    ENABLE_WEIGHT_TRACKING: bool = True
    ENABLE_MEDICATION_MANAGEMENT: bool = True
    ENABLE_SHIPMENT_TRACKING: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("ENV")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment"""
        if v.lower() not in VALID_ENVIRONMENTS:
            raise ValueError(f"Invalid environment: {v}. Must be one of {list(VALID_ENVIRONMENTS)}")
        return v.lower()

    @field_validator("JWT_SECRET")
    @classmethod
    def validate_secret(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("JWT_SECRET is required")
        return v

    @field_validator("JWT_EXPIRES_IN", "REFRESH_TOKEN_EXPIRES_IN")
    @classmethod
    def validate_duration(cls, v: str) -> str:
        # Raises ValueError for anything but <int><s|m|h|d>
        parse_duration(v)
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate log level"""
        if v.upper() not in VALID_LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}. Must be one of {list(VALID_LOG_LEVELS)}")
        return v.upper()

    @model_validator(mode="after")
    def warn_on_short_secret(self) -> "Settings":
        if len(self.JWT_SECRET.encode("utf-8")) < RECOMMENDED_SECRET_BYTES:
            logger.warning(
                f"JWT_SECRET is shorter than {RECOMMENDED_SECRET_BYTES} bytes; "
                "use a longer secret in production"
            )
        return self

    @property
    def allowed_origins(self) -> List[str]:
        """CORS origins as a list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def rate_limit_period(self) -> int:
        """Rate limit window in whole seconds."""
        return max(1, self.RATE_LIMIT_WINDOW_MS // 1000)

    @property
    def is_production(self) -> bool:
        return self.ENV == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get the process-wide settings.

    Returns:
        Loaded settings

    Raises:
        pydantic.ValidationError: If the environment is invalid
    """
    return Settings()


def load_settings_or_exit() -> Settings:
    """
    Load settings, logging every problem and exiting non-zero if invalid.

    Returns:
        Loaded settings
    """
    try:
        return get_settings()
    except ValidationError as e:
        logger.critical("Invalid environment configuration:")
        for error in e.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            logger.critical(f"  - {location}: {error.get('msg')}")
        logger.critical("Please check your .env file and ensure all required variables are set correctly.")
        sys.exit(1)
