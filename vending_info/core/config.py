"""
Application configuration using Pydantic Settings.

Configuration values can be set via environment variables or .env file.
"""

import json
from typing import Annotated, Any, List, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application settings
    APP_NAME: str = "Vending Machine Info"
    VERSION: str = "1.0.0"
    ENVIRONMENT: str = Field(
        "development", validation_alias=AliasChoices("ENVIRONMENT", "NODE_ENV")
    )
    DEBUG: bool = False
    DEV_MODE: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # Database
    DATABASE_URL: str = "sqlite:///./data/vending_info.db"

    # CORS (JSON list or comma-separated string)
    CORS_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:5173",
        "http://localhost:5174",
        "http://localhost:5175",
    ]

    # Sessions
    SESSION_LIFETIME_HOURS: int = 24
    SESSION_COOKIE_NAME: str = "session"
    SESSION_COOKIE_SECURE: bool = True
    BCRYPT_ROUNDS: int = 12

    # File storage
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024
    MAX_GALLERY_FILES: int = 10

    # Reviews are published immediately unless moderation is switched on
    AUTO_APPROVE_REVIEWS: bool = True

    # Rate limiting configuration
    RATE_LIMIT_ENABLED: bool = True
    rate_limit_login_endpoints: str = "5 per 15 minutes"
    rate_limit_upload_endpoints: str = "20/hour"
    rate_limit_write_endpoints: str = "100 per 15 minutes"

    # Optional Redis URL for distributed rate limiting
    # When set, rate limits will be shared across multiple instances
    redis_url: Optional[str] = None

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, value: Any) -> Any:
        """Accept a JSON list or a comma-separated string."""
        if isinstance(value, str):
            value = value.strip()
            if value.startswith("["):
                return json.loads(value)
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def session_max_age(self) -> int:
        """Session lifetime in seconds, used for the cookie Max-Age."""
        return self.SESSION_LIFETIME_HOURS * 60 * 60


# Global settings instance
settings = Settings()
