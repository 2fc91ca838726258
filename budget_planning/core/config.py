"""
Centralized configuration management using Pydantic Settings.

This module provides type-safe configuration management with validation,
loading settings from environment variables and .env files.
"""

from typing import Annotated, List
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict
import json


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    Secrets should never be committed to code - use .env file (gitignored).
    """

    # API Configuration
    api_v1_prefix: str = Field(
        default="/api/v1",
        description="API version 1 prefix for all endpoints"
    )
    project_name: str = Field(
        default="Budget Planning",
        description="Project name displayed in API docs"
    )

    # Database Configuration
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/budget_planning.db",
        description="Database connection URL (SQLite by default, PostgreSQL-ready format)"
    )
    enable_db_create_all: bool = Field(
        default=True,
        description="Create missing tables on startup (disable when migrations manage the schema)"
    )

    # Security Configuration
    secret_key: str = Field(
        ...,
        description="Secret key for JWT token signing (generate with: openssl rand -hex 32)"
    )
    access_token_expire_minutes: int = Field(
        default=60,
        ge=1,
        description="JWT access token expiration time in minutes"
    )

    # Rate limiting
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable per-IP rate limiting middleware"
    )
    auth_rate_limit: int = Field(
        default=10,
        ge=1,
        description="Requests per minute allowed on /auth endpoints"
    )
    default_rate_limit: int = Field(
        default=60,
        ge=1,
        description="Requests per minute allowed on all other endpoints"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(
        default=True,
        description="Emit structured JSON logs (False for human-readable lines)"
    )

    # CORS Configuration
    cors_origins: Annotated[List[str], NoDecode] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins (frontend URLs)"
    )
    cors_allow_credentials: bool = Field(
        default=True,
        description="Allow cookies/credentials in CORS requests"
    )

    # Pydantic Settings Configuration
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra environment variables
        env_nested_delimiter="__",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: str | List[str]) -> List[str]:
        """
        Parse cors_origins from JSON string or list.

        Supports comma-separated origins for easier .env configuration.
        """
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [s.strip() for s in v.split(",") if s.strip()]
        return v

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """
        Validate that secret_key is properly configured.

        Raises ValueError if still using placeholder value or too short.
        JWT signing keys must be at least 32 characters.
        """
        if not v or v.strip() == "":
            raise ValueError(
                "SECRET_KEY is required and cannot be empty. "
                "Generate one with: openssl rand -hex 32"
            )
        if v in ["generate-with-openssl-rand-hex-32", "CHANGE_ME_32_CHARS_MIN", "your-secret-key-here"]:
            raise ValueError(
                "SECRET_KEY must be set to a secure random value (not placeholder). "
                "Generate one with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError(
                f"SECRET_KEY must be at least 32 characters long. "
                f"Current length: {len(v)}. Generate with: openssl rand -hex 32"
            )
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        """
        Validate database URL format.

        Supports SQLite (default) and PostgreSQL.
        """
        if not v or v.strip() == "":
            raise ValueError("DATABASE_URL is required and cannot be empty")

        valid_schemes = ["sqlite", "sqlite+aiosqlite", "postgresql", "postgresql+asyncpg"]
        if not any(v.startswith(scheme + "://") for scheme in valid_schemes):
            raise ValueError(
                f"DATABASE_URL must start with one of: {', '.join(valid_schemes)}. "
                f"Got: {v[:20]}..."
            )
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"LOG_LEVEL must be a standard logging level, got: {v}")
        return level


# Global settings instance
# Import this instance throughout the application
settings = Settings()
