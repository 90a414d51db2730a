"""
==============================================================================
Application Settings Module
==============================================================================

Configuration management for the Flock & Fur marketplace API using
Pydantic Settings.

The settings object is created once (``get_settings`` is cached) and is the
only place external credentials are read. Integration clients are built
from it at startup, so a production deployment with missing payment,
storage or email credentials fails immediately instead of on first use.

Configuration Priority (highest to lowest):
------------------------------------------
1. Environment variables
2. .env file
3. Default values

Security Considerations:
-----------------------
- Never commit .env files to version control
- Use a strong JWT_SECRET_KEY in production
- Change the default admin credentials immediately

==============================================================================
"""

from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Module logger
logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes:
        app_name: Display name for the application
        app_env: Environment mode (development/staging/production)
        debug: Enable debug mode for verbose logging
        host: Server bind address
        port: Server port number
        database_url: SQLAlchemy database connection string
        jwt_secret_key: Secret key for JWT token signing
        jwt_algorithm: Algorithm for JWT signing (e.g., HS256)
        access_token_expire_minutes: Access token lifetime in minutes
        refresh_token_expire_days: Refresh token lifetime in days
        default_admin_email: Initial admin account email
        default_admin_password: Initial admin account password
        default_admin_name: Initial admin display name
        service_city: Metro area every job is located in
        service_state: State of the metro area
        base_url: Public URL of the web frontend (email links, redirects)
        require_after_photo: Require an AFTER photo before completing a job
        stripe_secret_key: Payment processor API key
        stripe_webhook_secret: Payment processor webhook signing secret
        aws_region: Object storage region
        aws_s3_bucket: Object storage bucket for job photos
        upload_url_expire_seconds: Lifetime of presigned upload URLs
        resend_api_key: Email delivery API key
        email_from: Sender address for outgoing email
        cors_origins: Allowed CORS origins (JSON array string)
    """

    # =========================================================================
    # PYDANTIC SETTINGS CONFIGURATION
    # =========================================================================
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True,
    )

    # =========================================================================
    # APPLICATION SETTINGS
    # =========================================================================
    app_name: str = Field(
        default="Flock & Fur API",
        description="Display name for the application"
    )

    app_env: str = Field(
        default="development",
        description="Environment mode: development, staging, production"
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode for verbose logging"
    )

    # =========================================================================
    # SERVER SETTINGS
    # =========================================================================
    host: str = Field(default="0.0.0.0", description="Server bind address")

    port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Server port number"
    )

    # =========================================================================
    # DATABASE SETTINGS
    # =========================================================================
    database_url: str = Field(
        default="sqlite:///./storage/db/flockfur.db",
        description="SQLAlchemy database connection string"
    )

    # =========================================================================
    # JWT AUTHENTICATION SETTINGS
    # =========================================================================
    jwt_secret_key: str = Field(
        default="change-this-in-production",
        min_length=16,
        description="Secret key for JWT token signing"
    )

    jwt_algorithm: str = Field(default="HS256", description="Algorithm for JWT signing")

    access_token_expire_minutes: int = Field(
        default=30,
        ge=1,
        le=1440,  # Max 24 hours
        description="Access token lifetime in minutes"
    )

    refresh_token_expire_days: int = Field(
        default=7,
        ge=1,
        le=90,
        description="Refresh token lifetime in days"
    )

    # =========================================================================
    # DEFAULT ADMIN SETTINGS
    # =========================================================================
    default_admin_email: str = Field(
        default="admin@flockfur.com",
        min_length=3,
        description="Initial admin account email"
    )

    default_admin_password: str = Field(
        default="admin123",
        min_length=6,
        description="Initial admin account password"
    )

    default_admin_name: str = Field(default="Administrator")

    # =========================================================================
    # MARKETPLACE SETTINGS
    # =========================================================================
    service_city: str = Field(default="Birmingham")

    service_state: str = Field(default="AL", min_length=2, max_length=2)

    base_url: str = Field(
        default="http://localhost:3000",
        description="Public frontend URL used in email links and payment redirects"
    )

    require_after_photo: bool = Field(
        default=True,
        description="Cleaner must upload an AFTER photo before completing a job"
    )

    # =========================================================================
    # PAYMENT PROCESSOR SETTINGS
    # =========================================================================
    stripe_secret_key: Optional[str] = Field(default=None)

    stripe_webhook_secret: Optional[str] = Field(default=None)

    # =========================================================================
    # OBJECT STORAGE SETTINGS
    # =========================================================================
    aws_region: str = Field(default="us-east-1")

    aws_s3_bucket: Optional[str] = Field(default=None)

    aws_access_key_id: Optional[str] = Field(default=None)

    aws_secret_access_key: Optional[str] = Field(default=None)

    upload_url_expire_seconds: int = Field(default=3600, ge=60, le=604800)

    # =========================================================================
    # EMAIL SETTINGS
    # =========================================================================
    resend_api_key: Optional[str] = Field(default=None)

    email_from: str = Field(default="Flock & Fur <noreply@flockfur.com>")

    # =========================================================================
    # CORS SETTINGS
    # =========================================================================
    cors_origins: str = Field(
        default='["*"]',
        description="Allowed CORS origins as JSON array string"
    )

    # =========================================================================
    # VALIDATORS
    # =========================================================================
    @field_validator("app_env")
    @classmethod
    def validate_app_env(cls, value: str) -> str:
        """
        Validate and normalize application environment.

        Unknown values fall back to 'development' with a warning.
        """
        valid_envs = {"development", "staging", "production"}
        normalized = value.lower().strip()

        if normalized not in valid_envs:
            logger.warning(
                f"Unknown environment '{value}', defaulting to 'development'"
            )
            return "development"

        return normalized

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, value: str) -> str:
        """Validate JWT algorithm is supported."""
        supported = {"HS256", "HS384", "HS512", "RS256", "RS384", "RS512"}

        if value.upper() not in supported:
            raise ValueError(
                f"Unsupported JWT algorithm: {value}. "
                f"Supported: {', '.join(sorted(supported))}"
            )

        return value.upper()

    @field_validator("default_admin_email")
    @classmethod
    def normalize_admin_email(cls, value: str) -> str:
        return value.lower().strip()

    @field_validator("base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @model_validator(mode="after")
    def validate_production_integrations(self) -> "Settings":
        """
        Require external service credentials in production.

        Development and staging run with whatever is configured; the
        integration layer reports unconfigured services per request.

        Raises:
            ValueError: If a production deployment lacks credentials
        """
        if not self.is_production:
            return self

        missing = [
            name for name, value in (
                ("STRIPE_SECRET_KEY", self.stripe_secret_key),
                ("STRIPE_WEBHOOK_SECRET", self.stripe_webhook_secret),
                ("AWS_S3_BUCKET", self.aws_s3_bucket),
                ("RESEND_API_KEY", self.resend_api_key),
            )
            if not value
        ]

        if missing:
            raise ValueError(
                f"Missing required production settings: {', '.join(missing)}"
            )

        if self.jwt_secret_key == "change-this-in-production":
            raise ValueError("JWT_SECRET_KEY must be changed in production")

        return self

    # =========================================================================
    # COMPUTED PROPERTIES
    # =========================================================================
    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"

    @property
    def payments_configured(self) -> bool:
        return bool(self.stripe_secret_key and self.stripe_webhook_secret)

    @property
    def storage_configured(self) -> bool:
        return bool(self.aws_s3_bucket)

    @property
    def cors_origins_list(self) -> List[str]:
        """
        Parse CORS origins from JSON string to list.

        Returns:
            List of allowed origin strings
        """
        try:
            origins = json.loads(self.cors_origins)
            if isinstance(origins, list):
                return origins
            return ["*"]
        except json.JSONDecodeError:
            logger.warning(
                f"Invalid CORS origins JSON: {self.cors_origins}, "
                "defaulting to ['*']"
            )
            return ["*"]

    @property
    def access_token_expire_seconds(self) -> int:
        """Get access token expiry in seconds."""
        return self.access_token_expire_minutes * 60

    # =========================================================================
    # UTILITY METHODS
    # =========================================================================
    def get_database_path(self) -> Optional[Path]:
        """
        Extract database file path for file-backed SQLite databases.

        Returns:
            Path to database file, or None for in-memory or non-SQLite databases
        """
        prefix = "sqlite:///"
        if not self.database_url.startswith(prefix):
            return None

        db_path = self.database_url[len(prefix):]
        if not db_path or db_path == ":memory:":
            return None
        if db_path.startswith("./"):
            db_path = db_path[2:]
        return Path(db_path)

    def ensure_directories(self) -> None:
        """Create the database directory for file-backed SQLite."""
        db_path = self.get_database_path()
        if db_path:
            db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.debug("Required directories created/verified")

    def __repr__(self) -> str:
        """String representation for debugging."""
        return (
            f"Settings(app_name={self.app_name!r}, "
            f"app_env={self.app_env!r}, "
            f"debug={self.debug}, "
            f"payments={self.payments_configured}, "
            f"storage={self.storage_configured})"
        )


# =============================================================================
# SINGLETON INSTANCE MANAGEMENT
# =============================================================================

@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the global Settings instance.

    Returns:
        Cached Settings instance
    """
    settings = Settings()
    settings.ensure_directories()

    if settings.debug:
        logger.info(f"Configuration loaded: {settings}")

    return settings
