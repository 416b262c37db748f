"""
Application Configuration Module

Centralizes all configuration using environment variables with Pydantic Settings.
Values are read once at startup and never mutated afterwards; the app factory
receives the Settings instance explicitly and stores it on ``app.state``.

Required variables (the process refuses to start without them):
    - PORT
    - CORS_ORIGIN
    - SESSION_SECRET
    - DATABASE_URL

Usage:
    from bistro.core.config import load_settings_or_exit

    settings = load_settings_or_exit()
    if settings.is_production:
        # Secure cookies, SameSite=None

Author: Your Name
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from functools import lru_cache

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Application environment modes.

    Attributes:
        DEVELOPMENT: Local work, plain-HTTP cookies, debug routes enabled
        PRODUCTION: Live environment, secure cross-site cookies
        STAGING: Pre-production, behaves like production
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    SESSION_SECRET should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging and error details

        # Server
        api_host: Host to bind the API server
        port: Port for the API server
        cors_origin: The single frontend origin allowed to send credentials

        # Database
        database_url: SQLAlchemy async connection string

        # Session cookie
        session_secret: HMAC key used to sign session cookies
        session_cookie_name: Cookie name
        session_max_age_seconds: Cookie and token lifetime

        # Frontend
        static_dir: Directory holding the built frontend bundle
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # ENVIRONMENT
    # ==========================================================================

    env_mode: EnvironmentMode = Field(
        default=EnvironmentMode.DEVELOPMENT,
        description="Application environment mode"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose logging"
    )

    # ==========================================================================
    # APPLICATION
    # ==========================================================================

    app_name: str = Field(
        default="Bistro Ordering API",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )
    api_host: str = Field(
        default="0.0.0.0",
        description="API server host"
    )
    port: int = Field(
        ...,
        gt=0,
        lt=65536,
        description="API server port"
    )
    cors_origin: str = Field(
        ...,
        min_length=1,
        description="Frontend origin allowed to call the API with cookies"
    )

    # ==========================================================================
    # DATABASE
    # ==========================================================================

    database_url: str = Field(
        ...,
        min_length=1,
        description="SQLAlchemy async database URL"
    )
    db_echo: bool = Field(
        default=False,
        description="Log every SQL statement"
    )
    db_pool_size: int = Field(
        default=5,
        description="Connection pool size"
    )
    db_max_overflow: int = Field(
        default=10,
        description="Extra connections when pool is full"
    )

    # ==========================================================================
    # SESSION COOKIE
    # ==========================================================================

    session_secret: str = Field(
        ...,
        min_length=16,
        description="Signing key for session cookies"
    )
    session_cookie_name: str = Field(
        default="session",
        description="Name of the session cookie"
    )
    session_max_age_seconds: int = Field(
        default=7 * 24 * 60 * 60,
        gt=0,
        description="Session lifetime in seconds"
    )

    # ==========================================================================
    # FRONTEND
    # ==========================================================================

    static_dir: str = Field(
        default="frontend/dist",
        description="Directory with the built frontend bundle"
    )

    # ==========================================================================
    # VALIDATORS
    # ==========================================================================

    @field_validator("env_mode", mode="before")
    @classmethod
    def validate_env_mode(cls, v: str) -> EnvironmentMode:
        """Convert string to EnvironmentMode enum."""
        if isinstance(v, EnvironmentMode):
            return v
        try:
            return EnvironmentMode(v.lower())
        except ValueError:
            valid = [e.value for e in EnvironmentMode]
            raise ValueError(f"Invalid env_mode. Must be one of: {valid}")

    @field_validator("cors_origin")
    @classmethod
    def validate_cors_origin(cls, v: str) -> str:
        """Origins never carry a trailing slash."""
        return v.strip().rstrip("/")

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.env_mode == EnvironmentMode.DEVELOPMENT

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.env_mode == EnvironmentMode.PRODUCTION

    @property
    def is_staging(self) -> bool:
        """Check if running in staging mode."""
        return self.env_mode == EnvironmentMode.STAGING

    @property
    def secure_cookies(self) -> bool:
        """Cookies are only sent over HTTPS outside development."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def cookie_samesite(self) -> str:
        """The frontend lives on another origin in deployed environments."""
        return "none" if self.secure_cookies else "lax"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses LRU cache to ensure settings are loaded only once and stay
    consistent across the application lifecycle.

    Returns:
        Settings: Configured application settings

    Raises:
        pydantic.ValidationError: If a required variable is missing or invalid
    """
    return Settings()


def load_settings_or_exit() -> Settings:
    """
    Load settings, terminating the process if they are unusable.

    Returns:
        Settings: Configured application settings

    Raises:
        SystemExit: With status 1 when required configuration is missing
    """
    try:
        return get_settings()
    except ValidationError as e:
        logger = logging.getLogger("bistro.config")
        problems = [
            f"{'.'.join(str(p) for p in err['loc']).upper()}: {err['msg']}"
            for err in e.errors()
        ]
        logger.critical(f"❌ Invalid configuration: {problems}")
        raise SystemExit(1)


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(debug: bool = False, level: int = logging.INFO) -> logging.Logger:
    """
    Configure application-wide logging.

    Args:
        debug: Force DEBUG level
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured application logger
    """
    if debug:
        level = logging.DEBUG

    # Configure format
    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    # Configure root logger
    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    return logging.getLogger("bistro")
