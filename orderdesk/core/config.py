"""
Order Desk Configuration

Every tunable of the library comes from environment variables (or .env) via Pydantic Settings.
Modes:
    - DEVELOPMENT: in-memory order server, queue-backed channel and
      in-memory session storage
    - STAGING / PRODUCTION: the REST API, the WebSocket event channel
      and Redis

ENV_MODE decides which implementation every service factory returns.

Usage:
    from orderdesk.core.config import get_settings

    settings = get_settings()
    if settings.is_development:
        # Use mock services
    else:
        # Use real integrations

Author: Khalil Bannouri
Version: 1.0.0
"""

import logging
import sys
from enum import Enum
from typing import Optional
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EnvironmentMode(str, Enum):
    """
    Deployment modes the library can run in.

    Attributes:
        DEVELOPMENT: In-memory server, channel and storage
        PRODUCTION: Live environment with real integrations
        STAGING: Pre-production testing against a staging server
    """
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    STAGING = "staging"


class Settings(BaseSettings):
    """
    Library settings read from the environment.

    Any field can be set through an upper-case environment variable or .env entry.
    Sensitive values (API tokens) should NEVER be committed to version control.

    Attributes:
        env_mode: Current environment (development/production/staging)
        debug: Enable verbose logging

        # Order API
        api_base_url: Base URL of the restaurant order server
        api_token: Bearer credential sent with every request
        compat_header_name: Transport-compatibility header name
        compat_header_value: Transport-compatibility header value

        # Event Channel
        event_channel_url: WebSocket URL of the push channel

        # Customer Session
        session_ttl_minutes: Canonical lifetime of a walk-in session
        session_storage_key: Storage key of the session record
        cart_storage_key: Storage key of the cart record
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
        default="Order Desk",
        description="Application display name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # ==========================================================================
    # ORDER API
    # ==========================================================================

    api_base_url: str = Field(
        default="http://localhost:5000",
        description="Base URL of the order server"
    )
    api_token: Optional[str] = Field(
        default=None,
        description="Bearer token issued to the signed-in staff member"
    )
    compat_header_name: str = Field(
        default="ngrok-skip-browser-warning",
        description="Transport-compatibility header required by the tunnel"
    )
    compat_header_value: str = Field(
        default="true",
        description="Value of the transport-compatibility header"
    )
    request_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single API request"
    )

    # ==========================================================================
    # EVENT CHANNEL
    # ==========================================================================

    event_channel_url: Optional[str] = Field(
        default=None,
        description="WebSocket URL delivering order mutation events"
    )

    # ==========================================================================
    # REDIS (SESSION STORAGE)
    # ==========================================================================

    redis_url: str = Field(
        default="redis://localhost:6379/0",
        description="Redis connection URL for remote session storage"
    )
    storage_namespace: str = Field(
        default="orderdesk",
        description="Key prefix for session storage records"
    )

    # ==========================================================================
    # CUSTOMER SESSION
    # ==========================================================================

    session_ttl_minutes: int = Field(
        default=15,
        gt=0,
        description="Minutes before a walk-in session is evicted"
    )
    session_storage_key: str = Field(
        default="userSession",
        description="Storage key of the session record"
    )
    cart_storage_key: str = Field(
        default="selectedItems",
        description="Storage key of the cart record"
    )

    # ==========================================================================
    # BUSINESS CONFIGURATION
    # ==========================================================================

    currency: str = Field(
        default="INR",
        description="Currency of all menu prices"
    )

    # ==========================================================================
    # MOCK SERVICES
    # ==========================================================================

    mock_failure_rate: float = Field(
        default=0.05,
        ge=0.0,
        le=1.0,
        description="Probability that a mock API call fails"
    )
    mock_min_latency: float = Field(
        default=0.05,
        description="Minimum simulated API latency in seconds"
    )
    mock_max_latency: float = Field(
        default=0.2,
        description="Maximum simulated API latency in seconds"
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
    def use_real_services(self) -> bool:
        """Check if real external services should be used."""
        return self.env_mode in (EnvironmentMode.PRODUCTION, EnvironmentMode.STAGING)

    @property
    def session_ttl_ms(self) -> int:
        """Session lifetime in milliseconds."""
        return self.session_ttl_minutes * 60 * 1000

    # ==========================================================================
    # VALIDATION METHODS
    # ==========================================================================

    def validate_production_config(self) -> list[str]:
        """
        Check the settings real services cannot run without.

        Returns:
            Names of the missing variables, empty when nothing is missing
        """
        missing = []

        if self.use_real_services:
            if not self.api_token:
                missing.append("API_TOKEN")
            if not self.api_base_url:
                missing.append("API_BASE_URL")
            if not self.event_channel_url:
                missing.append("EVENT_CHANNEL_URL")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Return the process-wide Settings.

    Cached so every module sees the same values; tests call
    ``get_settings.cache_clear()`` after changing the environment.

    Returns:
        Settings: Loaded settings

    Example:
        >>> settings = get_settings()
        >>> print(settings.env_mode)
        EnvironmentMode.DEVELOPMENT
    """
    return Settings()


# =============================================================================
# LOGGING CONFIGURATION
# =============================================================================

def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Configure logging for the library and its host process.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured package logger
    """
    settings = get_settings()

    if settings.debug:
        level = logging.DEBUG

    log_format = "%(asctime)s │ %(levelname)-8s │ %(name)-25s │ %(message)s"
    date_format = "%Y-%m-%d %H:%M:%S"

    logging.basicConfig(
        level=level,
        format=log_format,
        datefmt=date_format,
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("websockets").setLevel(logging.WARNING)

    return logging.getLogger("orderdesk")
