"""
Configuration Settings

This module defines application configuration using Pydantic Settings.
All configuration is loaded from environment variables or .env file.

Design Decisions:
- Uses pydantic-settings for type-safe configuration
- Supports multiple environments (production, staging, dev)
- Shortcode rules (length, alphabet budget, default validity) live here so the
  allocator and the request boundary agree on them
- The external log service is optional: without a token nothing is sent
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "settings"]


class EnvSettingsOptions(Enum):
    """Environment options for deployment."""
    production = "production"
    staging = "staging"
    development = "dev"


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables or .env file.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Project Configuration
    ENV_SETTING: EnvSettingsOptions = Field(
        default=EnvSettingsOptions.development,
        description="Environment setting (production, staging, dev)"
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Level for the local 'shortener' logger"
    )

    # Application Configuration
    BASE_URL: str = Field(
        default="http://localhost:3000",
        description="Base URL for generating short links"
    )

    # Shortcode Configuration
    DEFAULT_VALIDITY_MINUTES: int = Field(
        default=30,
        description="Validity applied when a creation request does not specify one"
    )
    SHORTCODE_LENGTH: int = Field(
        default=6,
        description="Length of generated shortcodes"
    )
    SHORTCODE_MIN_LENGTH: int = Field(
        default=3,
        description="Minimum length of a caller-supplied shortcode"
    )
    SHORTCODE_MAX_LENGTH: int = Field(
        default=20,
        description="Maximum length of a caller-supplied shortcode"
    )
    MAX_GENERATION_ATTEMPTS: int = Field(
        default=10,
        description="Number of random candidates tried before giving up"
    )

    # Rate Limiting
    RATE_LIMIT_ENABLED: bool = Field(
        default=True,
        description="Enable per-IP rate limiting on the public endpoints"
    )

    # External Log Service
    LOG_SERVICE_ENABLED: bool = Field(
        default=True,
        description="Forward audit entries to the external log service"
    )
    LOG_SERVICE_URL: str = Field(
        default="http://20.244.56.144/evaluation-service/logs",
        description="Endpoint accepting audit log entries"
    )
    LOG_SERVICE_TOKEN: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("ACCESS_TOKEN", "LOG_SERVICE_TOKEN"),
        description="Bearer token for the log service (read from ACCESS_TOKEN)"
    )
    LOG_SERVICE_TIMEOUT: float = Field(
        default=10.0,
        description="Timeout in seconds for a single log submission"
    )


settings = Settings()
