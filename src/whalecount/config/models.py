"""Configuration models for the whale count service.

This module contains all configuration-related Pydantic models used throughout the application.
"""

from urllib.parse import urlparse

import pytz
from pydantic import BaseModel, Field, field_validator

DEFAULT_SOURCE_URL = "https://newportwhales.com/whalecount.html"


class LoggingConfig(BaseModel):
    """Structlog-based logging configuration."""

    level: str = "INFO"
    json_logs: bool | None = None  # None = auto-detect based on environment
    include_caller: bool = False  # Include file:line info (useful for debugging)
    extra_fields: dict[str, str] = Field(default_factory=lambda: {"service": "whalecount"})


class IngestConfig(BaseModel):
    """Source page and schedule for the ingestion pipeline."""

    source_url: str = DEFAULT_SOURCE_URL
    timeout_seconds: float = Field(default=10.0, gt=0)
    schedule_hour: int = Field(default=18, ge=0, le=23)
    schedule_minute: int = Field(default=0, ge=0, le=59)
    schedule_timezone: str = "America/Los_Angeles"
    run_on_startup: bool = True  # Bootstrap ingest when the daemon starts

    @field_validator("source_url")
    @classmethod
    def validate_source_url(cls, v: str) -> str:
        """Only absolute http(s) URLs can be fetched."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid source URL '{v}'. Must be an absolute http(s) URL.")
        return v

    @field_validator("schedule_timezone")
    @classmethod
    def validate_schedule_timezone(cls, v: str) -> str:
        """Validate the timezone name against the tz database."""
        if v not in pytz.all_timezones_set:
            raise ValueError(f"Unknown timezone '{v}'.")
        return v


class WhaleCountConfig(BaseModel):
    """Configuration settings for the whale count service."""

    config_version: str = "1.0.0"
    site_name: str = "Newport Whale Count"

    ingest: IngestConfig = Field(default_factory=IngestConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
