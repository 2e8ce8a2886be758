"""Configuration for the Calendar Aggregator.

All environment parsing happens here. The rest of the package receives a
``Settings`` instance and never reads ``os.environ`` directly.
"""

import json
import logging
import os
from functools import lru_cache
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .exceptions import ConfigurationError

DEFAULT_TIMEZONE = "America/New_York"
DEFAULT_PORT = 3000


class Settings(BaseModel):
    """Process-wide configuration, built once at startup."""

    service_account_credentials: dict[str, Any] | None = Field(
        None, description="Parsed service account JSON key"
    )
    calendar_ids: list[str] = Field(default_factory=list)
    timezone: str = DEFAULT_TIMEZONE
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def require_credentials(self) -> dict[str, Any]:
        if not self.service_account_credentials:
            raise ConfigurationError("Missing GOOGLE_SERVICE_ACCOUNT_JSON")
        return self.service_account_credentials

    def require_calendar_ids(self) -> list[str]:
        if not self.calendar_ids:
            raise ConfigurationError("Missing GOOGLE_CALENDAR_IDS (or GOOGLE_CALENDAR_ID)")
        return list(self.calendar_ids)

    def zone(self) -> ZoneInfo:
        """Return the configured timezone, failing on unknown names."""
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown TIMEZONE: {self.timezone}") from e


def parse_calendar_ids(raw_ids: str | None, single_id: str | None = None) -> list[str]:
    """Split a comma separated id list, falling back to a single id."""
    ids = [s.strip() for s in (raw_ids or "").split(",") if s.strip()]

    # Single-calendar setups only set GOOGLE_CALENDAR_ID
    if not ids and single_id and single_id.strip():
        return [single_id.strip()]
    return list(dict.fromkeys(ids))


def parse_credentials(raw_json: str | None) -> dict[str, Any] | None:
    """Parse the service account key contents."""
    if not raw_json or not raw_json.strip():
        return None
    try:
        data = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"GOOGLE_SERVICE_ACCOUNT_JSON is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("GOOGLE_SERVICE_ACCOUNT_JSON must be a JSON object")
    return data


def load_settings(environ: dict[str, str] | None = None) -> Settings:
    """Build Settings from the process environment (or a given mapping)."""
    if environ is None:
        load_dotenv()
        environ = dict(os.environ)

    try:
        port = int(environ.get("PORT", str(DEFAULT_PORT)))
    except ValueError as e:
        raise ConfigurationError(f"PORT must be an integer: {environ.get('PORT')}") from e

    log_level = environ.get("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in logging.getLevelNamesMapping():
        raise ConfigurationError(f"Unknown LOG_LEVEL: {environ.get('LOG_LEVEL')}")

    return Settings(
        service_account_credentials=parse_credentials(
            environ.get("GOOGLE_SERVICE_ACCOUNT_JSON")
        ),
        calendar_ids=parse_calendar_ids(
            environ.get("GOOGLE_CALENDAR_IDS"),
            environ.get("GOOGLE_CALENDAR_ID"),
        ),
        timezone=environ.get("TIMEZONE") or DEFAULT_TIMEZONE,
        port=port,
        log_level=log_level,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the cached process Settings."""
    return load_settings()
