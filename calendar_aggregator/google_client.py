"""HTTP client for reading events from the Google Calendar v3 API."""

import asyncio
import logging
from typing import Any
from urllib.parse import quote

import httpx
from google.auth.exceptions import RefreshError
from google.auth.transport.requests import Request
from google.oauth2 import service_account

from .exceptions import (
    CalendarAPIError,
    CalendarAuthError,
    CalendarNotFoundError,
    ConfigurationError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

CALENDAR_API_URL = "https://www.googleapis.com/calendar/v3"
READONLY_SCOPE = "https://www.googleapis.com/auth/calendar.readonly"
MAX_RESULTS = 2500

_RATE_LIMIT_REASONS = {"rateLimitExceeded", "userRateLimitExceeded", "quotaExceeded"}


class GoogleCalendarClient:
    """Read-only Google Calendar client authenticated as a service account."""

    def __init__(
        self,
        credentials_info: dict[str, Any] | None = None,
        credentials: Any = None,
        api_url: str = CALENDAR_API_URL,
        timeout: float = 30.0,
    ):
        if credentials is None:
            if not credentials_info:
                raise ConfigurationError("Missing GOOGLE_SERVICE_ACCOUNT_JSON")
            try:
                credentials = service_account.Credentials.from_service_account_info(
                    credentials_info, scopes=[READONLY_SCOPE]
                )
            except (ValueError, KeyError) as e:
                raise ConfigurationError(f"Invalid service account credentials: {e}") from e
        self.credentials = credentials
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._refresh_lock = asyncio.Lock()

    async def _get_access_token(self) -> str:
        """Return a valid bearer token, refreshing it off the event loop."""
        if not self.credentials.valid:
            # One refresh at a time; waiters reuse the fresh token
            async with self._refresh_lock:
                if not self.credentials.valid:
                    try:
                        await asyncio.to_thread(self.credentials.refresh, Request())
                    except RefreshError as e:
                        raise CalendarAuthError(f"Token refresh failed: {e}") from e
        return self.credentials.token

    async def _get_headers(self) -> dict[str, str]:
        """Return headers for API requests."""
        token = await self._get_access_token()
        return {
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        }

    def _parse_error(self, response: httpx.Response, default: str) -> tuple[str, set[str]]:
        """Extract the error message and reasons from a Google error body."""
        try:
            error = response.json().get("error", {})
        except (ValueError, AttributeError):
            return default, set()
        if not isinstance(error, dict):
            return str(error) or default, set()
        items = error.get("errors")
        reasons = {
            item.get("reason", "")
            for item in (items if isinstance(items, list) else [])
            if isinstance(item, dict)
        }
        message = error.get("message")
        return (message if isinstance(message, str) and message else default), reasons

    def _handle_response(self, response: httpx.Response) -> dict[str, Any]:
        """Handle response and raise appropriate exceptions for errors."""
        if response.status_code == 401:
            message, _ = self._parse_error(response, "Invalid or expired credentials")
            raise CalendarAuthError(message)

        if response.status_code == 429:
            message, _ = self._parse_error(response, "Rate limit exceeded")
            raise RateLimitError(message)

        if response.status_code == 403:
            message, reasons = self._parse_error(response, "Access forbidden")
            if reasons & _RATE_LIMIT_REASONS:
                raise RateLimitError(message)
            raise CalendarAuthError(message)

        if response.status_code == 404:
            message, _ = self._parse_error(response, "Calendar not found")
            raise CalendarNotFoundError(message)

        if response.status_code >= 400:
            message, _ = self._parse_error(response, "Calendar API error")
            raise CalendarAPIError(f"Calendar API error ({response.status_code}): {message}")

        return response.json()

    async def list_events(
        self,
        calendar_id: str,
        time_min: str,
        time_max: str,
        single_events: bool = True,
        order_by: str | None = "startTime",
        max_results: int = MAX_RESULTS,
    ) -> list[dict[str, Any]]:
        """List raw events of one calendar within [time_min, time_max).

        Only the first page is requested; anything the API truncates beyond
        ``max_results`` is dropped.
        """
        url = f"{self.api_url}/calendars/{quote(calendar_id, safe='')}/events"
        params: dict[str, Any] = {
            "timeMin": time_min,
            "timeMax": time_max,
            "singleEvents": "true" if single_events else "false",
            "maxResults": max_results,
        }
        if order_by is not None:
            params["orderBy"] = order_by

        headers = await self._get_headers()
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(url, headers=headers, params=params)
        except httpx.RequestError as e:
            raise CalendarAPIError(f"Request failed: {e}") from e

        data = self._handle_response(response)
        if data.get("nextPageToken"):
            logger.info(
                "Calendar %s returned more than %d events; extra pages ignored",
                calendar_id,
                max_results,
            )
        return data.get("items") or []


# Process-wide client, credentials are read-only once built
_client: GoogleCalendarClient | None = None


def get_calendar_client(credentials_info: dict[str, Any]) -> GoogleCalendarClient:
    """Get or create the singleton GoogleCalendarClient instance."""
    global _client
    if _client is None:
        _client = GoogleCalendarClient(credentials_info=credentials_info)
    return _client
