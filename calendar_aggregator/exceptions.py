"""Custom exceptions for the Calendar Aggregator."""


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""

    pass


class CalendarError(Exception):
    """Base exception for calendar provider errors."""

    pass


class CalendarAuthError(CalendarError):
    """Raised when the provider rejects our credentials (401/403)."""

    pass


class RateLimitError(CalendarError):
    """Raised when the provider quota is exhausted (429 or rate-limit 403)."""

    pass


class CalendarNotFoundError(CalendarError):
    """Raised when the requested calendar does not exist (404)."""

    pass


class CalendarAPIError(CalendarError):
    """Raised for any other provider or transport failure."""

    pass


class FetchError(Exception):
    """Raised when fetching a single calendar fails.

    Carries the failing calendar id and the original cause message.
    """

    def __init__(self, calendar_id: str, cause: str):
        self.calendar_id = calendar_id
        self.cause = cause
        super().__init__(f"{calendar_id}: {cause}")
