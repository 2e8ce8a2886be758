"""Utility functions for normalizing and formatting calendar events."""

from datetime import UTC, date, datetime, time, timedelta, tzinfo
from typing import Any

from .models import Event

DEFAULT_TITLE = "(no title)"
ALL_DAY_LABEL = "All day"
RFC3339_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def get_event_time(event_datetime: Any) -> str:
    """Extract time string from event datetime object.

    Handles both all-day events (date) and timed events (dateTime).
    """
    if not isinstance(event_datetime, dict):
        return ""
    value = event_datetime.get("dateTime") or event_datetime.get("date") or ""
    return value if isinstance(value, str) else str(value)


def is_all_day_event(event: dict[str, Any]) -> bool:
    """Check if an event is an all-day event."""
    start = event.get("start")
    if not isinstance(start, dict):
        return False
    return bool(start.get("date")) and not start.get("dateTime")


def _text(value: Any, default: str = "") -> str:
    if value is None or value == "":
        return default
    return value if isinstance(value, str) else str(value)


def make_event_id(source_calendar_id: str, provider_id: Any) -> str:
    """Build an id that stays unique across calendars."""
    return f"{source_calendar_id}:{_text(provider_id)}"


def normalize_event(raw: dict[str, Any], source_calendar_id: str) -> Event:
    """Convert a Google Calendar event record into a canonical Event.

    Never raises: missing or malformed fields fall back to defaults.
    """
    if not isinstance(raw, dict):
        raw = {}

    return Event(
        id=make_event_id(source_calendar_id, raw.get("id")),
        sourceCalendarId=source_calendar_id,
        title=_text(raw.get("summary"), DEFAULT_TITLE),
        location=_text(raw.get("location")),
        description=_text(raw.get("description")),
        allDay=is_all_day_event(raw),
        start=get_event_time(raw.get("start")),
        end=get_event_time(raw.get("end")),
    )


def event_sort_key(event: Event) -> tuple[bool, str]:
    """Sort key: lexicographic on start, events without a start last.

    Plain string comparison puts a same-day all-day event ("2024-03-01")
    before timed ones ("2024-03-01T09:00:00Z"). Display clients rely on
    that order.
    """
    return (event.start == "", event.start)


def sort_events(events: list[Event]) -> list[Event]:
    """Return events sorted by start (stable)."""
    return sorted(events, key=event_sort_key)


def parse_event_start(value: str, zone: tzinfo) -> datetime | date | None:
    """Parse a start string into a date (all-day) or an aware datetime.

    Naive timestamps are interpreted in ``zone``. Returns None when the
    value cannot be parsed.
    """
    if not value:
        return None
    try:
        if "T" not in value:
            return date.fromisoformat(value)
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone)
    return dt


def event_local_date(event: Event, zone: tzinfo) -> date | None:
    """Calendar date of the event start as seen in ``zone``."""
    parsed = parse_event_start(event.start, zone)
    if parsed is None:
        return None
    if isinstance(parsed, datetime):
        return parsed.astimezone(zone).date()
    return parsed


def format_display_time(event: Event, zone: tzinfo) -> str:
    """Format the event start for the wall view, e.g. '9:05 AM'."""
    if event.allDay:
        return ALL_DAY_LABEL

    parsed = parse_event_start(event.start, zone)
    if parsed is None:
        return ""
    if not isinstance(parsed, datetime):
        # Date-only start on an event not flagged all-day
        return ALL_DAY_LABEL

    local = parsed.astimezone(zone)
    hour = local.hour % 12 or 12
    suffix = "AM" if local.hour < 12 else "PM"
    return f"{hour}:{local.minute:02d} {suffix}"


def get_time_range_rfc3339(
    days_ahead: int,
    zone: tzinfo,
    now: datetime | None = None,
    start_of_day: bool = False,
) -> tuple[str, str]:
    """Get a UTC time range from now (or local midnight) to N days ahead."""
    now = (now or datetime.now(UTC)).astimezone(zone)
    start = datetime.combine(now.date(), time(), tzinfo=zone) if start_of_day else now
    end = start + timedelta(days=days_ahead)
    return (
        start.astimezone(UTC).strftime(RFC3339_FORMAT),
        end.astimezone(UTC).strftime(RFC3339_FORMAT),
    )


def today_key(zone: tzinfo, now: datetime | None = None) -> str:
    """YYYY-MM-DD of ``now`` in ``zone``."""
    now = now or datetime.now(UTC)
    return now.astimezone(zone).date().isoformat()
