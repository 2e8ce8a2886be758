"""Pydantic models for canonical events and aggregated reports.

Field names are camelCase because they are serialized as-is to the JSON
consumed by display clients.
"""

from pydantic import BaseModel, Field


# ============================================================================
# Events
# ============================================================================


class Event(BaseModel):
    """Canonical, provider-agnostic calendar event."""
    id: str
    sourceCalendarId: str
    title: str
    location: str = ""
    description: str = ""
    allDay: bool = False
    start: str = Field("", description="Date (all-day) or RFC3339 timestamp, '' if missing")
    end: str = Field("", description="Date (all-day) or RFC3339 timestamp, '' if missing")


class WallEvent(Event):
    """Event with a human-readable local start time for the wall view."""
    displayTime: str = ""


# ============================================================================
# Aggregation
# ============================================================================


class AggregationResult(BaseModel):
    """Outcome of one fan-out across all configured calendars."""
    calendarsRequested: list[str] = Field(default_factory=list)
    calendarsSucceeded: list[str] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    events: list[Event] = Field(default_factory=list)


class TimeRange(BaseModel):
    """Requested window, echoed back to the client."""
    days: int
    timeMin: str
    timeMax: str


# ============================================================================
# Reports
# ============================================================================


class EventsReport(BaseModel):
    """Flat report: every event in one sorted list."""
    timezone: str
    range: TimeRange
    count: int
    events: list[Event]
    calendarsRequested: list[str]
    calendarsSucceeded: list[str]
    errors: list[str]


class WallReport(BaseModel):
    """Partitioned report for at-a-glance display."""
    timezone: str
    range: TimeRange
    todayKey: str
    today: list[WallEvent]
    upcoming: list[WallEvent]
    todayCount: int
    upcomingCount: int
    calendarsRequested: list[str]
    calendarsSucceeded: list[str]
    errors: list[str]
