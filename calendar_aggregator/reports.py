"""Shapes an AggregationResult into the JSON reports served over HTTP."""

from datetime import datetime
from zoneinfo import ZoneInfo

from .calendar_utils import event_local_date, format_display_time, today_key
from .models import AggregationResult, EventsReport, TimeRange, WallEvent, WallReport


class ReportBuilder:
    """Builds the flat and the wall (today/upcoming) reports."""

    def __init__(self, timezone: str, zone: ZoneInfo | None = None):
        self.timezone = timezone
        self.zone = zone or ZoneInfo(timezone)

    def build_events_report(
        self, result: AggregationResult, time_range: TimeRange
    ) -> EventsReport:
        return EventsReport(
            timezone=self.timezone,
            range=time_range,
            count=len(result.events),
            events=result.events,
            calendarsRequested=result.calendarsRequested,
            calendarsSucceeded=result.calendarsSucceeded,
            errors=result.errors,
        )

    def build_wall_report(
        self,
        result: AggregationResult,
        time_range: TimeRange,
        now: datetime | None = None,
    ) -> WallReport:
        """Split events into today and upcoming, in the configured zone.

        Events whose start is missing or unparseable go to upcoming. Both
        lists keep the merged sort order.
        """
        key = today_key(self.zone, now)
        today: list[WallEvent] = []
        upcoming: list[WallEvent] = []

        for event in result.events:
            wall_event = WallEvent(
                **event.model_dump(),
                displayTime=format_display_time(event, self.zone),
            )
            local_date = event_local_date(event, self.zone)
            if local_date is not None and local_date.isoformat() == key:
                today.append(wall_event)
            else:
                upcoming.append(wall_event)

        return WallReport(
            timezone=self.timezone,
            range=time_range,
            todayKey=key,
            today=today,
            upcoming=upcoming,
            todayCount=len(today),
            upcomingCount=len(upcoming),
            calendarsRequested=result.calendarsRequested,
            calendarsSucceeded=result.calendarsSucceeded,
            errors=result.errors,
        )
