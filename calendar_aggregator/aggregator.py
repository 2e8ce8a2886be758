"""Concurrent multi-calendar fetch and merge.

``CalendarFetcher`` reads and normalizes one calendar. ``AggregationEngine``
fans out one fetch per calendar, waits for every fetch to settle, and merges
the successful results into one sorted list. A failing calendar only costs
its own events.
"""

import asyncio
import logging
from typing import Any, Protocol

from .calendar_utils import normalize_event, sort_events
from .exceptions import ConfigurationError, FetchError
from .google_client import MAX_RESULTS
from .models import AggregationResult, Event

logger = logging.getLogger(__name__)


class CalendarReader(Protocol):
    """Anything that can list raw events of one calendar."""

    async def list_events(
        self,
        calendar_id: str,
        time_min: str,
        time_max: str,
        single_events: bool = True,
        order_by: str | None = "startTime",
        max_results: int = MAX_RESULTS,
    ) -> list[dict[str, Any]]: ...


class CalendarFetcher:
    """Fetches and normalizes the events of a single calendar."""

    def __init__(self, client: CalendarReader):
        self.client = client

    async def fetch(self, calendar_id: str, time_min: str, time_max: str) -> list[Event]:
        """Fetch one calendar, raising FetchError on any client failure."""
        try:
            items = await self.client.list_events(
                calendar_id=calendar_id,
                time_min=time_min,
                time_max=time_max,
                single_events=True,  # Expand recurring events
                order_by="startTime",
                max_results=MAX_RESULTS,
            )
            return [normalize_event(item, calendar_id) for item in items]
        except Exception as e:
            raise FetchError(calendar_id, str(e) or type(e).__name__) from e


class AggregationEngine:
    """Runs a CalendarFetcher for every calendar and merges the results."""

    def __init__(self, fetcher: CalendarFetcher):
        self.fetcher = fetcher

    async def _settle(
        self, calendar_id: str, time_min: str, time_max: str
    ) -> tuple[str, list[Event] | None, FetchError | None]:
        try:
            events = await self.fetcher.fetch(calendar_id, time_min, time_max)
        except FetchError as e:
            return calendar_id, None, e
        except Exception as e:
            return calendar_id, None, FetchError(calendar_id, str(e) or type(e).__name__)
        return calendar_id, events, None

    async def aggregate(
        self, calendar_ids: list[str], time_min: str, time_max: str
    ) -> AggregationResult:
        """Fetch all calendars concurrently and merge their events.

        Every fetch runs to completion; failures end up in ``errors`` in the
        order they complete. The merged events are sorted by start.
        """
        if not calendar_ids:
            raise ConfigurationError("Missing GOOGLE_CALENDAR_IDS (or GOOGLE_CALENDAR_ID)")
        calendar_ids = list(dict.fromkeys(calendar_ids))

        tasks = [
            asyncio.create_task(self._settle(calendar_id, time_min, time_max))
            for calendar_id in calendar_ids
        ]

        succeeded: list[str] = []
        errors: list[str] = []
        events_by_calendar: dict[str, list[Event]] = {}

        for completed in asyncio.as_completed(tasks):
            calendar_id, events, error = await completed
            if error is not None:
                logger.warning("Failed to fetch calendar %s: %s", calendar_id, error.cause)
                errors.append(str(error))
                continue
            succeeded.append(calendar_id)
            events_by_calendar[calendar_id] = events or []

        # Merge in request order so ties on start do not depend on timing
        merged = [
            event
            for calendar_id in calendar_ids
            for event in events_by_calendar.get(calendar_id, [])
        ]

        logger.info(
            "Aggregated %d events from %d/%d calendars",
            len(merged),
            len(succeeded),
            len(calendar_ids),
        )

        return AggregationResult(
            calendarsRequested=list(calendar_ids),
            calendarsSucceeded=succeeded,
            errors=errors,
            events=sort_events(merged),
        )
