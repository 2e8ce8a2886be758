"""Calendar Aggregator Server - a FastAPI server merging Google Calendars.

On every request the server reads all configured calendars concurrently
through a service account, normalizes their events and returns one sorted
view. Two shapes are served:

- ``/events``: a flat list over the requested number of days
- ``/wall``: the same events split into today and upcoming, with
  display-ready local times, for wall-mounted dashboards

A calendar that fails to load is reported in ``errors`` and does not fail
the request. Only missing or invalid configuration does.
"""

import logging
from datetime import UTC, datetime

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from . import __version__
from .aggregator import AggregationEngine, CalendarFetcher
from .calendar_utils import get_time_range_rfc3339
from .config import get_settings
from .exceptions import ConfigurationError
from .google_client import get_calendar_client
from .models import AggregationResult, EventsReport, TimeRange, WallReport
from .reports import ReportBuilder

logger = logging.getLogger(__name__)

DEFAULT_DAYS = 30
MAX_DAYS = 365
DEFAULT_WALL_DAYS = 7
MAX_WALL_DAYS = 14


# ============================================================================
# FastAPI App Setup
# ============================================================================

app = FastAPI(
    title="Calendar Aggregator",
    description="Aggregates Google Calendar feeds into one normalized JSON view",
    version=__version__,
)


# ============================================================================
# Pydantic Models - Responses
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str = __version__


class ErrorResponse(BaseModel):
    """Top-level failure (configuration or unexpected error)."""
    error: str


# ============================================================================
# Helper Functions
# ============================================================================


def utc_now() -> datetime:
    return datetime.now(UTC)


def clamp_days(days: int, maximum: int) -> int:
    """Clamp the requested window to [1, maximum]."""
    return max(1, min(days, maximum))


def error_response(e: Exception) -> JSONResponse:
    """Format a top-level failure as a 500 JSON body."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=str(e) or type(e).__name__).model_dump(),
    )


async def aggregate_window(
    days: int, now: datetime, start_of_day: bool = False
) -> tuple[AggregationResult, TimeRange, ReportBuilder]:
    """Validate configuration, then fetch every calendar for the window.

    Raises ConfigurationError before any network call when settings are
    incomplete.
    """
    settings = get_settings()
    calendar_ids = settings.require_calendar_ids()
    credentials = settings.require_credentials()
    zone = settings.zone()

    time_min, time_max = get_time_range_rfc3339(
        days, zone, now=now, start_of_day=start_of_day
    )
    time_range = TimeRange(days=days, timeMin=time_min, timeMax=time_max)

    engine = AggregationEngine(CalendarFetcher(get_calendar_client(credentials)))
    result = await engine.aggregate(calendar_ids, time_min, time_max)
    return result, time_range, ReportBuilder(settings.timezone, zone)


# ============================================================================
# Health Endpoint
# ============================================================================


@app.get("/health", response_model=HealthResponse, tags=["health"])
async def health_check():
    """Health check endpoint. Returns server status and version."""
    return HealthResponse()


# ============================================================================
# Event Endpoints
# ============================================================================


@app.get(
    "/events",
    response_model=EventsReport,
    responses={500: {"model": ErrorResponse}},
    tags=["events"],
)
async def list_events(days: int = DEFAULT_DAYS):
    """List events of all configured calendars, sorted by start.

    ``days`` is clamped to [1, 365].
    """
    days = clamp_days(days, MAX_DAYS)
    try:
        result, time_range, builder = await aggregate_window(days, utc_now())
        return builder.build_events_report(result, time_range)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return error_response(e)
    except Exception as e:
        logger.exception("Failed to aggregate events")
        return error_response(e)


@app.get(
    "/wall",
    response_model=WallReport,
    responses={500: {"model": ErrorResponse}},
    tags=["events"],
)
async def wall_view(days: int = DEFAULT_WALL_DAYS):
    """Events split into today and upcoming for wall displays.

    The window starts at local midnight so events that already began today
    are still listed. ``days`` is clamped to [1, 14].
    """
    days = clamp_days(days, MAX_WALL_DAYS)
    now = utc_now()
    try:
        result, time_range, builder = await aggregate_window(days, now, start_of_day=True)
        return builder.build_wall_report(result, time_range, now=now)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return error_response(e)
    except Exception as e:
        logger.exception("Failed to build wall view")
        return error_response(e)


# ============================================================================
# Main Entry Point
# ============================================================================


def main():
    import uvicorn

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logger.info("calendar-aggregator listening on :%d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
