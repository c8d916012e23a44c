"""Service layer for the watchlist server."""

from dailyb3.server.services.scheduler_service import (
    REFRESH_JOB_ID,
    SchedulerService,
    get_scheduler_service,
    refresh_all_watchlists,
)

__all__ = [
    "REFRESH_JOB_ID",
    "SchedulerService",
    "get_scheduler_service",
    "refresh_all_watchlists",
]
