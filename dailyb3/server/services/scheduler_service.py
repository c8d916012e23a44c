"""Background scheduler for periodic price refreshes.

Wraps APScheduler's BackgroundScheduler. When
``refresh_interval_minutes`` is set, one interval job runs a bulk
refresh for every CPF that has stocks in the store.
"""

import logging
from typing import Callable, Dict, Optional

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.schedulers.base import STATE_PAUSED, STATE_RUNNING, STATE_STOPPED
from sqlalchemy.orm import sessionmaker

from dailyb3.market_data.quote_client import QuoteClient
from dailyb3.server.config import settings
from dailyb3.server.database.session import get_session_factory
from dailyb3.server.repositories.document_store import DocumentStore
from dailyb3.watchlist.controller import RefreshReport, WatchlistController
from dailyb3.watchlist.session import WatchlistSession

logger = logging.getLogger(__name__)

REFRESH_JOB_ID = "watchlist_refresh"

_STATE_NAMES = {
    STATE_STOPPED: "stopped",
    STATE_RUNNING: "running",
    STATE_PAUSED: "paused",
}


def refresh_all_watchlists(
    session_factory: Optional[sessionmaker] = None,
    quote_client: Optional[QuoteClient] = None,
) -> Dict[str, RefreshReport]:
    """Run a bulk refresh for every CPF in the store.

    Args:
        session_factory: Database session factory (defaults to the app's)
        quote_client: Quote source (defaults to one built from settings)

    Returns:
        CPF -> refresh report
    """
    SessionLocal = session_factory or get_session_factory()
    owns_client = quote_client is None
    client = quote_client or QuoteClient(settings.quote_config())
    db = SessionLocal()
    reports: Dict[str, RefreshReport] = {}

    try:
        store = DocumentStore(db)
        for cpf in store.list_cpfs():
            session = WatchlistSession(cpf=cpf, timezone=settings.timezone)
            with WatchlistController(
                session, store, client, max_workers=settings.refresh_max_workers
            ) as controller:
                reports[cpf] = controller.refresh_all()
        logger.info(f"Scheduled refresh finished for {len(reports)} watchlists")
        return reports
    finally:
        db.close()
        if owns_client:
            client.close()


class SchedulerService:
    """Service managing the background refresh scheduler.

    Attributes:
        scheduler: APScheduler BackgroundScheduler instance
        is_running: Whether scheduler is currently running
    """

    def __init__(
        self,
        interval_minutes: Optional[int] = None,
        job: Optional[Callable[[], object]] = None,
    ):
        """Initialize scheduler service.

        Args:
            interval_minutes: Refresh interval, defaults to
                settings.refresh_interval_minutes (0 disables the job)
            job: Callable run on each tick, defaults to refresh_all_watchlists
        """
        self.scheduler: Optional[BackgroundScheduler] = None
        self.is_running = False
        self.interval_minutes = (
            settings.refresh_interval_minutes if interval_minutes is None else interval_minutes
        )
        self._job = job or refresh_all_watchlists

    @property
    def enabled(self) -> bool:
        return self.interval_minutes > 0

    def initialize(self) -> None:
        """Create the scheduler and register the refresh job."""
        if self.scheduler is not None:
            logger.warning("Scheduler already initialized")
            return

        self.scheduler = BackgroundScheduler(
            executors={"default": ThreadPoolExecutor(max_workers=1)},
            job_defaults={
                "coalesce": True,
                "max_instances": 1,
                "misfire_grace_time": 60,
            },
            timezone=settings.timezone,
        )

        if self.enabled:
            self.scheduler.add_job(
                func=self._job,
                trigger="interval",
                id=REFRESH_JOB_ID,
                name="Watchlist price refresh",
                replace_existing=True,
                minutes=self.interval_minutes,
            )
            logger.info(f"Scheduled watchlist refresh every {self.interval_minutes} minutes")

        logger.info("Scheduler initialized successfully")

    def start(self) -> None:
        """Start the scheduler.

        Does nothing when the refresh interval is 0.

        Raises:
            RuntimeError: If scheduler fails to start
        """
        if self.is_running:
            logger.warning("Scheduler already running")
            return

        if not self.enabled:
            logger.info("Scheduled refresh disabled")
            return

        if self.scheduler is None:
            self.initialize()

        try:
            self.scheduler.start()
            self.is_running = True
            logger.info("Scheduler started successfully")
        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            raise RuntimeError(f"Failed to start scheduler: {e}")

    def shutdown(self, wait: bool = True) -> None:
        """Shutdown the scheduler.

        Args:
            wait: Whether to wait for a running refresh to complete
        """
        if not self.is_running or self.scheduler is None:
            logger.debug("Scheduler not running")
            return

        self.scheduler.shutdown(wait=wait)
        self.is_running = False
        logger.info("Scheduler shutdown successfully")

    def get_job(self):
        """The refresh job, or None when not scheduled."""
        if self.scheduler is None:
            return None
        return self.scheduler.get_job(REFRESH_JOB_ID)

    def get_status(self) -> dict:
        """Scheduler status information, including the next refresh time."""
        status = {
            "initialized": self.scheduler is not None,
            "enabled": self.enabled,
            "running": self.is_running,
            "interval_minutes": self.interval_minutes,
            "state": "not_initialized",
            "next_refresh": None,
        }
        if self.scheduler is None:
            return status

        job = self.get_job()
        status["state"] = _STATE_NAMES.get(self.scheduler.state, "unknown")
        status["timezone"] = str(self.scheduler.timezone)
        # Pending jobs only get a next_run_time once the scheduler starts
        status["next_refresh"] = getattr(job, "next_run_time", None)
        return status


# Global scheduler service instance
_scheduler_service: Optional[SchedulerService] = None


def get_scheduler_service() -> SchedulerService:
    """Get the global scheduler service instance."""
    global _scheduler_service
    if _scheduler_service is None:
        _scheduler_service = SchedulerService()
    return _scheduler_service
