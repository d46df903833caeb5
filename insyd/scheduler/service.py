"""Scheduler service for periodic maintenance jobs."""

from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger

from insyd.logging import get_logger
from insyd.persistence import PersistenceError, ping_database

logger = get_logger(__name__, component="scheduler")

KEEPALIVE_JOB_ID = "database-keepalive"


class KeepaliveScheduler:
    """
    Wraps APScheduler to ping the database at a fixed interval.

    Uses BackgroundScheduler so the pings run in a separate thread while the
    web server keeps serving requests.
    """

    def __init__(
        self,
        interval_seconds: int,
        ping: Optional[Callable[[], None]] = None,
    ):
        """
        Initialize the scheduler service.

        Args:
            interval_seconds: Interval between pings in seconds
            ping: Callable that raises on failure (defaults to ping_database)
        """
        self.interval_seconds = interval_seconds
        self.ping = ping or ping_database

        self.scheduler = BackgroundScheduler(
            job_defaults={
                "max_instances": 1,
                "coalesce": True,
                "misfire_grace_time": interval_seconds,
            },
            timezone=timezone.utc,
        )

    def run_once(self) -> bool:
        """
        Ping the database once. Failures are logged, never raised.

        Returns:
            True if the ping succeeded
        """
        try:
            self.ping()
        except PersistenceError as e:
            logger.warning(
                f"Database keepalive failed: {e}",
                extra={"event": "keepalive.failure"},
            )
            return False

        logger.debug("Database keepalive succeeded", extra={"event": "keepalive.success"})
        return True

    def start(self) -> None:
        """Register the keepalive job and start the scheduler thread."""
        trigger = IntervalTrigger(seconds=self.interval_seconds, timezone=timezone.utc)

        self.scheduler.add_job(
            func=self.run_once,
            trigger=trigger,
            id=KEEPALIVE_JOB_ID,
            name="Database keepalive",
            replace_existing=True,
        )
        self.scheduler.start()

        next_run = self.get_next_run_time()
        logger.info(
            f"Keepalive scheduler started with interval: {self.interval_seconds} seconds",
            extra={
                "event": "scheduler.started",
                "interval_seconds": self.interval_seconds,
                "next_run_time": next_run.isoformat() if next_run else None,
            },
        )

    def shutdown(self, wait: bool = False) -> None:
        """
        Shutdown the scheduler.

        Args:
            wait: If True, wait for a running ping to complete before returning
        """
        if self.scheduler.running:
            self.scheduler.shutdown(wait=wait)

        logger.info("Keepalive scheduler stopped", extra={"event": "scheduler.stopped"})

    def is_running(self) -> bool:
        return self.scheduler.running

    def get_next_run_time(self) -> Optional[datetime]:
        """
        Get the next scheduled ping time.

        Returns:
            Next run time as a datetime, or None if not scheduled
        """
        job = self.scheduler.get_job(KEEPALIVE_JOB_ID)
        return job.next_run_time if job else None
