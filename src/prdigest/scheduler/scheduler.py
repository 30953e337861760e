"""CronScheduler - Fires a job from a background thread on a cron schedule."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime, tzinfo
from typing import TYPE_CHECKING

from croniter import croniter

from prdigest.clock import local_timezone, utc_now
from prdigest.scheduler.exceptions import ScheduleError

if TYPE_CHECKING:
    from prdigest.clock import Clock

logger = logging.getLogger(__name__)


class CronScheduler:
    """Calls ``job`` at every fire time of a cron expression.

    Fire times are evaluated in ``timezone`` (the server's local zone by
    default), so ``0 10 * * *`` means 10:00 wall-clock time there. The job
    runs on the scheduler thread; the next fire time is computed after the
    job returns, so fire times that pass while a job is running are not
    replayed.
    """

    def __init__(
        self,
        expression: str,
        job: Callable[[], object],
        clock: Clock = utc_now,
        timezone: tzinfo | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            expression: Cron expression (5 fields, or 6 with trailing seconds).
            job: No-argument callable to fire.
            clock: Returns the current time.
            timezone: Zone the expression is evaluated in. Defaults to the
                server's local timezone.

        Raises:
            ScheduleError: If the expression is not valid cron syntax.
        """
        if not croniter.is_valid(expression):
            raise ScheduleError(f"Invalid cron expression: {expression!r}")
        self.expression = expression
        self.job = job
        self.clock = clock
        self.timezone = timezone if timezone is not None else local_timezone()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._last_fired: datetime | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def next_run_time(self, after: datetime | None = None) -> datetime:
        """Return the first fire time strictly after ``after`` (default: now)."""
        base = after if after is not None else self.clock()
        base = base.astimezone(self.timezone)
        next_time: datetime = croniter(self.expression, base).get_next(datetime)
        return next_time

    def _fire(self, scheduled_for: datetime) -> None:
        self._last_fired = scheduled_for
        try:
            self.job()
        except Exception:
            logger.exception("Scheduled job raised")

    def _run_loop(self, stop_event: threading.Event) -> None:
        logger.info("Scheduler started (%s, %s)", self.expression, self.timezone)
        while not stop_event.is_set():
            now = self.clock()
            base = now
            if self._last_fired is not None and self._last_fired >= now:
                base = self._last_fired
            next_time = self.next_run_time(base)
            delay = max((next_time - now).total_seconds(), 0.0)
            logger.debug("Next digest run at %s", next_time.isoformat())
            if stop_event.wait(delay):
                break
            self._fire(next_time)
        logger.info("Scheduler stopped")

    def start(self) -> None:
        """Start the scheduler thread. No-op if already running."""
        if self.running:
            return
        # Each loop owns its event; a loop left running by a timed-out stop
        # still sees its own event set and exits after the current job.
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(self._stop_event,),
            name="prdigest-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info("Next digest run at %s", self.next_run_time().isoformat())

    def stop(self, timeout: float = 5.0) -> None:
        """Signal the scheduler thread to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            if self._thread.is_alive():
                logger.warning("Scheduler thread still running a job after %.1fs", timeout)
            self._thread = None
