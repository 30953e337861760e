"""DigestJob - The run-now entry point: aggregate, format, notify."""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from prdigest.clock import utc_now
from prdigest.scheduler.models import RunReport, RunStatus

if TYPE_CHECKING:
    from prdigest.aggregator import RunResult
    from prdigest.clock import Clock
    from prdigest.notifier import DeliveryResult

logger = logging.getLogger(__name__)


class Aggregator(Protocol):
    """Interface for the Pull Request Aggregator."""

    def aggregate(self, repository_identifiers: Sequence[str]) -> RunResult:
        """Collect one digest per repository."""
        ...


class Notifier(Protocol):
    """Interface for the Digest Formatter & Notifier."""

    def format_and_send(self, result: RunResult) -> DeliveryResult:
        """Render and deliver the digest."""
        ...


class DigestJob:
    """Runs one fetch-and-notify cycle per call.

    Calls that arrive while a cycle is still running are skipped rather
    than queued, so a slow cycle never produces a duplicate notification.
    """

    def __init__(
        self,
        aggregator: Aggregator,
        notifier: Notifier,
        repositories: Sequence[str],
        clock: Clock = utc_now,
    ) -> None:
        """Initialize the job.

        Args:
            aggregator: Fetches the per-repository digests.
            notifier: Formats and delivers the message.
            repositories: Repository identifiers, in reporting order.
            clock: Source of run timestamps.
        """
        self.aggregator = aggregator
        self.notifier = notifier
        self.repositories = list(repositories)
        self.clock = clock
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    def __call__(self) -> RunReport:
        return self.run()

    def run(self) -> RunReport:
        """Run the cycle once.

        Returns:
            RunReport. Errors are reported, never raised.
        """
        started_at = self.clock()
        if not self._lock.acquire(blocking=False):
            logger.warning("Digest run already in progress, skipping this trigger")
            return RunReport(
                status=RunStatus.SKIPPED,
                started_at=started_at,
                finished_at=self.clock(),
                error="run already in progress",
            )

        result: RunResult | None = None
        try:
            logger.info("Digest run started for %d repositories", len(self.repositories))
            result = self.aggregator.aggregate(self.repositories)
            delivery = self.notifier.format_and_send(result)
        except Exception as e:
            logger.exception("Error in digest run")
            return RunReport(
                status=RunStatus.FAILED,
                started_at=started_at,
                finished_at=self.clock(),
                result=result,
                error=str(e) or type(e).__name__,
            )
        finally:
            self._lock.release()

        finished_at = self.clock()
        logger.info(
            "Digest run finished in %.1fs (delivered=%s)",
            (finished_at - started_at).total_seconds(),
            delivery.success,
        )
        return RunReport(
            status=RunStatus.COMPLETED,
            started_at=started_at,
            finished_at=finished_at,
            result=result,
            delivery=delivery,
        )
