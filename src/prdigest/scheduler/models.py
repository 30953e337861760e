"""Data models for the Scheduler module."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prdigest.aggregator import RunResult
    from prdigest.notifier import DeliveryResult


class RunStatus(str, Enum):
    """How a digest run ended."""

    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class RunReport:
    """Result of one digest job invocation.

    Attributes:
        status: How the run ended.
        started_at: When the run was requested.
        finished_at: When the run returned.
        result: Aggregated digests, when aggregation finished.
        delivery: Webhook outcome, when a delivery was attempted.
        error: Failure or skip reason.
    """

    status: RunStatus
    started_at: datetime
    finished_at: datetime
    result: RunResult | None = None
    delivery: DeliveryResult | None = None
    error: str | None = None

    @property
    def delivered(self) -> bool:
        return self.delivery is not None and self.delivery.success
