"""Wall-clock helpers shared by the aggregator and the scheduler."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime, tzinfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def local_timezone() -> tzinfo:
    """The server's local timezone."""
    local = datetime.now().astimezone().tzinfo
    return local if local is not None else UTC
