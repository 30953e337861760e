"""Pydantic models for REST API."""

from datetime import datetime
from typing import TYPE_CHECKING, Generic, TypeVar

from pydantic import BaseModel

if TYPE_CHECKING:
    from prdigest.scheduler import RunReport

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Liveness payload for /actuator/health."""

    status: str = "UP"
    timestamp: datetime


class RepositoryDigestResponse(BaseModel):
    """Per-repository outcome of a run."""

    repository_name: str
    pull_requests: int
    error: str | None = None


class RunReportResponse(BaseModel):
    """Response model for a manually triggered run."""

    status: str
    started_at: datetime
    finished_at: datetime
    delivered: bool
    error: str | None = None
    repositories: list[RepositoryDigestResponse] = []


def run_report_to_response(report: "RunReport") -> RunReportResponse:
    """Convert a RunReport to RunReportResponse."""
    repositories = []
    if report.result is not None:
        repositories = [
            RepositoryDigestResponse(
                repository_name=digest.repository_name,
                pull_requests=len(digest.pull_requests),
                error=digest.error,
            )
            for digest in report.result
        ]
    error = report.error
    if error is None and report.delivery is not None and not report.delivery.success:
        error = report.delivery.error
    return RunReportResponse(
        status=report.status.value,
        started_at=report.started_at,
        finished_at=report.finished_at,
        delivered=report.delivered,
        error=error,
        repositories=repositories,
    )
