"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends, HTTPException, status

from prdigest.scheduler import DigestJob

# Global DigestJob instance (initialized on app startup)
_job: DigestJob | None = None


def init_job(job: DigestJob) -> DigestJob:
    """Initialize the global DigestJob instance."""
    global _job  # noqa: PLW0603
    _job = job
    return _job


def close_job() -> None:
    """Release the global DigestJob instance."""
    global _job  # noqa: PLW0603
    _job = None


def get_job() -> Generator[DigestJob, None, None]:
    """Dependency that provides the DigestJob instance."""
    if _job is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Digest job not configured",
        )
    yield _job


# Type alias for dependency injection
JobDep = Annotated[DigestJob, Depends(get_job)]
