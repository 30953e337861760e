"""Liveness endpoint."""

from fastapi import APIRouter

from prdigest.api.models import HealthResponse
from prdigest.clock import utc_now

router = APIRouter(tags=["health"])


@router.get("/actuator/health", response_model=HealthResponse)
def health() -> HealthResponse:
    """Report that the process is up. Does not touch the digest job."""
    return HealthResponse(status="UP", timestamp=utc_now())
