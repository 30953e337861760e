"""FastAPI application setup."""

from __future__ import annotations

import logging
import threading
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI

from prdigest.api.dependencies import close_job, init_job
from prdigest.api.routes import digest, health

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from prdigest.service import Service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    service: Service | None = getattr(app.state, "service", None)

    # Startup
    if service is not None:
        init_job(service.job)
        service.scheduler.start()
        if getattr(app.state, "run_on_startup", False):
            # Off the event loop so startup is not held up by the run
            threading.Thread(target=service.job, name="prdigest-startup-run", daemon=True).start()

    yield

    # Shutdown
    if service is not None:
        service.close()
    close_job()


def create_app(service: Service | None = None, run_on_startup: bool = False) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        service: Digest components; the health endpoint works without them.
        run_on_startup: Trigger one digest run as soon as the app starts.
    """
    app = FastAPI(
        title="prdigest",
        description="Open pull request digest for DingTalk",
        version="0.1.0",
        lifespan=lifespan,
    )

    # Store components for lifespan manager
    app.state.service = service
    app.state.run_on_startup = run_on_startup

    app.include_router(health.router)
    app.include_router(digest.router, prefix="/api/v1")

    return app
