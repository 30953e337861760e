"""Unit tests for the health and digest routes."""

import threading
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from prdigest.aggregator import RepositoryDigest, RunResult
from prdigest.api import create_app
from prdigest.notifier import DeliveryResult
from prdigest.scheduler import RunReport, RunStatus

STARTED = datetime(2026, 10, 16, 10, 0, tzinfo=UTC)
FINISHED = datetime(2026, 10, 16, 10, 0, 3, tzinfo=UTC)


@pytest.fixture
def service() -> MagicMock:
    """Create a mock Service with a job and scheduler."""
    svc = MagicMock()
    svc.job.run.return_value = RunReport(
        status=RunStatus.COMPLETED,
        started_at=STARTED,
        finished_at=FINISHED,
        result=RunResult(
            digests=[
                RepositoryDigest("backend", pull_requests=[MagicMock(), MagicMock()]),
                RepositoryDigest("frontend", error="Bitbucket API returned 500"),
            ]
        ),
        delivery=DeliveryResult(success=True, response={"errcode": 0}),
    )
    return svc


@pytest.fixture
def client(service: MagicMock):
    """Create a test client around an app with a mocked service."""
    with TestClient(create_app(service), raise_server_exceptions=False) as client:
        yield client


@pytest.mark.unit
class TestHealth:
    """Tests for GET /actuator/health."""

    def test_reports_up(self, client: TestClient) -> None:
        response = client.get("/actuator/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "UP"
        timestamp = datetime.fromisoformat(data["timestamp"])
        assert timestamp.tzinfo is not None

    def test_does_not_touch_job(self, client: TestClient, service: MagicMock) -> None:
        client.get("/actuator/health")

        service.job.run.assert_not_called()

    def test_works_without_service(self) -> None:
        with TestClient(create_app()) as client:
            response = client.get("/actuator/health")

        assert response.status_code == 200
        assert response.json()["status"] == "UP"


@pytest.mark.unit
class TestLifespan:
    """The app starts and stops the scheduler."""

    def test_scheduler_started_and_service_closed(self, service: MagicMock) -> None:
        with TestClient(create_app(service)):
            service.scheduler.start.assert_called_once()
            service.close.assert_not_called()

        service.close.assert_called_once()

    def test_run_on_startup_triggers_job(self, service: MagicMock) -> None:
        triggered = threading.Event()
        service.job.side_effect = lambda: triggered.set()

        with TestClient(create_app(service, run_on_startup=True)):
            assert triggered.wait(5)

        service.job.assert_called_once()

    def test_no_startup_run_by_default(self, service: MagicMock) -> None:
        with TestClient(create_app(service)):
            pass

        service.job.assert_not_called()


@pytest.mark.unit
class TestRunDigest:
    """Tests for POST /api/v1/digest/run."""

    def test_returns_report(self, client: TestClient, service: MagicMock) -> None:
        response = client.post("/api/v1/digest/run")

        assert response.status_code == 200
        data = response.json()
        assert data["error"] is None
        assert data["data"]["status"] == "completed"
        assert data["data"]["delivered"] is True
        assert data["data"]["repositories"] == [
            {"repository_name": "backend", "pull_requests": 2, "error": None},
            {
                "repository_name": "frontend",
                "pull_requests": 0,
                "error": "Bitbucket API returned 500",
            },
        ]
        service.job.run.assert_called_once()

    def test_failed_delivery_reported(self, client: TestClient, service: MagicMock) -> None:
        service.job.run.return_value = RunReport(
            status=RunStatus.COMPLETED,
            started_at=STARTED,
            finished_at=FINISHED,
            result=RunResult(),
            delivery=DeliveryResult(success=False, error="Webhook returned 502"),
        )

        data = client.post("/api/v1/digest/run").json()

        assert data["data"]["delivered"] is False
        assert data["data"]["error"] == "Webhook returned 502"

    def test_conflict_when_run_in_progress(self, client: TestClient, service: MagicMock) -> None:
        service.job.run.return_value = RunReport(
            status=RunStatus.SKIPPED,
            started_at=STARTED,
            finished_at=STARTED,
            error="run already in progress",
        )

        response = client.post("/api/v1/digest/run")

        assert response.status_code == 409
        assert response.json() == {"data": None, "error": "Digest run already in progress"}

    def test_unavailable_without_job(self) -> None:
        with TestClient(create_app()) as client:
            response = client.post("/api/v1/digest/run")

        assert response.status_code == 503
