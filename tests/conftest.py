"""Shared pytest fixtures and configuration."""

from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

NOW = datetime(2026, 10, 16, 12, 0, 0, tzinfo=UTC)


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@pytest.fixture
def now() -> datetime:
    """Fixed reference time for age calculations."""
    return NOW


@pytest.fixture
def pr_record() -> Callable[..., dict[str, Any]]:
    """Factory for Bitbucket pull request records."""

    def make(
        pr_id: int = 1,
        title: str = "Add feature",
        age: timedelta = timedelta(days=2),
        comment_count: int = 0,
        draft: bool = False,
        merged_on: str | None = None,
    ) -> dict[str, Any]:
        return {
            "id": pr_id,
            "title": title,
            "links": {
                "html": {"href": f"https://bitbucket.org/team/repo/pull-requests/{pr_id}"}
            },
            "created_on": (NOW - age).isoformat(),
            "merged_on": merged_on,
            "source": {"branch": {"name": f"feature/{pr_id}"}},
            "destination": {"branch": {"name": "main"}},
            "comment_count": comment_count,
            "author": {"nickname": "alice", "display_name": "Alice Liddell"},
            "draft": draft,
        }

    return make
