"""Unit tests for PullRequestAggregator."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest

from prdigest.aggregator import PullRequestAggregator, RepositoryDigest, RunResult
from prdigest.bitbucket import FetchError


def _pages(*pages):
    """Build an iter_pages side effect yielding the given pages."""

    def iterate(_repository):
        yield from pages

    return iterate


def _failing_after(*pages, error: Exception):
    """Build an iter_pages side effect that raises after the given pages."""

    def iterate(_repository):
        yield from pages
        raise error

    return iterate


@pytest.fixture
def mock_source() -> MagicMock:
    """Create a mock pull request source."""
    return MagicMock()


@pytest.fixture
def aggregator(mock_source: MagicMock, now: datetime) -> PullRequestAggregator:
    """Create an aggregator with a fixed clock."""
    return PullRequestAggregator(mock_source, clock=lambda: now)


@pytest.mark.unit
class TestAggregate:
    """Tests for aggregate."""

    def test_empty_repository_list_issues_no_requests(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock
    ) -> None:
        result = aggregator.aggregate([])

        assert isinstance(result, RunResult)
        assert len(result) == 0
        mock_source.iter_pages.assert_not_called()

    def test_one_digest_per_repository_in_order(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        """Result order matches configuration order, empty ones included."""
        pages = {
            "zeta": [{"values": [pr_record(pr_id=1)]}],
            "alpha": [{"values": []}],
            "mid": [{"values": [pr_record(pr_id=2), pr_record(pr_id=3)]}],
        }
        mock_source.iter_pages.side_effect = lambda repo: iter(pages[repo])

        result = aggregator.aggregate(["zeta", "alpha", "mid"])

        assert [d.repository_name for d in result] == ["zeta", "alpha", "mid"]
        assert [len(d.pull_requests) for d in result] == [1, 0, 2]
        assert all(d.ok for d in result)

    def test_accumulates_across_pages_in_api_order(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        mock_source.iter_pages.side_effect = _pages(
            {"values": [pr_record(pr_id=10), pr_record(pr_id=11)], "next": "n"},
            {"values": [pr_record(pr_id=5)]},
        )

        result = aggregator.aggregate(["backend"])

        assert [pr.id for pr in result[0].pull_requests] == ["#10", "#11", "#5"]

    def test_drafts_are_dropped(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        mock_source.iter_pages.side_effect = _pages(
            {"values": [pr_record(pr_id=1, draft=True), pr_record(pr_id=2)], "next": "n"},
            {"values": [pr_record(pr_id=3, draft=True)]},
        )

        result = aggregator.aggregate(["backend"])

        assert [pr.id for pr in result[0].pull_requests] == ["#2"]
        assert not any(pr.is_draft for digest in result for pr in digest.pull_requests)

    def test_ages_use_the_clock(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        mock_source.iter_pages.side_effect = _pages(
            {"values": [pr_record(age=timedelta(days=4, hours=1))]}
        )

        result = aggregator.aggregate(["backend"])

        assert result[0].pull_requests[0].age_days == 4


@pytest.mark.unit
class TestPartialFailure:
    """A failing repository keeps its partial results and does not stop the run."""

    def test_failure_keeps_accumulated_pull_requests(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        mock_source.iter_pages.side_effect = _failing_after(
            {"values": [pr_record(pr_id=1)], "next": "n"},
            error=FetchError("Bitbucket API returned 500"),
        )

        result = aggregator.aggregate(["backend"])

        digest = result[0]
        assert [pr.id for pr in digest.pull_requests] == ["#1"]
        assert digest.ok is False
        assert "500" in (digest.error or "")

    def test_failure_does_not_affect_other_repositories(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        """A fails nothing, B fails, C is still fetched."""
        behaviours = {
            "a": _pages({"values": [pr_record(pr_id=1)]}),
            "b": _failing_after(error=FetchError("connection refused")),
            "c": _pages({"values": [pr_record(pr_id=3)]}),
        }
        mock_source.iter_pages.side_effect = lambda repo: behaviours[repo](repo)

        result = aggregator.aggregate(["a", "b", "c"])

        assert [len(d.pull_requests) for d in result] == [1, 0, 1]
        assert [d.ok for d in result] == [True, False, True]
        assert [d.repository_name for d in result.failed] == ["b"]
        assert mock_source.iter_pages.call_count == 3

    def test_malformed_record_stops_repository(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        """Records before the malformed one are kept; later pages are not read."""
        broken = pr_record(pr_id=2)
        del broken["title"]
        pages_read = []

        def iterate(_repository):
            pages_read.append(1)
            yield {"values": [pr_record(pr_id=1), broken], "next": "n"}
            pages_read.append(2)
            yield {"values": [pr_record(pr_id=3)]}

        mock_source.iter_pages.side_effect = iterate

        result = aggregator.aggregate(["backend"])

        assert [pr.id for pr in result[0].pull_requests] == ["#1"]
        assert result[0].error is not None
        assert pages_read == [1]

    def test_unexpected_error_is_contained(
        self, aggregator: PullRequestAggregator, mock_source: MagicMock, pr_record
    ) -> None:
        behaviours = {
            "a": _failing_after(error=RuntimeError("boom")),
            "b": _pages({"values": [pr_record()]}),
        }
        mock_source.iter_pages.side_effect = lambda repo: behaviours[repo](repo)

        result = aggregator.aggregate(["a", "b"])

        assert result[0].error == "Unexpected error: boom"
        assert len(result[1].pull_requests) == 1


@pytest.mark.unit
class TestRunResult:
    """Tests for RunResult helpers."""

    def test_all_empty_for_no_digests(self) -> None:
        assert RunResult().all_empty is True

    def test_all_empty_false_when_any_has_pull_requests(self) -> None:
        result = RunResult(
            digests=[
                RepositoryDigest("a"),
                RepositoryDigest("b", pull_requests=[MagicMock()]),
            ]
        )

        assert result.all_empty is False
        assert result.total_pull_requests == 1
