"""PullRequestAggregator - Builds the per-repository digests for one run."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from prdigest.aggregator.models import RepositoryDigest, RunResult
from prdigest.bitbucket import FetchError, parse_pull_request
from prdigest.clock import utc_now

if TYPE_CHECKING:
    from prdigest.clock import Clock

logger = logging.getLogger(__name__)


class PullRequestSource(Protocol):
    """Interface for the paginated pull request listing."""

    def iter_pages(self, repository: str) -> Iterator[dict[str, Any]]:
        """Yield listing pages for a repository, raising FetchError on failure."""
        ...


class PullRequestAggregator:
    """Fetches open pull requests for each configured repository.

    Repositories are processed one at a time. A failure on one repository
    ends pagination for that repository only.
    """

    def __init__(self, source: PullRequestSource, clock: Clock = utc_now) -> None:
        """Initialize the aggregator.

        Args:
            source: Paginated pull request listing (usually a BitbucketClient).
            clock: Returns the reference time for pull request ages.
        """
        self.source = source
        self.clock = clock

    def aggregate(self, repository_identifiers: Sequence[str]) -> RunResult:
        """Collect a digest for each repository, in the given order.

        Args:
            repository_identifiers: Repository slugs to query.

        Returns:
            RunResult with exactly one digest per identifier.
        """
        result = RunResult()
        for repository in repository_identifiers:
            result.digests.append(self._collect(repository))

        logger.info(
            "Aggregated %d open pull request(s) across %d repositories (%d failed)",
            result.total_pull_requests,
            len(result),
            len(result.failed),
        )
        return result

    def _collect(self, repository: str) -> RepositoryDigest:
        digest = RepositoryDigest(repository_name=repository)
        now = self.clock()
        pages = 0
        try:
            for page in self.source.iter_pages(repository):
                pages += 1
                for record in page["values"]:
                    summary = parse_pull_request(record, now)
                    if summary.is_draft:
                        continue
                    digest.pull_requests.append(summary)
        except FetchError as e:
            digest.error = str(e)
            logger.error(
                "Error fetching pull requests for %s after %d page(s), keeping %d: %s",
                repository,
                pages,
                len(digest.pull_requests),
                e,
            )
            return digest
        except Exception as e:
            digest.error = f"Unexpected error: {e}"
            logger.exception("Unexpected error fetching pull requests for %s", repository)
            return digest

        logger.info(
            "Found %d open pull request(s) in %s (%d page(s))",
            len(digest.pull_requests),
            repository,
            pages,
        )
        return digest
