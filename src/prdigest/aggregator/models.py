"""Data models for the Pull Request Aggregator."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

from prdigest.bitbucket.models import PullRequestSummary


@dataclass
class RepositoryDigest:
    """Open, non-draft pull requests of one repository for one run.

    Attributes:
        repository_name: Repository identifier as configured.
        pull_requests: Summaries in API order, first page first.
        error: Why fetching stopped early, None when every page was read.
    """

    repository_name: str
    pull_requests: list[PullRequestSummary] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_empty(self) -> bool:
        return not self.pull_requests


@dataclass
class RunResult:
    """One RepositoryDigest per configured repository, in configuration order."""

    digests: list[RepositoryDigest] = field(default_factory=list)

    def __iter__(self) -> Iterator[RepositoryDigest]:
        return iter(self.digests)

    def __len__(self) -> int:
        return len(self.digests)

    def __getitem__(self, index: int) -> RepositoryDigest:
        return self.digests[index]

    @property
    def all_empty(self) -> bool:
        return all(digest.is_empty for digest in self.digests)

    @property
    def failed(self) -> list[RepositoryDigest]:
        return [digest for digest in self.digests if not digest.ok]

    @property
    def total_pull_requests(self) -> int:
        return sum(len(digest.pull_requests) for digest in self.digests)
