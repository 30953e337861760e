"""Pull Request Aggregator - Collects open pull requests across repositories."""

from prdigest.aggregator.aggregator import PullRequestAggregator, PullRequestSource
from prdigest.aggregator.models import RepositoryDigest, RunResult

__all__ = [
    "PullRequestAggregator",
    "PullRequestSource",
    "RepositoryDigest",
    "RunResult",
]
