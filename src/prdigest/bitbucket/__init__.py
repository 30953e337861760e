"""Bitbucket client - Reads open pull requests from the Bitbucket Cloud API."""

from prdigest.bitbucket.client import BitbucketClient, parse_pull_request
from prdigest.bitbucket.exceptions import BitbucketError, FetchError, MalformedRecordError
from prdigest.bitbucket.models import PullRequestSummary

__all__ = [
    "BitbucketClient",
    "BitbucketError",
    "FetchError",
    "MalformedRecordError",
    "PullRequestSummary",
    "parse_pull_request",
]
