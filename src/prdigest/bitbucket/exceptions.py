"""Custom exceptions for the Bitbucket client."""


class BitbucketError(Exception):
    """Base exception for Bitbucket client errors."""


class FetchError(BitbucketError):
    """A page of pull requests could not be fetched or read."""


class MalformedRecordError(FetchError):
    """A pull request record is missing required fields."""
