"""BitbucketClient - Reads open pull requests from the Bitbucket Cloud REST API."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime
from typing import TYPE_CHECKING, Any

import httpx

from prdigest.bitbucket.exceptions import FetchError, MalformedRecordError
from prdigest.bitbucket.models import PullRequestSummary
from prdigest.logging import sanitize_for_log, truncate_output

if TYPE_CHECKING:
    from prdigest.config import BitbucketCredentials

logger = logging.getLogger(__name__)

OPEN_STATE = "OPEN"


class BitbucketClient:
    """Client for the pull request listing of Bitbucket Cloud (API 2.0).

    Follows the ``next`` continuation link of each page until the listing
    is exhausted.
    """

    def __init__(
        self,
        workspace: str,
        credentials: BitbucketCredentials,
        base_url: str = "https://api.bitbucket.org/2.0",
        timeout: float = 30.0,
    ) -> None:
        """Initialize Bitbucket client.

        Args:
            workspace: Workspace slug owning the repositories
            credentials: Bearer token or username/app-password pair
            base_url: Bitbucket API URL (for testing/self-hosted proxies)
            timeout: Request timeout in seconds
        """
        self.workspace = workspace
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the Bitbucket API."""
        if self._client is None:
            self._client = httpx.Client(
                headers={"Accept": "application/json", **self.credentials.headers()},
                auth=self.credentials.basic_auth(),
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def pull_requests_url(self, repository: str) -> str:
        return f"{self.base_url}/repositories/{self.workspace}/{repository}/pullrequests"

    def _get_page(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Fetch one page of the listing.

        Args:
            url: Page URL (the first page URL or a ``next`` link)
            params: Query parameters, only sent with the first page

        Returns:
            Decoded page body

        Raises:
            FetchError: If the request fails or the body is not a listing page
        """
        try:
            response = self.client.get(url, params=params)
        except httpx.HTTPError as e:
            raise FetchError(f"Request to {sanitize_for_log(url)} failed: {e}") from e

        if not 200 <= response.status_code < 300:  # noqa: PLR2004
            raise FetchError(
                f"Bitbucket API returned {response.status_code} for {sanitize_for_log(url)}: "
                f"{truncate_output(response.text)}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise FetchError(
                f"Bitbucket API returned a non-JSON body for {sanitize_for_log(url)}"
            ) from e

        if not isinstance(data, dict) or not isinstance(data.get("values"), list):
            raise FetchError(
                f"Bitbucket API page for {sanitize_for_log(url)} has no 'values' list"
            )
        return data

    def iter_pages(self, repository: str) -> Iterator[dict[str, Any]]:
        """Yield every page of open pull requests for a repository.

        One request is issued per page; iteration ends when a page carries
        no ``next`` link.

        Raises:
            FetchError: If any page fails. Pages yielded before the failure
                stay valid.
        """
        url: str | None = self.pull_requests_url(repository)
        params: dict[str, str] | None = {"state": OPEN_STATE}
        page_number = 0

        while url:
            page_number += 1
            logger.debug("Fetching page %d of %s", page_number, repository)
            page = self._get_page(url, params)
            yield page
            # The next link already encodes the query
            url = page.get("next") or None
            params = None


def _parse_timestamp(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_pull_request(record: dict[str, Any], now: datetime) -> PullRequestSummary:
    """Build a PullRequestSummary from a Bitbucket pull request record.

    Args:
        record: One entry of a page's ``values`` list
        now: Reference time for ``age_days``

    Returns:
        The summary, including drafts (filtering is up to the caller)

    Raises:
        MalformedRecordError: If required fields are missing or unreadable
    """
    try:
        created_at = _parse_timestamp(record["created_on"])
        merged_on = record.get("merged_on")
        author = record.get("author") or {}
        return PullRequestSummary(
            id=f"#{record['id']}",
            title=record["title"],
            link=record["links"]["html"]["href"],
            age_days=(now - created_at).days,
            created_at=created_at,
            merged_at=_parse_timestamp(merged_on) if merged_on else None,
            source_branch=record["source"]["branch"]["name"],
            destination_branch=record["destination"]["branch"]["name"],
            comment_count=int(record.get("comment_count") or 0),
            author=author.get("nickname") or author.get("display_name") or "",
            is_draft=bool(record.get("draft", False)),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        record_id = record.get("id", "?") if isinstance(record, dict) else "?"
        raise MalformedRecordError(f"Malformed pull request record {record_id!r}: {e!r}") from e
