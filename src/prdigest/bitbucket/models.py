"""Data models for the Bitbucket client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class PullRequestSummary:
    """An open pull request, shaped for the digest.

    Attributes:
        id: Display identifier, e.g. "#42".
        title: Pull request title.
        link: Web URL of the pull request.
        age_days: Whole days since creation, relative to fetch time.
        created_at: Creation timestamp.
        merged_at: Merge timestamp, None while unmerged.
        source_branch: Branch being merged.
        destination_branch: Branch merged into.
        comment_count: Number of comments.
        author: Author nickname.
        is_draft: Whether the pull request is a draft.
    """

    id: str
    title: str
    link: str
    age_days: int
    created_at: datetime
    merged_at: datetime | None
    source_branch: str
    destination_branch: str
    comment_count: int
    author: str
    is_draft: bool = False

    @property
    def created_label(self) -> str:
        return self.created_at.strftime(TIMESTAMP_FORMAT)

    @property
    def merged_label(self) -> str:
        if self.merged_at is None:
            return "Not Merged"
        return self.merged_at.strftime(TIMESTAMP_FORMAT)
