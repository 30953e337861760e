"""Text rendering of a run's digests for a DingTalk text message."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from prdigest.aggregator import RepositoryDigest, RunResult
    from prdigest.bitbucket import PullRequestSummary

GREETING = (
    "Hi Team Dear developers,\n\n"
    "Please review the following pending pull requests. "
    "Approve them accordingly, or close them if they are no longer relevant."
)
CLOSING = "Thank you."
NO_PENDING_MESSAGE = (
    "Hi Team Dear developers,\n\n"
    "There are no pending pull requests at the moment. Great work!\n\n"
    "Thank you."
)

_INDENT = "   "


def _age_clause(age_days: int) -> str:
    unit = "day" if age_days == 1 else "days"
    return f"opened {age_days} {unit} ago"


def render_pull_request(index: int, pr: PullRequestSummary) -> str:
    """Render one numbered pull request entry.

    The age line is omitted for pull requests opened today and the comment
    line for pull requests without comments.
    """
    lines = [f"{index}. {pr.id} [{pr.title}] → {pr.link}"]
    if pr.age_days > 0:
        lines.append(f"{_INDENT}{_age_clause(pr.age_days)}")
    if pr.comment_count > 0:
        lines.append(f"{_INDENT}Comments: {pr.comment_count}")
    return "\n".join(lines)


def render_repository(digest: RepositoryDigest) -> str:
    entries = [
        render_pull_request(index, pr) for index, pr in enumerate(digest.pull_requests, start=1)
    ]
    return "\n".join([f"**{digest.repository_name}**", *entries])


def format_digest(result: RunResult) -> str:
    """Render the message body for a run.

    Returns NO_PENDING_MESSAGE when no repository has pull requests;
    otherwise lists every non-empty repository between GREETING and CLOSING.
    """
    if result.all_empty:
        return NO_PENDING_MESSAGE

    blocks = [render_repository(digest) for digest in result if not digest.is_empty]
    return "\n\n".join([GREETING, *blocks, CLOSING])


def build_envelope(content: str) -> dict[str, Any]:
    """Wrap message text in the DingTalk robot envelope, mentioning everyone."""
    return {
        "msgtype": "text",
        "text": {"content": content},
        "at": {"isAtAll": True},
    }
