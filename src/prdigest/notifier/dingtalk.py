"""DingTalkNotifier - Posts the digest to a DingTalk group robot webhook."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from prdigest.logging import sanitize_for_log, truncate_output
from prdigest.notifier.exceptions import DeliveryError
from prdigest.notifier.formatter import build_envelope, format_digest
from prdigest.notifier.models import DeliveryResult

if TYPE_CHECKING:
    from prdigest.aggregator import RunResult

logger = logging.getLogger(__name__)


class DingTalkNotifier:
    """Delivers text messages to a DingTalk group robot.

    Each call to :meth:`send` issues exactly one POST. Failures are logged
    and returned in the DeliveryResult, never raised or retried.
    """

    def __init__(
        self,
        access_token: str,
        base_url: str = "https://oapi.dingtalk.com/robot/send",
        timeout: float = 30.0,
    ) -> None:
        """Initialize DingTalk notifier.

        Args:
            access_token: Group robot access token
            base_url: Robot send endpoint (for testing/proxies)
            timeout: Request timeout in seconds
        """
        self.access_token = access_token
        self.base_url = base_url
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the webhook."""
        if self._client is None:
            self._client = httpx.Client(
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    @property
    def webhook_url(self) -> str:
        return f"{self.base_url}?access_token={self.access_token}"

    def _post(self, envelope: dict[str, Any]) -> dict[str, Any]:
        """Post an envelope and return the decoded response body.

        Raises:
            DeliveryError: If the webhook is unreachable, answers non-2xx,
                or reports a non-zero errcode
        """
        try:
            response = self.client.post(self.webhook_url, json=envelope)
        except httpx.HTTPError as e:
            raise DeliveryError(f"Webhook request failed: {sanitize_for_log(str(e))}") from e

        if not 200 <= response.status_code < 300:  # noqa: PLR2004
            raise DeliveryError(
                f"Webhook returned {response.status_code}",
                status_code=response.status_code,
                body=truncate_output(response.text),
            )

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        errcode = body.get("errcode", 0)
        if errcode not in (0, "0", None):
            raise DeliveryError(
                f"Webhook rejected message: errcode={errcode} errmsg={body.get('errmsg')}",
                status_code=response.status_code,
                body=truncate_output(response.text),
            )
        return body

    def send(self, content: str) -> DeliveryResult:
        """Send message text to the group.

        Args:
            content: Message body

        Returns:
            DeliveryResult describing the outcome
        """
        try:
            body = self._post(build_envelope(content))
        except DeliveryError as e:
            detail = f"{e} {e.body}".strip()
            logger.error("Error sending DingTalk notification: %s", detail)
            return DeliveryResult(success=False, error=str(e))

        logger.info("DingTalk notification sent successfully: %s", body)
        return DeliveryResult(success=True, response=body)

    def format_and_send(self, result: RunResult) -> DeliveryResult:
        """Render the run's digest and deliver it in a single call."""
        return self.send(format_digest(result))
