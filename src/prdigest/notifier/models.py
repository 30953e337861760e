"""Data models for the Notifier."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class DeliveryResult:
    """Outcome of one webhook delivery.

    Attributes:
        success: Whether the webhook accepted the message.
        error: Failure detail, None on success.
        response: Decoded webhook response body, if any was received.
    """

    success: bool
    error: str | None = None
    response: dict[str, Any] | None = None
