"""Digest Formatter & Notifier - Renders the digest and posts it to DingTalk."""

from prdigest.notifier.dingtalk import DingTalkNotifier
from prdigest.notifier.exceptions import DeliveryError, NotifierError
from prdigest.notifier.formatter import (
    CLOSING,
    GREETING,
    NO_PENDING_MESSAGE,
    build_envelope,
    format_digest,
)
from prdigest.notifier.models import DeliveryResult

__all__ = [
    "CLOSING",
    "GREETING",
    "NO_PENDING_MESSAGE",
    "DeliveryError",
    "DeliveryResult",
    "DingTalkNotifier",
    "NotifierError",
    "build_envelope",
    "format_digest",
]
