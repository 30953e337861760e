"""Custom exceptions for the Notifier."""

from __future__ import annotations


class NotifierError(Exception):
    """Base exception for Notifier errors."""


class DeliveryError(NotifierError):
    """The webhook could not be reached or rejected the message."""

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
