"""Exceptions raised by the Feishu REST client."""

from __future__ import annotations

__all__ = ["AuthError", "DeliveryError", "FeishuError", "TransportError"]


class FeishuError(Exception):
    """Base class for errors talking to the Feishu open platform."""

    def __init__(self, message: str, *, code: int | None = None) -> None:
        """Store the server-reported message and optional response code."""
        super().__init__(message)
        self.message = message
        self.code = code


class AuthError(FeishuError):
    """The app credential exchange was rejected by the platform."""


class TransportError(FeishuError):
    """The platform could not be reached or returned an unreadable body."""


class DeliveryError(FeishuError):
    """A send or reply call was rejected by the platform."""
