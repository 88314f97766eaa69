"""Exceptions raised while decoding inbound webhook payloads."""

from __future__ import annotations

__all__ = ["GatewayError", "ParseError", "UnsupportedFeatureError"]


class GatewayError(Exception):
    """Base class for inbound webhook errors."""


class ParseError(GatewayError):
    """The inbound body is not valid JSON or does not match a known shape."""


class UnsupportedFeatureError(GatewayError):
    """The inbound body uses a platform feature this gateway does not process."""
