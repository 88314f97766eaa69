"""Webhook authenticity checks."""

from __future__ import annotations

import base64
import hashlib
import hmac

__all__ = [
    "NONCE_HEADER",
    "SIGNATURE_HEADER",
    "TIMESTAMP_HEADER",
    "compute_signature",
    "verify_signature",
    "verify_token",
]

TIMESTAMP_HEADER = "X-Lark-Request-Timestamp"
NONCE_HEADER = "X-Lark-Request-Nonce"
SIGNATURE_HEADER = "X-Lark-Signature"


def compute_signature(timestamp: str, nonce: str, encrypt_key: str, body: str) -> str:
    """Return the base64 HMAC-SHA256 of ``timestamp\\nnonce\\nkey\\nbody`` keyed by ``encrypt_key``."""
    sign_string = f"{timestamp}\n{nonce}\n{encrypt_key}\n{body}"
    digest = hmac.new(encrypt_key.encode("utf-8"), sign_string.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(timestamp: str, nonce: str, encrypt_key: str, body: str, signature: str | None) -> bool:
    """Check a platform-supplied signature.

    Deployments without an encrypt key accept every request.

    Args:
        timestamp: Value of the request timestamp header.
        nonce: Value of the request nonce header.
        encrypt_key: Shared encrypt key; empty when signing is disabled.
        body: Raw request body as text.
        signature: Value of the signature header, if any.

    Returns:
        True when the request is accepted.

    """
    if not encrypt_key:
        return True
    if not signature:
        return False
    expected = compute_signature(timestamp, nonce, encrypt_key, body)
    return hmac.compare_digest(expected, signature)


def verify_token(expected: str, supplied: str | None) -> bool:
    """Return True when no verification token is configured or the payload token matches it."""
    if not expected:
        return True
    return supplied is not None and hmac.compare_digest(expected, supplied)
