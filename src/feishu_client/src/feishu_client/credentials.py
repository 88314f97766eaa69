"""App access token cache.

Holds the single bearer credential used for outbound Feishu calls and renews it
through the app-credential exchange when it is missing or close to expiry.
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

import requests

from feishu_client.errors import AuthError, TransportError

if TYPE_CHECKING:
    from collections.abc import Callable

__all__ = ["DEFAULT_BASE_URL", "TOKEN_SAFETY_MARGIN_SECONDS", "TokenCache"]

DEFAULT_BASE_URL = "https://open.feishu.cn/open-apis"
TOKEN_PATH = "/auth/v3/app_access_token/internal"
TOKEN_SAFETY_MARGIN_SECONDS = 300

logger = logging.getLogger("feishu_client.credentials")


class TokenCache:
    """Cache for the app access token.

    The cached token is considered valid until ``expires_at``, which is the
    server-declared lifetime shortened by ``TOKEN_SAFETY_MARGIN_SECONDS``.
    Concurrent refreshes are not serialized; the last successful refresh wins.

    Attributes:
        _app_id: Feishu application id.
        _app_secret: Feishu application secret.
        _token: Cached token, or None when nothing valid is held.
        _expires_at: Epoch seconds after which the cached token is stale.

    """

    def __init__(  # noqa: PLR0913
        self,
        app_id: str,
        app_secret: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
        clock: Callable[[], float] = time.time,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize an empty cache for the given app identity."""
        self._app_id = app_id
        self._app_secret = app_secret
        self._url = f"{base_url.rstrip('/')}{TOKEN_PATH}"
        self._session = session or requests.Session()
        self._clock = clock
        self._timeout_seconds = timeout_seconds
        self._token: str | None = None
        self._expires_at = 0.0

    @property
    def expires_at(self) -> float:
        """Return the margined expiry of the cached token (0 when empty)."""
        return self._expires_at

    def is_valid(self) -> bool:
        """Return True when a cached token exists and has not reached its expiry."""
        return self._token is not None and self._clock() < self._expires_at

    def get_token(self) -> str:
        """Return a valid bearer token, refreshing it when needed.

        Returns:
            The app access token.

        Raises:
            AuthError: The platform rejected the app credentials.
            TransportError: The token endpoint could not be reached.

        """
        if self._token is not None and self._clock() < self._expires_at:
            return self._token
        return self._refresh()

    def invalidate(self) -> None:
        """Drop the cached token so the next call performs a refresh."""
        self._token = None
        self._expires_at = 0.0

    def _refresh(self) -> str:
        payload = self._request_token()
        if payload.get("code") != 0:
            self.invalidate()
            msg = str(payload.get("msg") or "app access token request failed")
            raise AuthError(msg, code=_as_code(payload.get("code")))

        token = payload.get("app_access_token")
        lifetime = payload.get("expire")
        if not isinstance(token, str) or not token or not isinstance(lifetime, int):
            self.invalidate()
            msg = "Token response is missing app_access_token or expire."
            raise AuthError(msg)
        if lifetime <= TOKEN_SAFETY_MARGIN_SECONDS:
            self.invalidate()
            msg = f"Token lifetime of {lifetime}s does not exceed the {TOKEN_SAFETY_MARGIN_SECONDS}s safety margin."
            raise AuthError(msg)

        self._token = token
        self._expires_at = self._clock() + (lifetime - TOKEN_SAFETY_MARGIN_SECONDS)
        logger.info("Refreshed app access token (valid for %ss)", lifetime - TOKEN_SAFETY_MARGIN_SECONDS)
        return token

    def _request_token(self) -> dict[str, Any]:
        try:
            response = self._session.post(
                self._url,
                json={"app_id": self._app_id, "app_secret": self._app_secret},
                timeout=self._timeout_seconds,
            )
            payload = response.json()
        except requests.RequestException as exc:
            logger.warning("Token request failed: %s", exc)
            raise TransportError(str(exc)) from exc
        except ValueError as exc:
            msg = "Token endpoint returned a non-JSON body."
            raise TransportError(msg) from exc
        if not isinstance(payload, dict):
            msg = "Token endpoint returned an unexpected body."
            raise TransportError(msg)
        return payload


def _as_code(value: object) -> int | None:
    return value if isinstance(value, int) else None
