"""Authenticated Feishu message API client."""

from __future__ import annotations

import logging
from typing import Any, Literal

import requests
from pydantic import BaseModel

from feishu_client.credentials import DEFAULT_BASE_URL, TokenCache
from feishu_client.errors import DeliveryError, TransportError

__all__ = ["FeishuClient", "OutboundMessage"]

SEND_PATH = "/message/v4/send"
REPLY_PATH = "/message/v4/reply"
CURRENT_USER_PATH = "/contact/v3/users/me"
RICH_TEXT_LOCALE = "zh_cn"

logger = logging.getLogger("feishu_client")


class OutboundMessage(BaseModel):
    """One outbound message: a chat target for sends, a message id for replies."""

    target: str
    kind: Literal["send", "reply"]
    msg_type: Literal["text", "post"] = "text"
    content: dict[str, Any]

    def to_request_body(self) -> dict[str, Any]:
        """Return the JSON body expected by the send/reply endpoints."""
        target_field = "chat_id" if self.kind == "send" else "message_id"
        return {target_field: self.target, "msg_type": self.msg_type, "content": self.content}


class FeishuClient:
    """Send and reply to Feishu chats on behalf of the app.

    Every call fetches a token from the injected ``TokenCache`` and issues one
    request. Nothing is retried; ``AuthError`` and ``TransportError`` raised by
    the cache reach the caller unchanged.
    """

    def __init__(
        self,
        tokens: TokenCache,
        *,
        base_url: str = DEFAULT_BASE_URL,
        session: requests.Session | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Bind the client to a token cache and API base URL."""
        self._tokens = tokens
        self._base_url = base_url.rstrip("/")
        self._session = session or requests.Session()
        self._timeout_seconds = timeout_seconds

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_text(self, chat_id: str, text: str) -> dict[str, Any]:
        """Send a plain text message to a chat."""
        message = OutboundMessage(target=chat_id, kind="send", content={"text": text})
        return self._deliver(SEND_PATH, message, "send text message")

    def send_rich_text(self, chat_id: str, title: str, content: list[list[dict[str, Any]]]) -> dict[str, Any]:
        """Send a rich text (``post``) message to a chat.

        Args:
            chat_id: Target chat identifier.
            title: Post title.
            content: Paragraphs, each a list of post elements such as
                ``{"tag": "text", "text": "..."}``.

        Returns:
            Raw response payload.

        """
        message = OutboundMessage(
            target=chat_id,
            kind="send",
            msg_type="post",
            content={"post": {RICH_TEXT_LOCALE: {"title": title, "content": content}}},
        )
        return self._deliver(SEND_PATH, message, "send rich text message")

    def reply(self, message_id: str, text: str) -> dict[str, Any]:
        """Reply to an existing message with plain text."""
        message = OutboundMessage(target=message_id, kind="reply", content={"text": text})
        return self._deliver(REPLY_PATH, message, "reply to message")

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def get_user_info(self) -> dict[str, Any]:
        """Return the ``data`` member of the current-user lookup."""
        payload = self._post(CURRENT_USER_PATH, {}, "fetch user info")
        data = payload.get("data")
        return data if isinstance(data, dict) else {}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _deliver(self, path: str, message: OutboundMessage, action: str) -> dict[str, Any]:
        payload = self._post(path, message.to_request_body(), action)
        logger.info("Feishu %s succeeded (%s=%s)", action, message.kind, message.target)
        return payload

    def _post(self, path: str, body: dict[str, Any], action: str) -> dict[str, Any]:
        token = self._tokens.get_token()
        try:
            response = self._session.post(
                f"{self._base_url}{path}",
                json=body,
                headers={"Authorization": f"Bearer {token}", "Content-Type": "application/json"},
                timeout=self._timeout_seconds,
            )
            payload = response.json()
        except requests.RequestException as exc:
            msg = f"Failed to {action}: {exc}"
            raise TransportError(msg) from exc
        except ValueError as exc:
            msg = f"Failed to {action}: non-JSON response"
            raise TransportError(msg) from exc
        if not isinstance(payload, dict):
            msg = f"Failed to {action}: unexpected response body"
            raise TransportError(msg)

        code = payload.get("code")
        if code != 0:
            msg = str(payload.get("msg") or f"Failed to {action}")
            raise DeliveryError(msg, code=code if isinstance(code, int) else None)
        return payload
