"""Unit tests for the Feishu message client."""

from __future__ import annotations

from unittest.mock import Mock

import pytest
import requests
from feishu_client import AuthError, DeliveryError, FeishuClient, OutboundMessage, TransportError

BASE_URL = "https://open.feishu.cn/open-apis"


def _client(payload: object, token: str = "t-1") -> tuple[FeishuClient, Mock, Mock]:
    tokens = Mock()
    tokens.get_token = Mock(return_value=token)
    response = Mock()
    response.json.return_value = payload
    session = Mock()
    session.post = Mock(return_value=response)
    return FeishuClient(tokens, session=session), tokens, session


def _expected_headers(token: str = "t-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}


class TestOutboundMessage:
    """Request body shapes for sends and replies."""

    def test_send_targets_chat_id(self) -> None:
        """Send messages address a chat."""
        message = OutboundMessage(target="oc_1", kind="send", content={"text": "hi"})
        assert message.to_request_body() == {"chat_id": "oc_1", "msg_type": "text", "content": {"text": "hi"}}

    def test_reply_targets_message_id(self) -> None:
        """Reply messages address the original message."""
        message = OutboundMessage(target="om_1", kind="reply", content={"text": "hi"})
        assert message.to_request_body()["message_id"] == "om_1"
        assert "chat_id" not in message.to_request_body()


class TestFeishuClient:
    """Authenticated calls and error mapping."""

    def test_send_text_posts_payload(self) -> None:
        """Text sends hit the send endpoint with a bearer token."""
        payload = {"code": 0, "msg": "ok", "data": {"message_id": "om_9"}}
        client, tokens, session = _client(payload)

        assert client.send_text("oc_1", "hello") == payload

        tokens.get_token.assert_called_once_with()
        session.post.assert_called_once_with(
            f"{BASE_URL}/message/v4/send",
            json={"chat_id": "oc_1", "msg_type": "text", "content": {"text": "hello"}},
            headers=_expected_headers(),
            timeout=None,
        )

    def test_send_rich_text_wraps_post_content(self) -> None:
        """Rich text sends use the localized post envelope."""
        client, _, session = _client({"code": 0, "msg": "ok"})
        paragraphs = [[{"tag": "text", "text": "line"}]]

        client.send_rich_text("oc_1", "Title", paragraphs)

        body = session.post.call_args.kwargs["json"]
        assert body["msg_type"] == "post"
        assert body["content"] == {"post": {"zh_cn": {"title": "Title", "content": paragraphs}}}

    def test_reply_posts_to_reply_endpoint(self) -> None:
        """Replies hit the reply endpoint with the original message id."""
        client, _, session = _client({"code": 0, "msg": "ok"}, token="t-2")

        client.reply("om_1", "pong")

        session.post.assert_called_once_with(
            f"{BASE_URL}/message/v4/reply",
            json={"message_id": "om_1", "msg_type": "text", "content": {"text": "pong"}},
            headers=_expected_headers("t-2"),
            timeout=None,
        )

    def test_get_user_info_returns_data(self) -> None:
        """Current-user lookup returns the data member."""
        client, _, session = _client({"code": 0, "msg": "ok", "data": {"open_id": "ou_1"}})

        assert client.get_user_info() == {"open_id": "ou_1"}
        assert session.post.call_args.args[0] == f"{BASE_URL}/contact/v3/users/me"

    def test_non_zero_code_raises_delivery_error(self) -> None:
        """Rejected sends raise DeliveryError with the server message."""
        client, _, _ = _client({"code": 230002, "msg": "bot not in chat"})

        with pytest.raises(DeliveryError, match="bot not in chat") as excinfo:
            client.send_text("oc_1", "hello")
        assert excinfo.value.code == 230002

    def test_auth_error_propagates_unchanged(self) -> None:
        """Credential failures are not wrapped and no message is sent."""
        client, tokens, session = _client({"code": 0})
        error = AuthError("invalid secret", code=99)
        tokens.get_token.side_effect = error

        with pytest.raises(AuthError) as excinfo:
            client.reply("om_1", "pong")

        assert excinfo.value is error
        session.post.assert_not_called()

    def test_network_failure_raises_transport_error(self) -> None:
        """Request exceptions surface as TransportError."""
        client, _, session = _client({})
        session.post.side_effect = requests.Timeout("read timed out")

        with pytest.raises(TransportError, match="read timed out"):
            client.send_text("oc_1", "hello")

    def test_unexpected_body_raises_transport_error(self) -> None:
        """Non-object bodies are rejected."""
        client, _, _ = _client(["not", "an", "object"])

        with pytest.raises(TransportError, match="unexpected response body"):
            client.reply("om_1", "pong")

    def test_timeout_is_forwarded(self) -> None:
        """An explicit transport timeout is passed to every request."""
        tokens = Mock()
        tokens.get_token = Mock(return_value="t-1")
        response = Mock()
        response.json.return_value = {"code": 0}
        session = Mock()
        session.post = Mock(return_value=response)
        client = FeishuClient(tokens, base_url="https://example.com/api/", session=session, timeout_seconds=2.5)

        client.send_text("oc_1", "hello")

        assert session.post.call_args.args[0] == "https://example.com/api/message/v4/send"
        assert session.post.call_args.kwargs["timeout"] == 2.5
