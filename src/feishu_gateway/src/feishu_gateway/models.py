"""Pydantic schemas for Feishu webhook payloads.

Raw callbacks are validated against the wire schemas below and normalized into
a single ``InboundEvent`` tagged by ``type``.
"""

from __future__ import annotations

import json
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from feishu_gateway.errors import ParseError, UnsupportedFeatureError

EventType = Literal["url_verification", "message", "encrypted", "other"]


# ---------------------------------------------------------------------------
# Wire schemas
# ---------------------------------------------------------------------------


class SenderId(BaseModel):
    """Identifiers of the user who sent a message."""

    user_id: str | None = None
    open_id: str | None = None
    union_id: str | None = None


class Sender(BaseModel):
    """Sender block of a message event."""

    sender_id: SenderId | None = None
    sender_type: str | None = None


class MessageEvent(BaseModel):
    """The ``event`` member of a message callback."""

    message_type: str | None = None
    content: dict[str, Any] | None = None
    chat_id: str | None = None
    message_id: str | None = None
    sender: Sender | None = None

    @field_validator("content", mode="before")
    @classmethod
    def _decode_content(cls, value: object) -> object:
        # Feishu sends content as a JSON-encoded string.
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as exc:
                msg = f"content is not valid JSON: {exc.msg}"
                raise ValueError(msg) from exc
        return value


class EventHeader(BaseModel):
    """Header block of schema 2.0 callbacks."""

    event_type: str | None = None
    token: str | None = None


class EventCallback(BaseModel):
    """A callback carrying an ``event``."""

    token: str | None = None
    header: EventHeader | None = None
    event: MessageEvent


# ---------------------------------------------------------------------------
# Normalized event
# ---------------------------------------------------------------------------


class InboundEvent(BaseModel):
    """Normalized inbound webhook event."""

    model_config = ConfigDict(frozen=True)

    type: EventType
    challenge: str | None = None
    token: str | None = None
    message_type: str | None = None
    text: str | None = None
    chat_id: str | None = None
    message_id: str | None = None
    sender_id: str | None = None


def parse_inbound(raw_body: bytes | str) -> InboundEvent:
    """Decode a raw webhook body into an ``InboundEvent``.

    Args:
        raw_body: Request body exactly as received.

    Returns:
        The normalized event.

    Raises:
        ParseError: The body is not JSON or does not match a known shape.
        UnsupportedFeatureError: The body is an encrypted envelope.

    """
    try:
        payload = json.loads(raw_body)
    except (ValueError, UnicodeDecodeError) as exc:
        msg = f"Malformed JSON body: {exc}"
        raise ParseError(msg) from exc
    if not isinstance(payload, dict):
        msg = "Webhook body must be a JSON object."
        raise ParseError(msg)

    if payload.get("type") == "url_verification":
        challenge = payload.get("challenge")
        if not isinstance(challenge, str):
            msg = "url_verification payload is missing challenge."
            raise ParseError(msg)
        return InboundEvent(type="url_verification", challenge=challenge, token=_token_of(payload))

    if payload.get("encrypt"):
        msg = "Encrypted event payloads are not supported."
        raise UnsupportedFeatureError(msg)

    if "event" not in payload:
        return InboundEvent(type="other", token=_token_of(payload))

    try:
        callback = EventCallback.model_validate(payload)
    except ValidationError as exc:
        msg = f"Invalid event payload: {exc.errors(include_url=False)}"
        raise ParseError(msg) from exc
    return _from_callback(callback)


def _from_callback(callback: EventCallback) -> InboundEvent:
    event = callback.event
    text = None
    if event.message_type == "text":
        text = (event.content or {}).get("text")
        if not isinstance(text, str):
            msg = "Text message content is missing text."
            raise ParseError(msg)
        if not event.message_id:
            msg = "Text message is missing message_id."
            raise ParseError(msg)
    sender_id = None
    if event.sender and event.sender.sender_id:
        sender_id = event.sender.sender_id.user_id or event.sender.sender_id.open_id
    token = callback.token or (callback.header.token if callback.header else None)
    return InboundEvent(
        type="message",
        token=token,
        message_type=event.message_type,
        text=text,
        chat_id=event.chat_id,
        message_id=event.message_id,
        sender_id=sender_id,
    )


def _token_of(payload: dict[str, Any]) -> str | None:
    token = payload.get("token")
    if isinstance(token, str):
        return token
    header = payload.get("header")
    if isinstance(header, dict) and isinstance(header.get("token"), str):
        return header["token"]
    return None
