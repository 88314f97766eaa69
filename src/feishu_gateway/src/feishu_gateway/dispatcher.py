"""Per-request webhook pipeline: verify, parse, route, reply, acknowledge."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse
from feishu_client import FeishuError

from feishu_gateway.errors import ParseError, UnsupportedFeatureError
from feishu_gateway.models import InboundEvent, parse_inbound
from feishu_gateway.signature import (
    NONCE_HEADER,
    SIGNATURE_HEADER,
    TIMESTAMP_HEADER,
    verify_signature,
    verify_token,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from feishu_client import FeishuClient

    from feishu_gateway.commands import CommandRouter

logger = logging.getLogger("feishu_gateway.dispatcher")

SUCCESS_BODY = {"code": 0, "msg": "success"}


class EventDispatcher:
    """Handle one inbound webhook request end to end.

    Delivery failures are logged and still acknowledged so the platform does
    not start retrying the callback. Any other failure becomes a 500 response.
    """

    def __init__(
        self,
        router: CommandRouter,
        client: FeishuClient,
        *,
        encrypt_key: str = "",
        verification_token: str = "",
    ) -> None:
        """Bind the dispatcher to its router, outbound client and shared secrets."""
        self._router = router
        self._client = client
        self._encrypt_key = encrypt_key
        self._verification_token = verification_token

    async def handle(self, raw_body: bytes, headers: Mapping[str, str] | None = None) -> JSONResponse:
        """Process a raw webhook body and return the HTTP response for the platform."""
        lowered = {key.lower(): value for key, value in (headers or {}).items()}
        if not verify_signature(
            lowered.get(TIMESTAMP_HEADER.lower(), ""),
            lowered.get(NONCE_HEADER.lower(), ""),
            self._encrypt_key,
            raw_body.decode("utf-8", errors="replace"),
            lowered.get(SIGNATURE_HEADER.lower()),
        ):
            logger.warning("Rejected webhook with invalid signature")
            return _failure(401, "invalid signature")

        try:
            event = parse_inbound(raw_body)
        except UnsupportedFeatureError as exc:
            logger.warning("Acknowledging unprocessed webhook: %s", exc)
            return JSONResponse(SUCCESS_BODY)
        except ParseError as exc:
            logger.warning("Rejected webhook body: %s", exc)
            return _failure(500, str(exc))

        try:
            return await self._dispatch(event)
        except Exception as exc:
            logger.exception("Failed to handle Feishu event")
            return _failure(500, str(exc))

    async def _dispatch(self, event: InboundEvent) -> JSONResponse:
        if not verify_token(self._verification_token, event.token):
            logger.warning("Rejected webhook with invalid verification token")
            return _failure(401, "invalid verification token")

        if event.type == "url_verification":
            logger.info("Answered URL verification challenge")
            return JSONResponse({"challenge": event.challenge})

        if event.type == "message" and event.message_type == "text":
            await self._reply(event)
        else:
            logger.info("Ignoring %s event (message_type=%s)", event.type, event.message_type)
        return JSONResponse(SUCCESS_BODY)

    async def _reply(self, event: InboundEvent) -> None:
        text = (event.text or "").strip()
        logger.info("Message %s from %s: %s", event.message_id, event.sender_id, text)
        reply_text = self._router.route(event.model_copy(update={"text": text}))
        try:
            await asyncio.to_thread(self._client.reply, event.message_id, reply_text)
        except FeishuError:
            logger.exception("Failed to deliver reply to message %s", event.message_id)


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"code": status_code, "msg": message}, status_code=status_code)
