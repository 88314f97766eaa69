"""FastAPI service for Feishu bot callbacks.

Receives webhook events from the Feishu open platform, answers text commands
through the message reply API, and exposes health and manual-send endpoints.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from feishu_client import FeishuClient, FeishuError, TokenCache
from pydantic import BaseModel, ConfigDict, Field

from feishu_gateway.commands import CommandRouter, uptime_seconds
from feishu_gateway.config import Settings, load_settings
from feishu_gateway.dispatcher import EventDispatcher

app = FastAPI(title="Feishu Bot Gateway", version="0.1.0")

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("feishu_gateway")

WEBHOOK_PATH = "/webhook/feishu"


class SendMessageRequest(BaseModel):
    """Manual send request."""

    model_config = ConfigDict(populate_by_name=True)

    chat_id: str = Field(alias="chatId")
    text: str


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache process settings."""
    return load_settings()


@lru_cache(maxsize=1)
def get_client() -> FeishuClient:
    """Build the shared outbound client and its token cache."""
    settings = get_settings()
    tokens = TokenCache(settings.app_id, settings.app_secret, base_url=settings.base_url)
    return FeishuClient(tokens, base_url=settings.base_url)


@lru_cache(maxsize=1)
def get_dispatcher() -> EventDispatcher:
    """Build the webhook dispatcher around the shared client."""
    settings = get_settings()
    return EventDispatcher(
        CommandRouter(),
        get_client(),
        encrypt_key=settings.encrypt_key,
        verification_token=settings.verification_token,
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.post(WEBHOOK_PATH)
async def feishu_webhook(request: Request) -> JSONResponse:
    """Handle a Feishu event callback."""
    raw_body = await request.body()
    try:
        dispatcher = get_dispatcher()
    except RuntimeError as exc:
        logger.exception("Gateway is not configured")
        return JSONResponse({"code": 500, "msg": str(exc)}, status_code=500)
    return await dispatcher.handle(raw_body, request.headers)


@app.get("/health")
async def health() -> dict[str, Any]:
    """Return liveness status and process uptime."""
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": uptime_seconds(),
    }


@app.post("/api/send-message", response_model=None)
async def send_message(request: SendMessageRequest) -> dict[str, Any] | JSONResponse:
    """Send a text message to a chat on behalf of the bot."""
    try:
        client = get_client()
        result = await asyncio.to_thread(client.send_text, request.chat_id, request.text)
    except (FeishuError, RuntimeError) as exc:
        logger.warning("Manual send to %s failed: %s", request.chat_id, exc)
        return JSONResponse({"success": False, "error": str(exc)}, status_code=500)
    return {"success": True, "data": result}


def main() -> None:
    """Validate configuration and serve the gateway with uvicorn."""
    settings = get_settings()
    logger.info("Feishu gateway starting on port %s", settings.port)
    logger.info("Webhook URL: http://localhost:%s%s", settings.port, WEBHOOK_PATH)
    logger.info("Health check: http://localhost:%s/health", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)  # noqa: S104


if __name__ == "__main__":
    main()
