"""Environment-backed settings for the gateway service."""

from __future__ import annotations

import os

from dotenv import load_dotenv
from feishu_client import DEFAULT_BASE_URL
from pydantic import BaseModel

load_dotenv()

DEFAULT_PORT = 3000


class Settings(BaseModel):
    """Validated process configuration."""

    app_id: str
    app_secret: str
    encrypt_key: str = ""
    verification_token: str = ""
    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT


def load_settings() -> Settings:
    """Read settings from the environment.

    Returns:
        Settings populated from ``FEISHU_*`` variables and ``PORT``.

    Raises:
        RuntimeError: The app id or app secret is missing.

    """
    app_id = os.environ.get("FEISHU_APP_ID", "").strip()
    app_secret = os.environ.get("FEISHU_APP_SECRET", "").strip()
    if not app_id or not app_secret:
        raise RuntimeError("FEISHU_APP_ID and FEISHU_APP_SECRET are required.")  # noqa: TRY003, EM101
    return Settings(
        app_id=app_id,
        app_secret=app_secret,
        encrypt_key=os.environ.get("FEISHU_ENCRYPT_KEY", ""),
        verification_token=os.environ.get("FEISHU_VERIFICATION_TOKEN", ""),
        base_url=os.environ.get("FEISHU_BASE_URL") or DEFAULT_BASE_URL,
        port=int(os.environ.get("PORT") or DEFAULT_PORT),
    )
