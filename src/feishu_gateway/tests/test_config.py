"""Unit tests for environment settings."""

from __future__ import annotations

import pytest
from feishu_client import DEFAULT_BASE_URL
from feishu_gateway.config import DEFAULT_PORT, load_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "FEISHU_APP_ID",
        "FEISHU_APP_SECRET",
        "FEISHU_ENCRYPT_KEY",
        "FEISHU_VERIFICATION_TOKEN",
        "FEISHU_BASE_URL",
        "PORT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Only the app identity is required."""
    monkeypatch.setenv("FEISHU_APP_ID", "app")
    monkeypatch.setenv("FEISHU_APP_SECRET", "secret")

    settings = load_settings()

    assert settings.app_id == "app"
    assert settings.app_secret == "secret"
    assert settings.encrypt_key == ""
    assert settings.verification_token == ""
    assert settings.base_url == DEFAULT_BASE_URL
    assert settings.port == DEFAULT_PORT


def test_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    """Optional variables override the defaults."""
    monkeypatch.setenv("FEISHU_APP_ID", "app")
    monkeypatch.setenv("FEISHU_APP_SECRET", "secret")
    monkeypatch.setenv("FEISHU_ENCRYPT_KEY", "ek")
    monkeypatch.setenv("FEISHU_VERIFICATION_TOKEN", "vt")
    monkeypatch.setenv("FEISHU_BASE_URL", "https://open.larksuite.com/open-apis")
    monkeypatch.setenv("PORT", "8080")

    settings = load_settings()

    assert settings.encrypt_key == "ek"
    assert settings.verification_token == "vt"
    assert settings.base_url == "https://open.larksuite.com/open-apis"
    assert settings.port == 8080


@pytest.mark.parametrize(("app_id", "app_secret"), [("", "secret"), ("app", ""), ("  ", "  ")])
def test_missing_identity_is_fatal(monkeypatch: pytest.MonkeyPatch, app_id: str, app_secret: str) -> None:
    """Startup fails without an app id and secret."""
    monkeypatch.setenv("FEISHU_APP_ID", app_id)
    monkeypatch.setenv("FEISHU_APP_SECRET", app_secret)
    with pytest.raises(RuntimeError, match="FEISHU_APP_ID and FEISHU_APP_SECRET are required"):
        load_settings()
