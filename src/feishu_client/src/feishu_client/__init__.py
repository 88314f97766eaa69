"""Public export surface for ``feishu_client``."""

from feishu_client.client import FeishuClient, OutboundMessage
from feishu_client.credentials import DEFAULT_BASE_URL, TOKEN_SAFETY_MARGIN_SECONDS, TokenCache
from feishu_client.errors import AuthError, DeliveryError, FeishuError, TransportError

__all__ = [
    "DEFAULT_BASE_URL",
    "TOKEN_SAFETY_MARGIN_SECONDS",
    "AuthError",
    "DeliveryError",
    "FeishuClient",
    "FeishuError",
    "OutboundMessage",
    "TokenCache",
    "TransportError",
]
