"""Feishu webhook gateway."""

from feishu_gateway.commands import CommandRouter
from feishu_gateway.dispatcher import EventDispatcher
from feishu_gateway.models import InboundEvent, parse_inbound

__all__ = ["CommandRouter", "EventDispatcher", "InboundEvent", "parse_inbound"]
