"""Text command table and router."""

from __future__ import annotations

import platform
import sys
import time
from collections.abc import Callable, Mapping
from datetime import datetime
from types import MappingProxyType

from feishu_gateway.models import InboundEvent

CommandHandler = Callable[[InboundEvent], str]

PROCESS_STARTED_AT = time.monotonic()
DEFAULT_USER_NAME = "there"


def uptime_seconds() -> float:
    """Return seconds since this process imported the command table."""
    return time.monotonic() - PROCESS_STARTED_AT


def command_key(text: str | None) -> str:
    """Return the lower-cased first token of ``text``, or an empty string."""
    tokens = (text or "").split()
    return tokens[0].lower() if tokens else ""


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


def handle_help(_event: InboundEvent) -> str:
    """List the available commands."""
    return (
        "🤖 Available commands:\n\n"
        "• help - show this message\n"
        "• hello - say hello\n"
        "• time - show the current time\n"
        "• status - show bot status\n\n"
        "💡 Just type a command to use it."
    )


def handle_hello(event: InboundEvent) -> str:
    """Greet the sender by user id."""
    name = event.sender_id or DEFAULT_USER_NAME
    return f"Hello, {name}! 👋\nHappy to help."


def handle_time(_event: InboundEvent) -> str:
    """Report the local wall-clock time."""
    now = datetime.now().astimezone()
    return f"⏰ Current time:\n{now.strftime('%A, %B %d, %Y %H:%M:%S %Z')}"


def handle_status(_event: InboundEvent) -> str:
    """Report liveness, uptime and runtime metadata."""
    return (
        "🤖 Bot status:\n\n"
        "• State: online ✅\n"
        f"• Uptime: {uptime_seconds():.0f} seconds\n"
        f"• Python: {platform.python_version()}\n"
        f"• Platform: {sys.platform}"
    )


def handle_default(event: InboundEvent) -> str:
    """Echo the text back with a pointer to ``help``."""
    return f"Received: {event.text or ''}\n\nType \"help\" to see available commands."


DEFAULT_COMMANDS: Mapping[str, CommandHandler] = MappingProxyType(
    {
        "help": handle_help,
        "hello": handle_hello,
        "time": handle_time,
        "status": handle_status,
    }
)


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------


class CommandRouter:
    """Map message text to a handler and produce reply text."""

    def __init__(
        self,
        commands: Mapping[str, CommandHandler] = DEFAULT_COMMANDS,
        default: CommandHandler = handle_default,
    ) -> None:
        """Freeze the command table; it cannot change after construction."""
        self._commands = MappingProxyType(dict(commands))
        self._default = default

    @property
    def commands(self) -> Mapping[str, CommandHandler]:
        """Return the read-only command table."""
        return self._commands

    def resolve(self, text: str | None) -> CommandHandler:
        """Return the handler for ``text``, falling back to the default handler."""
        return self._commands.get(command_key(text), self._default)

    def route(self, event: InboundEvent) -> str:
        """Return the reply text for an inbound event."""
        return self.resolve(event.text)(event)
