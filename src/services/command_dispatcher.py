"""
Route mention text to a command handler.

Commands are checked in a fixed order over the lower-cased text and the
first match wins, so "hello ask foo" is a greeting.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Tuple

from models.slack import InboundEvent
from services import command_handlers
from services.slack_service import SlackResponder
from utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Command:
    """A named (predicate, handler) pair."""

    name: str
    matches: Callable[[str], bool]
    handle: Callable[[InboundEvent, SlackResponder], None]


COMMANDS: Tuple[Command, ...] = (
    Command("hello", lambda text: "hello" in text, command_handlers.greet),
    Command(
        command_handlers.LIST_COMMAND,
        lambda text: command_handlers.LIST_COMMAND in text,
        command_handlers.list_files,
    ),
    Command(
        command_handlers.URL_COMMAND,
        lambda text: command_handlers.URL_COMMAND_RE.search(text) is not None,
        command_handlers.sign_url,
    ),
    Command("ask", lambda text: command_handlers.ASK_KEYWORD in text, command_handlers.ask),
)

FALLBACK = Command("help", lambda text: True, command_handlers.show_help)


def classify(text: str) -> Command:
    """Return the first command whose predicate accepts `text`."""
    normalized = (text or "").lower()
    for command in COMMANDS:
        if command.matches(normalized):
            return command
    return FALLBACK


def dispatch(event: InboundEvent, responder: SlackResponder) -> str:
    """Run the matching handler and return the command name."""
    command = classify(event.text)
    logger.info(
        "Dispatching command",
        extra={"command": command.name, "event_key": event.event_key},
    )
    command.handle(event, responder)
    return command.name
