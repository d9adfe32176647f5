"""Slack event models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

# Only these event types carry user commands.
COMMAND_EVENT_TYPES = ("app_mention", "message")


class InboundEvent(BaseModel):
    """A user message addressed to the bot, scoped to one invocation."""

    model_config = ConfigDict(frozen=True)

    channel: str
    user: str
    ts: str
    text: str = ""
    thread_ts: Optional[str] = None

    @property
    def event_key(self) -> str:
        """Stable identifier used to suppress redelivered events."""
        return f"{self.channel}-{self.ts}-{self.user}"

    @classmethod
    def from_slack(cls, event: Dict[str, Any]) -> Optional["InboundEvent"]:
        """
        Build an InboundEvent from the `event` object of an event callback.

        Returns None for events the bot should not react to: unsupported
        types, bot-authored or edited messages, and channel messages that
        are not direct messages (those arrive as app_mention instead).
        """
        event_type = event.get("type")
        if event_type not in COMMAND_EVENT_TYPES:
            return None
        if event.get("bot_id") or event.get("subtype"):
            return None
        if event_type == "message" and event.get("channel_type") != "im":
            return None
        if not event.get("channel") or not event.get("user") or not event.get("ts"):
            return None
        return cls(
            channel=event["channel"],
            user=event["user"],
            ts=event["ts"],
            text=event.get("text") or "",
            thread_ts=event.get("thread_ts"),
        )


class ProgressMessage(BaseModel):
    """Reference to a posted reply that can later be edited in place."""

    model_config = ConfigDict(frozen=True)

    channel: str
    ts: str
