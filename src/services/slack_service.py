"""
Slack Web API access for replies.

The WebClient is cached per bot token for the life of the execution
environment, mirroring the configuration cache.
"""

from __future__ import annotations

from typing import Optional

from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

from models.slack import InboundEvent, ProgressMessage
from utils.error_handling import ExternalCallFailure
from utils.logging_config import get_logger

logger = get_logger(__name__)

_client: Optional[WebClient] = None


def get_slack_client(token: str) -> WebClient:
    """Return a cached WebClient, rebuilding it if the token changed."""
    global _client
    if _client is None or _client.token != token:
        _client = WebClient(token=token)
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None


class SlackResponder:
    """Post and edit replies to one inbound event."""

    def __init__(self, client: WebClient, event: InboundEvent):
        self.client = client
        self.event = event

    def say(self, text: str) -> ProgressMessage:
        """Post `text` to the event's channel (and thread, if any)."""
        kwargs = {"channel": self.event.channel, "text": text}
        if self.event.thread_ts:
            kwargs["thread_ts"] = self.event.thread_ts
        try:
            resp = self.client.chat_postMessage(**kwargs)
        except SlackApiError as exc:
            raise ExternalCallFailure(f"chat.postMessage failed: {exc}", service="slack") from exc
        return ProgressMessage(channel=resp.get("channel") or self.event.channel, ts=resp["ts"])

    def update(self, message: ProgressMessage, text: str) -> None:
        """Replace the text of a previously posted reply."""
        try:
            self.client.chat_update(channel=message.channel, ts=message.ts, text=text)
        except SlackApiError as exc:
            raise ExternalCallFailure(f"chat.update failed: {exc}", service="slack") from exc

    def finish(self, message: Optional[ProgressMessage], text: str) -> None:
        """
        Update the progress reply when there is one, otherwise post fresh.

        If the update is refused (e.g. the progress message was deleted), the
        text is posted as a new message instead.
        """
        if message is not None:
            try:
                self.update(message, text)
                return
            except ExternalCallFailure:
                logger.exception(
                    "Progress update failed, posting instead",
                    extra={"channel": message.channel, "ts": message.ts},
                )
        self.say(text)
