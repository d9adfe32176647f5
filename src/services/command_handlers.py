"""
Handlers for the bot's chat commands.

Slow commands (listing, knowledge base questions) post a progress reply
first and edit it in place once the external call finishes. External
failures are reported back in the channel and never escape a handler.
"""

from __future__ import annotations

import re
import time
from typing import List, Optional

from models.slack import InboundEvent, ProgressMessage
from models.storage import StoredObject
from services.config_service import get_config
from services.slack_service import SlackResponder
from utils.error_handling import ExternalCallFailure
from utils.formatting import human_size, short_timestamp
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)

LIST_COMMAND = "list-files"
URL_COMMAND = "get-url"
ASK_KEYWORD = "ask "

LIST_PAGE_SIZE = 20
URL_EXPIRY_SECONDS = 900

URL_COMMAND_RE = re.compile(r"get-url(?:\s+(?P<key>\S+))?", re.IGNORECASE)
ASK_RE = re.compile(r"ask (?P<query>.*)", re.IGNORECASE | re.DOTALL)
# Slack auto-links domain-like words: <http://notes.md|notes.md>
SLACK_LINK_RE = re.compile(r"^<(?P<url>[^|>]+)(?:\|(?P<label>[^>]*))?>$")

GREETING_TEXT = "Hello, World!"
EMPTY_BUCKET_TEXT = "No files found in the bucket."
EMPTY_QUESTION_TEXT = (
    "Please include a question after `ask`, for example "
    "`ask what is our refund policy?`"
)
HELP_TEXT = "\n".join(
    [
        "Here is what I can do:",
        "• `hello` - say hello",
        f"• `{LIST_COMMAND}` - list the files in the document bucket",
        f"• `{URL_COMMAND} <file>` - get a download link valid for 15 minutes",
        "• `ask <question>` - answer a question from the knowledge base",
    ]
)

# Lazy-loaded services so cold starts only pay for what a command uses
_s3_repository: Optional["S3Repository"] = None
_bedrock_service: Optional["BedrockService"] = None


def _get_s3_repository():
    """Lazy-load S3Repository for the configured bucket."""
    global _s3_repository
    if _s3_repository is None:
        from repositories.s3_repo import S3Repository
        _s3_repository = S3Repository(get_config().bucket_name)
    return _s3_repository


def _get_bedrock_service():
    """Lazy-load BedrockService for the configured knowledge base."""
    global _bedrock_service
    if _bedrock_service is None:
        from services.bedrock_service import BedrockService
        _bedrock_service = BedrockService(knowledge_base_id=get_config().knowledge_base_id)
    return _bedrock_service


def extract_object_key(text: str) -> str:
    """Argument following `get-url`, or an empty string if there is none."""
    match = URL_COMMAND_RE.search(text or "")
    if not match or not match.group("key"):
        return ""
    key = match.group("key").strip("`")
    link = SLACK_LINK_RE.match(key)
    if link:
        key = link.group("label") or link.group("url")
    return key.strip("`<>")


def extract_query(text: str) -> str:
    """Everything after the `ask ` keyword, trimmed."""
    match = ASK_RE.search(text or "")
    return match.group("query").strip() if match else ""


def format_listing(bucket_name: str, objects: List[StoredObject]) -> str:
    """One line per object: key, size and last modified time."""
    lines = [f"*Files in `{bucket_name}`* (showing up to {LIST_PAGE_SIZE}):"]
    for obj in objects:
        lines.append(
            f"• `{obj.key}` ({human_size(obj.size)}, {short_timestamp(obj.last_modified)})"
        )
    return "\n".join(lines)


def _post_progress(responder: SlackResponder, text: str) -> Optional[ProgressMessage]:
    """Post the transient reply; None if Slack refused it."""
    try:
        return responder.say(text)
    except ExternalCallFailure:
        logger.exception("Progress message failed", extra={"channel": responder.event.channel})
        return None


def _reply(
    responder: SlackResponder,
    text: str,
    progress: Optional[ProgressMessage] = None,
) -> None:
    """Send the final reply; a refused reply is logged, not raised."""
    try:
        responder.finish(progress, text)
    except ExternalCallFailure:
        logger.exception(
            "Reply failed",
            extra={"channel": responder.event.channel, "event_key": responder.event.event_key},
        )


def greet(event: InboundEvent, responder: SlackResponder) -> None:
    _reply(responder, GREETING_TEXT)


def show_help(event: InboundEvent, responder: SlackResponder) -> None:
    _reply(responder, HELP_TEXT)


def list_files(event: InboundEvent, responder: SlackResponder) -> None:
    """List the first page of the bucket."""
    progress = _post_progress(responder, ":mag: Listing files...")
    start = time.perf_counter()
    try:
        repository = _get_s3_repository()
        objects = repository.list_objects(limit=LIST_PAGE_SIZE)
    except Exception:
        logger.exception("Listing failed", extra={"event_key": event.event_key})
        _reply(responder, ":warning: Failed to list files. Please try again later.", progress)
        return

    logger.info(
        "Listing complete",
        extra={
            "event_key": event.event_key,
            "count": len(objects),
            "duration_ms": int((time.perf_counter() - start) * 1000),
        },
    )
    if not objects:
        _reply(responder, EMPTY_BUCKET_TEXT, progress)
        return
    _reply(responder, format_listing(repository.bucket_name, objects), progress)


def sign_url(event: InboundEvent, responder: SlackResponder) -> None:
    """Reply with a presigned download URL for the requested object."""
    key = extract_object_key(event.text)
    try:
        ensure_present(key, "object key")
        repository = _get_s3_repository()
        if not repository.exists(key):
            raise ExternalCallFailure(f"Object {key} not found", service="s3")
        url = repository.presigned_url(key, expires_in=URL_EXPIRY_SECONDS)
    except Exception:
        logger.exception("Presigned URL failed", extra={"object_key": key})
        _reply(
            responder,
            f":warning: Could not generate a download URL for `{key}`. "
            f"Check the file name and try again (usage: `{URL_COMMAND} <file>`).",
        )
        return
    _reply(responder, f":link: Download URL for `{key}` (valid for 15 minutes):\n{url}")


def ask(event: InboundEvent, responder: SlackResponder) -> None:
    """Answer a free-text question from the knowledge base."""
    query = extract_query(event.text)
    if not query:
        _reply(responder, EMPTY_QUESTION_TEXT)
        return

    progress = _post_progress(responder, ":hourglass_flowing_sand: Searching the knowledge base...")
    start = time.perf_counter()
    try:
        answer = _get_bedrock_service().ask(query)
    except Exception:
        logger.exception("Knowledge base query failed", extra={"event_key": event.event_key})
        _reply(
            responder,
            ":warning: Sorry, something went wrong while searching the knowledge base. "
            "Please try again later.",
            progress,
        )
        return

    logger.info(
        "Knowledge base answered",
        extra={
            "event_key": event.event_key,
            "duration_ms": int((time.perf_counter() - start) * 1000),
        },
    )
    _reply(responder, answer, progress)


def reset_services() -> None:
    """Drop lazily created services. Used for testing."""
    global _s3_repository, _bedrock_service
    _s3_repository = None
    _bedrock_service = None
