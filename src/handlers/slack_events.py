"""
Slack Events API webhook handler for POST /slack/events.

Verifies the request signature, claims the event in the dedup table and
dispatches mention text to a command. Every failure below this handler is
turned into a JSON 500 here; a claimed event is not released on failure.
"""

from __future__ import annotations

import base64
import json
import time
import uuid
from typing import Any, Dict, Optional

from slack_sdk.signature import SignatureVerifier

from models.slack import InboundEvent
from services.command_dispatcher import dispatch
from services.config_service import get_config
from services.slack_service import SlackResponder, get_slack_client
from utils.error_handling import (
    AppError,
    DuplicateEventSkip,
    InvalidSignatureError,
    json_response,
    to_response,
)
from utils.logging_config import get_logger

logger = get_logger(__name__)

# Lazy-loaded gate to avoid creating DynamoDB resources at import time
_dedup_gate: Optional["DeduplicationGate"] = None


def _get_dedup_gate():
    """Lazy-load DeduplicationGate."""
    global _dedup_gate
    if _dedup_gate is None:
        from services.dedup_service import DeduplicationGate
        _dedup_gate = DeduplicationGate()
    return _dedup_gate


def _get_header(event: Dict[str, Any], name: str) -> str:
    headers = event.get("headers") or {}
    for key, value in headers.items():
        if key.lower() == name.lower():
            return value or ""
    return ""


def _raw_body(event: Dict[str, Any]) -> str:
    """Exact request body as signed by Slack."""
    body = event.get("body") or ""
    if event.get("isBase64Encoded"):
        return base64.b64decode(body).decode("utf-8")
    return body


def _verify_signature(event: Dict[str, Any], body: str, signing_secret: str) -> None:
    timestamp = _get_header(event, "X-Slack-Request-Timestamp")
    signature = _get_header(event, "X-Slack-Signature")
    if not timestamp.isdigit() or not signature:
        raise InvalidSignatureError()
    verifier = SignatureVerifier(signing_secret=signing_secret)
    if not verifier.is_valid(body=body, timestamp=timestamp, signature=signature):
        raise InvalidSignatureError()


def _process(event: Dict[str, Any], correlation_id: str) -> Dict[str, Any]:
    config = get_config()
    body = _raw_body(event)
    _verify_signature(event, body, config.signing_secret)

    payload = json.loads(body or "{}")
    payload_type = payload.get("type")
    if payload_type == "url_verification":
        return json_response(200, {"challenge": payload.get("challenge", "")})
    if payload_type != "event_callback":
        logger.info("Ignored payload", extra={"correlation_id": correlation_id, "type": payload_type})
        return json_response(200, {"result": "ignored"})

    inbound = InboundEvent.from_slack(payload.get("event") or {})
    if inbound is None:
        logger.info(
            "Ignored event",
            extra={
                "correlation_id": correlation_id,
                "event_type": (payload.get("event") or {}).get("type"),
            },
        )
        return json_response(200, {"result": "ignored"})

    try:
        _get_dedup_gate().ensure_first_delivery(inbound.event_key)
    except DuplicateEventSkip:
        return json_response(200, {"result": "duplicate_ignored"})

    responder = SlackResponder(get_slack_client(config.bot_token), inbound)
    command = dispatch(inbound, responder)
    logger.info(
        "Event handled",
        extra={
            "correlation_id": correlation_id,
            "event_key": inbound.event_key,
            "command": command,
            "retry_num": _get_header(event, "X-Slack-Retry-Num") or None,
        },
    )
    return json_response(200, {"result": "ok"})


def lambda_handler(event, context):
    """Entry point for Slack event deliveries."""
    start = time.perf_counter()
    correlation_id = getattr(context, "aws_request_id", None) or str(uuid.uuid4())
    try:
        response = _process(event, correlation_id)
    except InvalidSignatureError as exc:
        logger.warning("Rejected unsigned request", extra={"correlation_id": correlation_id})
        return to_response(exc)
    except AppError as exc:
        logger.exception("Slack event failed", extra={"correlation_id": correlation_id})
        return to_response(exc)
    except Exception:
        logger.exception("Unhandled error in Slack event", extra={"correlation_id": correlation_id})
        return to_response(AppError("Internal server error"))

    logger.info(
        "Slack request complete",
        extra={
            "correlation_id": correlation_id,
            "duration_ms": int((time.perf_counter() - start) * 1000),
        },
    )
    return response
