"""
Single entrypoint Lambda that routes HTTP API requests to thin handler modules.

Slack only ever calls POST /slack/events; GET /health lets deploy checks
confirm the function is reachable without a signed request.
"""

from typing import Callable, Tuple

from utils.error_handling import json_response

from . import health_check, slack_events


def lambda_handler(event, context):
    """
    Entry point invoked by API Gateway HTTP API.

    The event contains the HTTP method and path; we route it to the correct
    handler and fall back to 404 for anything else.
    """
    method = event.get("requestContext", {}).get("http", {}).get("method", "")
    path = event.get("requestContext", {}).get("http", {}).get("path", "")
    route_key = f"{method.upper()} {path.rstrip('/')}"

    route_table: Tuple[Tuple[str, Callable], ...] = (
        ("POST /slack/events", slack_events.lambda_handler),
        ("GET /health", health_check.lambda_handler),
    )

    for key, handler in route_table:
        if route_key == key:
            return handler(event, context)

    return json_response(404, {"error": "Route not found", "route": route_key})
