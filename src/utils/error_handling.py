"""Custom exceptions and helpers for consistent error responses."""

import json
from typing import Any, Dict

INTERNAL_ERROR_MESSAGE = "Internal server error"


class AppError(Exception):
    """Base class for application errors."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class ConfigurationError(AppError):
    """Raised when required parameters are missing or cannot be fetched."""

    def __init__(self, message: str = "Configuration unavailable"):
        super().__init__(message, status_code=500)


class ExternalCallFailure(AppError):
    """Raised when S3, Bedrock, DynamoDB or Slack fail unexpectedly."""

    def __init__(self, message: str, service: str = "unknown"):
        super().__init__(message, status_code=500)
        self.service = service


class InvalidSignatureError(AppError):
    """Raised when a request does not carry a valid Slack signature."""

    def __init__(self, message: str = "invalid signature"):
        super().__init__(message, status_code=401)


class DuplicateEventSkip(Exception):
    """Control signal: the event was already claimed by another delivery."""

    def __init__(self, event_key: str):
        super().__init__(f"Duplicate event {event_key}")
        self.event_key = event_key


def json_response(status: int, body: Dict[str, Any]) -> Dict[str, Any]:
    """Format a JSON API Gateway HTTP API response."""
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def to_response(error: AppError) -> Dict[str, Any]:
    """
    Convert an AppError into a Lambda proxy integration response.

    Server-side failures get a generic body; their detail belongs in the logs.
    """
    if error.status_code >= 500:
        return json_response(error.status_code, {"error": INTERNAL_ERROR_MESSAGE})
    return json_response(error.status_code, {"error": str(error)})
