"""Lightweight health check handler."""

import os
from datetime import datetime, timezone

from services import config_service
from utils.error_handling import json_response


def lambda_handler(event, context):
    """Report liveness and whether this environment has loaded its secrets."""
    return json_response(
        200,
        {
            "status": "ok",
            "environment": os.environ.get("ENVIRONMENT", "dev"),
            "config_loaded": config_service.is_loaded(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    )
