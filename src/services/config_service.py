"""
Parameter Store backed configuration loader.

Secrets are fetched once per Lambda execution environment and reused by
every warm invocation. A failed load leaves nothing cached so the next
invocation tries again; a successful load is never refreshed.
"""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from models.config import AppConfig
from utils.error_handling import ConfigurationError
from utils.logging_config import get_logger
from utils.validators import ensure_present

logger = get_logger(__name__)
ssm_client = boto3.client("ssm")

DEFAULT_PARAMETER_PREFIX = "/slack-kb-agent"

# SSM parameter name -> AppConfig field
PARAMETER_FIELDS: Dict[str, str] = {
    "bot-token": "bot_token",
    "signing-secret": "signing_secret",
    "s3-bucket": "bucket_name",
    "knowledge-base-id": "knowledge_base_id",
}

_config: Optional[AppConfig] = None


def parameter_prefix() -> str:
    """Namespace all parameters live under, without a trailing slash."""
    return os.environ.get("PARAMETER_PREFIX", DEFAULT_PARAMETER_PREFIX).rstrip("/")


def _fetch_parameter(name: str) -> str:
    try:
        resp = ssm_client.get_parameter(Name=name, WithDecryption=True)
    except (BotoCoreError, ClientError) as exc:
        raise ConfigurationError(f"Unable to read parameter {name}") from exc
    value = resp.get("Parameter", {}).get("Value")
    ensure_present(value, name, error=ConfigurationError)
    return value


def _load_config() -> AppConfig:
    """Fetch all parameters concurrently; any failure fails the whole load."""
    prefix = parameter_prefix()
    names = {f"{prefix}/{key}": field for key, field in PARAMETER_FIELDS.items()}
    with ThreadPoolExecutor(max_workers=len(names)) as pool:
        futures = {name: pool.submit(_fetch_parameter, name) for name in names}
        values = {names[name]: future.result() for name, future in futures.items()}
    return AppConfig(**values)


def get_config() -> AppConfig:
    """Return the cached configuration, loading it on first use."""
    global _config
    if _config is None:
        try:
            loaded = _load_config()
        except ConfigurationError:
            logger.exception("Configuration load failed", extra={"prefix": parameter_prefix()})
            raise
        logger.info("Configuration loaded", extra={"prefix": parameter_prefix()})
        _config = loaded
    return _config


def is_loaded() -> bool:
    """True once a configuration has been cached in this process."""
    return _config is not None


def reset_config() -> None:
    """Drop the cached configuration. Used for testing."""
    global _config
    _config = None
