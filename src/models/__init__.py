"""Pydantic models for configuration, Slack events and storage."""

from models.config import AppConfig  # noqa: F401
from models.dedup import DeduplicationRecord  # noqa: F401
from models.slack import InboundEvent, ProgressMessage  # noqa: F401
from models.storage import StoredObject  # noqa: F401
