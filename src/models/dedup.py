"""Deduplication table record."""

from datetime import datetime, timezone
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict


class DeduplicationRecord(BaseModel):
    """One claimed event; DynamoDB TTL removes it after `ttl`."""

    model_config = ConfigDict(frozen=True)

    event_key: str
    ttl: int
    timestamp: str

    @classmethod
    def claim(cls, event_key: str, now: float, ttl_seconds: int) -> "DeduplicationRecord":
        """Create the record written when `event_key` is first seen at `now`."""
        return cls(
            event_key=event_key,
            ttl=int(now) + ttl_seconds,
            timestamp=datetime.fromtimestamp(now, tz=timezone.utc).isoformat(),
        )

    def to_item(self) -> Dict[str, Any]:
        """Serialise to the table's attribute names."""
        return {"eventKey": self.event_key, "ttl": self.ttl, "timestamp": self.timestamp}
