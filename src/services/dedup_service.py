"""
Event deduplication gate.

Slack redelivers events it considers unacknowledged. Each event key is
claimed with a conditional insert; only the first delivery wins until the
record's TTL passes and DynamoDB sweeps it.
"""

from __future__ import annotations

import os
import time
from typing import Callable, Optional

from models.dedup import DeduplicationRecord
from repositories.dynamodb_repo import DynamoDbRepository
from utils.error_handling import DuplicateEventSkip
from utils.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_TTL_SECONDS = 300
KEY_ATTRIBUTE = "eventKey"


class DeduplicationGate:
    """Claim event keys against the dedup table."""

    def __init__(
        self,
        repository: Optional[DynamoDbRepository] = None,
        ttl_seconds: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.repository = repository or DynamoDbRepository(
            os.environ.get("DEDUP_TABLE_NAME", "slack-kb-agent-event-deduplication")
        )
        if ttl_seconds is None:
            ttl_seconds = int(os.environ.get("DEDUP_TTL_SECONDS", DEFAULT_TTL_SECONDS))
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def try_claim(self, event_key: str) -> bool:
        """
        Return True for the first claim of `event_key`, False for a duplicate.

        Store errors other than the key conflict propagate as
        ExternalCallFailure; an unavailable store never counts as a first claim.
        """
        record = DeduplicationRecord.claim(event_key, self.clock(), self.ttl_seconds)
        claimed = self.repository.put_if_absent(record.to_item(), KEY_ATTRIBUTE)
        logger.info(
            "Event claimed" if claimed else "Duplicate event",
            extra={"event_key": event_key, "claimed": claimed},
        )
        return claimed

    def ensure_first_delivery(self, event_key: str) -> None:
        """Raise DuplicateEventSkip unless this delivery wins the claim."""
        if not self.try_claim(event_key):
            raise DuplicateEventSkip(event_key)
