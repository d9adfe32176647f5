"""Object storage models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class StoredObject(BaseModel):
    """One entry from a bucket listing."""

    key: str
    size: int = 0
    last_modified: Optional[datetime] = None
