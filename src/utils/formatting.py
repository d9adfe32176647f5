"""Helpers that turn storage metadata into Slack-friendly text."""

from datetime import datetime
from typing import Optional

_UNITS = ("B", "KB", "MB", "GB", "TB")


def human_size(num_bytes: int) -> str:
    """Render a byte count as e.g. `512 B`, `1.5 KB`, `3.2 MB`."""
    size = float(num_bytes)
    for unit in _UNITS:
        if size < 1024 or unit == _UNITS[-1]:
            if unit == "B":
                return f"{int(size)} {unit}"
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{num_bytes} B"


def short_timestamp(value: Optional[datetime]) -> str:
    """Format a timestamp to the minute; unknown times render as `-`."""
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d %H:%M")
