"""Lightweight validation helpers."""

from typing import Any, Type


def ensure_present(value: Any, field: str, error: Type[Exception] = ValueError) -> None:
    """Raise `error` if value is falsy or whitespace only."""
    if value is None or (isinstance(value, str) and not value.strip()) or value == []:
        raise error(f"{field} is required")
