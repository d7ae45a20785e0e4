"""
Shared pieces for request models.
"""

from typing import Any


def blank_to_none(value: Any) -> Any:
    """Form inputs send "" for untouched fields; treat that as missing."""
    if isinstance(value, str) and not value.strip():
        return None
    return value
