"""Shared utilities (datetime formatting, id generation)."""

from staticimp.shared.utils.datetime import (
    DEFAULT_TIMESTAMP_FORMAT,
    ensure_utc,
    format_timestamp,
    utc_now,
)
from staticimp.shared.utils.generators import generate_entry_id

__all__ = [
    "DEFAULT_TIMESTAMP_FORMAT",
    "ensure_utc",
    "format_timestamp",
    "generate_entry_id",
    "utc_now",
]
