"""Identifier generation for knowledge items."""

import secrets
import string
import time

__all__ = [
    "generate_item_id",
]

_BASE36 = string.digits + string.ascii_lowercase


def generate_item_id(now_ms: int | None = None) -> str:
    """Generate a knowledge item ID.

    IDs are ``{epoch_ms}-{7 base36 chars}``. The millisecond prefix keeps
    IDs roughly sortable by creation time; it is not strictly increasing
    across hosts with skewed clocks.

    Args:
        now_ms: Epoch milliseconds to use instead of the current time

    Returns:
        New item ID
    """
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{now_ms}-{suffix}"
