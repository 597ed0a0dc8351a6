"""Parsing of email ``date`` header values."""

from datetime import UTC, datetime
from email.utils import parsedate_to_datetime

__all__ = [
    "EPOCH_FLOOR",
    "parse_timestamp",
]

# Sort key for dates that cannot be parsed: older than anything real
EPOCH_FLOOR = datetime.min.replace(tzinfo=UTC)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an ISO-8601 or RFC 2822 date string.

    Naive results are taken to be UTC.

    Args:
        value: Raw date string from a message

    Returns:
        Timezone-aware datetime, or None if the value cannot be parsed
    """
    if not value:
        return None
    text = value.strip()
    parsed: datetime | None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
