"""Email address masking shared by log output and retrieval responses."""

import re

__all__ = [
    "mask_addresses",
]

_EMAIL_LOCAL_PART = re.compile(r"[\w.-]+@")


def mask_addresses(text: str) -> str:
    """Replace the local part of every email address with ``***``.

    Args:
        text: Free text, e.g. a ``From`` header or a rendered thread

    Returns:
        Text in which only address domains remain readable
    """
    return _EMAIL_LOCAL_PART.sub("***@", text)
