"""Payload validation and log sanitization for guest_knows.

Validation checks run in a fixed order and stop at the first violation,
so the error a caller sees is deterministic.
"""

from typing import Any

from guest_knows.errors import PayloadValidationError
from guest_knows.models.knowledge import KnowledgeItem
from guest_knows.utils.masking import mask_addresses

__all__ = [
    "REDACTED",
    "SENSITIVE_FIELDS",
    "redact_knowledge_item",
    "sanitize_for_logging",
    "validate_webhook_payload",
]

REQUIRED_MESSAGE_FIELDS = ("id", "from", "date")
SENSITIVE_FIELDS = frozenset({"from", "to", "cc", "bodyPlain", "bodyHtml", "raw_payload"})
REDACTED = "[REDACTED]"


def validate_webhook_payload(payload: Any) -> dict[str, Any]:
    """Validate the shape of an inbound webhook payload.

    Args:
        payload: Decoded JSON request body

    Returns:
        The payload, unchanged

    Raises:
        PayloadValidationError: Describing the first violated rule
    """
    if not isinstance(payload, dict):
        raise PayloadValidationError("Payload must be an object")

    if not isinstance(payload.get("schema_version"), str):
        raise PayloadValidationError("Payload must contain 'schema_version' string field")

    messages = payload.get("messages")
    if not isinstance(messages, list):
        raise PayloadValidationError("Payload must contain 'messages' array")
    if not messages:
        raise PayloadValidationError("Payload must contain at least one message")

    for index, message in enumerate(messages):
        if not isinstance(message, dict):
            raise PayloadValidationError(f"Message {index} must be an object")
        for field in REQUIRED_MESSAGE_FIELDS:
            if not message.get(field):
                raise PayloadValidationError(f"Message {index} missing required field: {field}")

    return payload


def sanitize_for_logging(data: Any) -> Any:
    """Mask PII in a payload before it is logged or returned.

    Email addresses in sensitive string fields keep only their domain;
    sensitive fields holding objects or lists are replaced
    wholesale. Nested dicts are sanitized recursively; lists are copied
    as-is. The input is never modified.

    Args:
        data: Any decoded JSON value

    Returns:
        Sanitized copy (non-dict values are returned unchanged)
    """
    if not isinstance(data, dict):
        return data

    sanitized: dict[str, Any] = {}
    for key, value in data.items():
        if key in SENSITIVE_FIELDS:
            if isinstance(value, str):
                sanitized[key] = mask_addresses(value)
            elif isinstance(value, dict | list):
                sanitized[key] = REDACTED
            else:
                sanitized[key] = value
        elif isinstance(value, dict):
            sanitized[key] = sanitize_for_logging(value)
        elif isinstance(value, list):
            sanitized[key] = list(value)
        else:
            sanitized[key] = value
    return sanitized


def redact_knowledge_item(item: KnowledgeItem) -> dict[str, Any]:
    """Render a knowledge item for retrieval responses.

    Args:
        item: Stored knowledge item

    Returns:
        JSON-ready dict with raw_payload redacted and addresses masked,
        including the headers inside the rendered thread text
    """
    document = item.to_document()
    document["raw_payload"] = REDACTED
    normalized = sanitize_for_logging(document["normalized"])
    normalized["full_thread_text"] = mask_addresses(normalized["full_thread_text"])
    document["normalized"] = normalized
    return document
