"""Inbound email models for guest_knows.

These models mirror the webhook wire format, which uses camelCase
(``bodyPlain``) and the reserved word ``from`` as field names.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from guest_knows.utils.timestamps import EPOCH_FLOOR, parse_timestamp

__all__ = [
    "EmailMessage",
    "WebhookPayload",
]


def _number_to_str(value: Any) -> Any:
    # Mailbox and booking systems send some ids as JSON numbers
    if isinstance(value, int | float) and not isinstance(value, bool):
        return str(value)
    return value


class EmailMessage(BaseModel):
    """A single email from a forwarded thread.

    Attributes:
        id: Mailbox-assigned message ID
        from_address: Raw ``From`` header (wire name ``from``)
        date: Raw date string (ISO-8601 or RFC 2822)
        to: ``To`` header; lists are joined with ", "
        cc: ``Cc`` header; lists are joined with ", "
        subject: Subject line
        body_plain: Plain-text body (wire name ``bodyPlain``)
        body_html: HTML body (wire name ``bodyHtml``)
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str
    from_address: str = Field(alias="from")
    date: str
    to: str | None = None
    cc: str | None = None
    subject: str | None = None
    body_plain: str | None = Field(default=None, alias="bodyPlain")
    body_html: str | None = Field(default=None, alias="bodyHtml")

    @field_validator("id", "date", "subject", mode="before")
    @classmethod
    def _coerce_scalars(cls, value: Any) -> Any:
        return _number_to_str(value)

    @field_validator("to", "cc", mode="before")
    @classmethod
    def _join_recipients(cls, value: Any) -> Any:
        if isinstance(value, list):
            return ", ".join(str(v) for v in value)
        return _number_to_str(value)

    @property
    def timestamp(self) -> datetime:
        """Parsed ``date``; unparseable values sort as the oldest instant."""
        return parse_timestamp(self.date) or EPOCH_FLOOR


class WebhookPayload(BaseModel):
    """Validated webhook request body.

    Unknown top-level fields are kept so the payload can be
    inspected, but the raw dict is what gets persisted.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="allow")

    schema_version: str
    messages: list[EmailMessage] = Field(min_length=1)
    source: str | None = None
    thread_id: str | None = Field(default=None, alias="threadId")
    property_id: str | None = None
    booking_id: str | None = None

    @field_validator(
        "schema_version", "source", "thread_id", "property_id", "booking_id", mode="before"
    )
    @classmethod
    def _coerce_ids(cls, value: Any) -> Any:
        return _number_to_str(value)
