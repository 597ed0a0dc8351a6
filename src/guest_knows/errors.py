"""Exception taxonomy for guest_knows.

Validation errors surface to webhook callers as HTTP 400. Storage,
reply and notification errors are dependency failures: the orchestrator
records them against the stage that raised and keeps going.
"""

__all__ = [
    "GuestKnowsError",
    "IndexConflictError",
    "PayloadValidationError",
    "ReplyGenerationError",
    "StorageUnavailableError",
]


class GuestKnowsError(Exception):
    """Base class for guest_knows errors."""


class PayloadValidationError(GuestKnowsError):
    """Inbound webhook payload is malformed.

    The message names the first violated rule and is returned
    to the caller verbatim.
    """


class StorageUnavailableError(GuestKnowsError):
    """The key-value backend is missing or not connected."""


class IndexConflictError(GuestKnowsError):
    """An index append kept losing its compare-and-set race.

    Attributes:
        key: Index key that could not be updated
        attempts: Number of compare-and-set attempts made
    """

    def __init__(self, key: str, attempts: int) -> None:
        super().__init__(f"Index append to {key!r} failed after {attempts} attempts")
        self.key = key
        self.attempts = attempts


class ReplyGenerationError(GuestKnowsError):
    """An LLM provider returned no usable draft."""
