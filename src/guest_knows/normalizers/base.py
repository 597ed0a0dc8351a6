"""Base platform normalizer for guest_knows.

This module defines the abstract base class for per-platform strategies
that recognize a booking channel's emails and pull the guest-authored
text out of them.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from email.utils import parseaddr

from guest_knows.models.email import EmailMessage
from guest_knows.models.knowledge import Platform

__all__ = [
    "PlatformNormalizer",
    "sender_domain",
    "domain_matches",
]


def sender_domain(sender: str | None) -> str | None:
    """Extract the lowercased domain of a ``From`` header value.

    Args:
        sender: Raw header, e.g. ``"Jane via Airbnb <express@airbnb.com>"``

    Returns:
        Domain part of the address, or None if there is no address
    """
    if not sender:
        return None
    _, address = parseaddr(sender)
    if "@" not in address:
        return None
    return address.rsplit("@", 1)[1].strip().lower() or None


def domain_matches(domain: str | None, candidates: Iterable[str]) -> bool:
    """Check a domain against a list, counting subdomains as matches."""
    if not domain:
        return False
    for candidate in candidates:
        candidate = candidate.lower()
        if domain == candidate or domain.endswith(f".{candidate}"):
            return True
    return False


class PlatformNormalizer(ABC):
    """Abstract base class for platform normalizers.

    Normalizers are pure: they never perform I/O or mutate the message
    they are given. Extraction is a best-effort text scan; returning None
    for an unrecognized layout is expected, raising is not.

    Example:
        class MyNormalizer(PlatformNormalizer):
            platform = Platform.DIRECT
            domains = ("example.com",)

            def extract_guest_message(self, message):
                ...

            def extract_thread_id(self, body, subject):
                return None
    """

    platform: Platform
    domains: tuple[str, ...] = ()

    def detect(self, message: EmailMessage) -> bool:
        """Check whether the message was sent through this platform.

        Args:
            message: Inbound email

        Returns:
            True if the sender belongs to one of the platform's domains
        """
        return self.detect_sender(message.from_address)

    def detect_sender(self, sender: str | None) -> bool:
        """Sender-only variant of detect, used for platform detection."""
        return domain_matches(sender_domain(sender), self.domains)

    @abstractmethod
    def extract_guest_message(self, message: EmailMessage) -> EmailMessage | None:
        """Strip platform furniture and return the guest-authored text.

        Args:
            message: Inbound email from this platform

        Returns:
            Copy of the message whose body is the guest text only,
            or None if no guest text could be identified
        """
        ...

    @abstractmethod
    def extract_thread_id(self, body: str, subject: str | None) -> str | None:
        """Recover the platform's own conversation ID, if it appears."""
        ...

    def extract_property_id(self, body: str, subject: str | None) -> str | None:
        """Recover the platform's listing ID. Most platforms don't expose one."""
        return None

    @staticmethod
    def relabel(message: EmailMessage, guest_text: str, guest_name: str | None) -> EmailMessage:
        """Build the extracted message, crediting the guest by name."""
        name = guest_name or "Guest"
        return message.model_copy(
            update={
                "body_plain": guest_text,
                "from_address": f"{name} (via {message.from_address})",
            }
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}(platform={self.platform.value!r})"
