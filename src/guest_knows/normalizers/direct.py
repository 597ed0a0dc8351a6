"""Direct guest email normalizer.

Catch-all for guests writing straight to the host mailbox. Anything not
sent from one of the operator's own domains is treated as guest mail,
and the body is taken as-is.
"""

from collections.abc import Iterable

from guest_knows.models.email import EmailMessage
from guest_knows.models.knowledge import Platform
from guest_knows.normalizers.base import PlatformNormalizer, domain_matches, sender_domain

__all__ = [
    "DirectNormalizer",
]


class DirectNormalizer(PlatformNormalizer):
    """Matches any sender outside the operator's host domains.

    Must be registered after every platform-specific normalizer.
    """

    platform = Platform.DIRECT

    def __init__(self, host_domains: Iterable[str] = ("capehost.ai", "capehost.com")) -> None:
        """Initialize with the operator's own domains.

        Args:
            host_domains: Domains whose senders are hosts, never guests
        """
        self.host_domains = tuple(d.lower() for d in host_domains)

    def detect_sender(self, sender: str | None) -> bool:
        domain = sender_domain(sender)
        if domain is None:
            return False
        return not domain_matches(domain, self.host_domains)

    def extract_guest_message(self, message: EmailMessage) -> EmailMessage | None:
        if not message.body_plain or not message.body_plain.strip():
            return None
        return message

    def extract_thread_id(self, body: str, subject: str | None) -> str | None:
        return None
