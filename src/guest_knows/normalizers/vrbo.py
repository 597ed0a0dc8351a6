"""VRBO (HomeAway) message normalizer.

VRBO relays guest replies as
``Vrbo: <Name> has replied to your message``, a blank line, the
message, and then a footer that starts with a dashed rule or one of
the help/legal links.
"""

import re

from guest_knows.models.email import EmailMessage
from guest_knows.models.knowledge import Platform
from guest_knows.normalizers.base import PlatformNormalizer

__all__ = [
    "VrboNormalizer",
]

_HEADER = re.compile(r"Vrbo:\s*(.+?)\s+has replied", re.IGNORECASE)
_SUBJECT_GUEST = re.compile(r"Reservation from ([^:]+):")
_LISTING_NUMBER = re.compile(r"Vrbo #(\d+)")
_HEADER_SEARCH_LINES = 5
_FOOTER_MARKERS = (
    "We're here to help",
    "Help Centre",
    "Help Center",
    "©",
    "Terms & conditions",
    "Contact Us",
    "Privacy",
)


def _is_footer(line: str) -> bool:
    return line.startswith("-------") or any(marker in line for marker in _FOOTER_MARKERS)


class VrboNormalizer(PlatformNormalizer):
    """Extracts guest text from VRBO reply notifications.

    The ``Vrbo #NNN`` reference in VRBO subjects identifies the listing,
    so it is surfaced as a property ID. VRBO emails carry no
    conversation ID of their own.
    """

    platform = Platform.VRBO
    domains = ("vrbo.com", "homeaway.com", "messages.homeaway.com")

    def extract_guest_message(self, message: EmailMessage) -> EmailMessage | None:
        if not message.body_plain:
            return None

        guest_name = None
        if message.subject:
            subject_match = _SUBJECT_GUEST.search(message.subject)
            if subject_match:
                guest_name = subject_match.group(1).strip()

        lines = message.body_plain.split("\n")
        for i, line in enumerate(lines[:_HEADER_SEARCH_LINES]):
            header = _HEADER.search(line)
            if header is None:
                continue
            guest_name = guest_name or header.group(1).strip()
            guest_text = " ".join(self._message_lines(lines[i + 1 :])).strip()
            if not guest_text:
                return None
            return self.relabel(message, guest_text, guest_name)

        return None

    def extract_thread_id(self, body: str, subject: str | None) -> str | None:
        return None

    def extract_property_id(self, body: str, subject: str | None) -> str | None:
        for text in (subject, body):
            if not text:
                continue
            match = _LISTING_NUMBER.search(text)
            if match:
                return match.group(1)
        return None

    @staticmethod
    def _message_lines(lines: list[str]) -> list[str]:
        kept = []
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            if _is_footer(line):
                break
            kept.append(line)
        return kept
