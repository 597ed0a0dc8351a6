"""Airbnb message normalizer.

Airbnb notification emails put the guest's name on its own upper-case
line, followed by a role label (``Booker``/``Guest``) and then the
message itself. Everything after the message is reservation details
and reply buttons.
"""

import re

from guest_knows.models.email import EmailMessage
from guest_knows.models.knowledge import Platform
from guest_knows.normalizers.base import PlatformNormalizer

__all__ = [
    "AirbnbNormalizer",
]

_THREAD_ID = re.compile(r"/hosting/thread/(\d+)")
_ALL_CAPS = re.compile(r"^[A-Z\s]+$")
_ROLE_LABELS = frozenset({"Booker", "Guest"})
_BLOCK_END_MARKERS = (
    "Reply",
    "You can also respond",
    "RESERVATION FOR",
    "Check-in",
    "GUESTS",
)


class AirbnbNormalizer(PlatformNormalizer):
    """Extracts guest text from Airbnb message notifications."""

    platform = Platform.AIRBNB
    domains = ("airbnb.com", "airbnbmail.com")

    def extract_guest_message(self, message: EmailMessage) -> EmailMessage | None:
        if not message.body_plain:
            return None

        guest_name, lines = self._scan(message.body_plain)
        guest_text = " ".join(lines).strip()
        if not guest_text:
            return None
        return self.relabel(message, guest_text, guest_name)

    def extract_thread_id(self, body: str, subject: str | None) -> str | None:
        match = _THREAD_ID.search(body or "")
        return match.group(1) if match else None

    @staticmethod
    def _is_name_line(line: str, next_line: str) -> bool:
        return line == line.upper() and 1 < len(line) < 50 and next_line in ("Booker", "Guest", "")

    def _scan(self, body: str) -> tuple[str | None, list[str]]:
        """Walk the body once, returning the guest name and message lines."""
        raw_lines = body.split("\n")
        guest_name: str | None = None
        in_message = False
        kept: list[str] = []

        for i, raw in enumerate(raw_lines):
            line = raw.strip()
            if not line or line.startswith("%") or line.startswith("http"):
                continue

            if guest_name is None:
                next_line = raw_lines[i + 1].strip() if i + 1 < len(raw_lines) else ""
                if self._is_name_line(line, next_line):
                    guest_name = line
                    in_message = True
                    continue

            if not in_message:
                continue
            if any(marker in line for marker in _BLOCK_END_MARKERS):
                break
            if line in _ROLE_LABELS or _ALL_CAPS.match(line):
                continue
            kept.append(line)

        return guest_name, kept
