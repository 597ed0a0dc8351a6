"""Normalizer registry for guest_knows.

This module holds the ordered set of platform normalizers and resolves
which one, if any, handles a given message.
"""

from collections.abc import Iterable, Iterator

from guest_knows.logging import get_logger
from guest_knows.models.email import EmailMessage
from guest_knows.models.knowledge import Platform
from guest_knows.normalizers.airbnb import AirbnbNormalizer
from guest_knows.normalizers.base import PlatformNormalizer
from guest_knows.normalizers.direct import DirectNormalizer
from guest_knows.normalizers.vrbo import VrboNormalizer

__all__ = [
    "NormalizerRegistry",
]

logger = get_logger(__name__)


class NormalizerRegistry:
    """Ordered registry of platform normalizers.

    Resolution is first-match-wins in registration order, so
    platform-specific normalizers must be registered before the
    catch-all direct normalizer.

    Example:
        registry = NormalizerRegistry.default(host_domains=["capehost.ai"])
        normalizer = registry.resolve(message)
        if normalizer is not None:
            guest = normalizer.extract_guest_message(message)
    """

    def __init__(self, normalizers: Iterable[PlatformNormalizer] = ()) -> None:
        self._normalizers: list[PlatformNormalizer] = []
        for normalizer in normalizers:
            self.register(normalizer)

    @classmethod
    def default(cls, host_domains: Iterable[str] | None = None) -> "NormalizerRegistry":
        """Build the standard registry: Airbnb, VRBO, then direct mail.

        Args:
            host_domains: Operator domains excluded from direct detection

        Returns:
            Registry with the built-in normalizers
        """
        direct = DirectNormalizer(host_domains) if host_domains is not None else DirectNormalizer()
        return cls([AirbnbNormalizer(), VrboNormalizer(), direct])

    def register(self, normalizer: PlatformNormalizer) -> PlatformNormalizer:
        """Append a normalizer to the resolution order.

        Args:
            normalizer: Normalizer instance

        Returns:
            The registered normalizer

        Raises:
            ValueError: If a normalizer for the same platform is registered
        """
        if self.get_by_platform(normalizer.platform) is not None:
            raise ValueError(f"Normalizer already registered for platform: {normalizer.platform}")
        self._normalizers.append(normalizer)
        logger.debug("normalizer_registered", platform=normalizer.platform.value)
        return normalizer

    def resolve(self, message: EmailMessage) -> PlatformNormalizer | None:
        """Find the normalizer responsible for a message.

        Args:
            message: Inbound email

        Returns:
            First normalizer whose detect() accepts the message, or None
            (e.g. host-to-host mail)
        """
        if not message.from_address:
            return None
        for normalizer in self._normalizers:
            if normalizer.detect(message):
                return normalizer
        return None

    def get_by_platform(self, platform: Platform | str) -> PlatformNormalizer | None:
        """Look up a normalizer by platform name. Returns None if unsupported."""
        for normalizer in self._normalizers:
            if normalizer.platform == platform:
                return normalizer
        return None

    def detect_platform(self, sender: str | None) -> Platform | None:
        """Detect the platform from a bare ``From`` value.

        Args:
            sender: Raw sender header

        Returns:
            Platform of the first matching normalizer, or None
        """
        if not sender:
            return None
        for normalizer in self._normalizers:
            if normalizer.detect_sender(sender):
                return normalizer.platform
        return None

    @property
    def platforms(self) -> list[Platform]:
        """Registered platforms in resolution order."""
        return [n.platform for n in self._normalizers]

    def __iter__(self) -> Iterator[PlatformNormalizer]:
        return iter(self._normalizers)

    def __len__(self) -> int:
        return len(self._normalizers)
