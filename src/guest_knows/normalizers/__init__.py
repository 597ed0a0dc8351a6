"""Platform normalizers for guest_knows.

Each normalizer recognizes one booking channel's emails and extracts
the guest-authored text from them.
"""

from guest_knows.normalizers.airbnb import AirbnbNormalizer
from guest_knows.normalizers.base import PlatformNormalizer
from guest_knows.normalizers.direct import DirectNormalizer
from guest_knows.normalizers.registry import NormalizerRegistry
from guest_knows.normalizers.vrbo import VrboNormalizer

__all__ = [
    "AirbnbNormalizer",
    "DirectNormalizer",
    "NormalizerRegistry",
    "PlatformNormalizer",
    "VrboNormalizer",
]
