"""Utility functions for guest_knows.

This module contains internal utility functions.
"""

from guest_knows.utils.ids import generate_item_id
from guest_knows.utils.masking import mask_addresses
from guest_knows.utils.timestamps import EPOCH_FLOOR, parse_timestamp

__all__ = [
    "EPOCH_FLOOR",
    "generate_item_id",
    "mask_addresses",
    "parse_timestamp",
]
