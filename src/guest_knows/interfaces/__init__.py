"""Interface contracts for guest_knows.

This module exports all Protocol-based interfaces for dependency injection.
"""

from guest_knows.interfaces.llm import LLMInterface
from guest_knows.interfaces.notifier import NotifierInterface
from guest_knows.interfaces.reply import ReplyGeneratorInterface
from guest_knows.interfaces.storage import KeyValueStoreInterface

__all__ = [
    "KeyValueStoreInterface",
    "LLMInterface",
    "NotifierInterface",
    "ReplyGeneratorInterface",
]
