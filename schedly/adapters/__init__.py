"""
Adapters layer - Datastores and notification delivery.
"""

from .json_store import JsonBookingStore
from .mail_notifier import HttpMailNotifier, LoggingNotifier
from .memory_store import InMemoryBookingStore

__all__ = ["JsonBookingStore", "HttpMailNotifier", "LoggingNotifier", "InMemoryBookingStore"]
