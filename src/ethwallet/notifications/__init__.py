"""Notifications — outbound events for the presentation layer.

Provides:
- ``NotificationService`` — fan-out event bus using asyncio queues
- ``RawEvent`` / ``AccountSummaryEvent`` / ``TransactionEvent`` — event types
"""

from __future__ import annotations

from ethwallet.notifications.events import (
    AUTH_FAILED,
    NO_ACCOUNT,
    AccountSummaryEvent,
    RawEvent,
    TransactionEvent,
)
from ethwallet.notifications.service import NotificationService

__all__ = [
    "AUTH_FAILED",
    "NO_ACCOUNT",
    "AccountSummaryEvent",
    "NotificationService",
    "RawEvent",
    "TransactionEvent",
]
