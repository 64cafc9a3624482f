"""Event types for the notification system.

These are the outbound signals for the presentation layer:
- ``RawEvent`` — envelope with type string + JSON content
  (``auth_failed`` and ``no_account`` are plain envelopes)
- ``AccountSummaryEvent`` — current account name, address and balance
- ``TransactionEvent`` — a tracked transaction changed state
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

AUTH_FAILED = "auth_failed"
NO_ACCOUNT = "no_account"


@dataclass(frozen=True)
class RawEvent:
    """Generic event envelope sent to subscribers."""

    type: str
    content: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict."""
        return asdict(self)


@dataclass(frozen=True)
class AccountSummaryEvent(RawEvent):
    """Display-ready summary of the selected account."""

    type: str = "account_summary"
    name: str = ""
    address: str = ""
    balance: str = ""


@dataclass(frozen=True)
class TransactionEvent(RawEvent):
    """Event emitted when a transaction changes state."""

    type: str = "transaction"
    tx_hash: str = ""
    from_address: str = ""
    status: str = ""
