"""Transaction record — one submitted value or token-creation transaction.

Lifecycle: PENDING → ACCEPTED | REJECTED

A record is created PENDING at submission time and parked in the wallet's
transaction buffer.  Reconciliation replaces it with a resolved copy in the
owning account's history.  Resolved records never change again.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any

from ethwallet.errors.definitions import ErrInvalidAmount
from ethwallet.eth.address import validate_address

TX_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class TxStatus(enum.IntEnum):
    """Confirmation status, stored as ``txStatus``."""

    PENDING = -1
    REJECTED = 0
    ACCEPTED = 1

    @property
    def is_terminal(self) -> bool:
        return self is not TxStatus.PENDING


class TxType(enum.StrEnum):
    """What the transaction does."""

    SEND = "send"
    TOKEN_CREATE = "token_create"


class CurrencyType(enum.StrEnum):
    """Which currency the amount is denominated in."""

    NATIVE = "native"
    TOKEN = "token"


def tx_timestamp(now: datetime | None = None) -> str:
    """Format the submission time of a transaction."""
    return (now or datetime.now()).strftime(TX_TIME_FORMAT)


def to_amount(value: Any) -> Decimal:
    """Coerce *value* to a non-negative finite Decimal.

    Raises:
        ValidationError: If the value is not a number or is negative.
    """
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ErrInvalidAmount from None
    if not amount.is_finite() or amount < 0:
        raise ErrInvalidAmount
    return amount


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    """A tracked transaction.

    Attributes:
        tx_hash: Transaction hash returned by the ledger on broadcast.
        from_address: Sender (or token creator); must match an account.
        to_address: Receiver; empty for token creation.
        amount: Ether/token amount sent, or total supply created.
        time: Submission time (see :data:`TX_TIME_FORMAT`).
        tx_type: Send or token creation.
        currency_type: Native ether or a token.
        status: PENDING until reconciled.
    """

    tx_hash: str
    from_address: str
    to_address: str
    amount: Decimal
    time: str
    tx_type: TxType = TxType.SEND
    currency_type: CurrencyType = CurrencyType.NATIVE
    status: TxStatus = TxStatus.PENDING

    def __post_init__(self) -> None:
        object.__setattr__(self, "from_address", validate_address(self.from_address))
        if self.to_address:
            object.__setattr__(self, "to_address", validate_address(self.to_address))
        object.__setattr__(self, "amount", to_amount(self.amount))
        object.__setattr__(self, "status", TxStatus(self.status))
        object.__setattr__(self, "tx_type", TxType(self.tx_type))
        object.__setattr__(self, "currency_type", CurrencyType(self.currency_type))

    @property
    def is_resolved(self) -> bool:
        """True once the record reached ACCEPTED or REJECTED."""
        return self.status.is_terminal

    def resolve(self, status: TxStatus) -> TransactionRecord:
        """Return a resolved copy of this pending record.

        Raises:
            ValueError: If the record is already resolved or *status* is PENDING.
        """
        if self.is_resolved:
            msg = f"transaction {self.tx_hash} is already {self.status.name.lower()}"
            raise ValueError(msg)
        if not status.is_terminal:
            msg = "a record can only be resolved to ACCEPTED or REJECTED"
            raise ValueError(msg)
        return replace(self, status=status)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TransactionRecord:
        """Create a record from its stored JSON form."""
        return cls(
            tx_hash=data.get("txHash", ""),
            from_address=data.get("from", ""),
            to_address=data.get("to") or "",
            amount=data.get("amount", "0"),
            time=data.get("time", ""),
            tx_type=data.get("txType", TxType.SEND),
            currency_type=data.get("currencyType", CurrencyType.NATIVE),
            status=data.get("txStatus", TxStatus.PENDING),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored JSON form."""
        return {
            "txStatus": int(self.status),
            "txType": str(self.tx_type),
            "currencyType": str(self.currency_type),
            "txHash": self.tx_hash,
            "from": self.from_address,
            "to": self.to_address,
            "amount": str(self.amount),
            "time": self.time,
        }
