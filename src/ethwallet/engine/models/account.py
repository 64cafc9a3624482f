"""Account record — a named address with balances and resolved history."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from ethwallet.engine.models.transaction import TransactionRecord, to_amount
from ethwallet.eth.address import validate_address

ACCOUNT_TIME_FORMAT = "%Y%m%d%H%M"
CREATED_PREFIX = "AccountCreatedAt_"
LOADED_PREFIX = "AccountLoadedAt_"

NATIVE_SYMBOL = "ETH"


def created_account_name(now: datetime | None = None) -> str:
    """Default name for a freshly generated account."""
    return CREATED_PREFIX + (now or datetime.now()).strftime(ACCOUNT_TIME_FORMAT)


def loaded_account_name(now: datetime | None = None) -> str:
    """Default name for an account imported from an existing key."""
    return LOADED_PREFIX + (now or datetime.now()).strftime(ACCOUNT_TIME_FORMAT)


@dataclass(frozen=True, slots=True)
class Balance:
    """One balance line: currency symbol, amount, and token contract if any."""

    symbol: str
    amount: Decimal
    contract_address: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", to_amount(self.amount))
        if self.contract_address:
            object.__setattr__(
                self, "contract_address", validate_address(self.contract_address)
            )

    @classmethod
    def from_list(cls, data: list[Any]) -> Balance:
        """Create from the stored ``[symbol, amount, contract]`` triple."""
        contract = data[2] if len(data) > 2 else None
        return cls(symbol=data[0], amount=data[1], contract_address=contract or None)

    def to_list(self) -> list[Any]:
        return [self.symbol, str(self.amount), self.contract_address]


@dataclass(frozen=True, slots=True)
class AccountRecord:
    """A wallet account.

    Attributes:
        name: Display name (auto-generated or user supplied).
        address: Canonical ``0x``-prefixed address.
        balances: Ordered balance lines, native first by convention.
        history: Resolved transactions sent from this account, oldest first.
    """

    name: str
    address: str
    balances: tuple[Balance, ...] = ()
    history: tuple[TransactionRecord, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "address", validate_address(self.address))
        object.__setattr__(self, "balances", tuple(self.balances))
        object.__setattr__(self, "history", tuple(self.history))
        for record in self.history:
            if not record.is_resolved:
                msg = f"pending transaction {record.tx_hash} cannot be part of history"
                raise ValueError(msg)

    @property
    def native_balance(self) -> Decimal | None:
        """The native ether balance if it has been fetched."""
        for balance in self.balances:
            if balance.contract_address is None and balance.symbol == NATIVE_SYMBOL:
                return balance.amount
        return None

    def with_native_balance(self, amount: Decimal) -> AccountRecord:
        """Return a copy with the native balance line set to *amount*."""
        line = Balance(symbol=NATIVE_SYMBOL, amount=amount)
        others = tuple(
            b for b in self.balances
            if not (b.contract_address is None and b.symbol == NATIVE_SYMBOL)
        )
        return replace(self, balances=(line, *others))

    def with_history_entry(self, record: TransactionRecord) -> AccountRecord:
        """Return a copy with *record* appended to the history."""
        return replace(self, history=(*self.history, record))

    def has_history_entry(self, tx_hash: str) -> bool:
        return any(r.tx_hash == tx_hash for r in self.history)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AccountRecord:
        """Create an account from its stored JSON form."""
        return cls(
            name=data.get("name", ""),
            address=data.get("address", ""),
            balances=tuple(Balance.from_list(b) for b in data.get("balance", [])),
            history=tuple(TransactionRecord.from_dict(h) for h in data.get("history", [])),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored JSON form."""
        return {
            "name": self.name,
            "address": self.address,
            "balance": [b.to_list() for b in self.balances],
            "history": [h.to_dict() for h in self.history],
        }
