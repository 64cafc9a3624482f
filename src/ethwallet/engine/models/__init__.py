"""Wallet domain models."""

from __future__ import annotations

from ethwallet.engine.models.account import AccountRecord, Balance
from ethwallet.engine.models.transaction import (
    CurrencyType,
    TransactionRecord,
    TxStatus,
    TxType,
)
from ethwallet.engine.models.wallet_store import NO_ACCOUNT, WalletStore

__all__ = [
    "NO_ACCOUNT",
    "AccountRecord",
    "Balance",
    "CurrencyType",
    "TransactionRecord",
    "TxStatus",
    "TxType",
    "WalletStore",
]
