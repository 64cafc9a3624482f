"""Shared test fixtures for the py-ethwallet test suite."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest

from ethwallet.chain.models import Receipt
from ethwallet.config.settings import (
    AppConfig,
    KeystoreKDF,
    StoreConfig,
    StoreEngine,
    TaskConfig,
    VaultConfig,
)
from ethwallet.errors.categories import LedgerError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from ethwallet.engine.client import WalletEngine

# Well-known throwaway key pair
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
PRIVATE_KEY_ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"

PASSWORD = "correct horse battery staple"


class FakeLedger:
    """In-memory ledger provider.

    ``receipts`` maps a tx hash to a :class:`Receipt`, ``None`` (not mined)
    or an exception instance raised by the lookup.
    """

    def __init__(self) -> None:
        self.balances: dict[str, Decimal] = {}
        self.receipts: dict[str, Receipt | Exception | None] = {}
        self.nonces: dict[str, int] = {}
        self.gas_price = 1_000_000_000
        self.sent: list[str] = []
        self.receipt_calls: list[str] = []

    def mine(self, tx_hash: str, *, success: bool | None = True) -> None:
        self.receipts[tx_hash] = Receipt(tx_hash=tx_hash, block_number=1, success=success)

    async def get_balance(self, address: str) -> Decimal:
        result = self.balances.get(address.lower(), Decimal(0))
        if isinstance(result, Exception):
            raise result
        return result

    async def get_transaction_receipt(self, tx_hash: str) -> Receipt | None:
        self.receipt_calls.append(tx_hash)
        result = self.receipts.get(tx_hash)
        if isinstance(result, Exception):
            raise result
        return result

    async def get_gas_price(self) -> int:
        return self.gas_price

    async def get_transaction_count(self, address: str) -> int:
        return self.nonces.get(address.lower(), 0)

    async def send_raw_transaction(self, raw_tx: str) -> str:
        self.sent.append(raw_tx)
        return "0x" + f"{len(self.sent):064x}"


class BrokenLedger(FakeLedger):
    """Ledger whose every call fails."""

    async def get_balance(self, address: str) -> Decimal:
        raise LedgerError("node unreachable")

    async def get_transaction_receipt(self, tx_hash: str) -> Receipt | None:
        raise LedgerError("node unreachable")


def make_config(**overrides) -> AppConfig:
    """AppConfig with an in-memory store, a cheap keystore KDF and no cron jobs."""
    values = {
        "debug": True,
        "store": StoreConfig(engine=StoreEngine.MEMORY),
        "vault": VaultConfig(kdf=KeystoreKDF.PBKDF2, iterations=16),
        "task": TaskConfig(enabled=False),
    }
    values.update(overrides)
    return AppConfig(**values)


@pytest.fixture
def app_config() -> AppConfig:
    return make_config()


@pytest.fixture
def ledger() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
async def engine(app_config: AppConfig, ledger: FakeLedger) -> AsyncIterator[WalletEngine]:
    """A fully initialized engine on the memory backend and the fake ledger."""
    from ethwallet.engine.client import WalletEngine

    eng = WalletEngine(app_config, ledger=ledger)
    await eng.initialize()
    yield eng
    await eng.close()


@pytest.fixture
async def wallet_engine(engine: WalletEngine) -> WalletEngine:
    """Engine with a created wallet (no accounts yet)."""
    await engine.auth_service.create_wallet(PASSWORD)
    return engine
