"""Shared fixtures for integration tests.

These fixtures create a REAL WalletEngine, on the memory or file backend,
talking to the in-process fake ledger; the engine itself is never mocked.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from conftest import PASSWORD, FakeLedger, make_config

from ethwallet.config.settings import StoreConfig, StoreEngine, TaskConfig
from ethwallet.engine.client import WalletEngine

if TYPE_CHECKING:
    from collections.abc import AsyncIterator
    from pathlib import Path


@pytest.fixture
def chain() -> FakeLedger:
    return FakeLedger()


@pytest.fixture
async def live_engine(chain: FakeLedger) -> AsyncIterator[WalletEngine]:
    """Engine with the cron scheduler on a long period, so jobs only run on trigger()."""
    config = make_config(task=TaskConfig(enabled=True, reconcile_period=3600))
    engine = WalletEngine(config, ledger=chain)
    await engine.initialize()
    yield engine
    await engine.close()


@pytest.fixture
async def funded_engine(live_engine: WalletEngine, chain: FakeLedger) -> WalletEngine:
    """Wallet with one generated account holding 2 ETH."""
    await live_engine.auth_service.create_wallet(PASSWORD)
    account = await live_engine.account_service.create_account("main")
    chain.balances[account.address.lower()] = Decimal(2)
    return live_engine


@pytest.fixture
def file_config(tmp_path: Path):
    return make_config(
        store=StoreConfig(engine=StoreEngine.FILE, path=str(tmp_path / "wallet.json")),
    )
