"""Tests for WalletEngine lifecycle and service registry."""

from __future__ import annotations

import asyncio

import pytest
from conftest import FakeLedger, make_config

from ethwallet.chain.ledger import LedgerClient
from ethwallet.config.settings import LedgerConfig, MetricsConfig, NotificationsConfig, TaskConfig
from ethwallet.engine.client import WalletEngine
from ethwallet.metrics.collector import WalletMetrics
from ethwallet.notifications.events import RawEvent


class TestLifecycle:
    async def test_initialize_and_close(self) -> None:
        engine = WalletEngine(make_config(), ledger=FakeLedger())
        assert not engine.is_initialized
        await engine.initialize()
        assert engine.is_initialized
        assert engine.datastore.is_open
        await engine.close()
        assert not engine.is_initialized

    async def test_double_initialize(self, engine: WalletEngine) -> None:
        with pytest.raises(RuntimeError, match="already initialized"):
            await engine.initialize()

    async def test_close_is_idempotent(self) -> None:
        engine = WalletEngine(make_config(), ledger=FakeLedger())
        await engine.close()
        await engine.initialize()
        await engine.close()
        await engine.close()
        assert not engine.is_initialized

    @pytest.mark.parametrize(
        "attr",
        ["datastore", "vault", "ledger", "auth_service", "account_service", "transaction_service"],
    )
    def test_properties_before_initialize(self, attr: str) -> None:
        engine = WalletEngine(make_config())
        with pytest.raises(RuntimeError, match="not initialized"):
            getattr(engine, attr)

    def test_optional_components_before_initialize(self) -> None:
        engine = WalletEngine(make_config())
        assert engine.metrics is None
        assert engine.task_manager is None
        assert engine.notification_service is None


class TestComponents:
    async def test_injected_ledger(self, engine: WalletEngine, ledger: FakeLedger) -> None:
        assert engine.ledger is ledger

    async def test_default_ledger_client(self) -> None:
        config = make_config(ledger=LedgerConfig(rpc_url="http://127.0.0.1:9", timeout=1))
        engine = WalletEngine(config)
        await engine.initialize()
        try:
            assert isinstance(engine.ledger, LedgerClient)
            health = await engine.health_check()
            assert health["ledger"] == "error"
        finally:
            await engine.close()

    async def test_injected_metrics(self) -> None:
        metrics = WalletMetrics()
        engine = WalletEngine(make_config(), ledger=FakeLedger(), metrics=metrics)
        await engine.initialize()
        try:
            assert engine.metrics is metrics
        finally:
            await engine.close()

    async def test_metrics_disabled(self) -> None:
        config = make_config(metrics=MetricsConfig(enabled=False))
        engine = WalletEngine(config, ledger=FakeLedger())
        await engine.initialize()
        try:
            assert engine.metrics is None
        finally:
            await engine.close()

    async def test_task_manager_jobs(self) -> None:
        config = make_config(task=TaskConfig(enabled=True, reconcile_period=60))
        engine = WalletEngine(config, ledger=FakeLedger())
        await engine.initialize()
        try:
            assert engine.task_manager is not None
            assert engine.task_manager.is_running
            assert set(engine.task_manager.jobs) == {"reconcile_transactions", "calculate_metrics"}
            assert engine.task_manager.jobs["reconcile_transactions"].period == 60
        finally:
            await engine.close()
        assert engine.task_manager is None

    async def test_task_manager_without_metrics(self) -> None:
        config = make_config(
            task=TaskConfig(enabled=True),
            metrics=MetricsConfig(enabled=False),
        )
        engine = WalletEngine(config, ledger=FakeLedger())
        await engine.initialize()
        try:
            assert set(engine.task_manager.jobs) == {"reconcile_transactions"}
        finally:
            await engine.close()


class TestHealthAndEvents:
    async def test_health_before_initialize(self) -> None:
        health = await WalletEngine(make_config()).health_check()
        assert health == {"engine": "not_initialized", "datastore": "unknown", "ledger": "unknown"}

    async def test_health(self, engine: WalletEngine) -> None:
        assert await engine.health_check() == {"engine": "ok", "datastore": "ok", "ledger": "ok"}

    async def test_emit_reaches_subscribers(self, engine: WalletEngine) -> None:
        queue = engine.notification_service.add_subscriber("test")
        await engine.emit(RawEvent(type="ping"))
        event = await asyncio.wait_for(queue.get(), timeout=1)
        assert event.type == "ping"

    async def test_emit_with_notifications_disabled(self) -> None:
        config = make_config(notifications=NotificationsConfig(enabled=False))
        engine = WalletEngine(config, ledger=FakeLedger())
        await engine.initialize()
        try:
            assert engine.notification_service is None
            await engine.emit(RawEvent(type="ping"))
        finally:
            await engine.close()
