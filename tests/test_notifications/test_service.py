"""Tests for the notification fan-out service and event types."""

from __future__ import annotations

import asyncio

from ethwallet.notifications.events import (
    AUTH_FAILED,
    AccountSummaryEvent,
    RawEvent,
    TransactionEvent,
)
from ethwallet.notifications.service import NotificationService


class TestEvents:
    def test_raw_event(self) -> None:
        assert RawEvent(type=AUTH_FAILED).to_dict() == {"type": "auth_failed", "content": {}}

    def test_account_summary_event(self) -> None:
        event = AccountSummaryEvent(name="main", address="0x1", balance="1 ETH")
        data = event.to_dict()
        assert data["type"] == "account_summary"
        assert data["balance"] == "1 ETH"

    def test_transaction_event(self) -> None:
        event = TransactionEvent(tx_hash="0xab", from_address="0x1", status="rejected")
        assert event.type == "transaction"
        assert event.to_dict()["status"] == "rejected"


class TestNotificationService:
    async def test_fan_out(self) -> None:
        svc = NotificationService()
        first = svc.add_subscriber("a")
        second = svc.add_subscriber("b")
        await svc.start()
        try:
            await svc.notify(RawEvent(type=AUTH_FAILED))
            assert (await asyncio.wait_for(first.get(), timeout=2)).type == AUTH_FAILED
            assert (await asyncio.wait_for(second.get(), timeout=2)).type == AUTH_FAILED
        finally:
            await svc.stop()

    async def test_remove_subscriber(self) -> None:
        svc = NotificationService()
        queue = svc.add_subscriber("a")
        svc.remove_subscriber("a")
        await svc.start()
        try:
            await svc.notify(RawEvent(type=AUTH_FAILED))
            await asyncio.sleep(0.05)
            assert queue.empty()
        finally:
            await svc.stop()

    async def test_start_stop_idempotent(self) -> None:
        svc = NotificationService()
        await svc.start()
        await svc.start()
        assert svc.is_running
        await svc.stop()
        await svc.stop()
        assert svc.is_running is False

    async def test_full_subscriber_drops_event(self) -> None:
        svc = NotificationService()
        queue = svc.add_subscriber("slow", buffer=1)
        await svc.start()
        try:
            await svc.notify(RawEvent(type="one"))
            await svc.notify(RawEvent(type="two"))
            await asyncio.sleep(0.05)
            assert queue.qsize() == 1
            assert queue.get_nowait().type == "one"
        finally:
            await svc.stop()

    async def test_type_filter(self) -> None:
        svc = NotificationService()
        prompt = svc.add_subscriber("prompt", types=[AUTH_FAILED])
        everything = svc.add_subscriber("all")
        await svc.start()
        try:
            await svc.notify(TransactionEvent(tx_hash="0x1"))
            await svc.notify(RawEvent(type=AUTH_FAILED))
            assert (await asyncio.wait_for(prompt.get(), timeout=2)).type == AUTH_FAILED
            assert prompt.empty()
            assert (await asyncio.wait_for(everything.get(), timeout=2)).type == "transaction"
            assert svc.subscribers == ["prompt", "all"]
        finally:
            await svc.stop()
