"""Tests for transaction submission, sending and reconciliation."""

from __future__ import annotations

import asyncio
from decimal import Decimal
from typing import TYPE_CHECKING

import pytest
from conftest import PASSWORD, PRIVATE_KEY, FakeLedger
from eth_account import Account

from ethwallet.chain.models import Receipt
from ethwallet.engine.models import TransactionRecord, TxStatus, WalletStore
from ethwallet.engine.services.auth_service import hash_password
from ethwallet.engine.services.transaction_service import (
    ReconcileReport,
    apply_outcomes,
    lookup_outcomes,
    reconcile_store,
)
from ethwallet.errors.categories import (
    AuthenticationError,
    ConsistencyError,
    LedgerError,
    NotFoundError,
    ValidationError,
)
from ethwallet.notifications.events import TransactionEvent

if TYPE_CHECKING:
    from ethwallet.engine.client import WalletEngine

SENDER = "0x" + "a1" * 20
OTHER = "0x" + "b2" * 20
STRANGER = "0x" + "d4" * 20


def _record(tx_hash: str, sender: str = SENDER) -> TransactionRecord:
    return TransactionRecord(
        tx_hash=tx_hash,
        from_address=sender,
        to_address=OTHER,
        amount="0.1",
        time="2024-01-01 12:00:00",
    )


def _store(*records: TransactionRecord) -> WalletStore:
    store = WalletStore.create(hash_password("pw")).append_account("main", SENDER)
    for record in records:
        store = store.submit(record)
    return store


# ---------------------------------------------------------------------------
# Pure reconciliation
# ---------------------------------------------------------------------------


class TestLookupOutcomes:
    async def test_outcomes(self) -> None:
        ledger = FakeLedger()
        ledger.mine("0x1", success=True)
        ledger.mine("0x2", success=False)
        ledger.mine("0x3", success=None)
        outcomes = await lookup_outcomes([_record(h) for h in ("0x1", "0x2", "0x3", "0x4")], ledger)
        assert outcomes == {
            "0x1": TxStatus.ACCEPTED,
            "0x2": TxStatus.REJECTED,
            "0x3": TxStatus.ACCEPTED,
            "0x4": TxStatus.PENDING,
        }

    async def test_failures_are_isolated(self) -> None:
        ledger = FakeLedger()
        ledger.mine("0x1")
        ledger.receipts["0x2"] = LedgerError("timeout")
        ledger.receipts["0x3"] = RuntimeError("boom")
        outcomes = await lookup_outcomes([_record(h) for h in ("0x1", "0x2", "0x3")], ledger)
        assert outcomes["0x1"] is TxStatus.ACCEPTED
        assert isinstance(outcomes["0x2"], LedgerError)
        assert isinstance(outcomes["0x3"], LedgerError)
        assert "boom" in outcomes["0x3"].message

    async def test_duplicate_hashes_looked_up_once(self) -> None:
        ledger = FakeLedger()
        await lookup_outcomes([_record("0x1"), _record("0x1")], ledger)
        assert ledger.receipt_calls == ["0x1"]


class TestApplyOutcomes:
    def test_accepted_moves_into_history(self) -> None:
        store = _store(_record("0x1"))
        updated, report = apply_outcomes(store, {"0x1": TxStatus.ACCEPTED})
        assert updated.transaction_buffer == ()
        [entry] = updated.accounts[0].history
        assert entry.tx_hash == "0x1"
        assert entry.status is TxStatus.ACCEPTED
        assert [r.tx_hash for r in report.accepted] == ["0x1"]

    def test_pending_untouched(self) -> None:
        store = _store(_record("0x1"))
        updated, report = apply_outcomes(store, {"0x1": TxStatus.PENDING})
        assert updated is store
        assert report.changed is False
        assert [r.tx_hash for r in report.pending] == ["0x1"]

    def test_missing_outcome_is_pending(self) -> None:
        store = _store(_record("0x1"))
        updated, _ = apply_outcomes(store, {})
        assert updated is store

    def test_buffer_order_kept(self) -> None:
        store = _store(_record("0x1"), _record("0x2"), _record("0x3"), _record("0x4"))
        outcomes = {
            "0x1": TxStatus.PENDING,
            "0x2": TxStatus.REJECTED,
            "0x3": TxStatus.PENDING,
            "0x4": TxStatus.ACCEPTED,
        }
        updated, report = apply_outcomes(store, outcomes)
        assert [r.tx_hash for r in updated.transaction_buffer] == ["0x1", "0x3"]
        assert [r.tx_hash for r in updated.accounts[0].history] == ["0x2", "0x4"]
        assert [r.tx_hash for r in report.resolved] == ["0x4", "0x2"]

    def test_lookup_error_keeps_record(self) -> None:
        store = _store(_record("0x1"))
        error = LedgerError("down")
        updated, report = apply_outcomes(store, {"0x1": error})
        assert updated is store
        assert report.errors == [("0x1", error)]

    def test_unknown_sender_is_consistency_error(self) -> None:
        store = _store(_record("0x1", sender=STRANGER), _record("0x2"))
        outcomes = {"0x1": TxStatus.ACCEPTED, "0x2": TxStatus.ACCEPTED}
        updated, report = apply_outcomes(store, outcomes)
        assert [r.tx_hash for r in updated.transaction_buffer] == ["0x1"]
        [(tx_hash, error)] = report.errors
        assert tx_hash == "0x1"
        assert isinstance(error, ConsistencyError)
        assert error.code == "unknown-account"

    def test_history_not_duplicated(self) -> None:
        resolved = _record("0x1").resolve(TxStatus.ACCEPTED)
        store = _store(_record("0x1"))
        store = store.replace_account(0, store.accounts[0].with_history_entry(resolved))
        updated, _ = apply_outcomes(store, {"0x1": TxStatus.ACCEPTED})
        assert len(updated.accounts[0].history) == 1
        assert updated.transaction_buffer == ()


class TestReconcileStore:
    async def test_idempotent_without_receipts(self) -> None:
        store = _store(_record("0x1"))
        ledger = FakeLedger()
        first, _ = await reconcile_store(store, ledger)
        second, _ = await reconcile_store(first, ledger)
        assert first == store
        assert second == first

    async def test_success_receipt(self) -> None:
        ledger = FakeLedger()
        ledger.receipts["0x1"] = Receipt(tx_hash="0x1", block_number=7, success=True)
        updated, report = await reconcile_store(_store(_record("0x1")), ledger)
        assert updated.transaction_buffer == ()
        assert updated.accounts[0].history[0].status is TxStatus.ACCEPTED
        assert isinstance(report, ReconcileReport)

    async def test_create_append_submit_reject(self) -> None:
        store = WalletStore.create(hash_password("pw"))
        store = store.append_account("main", SENDER)
        store = store.submit(_record("0xdead"))
        ledger = FakeLedger()
        ledger.mine("0xdead", success=False)
        updated, _ = await reconcile_store(store, ledger)
        assert updated.transaction_buffer == ()
        [entry] = updated.accounts[0].history
        assert entry.status is TxStatus.REJECTED


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------


class TestSubmitAndReconcile:
    async def test_submit(self, wallet_engine: WalletEngine) -> None:
        account = await wallet_engine.account_service.create_account()
        await wallet_engine.transaction_service.submit(_record("0x1", sender=account.address))
        pending = await wallet_engine.transaction_service.pending_transactions()
        assert [r.tx_hash for r in pending] == ["0x1"]

    async def test_submit_resolved_rejected(self, wallet_engine: WalletEngine) -> None:
        with pytest.raises(ValidationError):
            await wallet_engine.transaction_service.submit(
                _record("0x1").resolve(TxStatus.ACCEPTED)
            )

    async def test_reconcile_persists(
        self, wallet_engine: WalletEngine, ledger: FakeLedger
    ) -> None:
        account = await wallet_engine.account_service.create_account()
        await wallet_engine.transaction_service.submit(_record("0x1", sender=account.address))
        await wallet_engine.transaction_service.submit(_record("0x2", sender=account.address))
        ledger.mine("0x2")

        report = await wallet_engine.transaction_service.reconcile()
        assert [r.tx_hash for r in report.accepted] == ["0x2"]
        assert [r.tx_hash for r in report.pending] == ["0x1"]

        store = await wallet_engine.datastore.require()
        assert [r.tx_hash for r in store.transaction_buffer] == ["0x1"]
        history = await wallet_engine.transaction_service.history()
        assert [r.tx_hash for r in history] == ["0x2"]

    async def test_reconcile_twice_changes_nothing(
        self, wallet_engine: WalletEngine, ledger: FakeLedger
    ) -> None:
        account = await wallet_engine.account_service.create_account()
        await wallet_engine.transaction_service.submit(_record("0x1", sender=account.address))
        ledger.mine("0x1", success=False)
        await wallet_engine.transaction_service.reconcile()
        before = await wallet_engine.datastore.require()
        report = await wallet_engine.transaction_service.reconcile()
        assert report.changed is False
        assert await wallet_engine.datastore.require() == before

    async def test_reconcile_emits_events(
        self, wallet_engine: WalletEngine, ledger: FakeLedger
    ) -> None:
        account = await wallet_engine.account_service.create_account()
        await wallet_engine.transaction_service.submit(_record("0x1", sender=account.address))
        queue = wallet_engine.notification_service.add_subscriber("test")
        ledger.mine("0x1")
        await wallet_engine.transaction_service.reconcile()
        event = await asyncio.wait_for(queue.get(), timeout=2)
        assert isinstance(event, TransactionEvent)
        assert event.tx_hash == "0x1"
        assert event.status == "accepted"

    async def test_reconcile_keeps_concurrent_submission(
        self, wallet_engine: WalletEngine, ledger: FakeLedger
    ) -> None:
        account = await wallet_engine.account_service.create_account()
        service = wallet_engine.transaction_service
        await service.submit(_record("0x1", sender=account.address))
        ledger.mine("0x1")

        original = ledger.get_transaction_receipt

        async def slow_receipt(tx_hash: str) -> Receipt | None:
            await service.submit(_record("0x2", sender=account.address))
            return await original(tx_hash)

        ledger.get_transaction_receipt = slow_receipt  # type: ignore[method-assign]
        await service.reconcile()
        pending = await service.pending_transactions()
        assert [r.tx_hash for r in pending] == ["0x2"]

    async def test_reconcile_requires_wallet(self, engine: WalletEngine) -> None:
        with pytest.raises(NotFoundError):
            await engine.transaction_service.reconcile()


class TestSend:
    async def test_send_signs_and_tracks(
        self, wallet_engine: WalletEngine, ledger: FakeLedger
    ) -> None:
        account = await wallet_engine.account_service.import_account(PRIVATE_KEY)
        ledger.nonces[account.address.lower()] = 3

        record = await wallet_engine.transaction_service.send(OTHER, "0.1", PASSWORD)

        assert record.status is TxStatus.PENDING
        assert record.from_address == account.address
        assert record.to_address == OTHER
        assert record.amount == Decimal("0.1")
        [raw] = ledger.sent
        assert Account.recover_transaction(raw) == account.address
        pending = await wallet_engine.transaction_service.pending_transactions()
        assert pending == (record,)

    async def test_send_wrong_password(
        self, wallet_engine: WalletEngine, ledger: FakeLedger
    ) -> None:
        await wallet_engine.account_service.create_account()
        with pytest.raises(AuthenticationError):
            await wallet_engine.transaction_service.send(OTHER, "0.1", "wrong")
        assert ledger.sent == []

    @pytest.mark.parametrize("amount", ["0", "-1", "abc"])
    async def test_send_invalid_amount(self, wallet_engine: WalletEngine, amount: str) -> None:
        await wallet_engine.account_service.create_account()
        with pytest.raises(ValidationError):
            await wallet_engine.transaction_service.send(OTHER, amount, PASSWORD)

    async def test_send_non_hex_recipient(self, wallet_engine: WalletEngine) -> None:
        await wallet_engine.account_service.create_account()
        with pytest.raises(ValidationError):
            await wallet_engine.transaction_service.send("zz" * 20, "0.1", PASSWORD)

    async def test_send_without_account(self, wallet_engine: WalletEngine) -> None:
        with pytest.raises(NotFoundError):
            await wallet_engine.transaction_service.send(OTHER, "0.1", PASSWORD)
