"""Transaction service — submission, sending and reconciliation.

Lifecycle of a tracked transaction:
1. Submit — a PENDING record is appended to the wallet's transaction buffer
2. Reconcile — receipts are looked up; terminal records move from the buffer
   into the history of the account that sent them

Receipt lookups run concurrently and outside the mutation lock; the outcomes
are then applied to a freshly read wallet in one locked write.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import TYPE_CHECKING

from eth_utils import to_checksum_address, to_wei

from ethwallet.engine.models.transaction import (
    CurrencyType,
    TransactionRecord,
    TxStatus,
    TxType,
    to_amount,
    tx_timestamp,
)
from ethwallet.errors.categories import ConsistencyError, LedgerError
from ethwallet.errors.definitions import ErrInvalidAddress, ErrInvalidAmount
from ethwallet.eth.address import validate_address
from ethwallet.notifications.events import TransactionEvent

if TYPE_CHECKING:
    from ethwallet.chain.ledger import LedgerProvider
    from ethwallet.engine.client import WalletEngine
    from ethwallet.engine.models.wallet_store import WalletStore
    from ethwallet.errors.wallet_errors import WalletError

logger = logging.getLogger(__name__)


@dataclass
class ReconcileReport:
    """Result of one reconciliation pass.

    Attributes:
        accepted: Records moved into history as ACCEPTED.
        rejected: Records moved into history as REJECTED.
        pending: Records left in the buffer.
        errors: ``(tx_hash, error)`` pairs for failed lookups and records
            whose sender is not a wallet account.
    """

    accepted: list[TransactionRecord] = field(default_factory=list)
    rejected: list[TransactionRecord] = field(default_factory=list)
    pending: list[TransactionRecord] = field(default_factory=list)
    errors: list[tuple[str, WalletError]] = field(default_factory=list)

    @property
    def resolved(self) -> list[TransactionRecord]:
        return [*self.accepted, *self.rejected]

    @property
    def changed(self) -> bool:
        return bool(self.accepted or self.rejected)


async def _lookup(ledger: LedgerProvider, tx_hash: str) -> TxStatus | LedgerError:
    try:
        receipt = await ledger.get_transaction_receipt(tx_hash)
    except LedgerError as exc:
        return exc
    except Exception as exc:
        return LedgerError(f"receipt lookup for {tx_hash} failed: {exc}")
    if receipt is None:
        return TxStatus.PENDING
    return receipt.outcome


async def lookup_outcomes(
    records: tuple[TransactionRecord, ...] | list[TransactionRecord],
    ledger: LedgerProvider,
) -> dict[str, TxStatus | LedgerError]:
    """Look up the receipt of every record concurrently.

    Returns:
        Mapping of tx hash to the implied status, or to the ``LedgerError``
        that made its lookup fail.  One failure never affects the others.
    """
    hashes = list(dict.fromkeys(r.tx_hash for r in records))
    results = await asyncio.gather(*(_lookup(ledger, h) for h in hashes))
    return dict(zip(hashes, results, strict=True))


def apply_outcomes(
    store: WalletStore,
    outcomes: dict[str, TxStatus | LedgerError],
) -> tuple[WalletStore, ReconcileReport]:
    """Move terminal buffer records into their senders' histories.

    Walks the buffer in order.  Records without a terminal outcome stay in
    the buffer, as do records whose sender is not a wallet account.
    """
    report = ReconcileReport()
    accounts = list(store.accounts)
    remaining: list[TransactionRecord] = []

    for record in store.transaction_buffer:
        outcome = outcomes.get(record.tx_hash, TxStatus.PENDING)
        if isinstance(outcome, LedgerError):
            report.errors.append((record.tx_hash, outcome))
            report.pending.append(record)
            remaining.append(record)
            continue
        if not outcome.is_terminal:
            report.pending.append(record)
            remaining.append(record)
            continue

        index = store.find_account_index_or_none(record.from_address)
        if index is None:
            error = ConsistencyError(
                f"transaction {record.tx_hash} was sent from unknown account "
                f"{record.from_address}",
                code="unknown-account",
            )
            report.errors.append((record.tx_hash, error))
            report.pending.append(record)
            remaining.append(record)
            continue

        resolved = record.resolve(outcome)
        if not accounts[index].has_history_entry(record.tx_hash):
            accounts[index] = accounts[index].with_history_entry(resolved)
        if outcome is TxStatus.ACCEPTED:
            report.accepted.append(resolved)
        else:
            report.rejected.append(resolved)

    if not report.changed:
        return store, report
    updated = replace(store, accounts=tuple(accounts), transaction_buffer=tuple(remaining))
    return updated, report


async def reconcile_store(
    store: WalletStore, ledger: LedgerProvider
) -> tuple[WalletStore, ReconcileReport]:
    """Run one reconciliation pass on *store* without persisting it."""
    outcomes = await lookup_outcomes(store.transaction_buffer, ledger)
    return apply_outcomes(store, outcomes)


class TransactionService:
    """Business logic for tracked transactions."""

    def __init__(self, engine: WalletEngine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    async def submit(self, record: TransactionRecord) -> WalletStore:
        """Append a PENDING record to the transaction buffer.

        Raises:
            ValidationError: If the record is not PENDING.
        """
        updated = await self._engine.datastore.mutate(lambda s: s.submit(record))
        logger.info("Tracking transaction %s from %s", record.tx_hash, record.from_address)
        if self._engine.metrics:
            self._engine.metrics.set_pending_count(len(updated.transaction_buffer))
        await self._engine.emit(
            TransactionEvent(
                tx_hash=record.tx_hash,
                from_address=record.from_address,
                status=record.status.name.lower(),
            )
        )
        return updated

    async def send(
        self,
        to: str,
        amount: Decimal | str | float,
        password: str,
        *,
        gas_limit: int | None = None,
    ) -> TransactionRecord:
        """Sign and broadcast an ether transfer from the selected account.

        Args:
            to: Recipient address.
            amount: Value in ether; must be greater than zero.
            password: Wallet password, needed to decrypt the signing key.
            gas_limit: Overrides the configured gas limit.

        Returns:
            The PENDING record that was submitted for tracking.

        Raises:
            AuthenticationError: If the password is wrong.
            ValidationError: If the recipient or amount is malformed.
            NotFoundError: If no account is selected.
            LedgerError: If a ledger call fails; nothing is tracked then.
        """
        recipient = validate_address(to)
        try:
            checksummed = to_checksum_address(recipient)
        except ValueError:
            raise ErrInvalidAddress from None
        value = to_amount(amount)
        if value <= 0:
            raise ErrInvalidAmount

        store = await self._engine.auth_service.unlock_wallet(password)
        sender = store.current_account()
        signer = await self._engine.vault.signer(sender.address, store.password_hash)

        ledger = self._engine.ledger
        nonce = await ledger.get_transaction_count(sender.address)
        gas_price = await ledger.get_gas_price()
        tx = {
            "to": checksummed,
            "value": to_wei(value, "ether"),
            "gas": gas_limit or self._engine.config.ledger.gas_limit,
            "gasPrice": gas_price,
            "nonce": nonce,
            "chainId": self._engine.config.ledger.chain_id,
        }
        signed = signer.sign_transaction(tx)
        tx_hash = await ledger.send_raw_transaction("0x" + bytes(signed.raw_transaction).hex())
        logger.info("Broadcast %s ETH from %s to %s: %s", value, sender.address, recipient, tx_hash)

        record = TransactionRecord(
            tx_hash=tx_hash,
            from_address=sender.address,
            to_address=recipient,
            amount=value,
            time=tx_timestamp(),
            tx_type=TxType.SEND,
            currency_type=CurrencyType.NATIVE,
        )
        await self.submit(record)
        return record

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    async def reconcile(self) -> ReconcileReport:
        """Resolve buffered transactions whose receipts are available.

        Idempotent: with no new receipts a second pass changes nothing.

        Raises:
            NotFoundError: If no wallet exists.
            PersistenceError: If the store cannot be read or written.
        """
        metrics = self._engine.metrics
        if metrics:
            with metrics.track_reconcile():
                return await self._reconcile()
        return await self._reconcile()

    async def _reconcile(self) -> ReconcileReport:
        snapshot = await self._engine.datastore.require()
        if not snapshot.transaction_buffer:
            return ReconcileReport()
        outcomes = await lookup_outcomes(snapshot.transaction_buffer, self._engine.ledger)

        report = ReconcileReport()

        def _apply(store: WalletStore) -> WalletStore:
            nonlocal report
            updated, report = apply_outcomes(store, outcomes)
            return updated

        updated = await self._engine.datastore.mutate(_apply)

        for tx_hash, error in report.errors:
            if isinstance(error, LedgerError):
                logger.warning("Receipt lookup for %s failed: %s", tx_hash, error.message)
            else:
                logger.error("Cannot resolve %s: %s", tx_hash, error.message)

        metrics = self._engine.metrics
        for record in report.resolved:
            logger.info(
                "Transaction %s from %s is %s",
                record.tx_hash,
                record.from_address,
                record.status.name.lower(),
            )
            if metrics:
                metrics.record_outcome(record.status)
            await self._engine.emit(
                TransactionEvent(
                    tx_hash=record.tx_hash,
                    from_address=record.from_address,
                    status=record.status.name.lower(),
                )
            )
        if metrics:
            metrics.set_pending_count(len(updated.transaction_buffer))
        return report

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def pending_transactions(self) -> tuple[TransactionRecord, ...]:
        store = await self._engine.datastore.require()
        return store.transaction_buffer

    async def history(self, address: str | None = None) -> tuple[TransactionRecord, ...]:
        """Resolved transactions of *address*, or of the selected account."""
        store = await self._engine.datastore.require()
        if address is None:
            return store.current_account().history
        return store.accounts[store.find_account_index(validate_address(address))].history
