"""Account service — create, import, select and summarize wallet accounts.

Every mutation is a single read-modify-write through
:meth:`WalletDatastore.mutate`; ledger lookups happen before the lock is taken.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ethwallet.engine.models.account import (
    NATIVE_SYMBOL,
    AccountRecord,
    created_account_name,
    loaded_account_name,
)
from ethwallet.errors.categories import LedgerError
from ethwallet.errors.definitions import ErrAccountDuplicate, ErrNoAccountSelected
from ethwallet.eth.keys import ORIGIN_CREATED
from ethwallet.notifications.events import NO_ACCOUNT, AccountSummaryEvent, RawEvent

if TYPE_CHECKING:
    from ethwallet.engine.client import WalletEngine
    from ethwallet.engine.models.wallet_store import WalletStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccountSummary:
    """Display-ready view of the selected account."""

    name: str
    address: str
    balance: str


def format_balance(account: AccountRecord) -> str:
    """Render the account's balance lines, e.g. ``"1.5 ETH, 20 TKN"``."""
    if not account.balances:
        return f"0 {NATIVE_SYMBOL}"
    return ", ".join(f"{b.amount.normalize():f} {b.symbol}" for b in account.balances)


class AccountService:
    """Business logic for wallet accounts."""

    def __init__(self, engine: WalletEngine) -> None:
        self._engine = engine

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    async def create_account(self, name: str | None = None) -> AccountRecord:
        """Add a freshly generated account and select it.

        A generated vault secret that no account lists yet (the one created
        with the wallet, or one left by an interrupted call) is used before a
        new secret is generated.  Imported keys are never adopted.
        """
        vault = self._engine.vault

        async def _append(store: WalletStore) -> WalletStore:
            listed = {a.address.lower() for a in store.accounts}
            unlisted = [
                a
                for a in await vault.addresses(origin=ORIGIN_CREATED)
                if a.lower() not in listed
            ]
            address = unlisted[0] if unlisted else await vault.create(store.password_hash)
            return store.append_account(name or created_account_name(), address)

        updated = await self._engine.datastore.mutate(_append)
        account = updated.current_account()
        logger.info("Created account %s (%s)", account.name, account.address)
        self._update_stats(updated)
        return account

    async def import_account(self, private_key: str, name: str | None = None) -> AccountRecord:
        """Add an account from an existing private key and select it.

        Raises:
            ValidationError: If the key is malformed.
            ConsistencyError: If the account is already in the wallet.
        """
        vault = self._engine.vault

        async def _append(store: WalletStore) -> WalletStore:
            address = await vault.import_key(private_key, store.password_hash)
            if store.find_account_index_or_none(address) is not None:
                raise ErrAccountDuplicate
            return store.append_account(name or loaded_account_name(), address)

        updated = await self._engine.datastore.mutate(_append)
        account = updated.current_account()
        logger.info("Loaded account %s (%s)", account.name, account.address)
        self._update_stats(updated)
        return account

    # ------------------------------------------------------------------
    # Queries / selection
    # ------------------------------------------------------------------

    async def list_accounts(self) -> tuple[AccountRecord, ...]:
        store = await self._engine.datastore.require()
        return store.accounts

    async def current_account(self) -> AccountRecord:
        store = await self._engine.datastore.require()
        return store.current_account()

    async def current_index(self) -> int:
        store = await self._engine.datastore.require()
        return store.current_account_index

    async def select_account(self, index: int) -> AccountRecord:
        """Make the account at *index* the current one."""
        updated = await self._engine.datastore.mutate(lambda s: s.select_account(index))
        return updated.current_account()

    async def register_token(self, contract_address: str, name: str) -> dict[str, str]:
        """Record the display name of a token contract."""
        updated = await self._engine.datastore.mutate(
            lambda s: s.with_token_name(contract_address, name)
        )
        return updated.token_name_map

    # ------------------------------------------------------------------
    # Balances
    # ------------------------------------------------------------------

    async def refresh_balance(self) -> AccountRecord:
        """Fetch the selected account's native balance and store it.

        Raises:
            NotFoundError: If no account is selected.
            LedgerError: If the balance lookup fails.
        """
        address = (await self.current_account()).address
        amount = await self._engine.ledger.get_balance(address)

        def _apply(store: WalletStore) -> WalletStore:
            index = store.find_account_index(address)
            return store.replace_account(index, store.accounts[index].with_native_balance(amount))

        updated = await self._engine.datastore.mutate(_apply)
        return updated.accounts[updated.find_account_index(address)]

    async def account_summary(self, *, refresh: bool = True) -> AccountSummary:
        """Summarize the selected account and emit it as an event.

        A failed balance refresh falls back to the last stored balance.

        Raises:
            NotFoundError: If no account is selected (a ``no_account`` event
                is emitted first).
        """
        store = await self._engine.datastore.require()
        if not store.has_selection:
            await self._engine.emit(RawEvent(type=NO_ACCOUNT))
            raise ErrNoAccountSelected

        account = store.current_account()
        if refresh:
            try:
                account = await self.refresh_balance()
            except LedgerError as exc:
                logger.warning("Balance refresh for %s failed: %s", account.address, exc.message)

        summary = AccountSummary(
            name=account.name,
            address=account.address,
            balance=format_balance(account),
        )
        await self._engine.emit(
            AccountSummaryEvent(
                name=summary.name,
                address=summary.address,
                balance=summary.balance,
            )
        )
        return summary

    def _update_stats(self, store: WalletStore) -> None:
        if self._engine.metrics:
            self._engine.metrics.set_account_count(len(store.accounts))
