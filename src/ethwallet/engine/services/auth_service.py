"""Auth service — password hashing, wallet creation and unlocking.

The wallet password is never stored.  Only its unsalted SHA-256 hex digest is
kept in ``WalletStore.password_hash``; the same digest encrypts the keystores.
One wallet per store means identical passwords across stores produce
identical digests.
"""

from __future__ import annotations

import hmac
import logging
from typing import TYPE_CHECKING

from ethwallet.engine.models.wallet_store import WalletStore
from ethwallet.errors.definitions import ErrInvalidPassword, ErrWalletNotCreated
from ethwallet.errors.wallet_errors import WalletError
from ethwallet.notifications.events import AUTH_FAILED, RawEvent
from ethwallet.utils.crypto import sha256_hex

if TYPE_CHECKING:
    from ethwallet.engine.client import WalletEngine

logger = logging.getLogger(__name__)


def hash_password(plaintext: str) -> str:
    """Return the 64-char lowercase hex SHA-256 digest of *plaintext*."""
    return sha256_hex(plaintext)


def check_password_hash(candidate: str, password_hash: str) -> bool:
    """True only if *candidate* hashes exactly to *password_hash*."""
    if not password_hash:
        return False
    return hmac.compare_digest(hash_password(candidate), password_hash)


def unlock_store(store: WalletStore, password: str) -> WalletStore:
    """Return *store* if *password* opens it.

    Raises:
        AuthenticationError: On mismatch; the error carries no hint.
    """
    if not check_password_hash(password, store.password_hash):
        raise ErrInvalidPassword
    return store


class AuthService:
    """Create and unlock the wallet."""

    def __init__(self, engine: WalletEngine) -> None:
        self._engine = engine

    async def create_wallet(self, password: str) -> WalletStore:
        """Replace any existing wallet with a fresh one protected by *password*.

        Clears the key vault, generates the first account secret, then writes
        an empty wallet.  Accounts are added separately; the generated secret
        is adopted by the first ``create_account`` call.

        Raises:
            PersistenceError: ``ErrWalletNotCreated`` if the secret or the
                wallet cannot be saved.  The previous wallet and its keystores
                are left in place in that case.
        """
        password_hash = hash_password(password)
        vault = self._engine.vault
        try:
            previous = await vault.snapshot()
        except WalletError as exc:
            logger.error("Key vault could not be read: %s", exc.message)
            raise ErrWalletNotCreated from exc

        try:
            await vault.clear()
            address = await vault.create(password_hash)
        except WalletError as exc:
            logger.error("Wallet secret could not be created: %s", exc.message)
            await self._restore_vault(previous)
            raise ErrWalletNotCreated from exc

        store = WalletStore.create(password_hash)
        try:
            await self._engine.datastore.replace(store)
        except WalletError as exc:
            logger.error("Wallet could not be saved: %s", exc.message)
            await self._restore_vault(previous)
            raise ErrWalletNotCreated from exc

        logger.info("Wallet created with initial secret for %s", address)
        if self._engine.metrics:
            self._engine.metrics.set_account_count(0)
            self._engine.metrics.set_pending_count(0)
        return store

    async def check_password(self, candidate: str) -> bool:
        """True if a wallet exists and *candidate* is its password."""
        store = await self._engine.datastore.get()
        if store is None:
            return False
        return check_password_hash(candidate, store.password_hash)

    async def unlock_wallet(self, password: str) -> WalletStore:
        """Return the wallet if *password* is correct.

        Raises:
            NotFoundError: If no wallet has been created.
            AuthenticationError: If the password is wrong.
        """
        store = await self._engine.datastore.require()
        try:
            return unlock_store(store, password)
        except WalletError:
            await self._engine.emit(RawEvent(type=AUTH_FAILED))
            raise

    async def _restore_vault(self, previous: str | None) -> None:
        try:
            await self._engine.vault.restore(previous)
        except WalletError as exc:
            logger.error("Previous keystores could not be restored: %s", exc.message)
