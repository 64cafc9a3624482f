"""Key vault — account secrets held as Web3 Secret Storage keystores.

The vault keeps a JSON list of encrypted keystores under its own key in the
same key-value backend as the wallet.  Keystores are encrypted with the
wallet's password hash, never with the plaintext password.

Each keystore carries an ``origin`` field telling generated secrets
(``created``) apart from imported ones (``imported``).

Operations:
- ``create`` — generate a new secret and append its keystore
- ``import_key`` — append the keystore of an existing private key
- ``snapshot`` / ``restore`` — save and put back the raw keystore list
- ``unlock`` — decrypt every keystore into a :class:`WalletHandle`
- ``clear`` — drop all keystores
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from eth_account import Account
from eth_utils import to_checksum_address

from ethwallet.errors.categories import PersistenceError
from ethwallet.errors.definitions import (
    ErrInvalidPassword,
    ErrInvalidPrivateKey,
    ErrKeyNotFound,
)
from ethwallet.eth.address import validate_private_key

if TYPE_CHECKING:
    from eth_account.signers.local import LocalAccount

    from ethwallet.config.settings import VaultConfig
    from ethwallet.datastore.client import StoreBackend

ORIGIN_CREATED = "created"
ORIGIN_IMPORTED = "imported"


@dataclass
class WalletHandle:
    """Decrypted accounts of an unlocked vault, keyed by lowercase address."""

    accounts: dict[str, LocalAccount] = field(default_factory=dict)

    @property
    def addresses(self) -> list[str]:
        return [acct.address for acct in self.accounts.values()]

    def get(self, address: str) -> LocalAccount:
        """Return the signer for *address*.

        Raises:
            NotFoundError: If the vault holds no key for the address.
        """
        try:
            return self.accounts[address.lower()]
        except KeyError:
            raise ErrKeyNotFound from None


class KeyVault:
    """Keystore-backed custody of account private keys.

    Usage::

        vault = KeyVault(backend, "ethwallet:keystore", vault_config)
        address = await vault.create(password_hash)
        handle = await vault.unlock(password_hash)
        signer = handle.get(address)
    """

    def __init__(self, backend: StoreBackend, key: str, config: VaultConfig) -> None:
        self._backend = backend
        self._key = key
        self._config = config

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create(self, password_hash: str) -> str:
        """Generate a new account secret, store it, and return its address."""
        account = Account.create()
        await self._append(account, password_hash, ORIGIN_CREATED)
        return account.address

    async def import_key(self, private_key: str, password_hash: str) -> str:
        """Store an existing private key and return its address.

        An already-stored key is not stored twice.

        Raises:
            ValidationError: If the key is malformed or not a valid secp256k1 scalar.
        """
        canonical = validate_private_key(private_key)
        try:
            account = Account.from_key(canonical)
        except (ValueError, TypeError):
            raise ErrInvalidPrivateKey from None
        if account.address not in await self.addresses():
            await self._append(account, password_hash, ORIGIN_IMPORTED)
        return account.address

    async def addresses(self, *, origin: str | None = None) -> list[str]:
        """Checksummed addresses of the stored keystores, oldest first.

        Args:
            origin: Only list keystores of this origin; all when omitted.
        """
        return [
            to_checksum_address(ks["address"])
            for ks in await self._load()
            if origin is None or ks.get("origin") == origin
        ]

    async def unlock(self, password_hash: str) -> WalletHandle:
        """Decrypt every keystore.

        Raises:
            AuthenticationError: If *password_hash* does not open the keystores.
        """
        keystores = await self._load()
        handle = WalletHandle()
        for keystore in keystores:
            account = await asyncio.to_thread(self._decrypt, keystore, password_hash)
            handle.accounts[account.address.lower()] = account
        return handle

    async def signer(self, address: str, password_hash: str) -> LocalAccount:
        """Decrypt only the keystore for *address*.

        Raises:
            NotFoundError: If no keystore exists for the address.
            AuthenticationError: If the password hash is wrong.
        """
        wanted = address.lower().removeprefix("0x")
        for keystore in await self._load():
            if keystore.get("address", "").lower() == wanted:
                return await asyncio.to_thread(self._decrypt, keystore, password_hash)
        raise ErrKeyNotFound

    async def clear(self) -> None:
        """Remove all keystores."""
        await self._backend.delete(self._key)

    async def snapshot(self) -> str | None:
        """Return the raw stored keystore list, or None if there is none."""
        return await self._backend.get(self._key)

    async def restore(self, raw: str | None) -> None:
        """Put back a value returned by :meth:`snapshot`."""
        if raw is None:
            await self._backend.delete(self._key)
        else:
            await self._backend.set(self._key, raw)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _load(self) -> list[dict[str, Any]]:
        raw = await self._backend.get(self._key)
        if raw is None:
            return []
        try:
            keystores = json.loads(raw)
        except json.JSONDecodeError as exc:
            msg = f"keystore data under {self._key!r} is not valid JSON"
            raise PersistenceError(msg, code="store-corrupted") from exc
        if not isinstance(keystores, list):
            msg = f"keystore data under {self._key!r} is not a list"
            raise PersistenceError(msg, code="store-corrupted")
        return keystores

    async def _append(self, account: LocalAccount, password_hash: str, origin: str) -> None:
        keystore = await asyncio.to_thread(
            Account.encrypt,
            account.key,
            password_hash,
            kdf=str(self._config.kdf),
            iterations=self._config.iterations,
        )
        keystore["origin"] = origin
        keystores = await self._load()
        keystores.append(keystore)
        await self._backend.set(self._key, json.dumps(keystores))

    @staticmethod
    def _decrypt(keystore: dict[str, Any], password_hash: str) -> LocalAccount:
        try:
            private_key = Account.decrypt(keystore, password_hash)
        except ValueError:
            raise ErrInvalidPassword from None
        return Account.from_key(private_key)
