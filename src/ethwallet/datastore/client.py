"""Datastore client — the wallet's only path to persistent state.

Wraps a key-value backend (memory, file or Redis) behind two layers:

- ``StoreBackend`` — raw async ``get``/``set``/``delete`` of string values,
  shared with the key vault
- ``WalletDatastore`` — JSON (de)serialization of :class:`WalletStore` and the
  single serialization point for read-modify-write sequences

The backends offer no compare-and-swap, so every mutation must go through
:meth:`WalletDatastore.mutate` to avoid lost updates.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from typing import TYPE_CHECKING, Protocol

from ethwallet.engine.models.wallet_store import WalletStore
from ethwallet.errors.categories import PersistenceError
from ethwallet.errors.definitions import ErrWalletNotFound
from ethwallet.errors.wallet_errors import WalletError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ethwallet.config.settings import StoreConfig

logger = logging.getLogger(__name__)


class StoreBackend(Protocol):
    """Protocol for key-value backend implementations."""

    async def connect(self) -> None: ...
    async def close(self) -> None: ...
    async def get(self, key: str) -> str | None: ...
    async def set(self, key: str, value: str) -> None: ...
    async def delete(self, key: str) -> None: ...


def create_backend(config: StoreConfig) -> StoreBackend:
    """Build the backend selected by ``config.engine``.

    Raises:
        ValueError: If the engine name is unknown.
    """
    from ethwallet.datastore.file import FileStore
    from ethwallet.datastore.memory import MemoryStore
    from ethwallet.datastore.redis import RedisStore

    engine = str(config.engine).lower()
    if engine == "memory":
        return MemoryStore(config)
    if engine == "file":
        return FileStore(config)
    if engine == "redis":
        return RedisStore(config)
    msg = f"Unsupported store engine: {engine}"
    raise ValueError(msg)


class WalletDatastore:
    """Async access to the persisted :class:`WalletStore`.

    Usage::

        ds = WalletDatastore(store_config)
        await ds.open()
        store = await ds.mutate(lambda s: s.append_account(name, address))
        await ds.close()
    """

    def __init__(self, config: StoreConfig, backend: StoreBackend | None = None) -> None:
        self._config = config
        self._backend = backend
        self._lock = asyncio.Lock()
        self._open = False

    @property
    def backend(self) -> StoreBackend:
        """Return the underlying key-value backend.

        Raises:
            RuntimeError: If the datastore is not open.
        """
        if not self._open or self._backend is None:
            msg = "Datastore is not open. Call open() first."
            raise RuntimeError(msg)
        return self._backend

    @property
    def is_open(self) -> bool:
        return self._open

    async def open(self) -> None:
        """Create (if needed) and connect the backend."""
        if self._backend is None:
            self._backend = create_backend(self._config)
        await self._backend.connect()
        self._open = True

    async def close(self) -> None:
        """Close the backend (idempotent)."""
        if self._backend is not None and self._open:
            await self._backend.close()
        self._open = False

    # ------------------------------------------------------------------
    # Whole-store access
    # ------------------------------------------------------------------

    async def get(self) -> WalletStore | None:
        """Read the wallet, or None if no wallet has been created.

        Raises:
            PersistenceError: If the backend fails or the stored data is corrupt.
        """
        raw = await self.backend.get(self._config.key)
        if raw is None:
            return None
        try:
            return WalletStore.from_dict(json.loads(raw))
        except (json.JSONDecodeError, TypeError, ValueError, KeyError, WalletError) as exc:
            msg = f"stored wallet under {self._config.key!r} is corrupted: {exc}"
            raise PersistenceError(msg, code="store-corrupted") from exc

    async def require(self) -> WalletStore:
        """Read the wallet, raising ``ErrWalletNotFound`` if absent."""
        store = await self.get()
        if store is None:
            raise ErrWalletNotFound
        return store

    async def set(self, store: WalletStore) -> None:
        """Write the whole wallet."""
        await self.backend.set(self._config.key, json.dumps(store.to_dict()))

    async def replace(self, store: WalletStore) -> WalletStore:
        """Overwrite the wallet under the mutation lock."""
        async with self._lock:
            await self.set(store)
        return store

    async def mutate(
        self,
        transform: Callable[[WalletStore], WalletStore | Awaitable[WalletStore]],
    ) -> WalletStore:
        """Run one read-modify-write cycle under the mutation lock.

        *transform* receives the freshly read wallet and returns the new one;
        it may be a coroutine function.  If it raises, nothing is written.
        The write is skipped when the result equals the input.

        Raises:
            NotFoundError: If no wallet exists.
            PersistenceError: If the backend read or write fails.
        """
        async with self._lock:
            current = await self.require()
            result = transform(current)
            updated = await result if inspect.isawaitable(result) else result
            if updated != current:
                await self.set(updated)
                logger.debug("Wallet store written (%d accounts)", len(updated.accounts))
            return updated
