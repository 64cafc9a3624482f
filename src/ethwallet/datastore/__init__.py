"""Datastore — persistent key-value backends and wallet access."""

from __future__ import annotations

from ethwallet.datastore.client import StoreBackend, WalletDatastore, create_backend

__all__ = ["StoreBackend", "WalletDatastore", "create_backend"]
