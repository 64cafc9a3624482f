"""Chain — Ethereum JSON-RPC ledger client."""

from __future__ import annotations

from ethwallet.chain.ledger import LedgerClient, LedgerProvider
from ethwallet.chain.models import Receipt

__all__ = ["LedgerClient", "LedgerProvider", "Receipt"]
