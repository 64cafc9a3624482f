"""Ethereum JSON-RPC client — balances, receipts, gas price, broadcast.

Provides an async HTTP client for the subset of the JSON-RPC API the wallet
consumes:
- ``eth_getBalance`` — native balance of an address
- ``eth_getTransactionReceipt`` — receipt of a mined transaction (or null)
- ``eth_gasPrice`` — current gas price
- ``eth_getTransactionCount`` — next nonce
- ``eth_sendRawTransaction`` — broadcast a signed transaction
- ``eth_chainId`` — network identity (health check)
"""

from __future__ import annotations

import itertools
from contextlib import nullcontext
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol

import httpx
from eth_utils import from_wei

from ethwallet.chain.models import Receipt, hex_to_int
from ethwallet.errors.categories import LedgerError

if TYPE_CHECKING:
    from ethwallet.config.settings import LedgerConfig
    from ethwallet.metrics.collector import WalletMetrics


class LedgerProvider(Protocol):
    """What the wallet core needs from the ledger."""

    async def get_balance(self, address: str) -> Decimal: ...
    async def get_transaction_receipt(self, tx_hash: str) -> Receipt | None: ...
    async def get_gas_price(self) -> int: ...
    async def get_transaction_count(self, address: str) -> int: ...
    async def send_raw_transaction(self, raw_tx: str) -> str: ...


class LedgerClient:
    """Async JSON-RPC client for an Ethereum node.

    Usage::

        ledger = LedgerClient(config)
        await ledger.connect()
        try:
            receipt = await ledger.get_transaction_receipt("0x...")
        finally:
            await ledger.close()
    """

    def __init__(self, config: LedgerConfig, *, metrics: WalletMetrics | None = None) -> None:
        """Initialize the ledger client.

        Args:
            config: Ledger configuration (rpc_url, chain_id, timeout).
            metrics: Optional metrics sink for call durations.
        """
        self._config = config
        self._metrics = metrics
        self._client: httpx.AsyncClient | None = None
        self._ids = itertools.count(1)

    async def connect(self) -> None:
        """Create the underlying HTTP client."""
        self._client = httpx.AsyncClient(
            headers={"Content-Type": "application/json"},
            timeout=self._config.timeout,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    @property
    def is_connected(self) -> bool:
        """Check if the HTTP client is active."""
        return self._client is not None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def get_balance(self, address: str) -> Decimal:
        """Return the latest native balance of *address* in ether."""
        wei = hex_to_int(await self._call("eth_getBalance", [address, "latest"]))
        return Decimal(from_wei(wei, "ether"))

    async def get_transaction_receipt(self, tx_hash: str) -> Receipt | None:
        """Return the receipt for *tx_hash*, or None while it is not mined."""
        result = await self._call("eth_getTransactionReceipt", [tx_hash])
        if result is None:
            return None
        return Receipt.from_dict(result)

    async def get_gas_price(self) -> int:
        """Return the current gas price in wei."""
        return hex_to_int(await self._call("eth_gasPrice", []))

    async def get_transaction_count(self, address: str) -> int:
        """Return the next nonce for *address*, counting pending transactions."""
        return hex_to_int(await self._call("eth_getTransactionCount", [address, "pending"]))

    async def send_raw_transaction(self, raw_tx: str) -> str:
        """Broadcast a signed transaction and return its hash."""
        return await self._call("eth_sendRawTransaction", [raw_tx])

    async def chain_id(self) -> int:
        """Return the node's chain ID."""
        return hex_to_int(await self._call("eth_chainId", []))

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_connected(self) -> httpx.AsyncClient:
        """Return the HTTP client, raising if not connected."""
        if self._client is None:
            msg = "Ledger client not connected. Call connect() first."
            raise LedgerError(msg, status_code=500)
        return self._client

    async def _call(self, method: str, params: list[Any]) -> Any:
        """Send one JSON-RPC request and return its ``result``.

        Raises:
            LedgerError: On transport errors, non-200 responses, or RPC errors.
        """
        client = self._ensure_connected()
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": params}
        tracker = self._metrics.track_ledger_call(method) if self._metrics else nullcontext()

        with tracker:
            try:
                response = await client.post(self._config.rpc_url, json=payload)
            except httpx.HTTPError as exc:
                raise LedgerError(f"{method} failed: {exc}") from exc

        if response.status_code != 200:
            raise LedgerError(
                f"{method} failed ({response.status_code}): {response.text}",
                status_code=502,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise LedgerError(f"{method} returned a non-JSON body") from exc

        error = body.get("error")
        if error:
            message = error.get("message", "unknown error") if isinstance(error, dict) else error
            raise LedgerError(f"{method} rejected: {message}")
        return body.get("result")
