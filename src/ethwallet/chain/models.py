"""Ledger data models — transaction receipts.

Mirrors the ``eth_getTransactionReceipt`` JSON-RPC result object.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ethwallet.engine.models.transaction import TxStatus


def hex_to_int(value: str | int | None, default: int = 0) -> int:
    """Decode a JSON-RPC quantity (``"0x1a"``) into an int."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    return int(value, 16)


@dataclass(frozen=True)
class Receipt:
    """A mined transaction's receipt.

    Attributes:
        tx_hash: Transaction hash.
        block_number: Block the transaction was mined in.
        block_hash: Hash of that block.
        gas_used: Gas consumed by the transaction.
        success: Execution status; None for pre-Byzantium receipts.
    """

    tx_hash: str = ""
    block_number: int = 0
    block_hash: str = ""
    gas_used: int = 0
    success: bool | None = None

    @property
    def outcome(self) -> TxStatus:
        """Terminal status implied by this receipt.

        Receipts without a status field predate status reporting; being mined
        is the only signal they carry, so they count as accepted.
        """
        if self.success is False:
            return TxStatus.REJECTED
        return TxStatus.ACCEPTED

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Receipt:
        """Create a Receipt from a JSON-RPC result object."""
        status = data.get("status")
        return cls(
            tx_hash=data.get("transactionHash", ""),
            block_number=hex_to_int(data.get("blockNumber")),
            block_hash=data.get("blockHash") or "",
            gas_used=hex_to_int(data.get("gasUsed")),
            success=None if status is None else hex_to_int(status) == 1,
        )
