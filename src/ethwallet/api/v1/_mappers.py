"""Mapping from engine records to V1 response schemas."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ethwallet.api.v1.schemas import (
    AccountResponse,
    BalanceResponse,
    ReconcileErrorResponse,
    ReconcileResponse,
    TransactionResponse,
    WalletResponse,
)

if TYPE_CHECKING:
    from ethwallet.engine.models.account import AccountRecord
    from ethwallet.engine.models.transaction import TransactionRecord
    from ethwallet.engine.models.wallet_store import WalletStore
    from ethwallet.engine.services.transaction_service import ReconcileReport


def wallet_resp(store: WalletStore) -> dict:
    return WalletResponse(
        current_account_index=store.current_account_index,
        account_count=len(store.accounts),
        pending_count=len(store.transaction_buffer),
        token_names=store.token_name_map,
    ).model_dump(mode="json")


def tx_resp(record: TransactionRecord) -> TransactionResponse:
    return TransactionResponse(
        tx_hash=record.tx_hash,
        from_address=record.from_address,
        to_address=record.to_address,
        amount=str(record.amount),
        time=record.time,
        tx_type=str(record.tx_type),
        currency_type=str(record.currency_type),
        status=record.status.name.lower(),
    )


def account_resp(account: AccountRecord) -> dict:
    return AccountResponse(
        name=account.name,
        address=account.address,
        balances=[
            BalanceResponse(
                symbol=b.symbol,
                amount=str(b.amount),
                contract_address=b.contract_address,
            )
            for b in account.balances
        ],
        history=[tx_resp(r) for r in account.history],
    ).model_dump(mode="json")


def reconcile_resp(report: ReconcileReport) -> dict:
    return ReconcileResponse(
        accepted=[tx_resp(r) for r in report.accepted],
        rejected=[tx_resp(r) for r in report.rejected],
        pending=[tx_resp(r) for r in report.pending],
        errors=[
            ReconcileErrorResponse(tx_hash=tx_hash, code=err.code, message=err.message)
            for tx_hash, err in report.errors
        ],
    ).model_dump(mode="json")
