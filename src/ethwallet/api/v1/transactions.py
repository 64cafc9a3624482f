"""V1 transaction endpoints — send, list pending, reconcile."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ethwallet.api.dependencies import get_engine, get_password, require_password
from ethwallet.api.v1._mappers import reconcile_resp, tx_resp
from ethwallet.api.v1.schemas import ErrorResponse, SendRequest
from ethwallet.engine.client import WalletEngine  # noqa: TC001

router = APIRouter(
    tags=["transaction"],
    dependencies=[Depends(require_password)],
    responses={401: {"model": ErrorResponse}},
)


@router.get("/transactions/pending")
async def list_pending(
    engine: Annotated[WalletEngine, Depends(get_engine)],
) -> list[dict]:
    """List transactions waiting for a receipt."""
    records = await engine.transaction_service.pending_transactions()
    return [tx_resp(r).model_dump(mode="json") for r in records]


@router.post("/transactions", status_code=201)
async def send_transaction(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    password: Annotated[str, Depends(get_password)],
    body: SendRequest,
) -> dict:
    """Send ether from the selected account and track the transaction."""
    record = await engine.transaction_service.send(
        body.to,
        body.amount,
        password,
        gas_limit=body.gas_limit,
    )
    return tx_resp(record).model_dump(mode="json")


@router.post("/transactions/reconcile")
async def reconcile_transactions(
    engine: Annotated[WalletEngine, Depends(get_engine)],
) -> dict:
    """Resolve pending transactions from their receipts now."""
    report = await engine.transaction_service.reconcile()
    return reconcile_resp(report)
