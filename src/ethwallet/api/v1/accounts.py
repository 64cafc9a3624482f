"""V1 account endpoints — list, create, import, select, summarize, tokens."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ethwallet.api.dependencies import get_engine, require_password
from ethwallet.api.v1._mappers import account_resp
from ethwallet.api.v1.schemas import (
    AccountCreateRequest,
    AccountImportRequest,
    AccountSelectRequest,
    AccountSummaryResponse,
    ErrorResponse,
    TokenRegisterRequest,
)
from ethwallet.engine.client import WalletEngine  # noqa: TC001

router = APIRouter(
    tags=["account"],
    dependencies=[Depends(require_password)],
    responses={401: {"model": ErrorResponse}},
)


@router.get("/accounts")
async def list_accounts(
    engine: Annotated[WalletEngine, Depends(get_engine)],
) -> list[dict]:
    """List all wallet accounts in creation order."""
    accounts = await engine.account_service.list_accounts()
    return [account_resp(a) for a in accounts]


@router.post("/accounts", status_code=201)
async def create_account(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    body: AccountCreateRequest,
) -> dict:
    """Generate a new account and select it."""
    account = await engine.account_service.create_account(body.name)
    return account_resp(account)


@router.post("/accounts/import", status_code=201)
async def import_account(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    body: AccountImportRequest,
) -> dict:
    """Add an account from a private key and select it."""
    account = await engine.account_service.import_account(body.private_key, body.name)
    return account_resp(account)


@router.get("/accounts/current")
async def current_account(
    engine: Annotated[WalletEngine, Depends(get_engine)],
) -> dict:
    """Summarize the selected account, refreshing its balance."""
    summary = await engine.account_service.account_summary(refresh=True)
    return AccountSummaryResponse(
        name=summary.name,
        address=summary.address,
        balance=summary.balance,
    ).model_dump(mode="json")


@router.put("/accounts/current")
async def select_account(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    body: AccountSelectRequest,
) -> dict:
    """Select the account at ``index``."""
    account = await engine.account_service.select_account(body.index)
    return account_resp(account)


@router.post("/tokens", status_code=201)
async def register_token(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    body: TokenRegisterRequest,
) -> dict[str, str]:
    """Record the display name of a token contract."""
    return await engine.account_service.register_token(body.contract_address, body.name)
