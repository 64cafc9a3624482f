"""V1 wallet endpoints — create and unlock."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from ethwallet.api.dependencies import get_engine
from ethwallet.api.v1._mappers import wallet_resp
from ethwallet.api.v1.schemas import ErrorResponse, PasswordRequest
from ethwallet.engine.client import WalletEngine  # noqa: TC001

router = APIRouter(tags=["wallet"], responses={401: {"model": ErrorResponse}})


@router.post("/wallet", status_code=201)
async def create_wallet(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    body: PasswordRequest,
) -> dict:
    """Create a new wallet, replacing any existing one."""
    store = await engine.auth_service.create_wallet(body.password)
    return wallet_resp(store)


@router.post("/wallet/unlock")
async def unlock_wallet(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    body: PasswordRequest,
) -> dict:
    """Check the password and return the wallet overview."""
    store = await engine.auth_service.unlock_wallet(body.password)
    return wallet_resp(store)
