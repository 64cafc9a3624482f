"""FastAPI dependency injection helpers.

Usage in a route::

    @router.get("/accounts")
    async def list_accounts(
        engine: Annotated[WalletEngine, Depends(get_engine)],
        _: Annotated[WalletStore, Depends(require_password)],
    ) -> ...:
        ...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, Request

from ethwallet.engine.client import WalletEngine  # noqa: TC001
from ethwallet.engine.models.wallet_store import WalletStore  # noqa: TC001
from ethwallet.errors.definitions import ErrInvalidPassword

AUTH_HEADER_PASSWORD = "x-auth-password"

# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def get_engine(request: Request) -> WalletEngine:
    """Retrieve the engine stored on ``app.state`` during lifespan startup.

    Raises:
        RuntimeError: If the application has not started.
    """
    engine: WalletEngine | None = getattr(request.app.state, "engine", None)
    if engine is None:
        msg = "wallet engine is not running"
        raise RuntimeError(msg)
    return engine


# ---------------------------------------------------------------------------
# Password
# ---------------------------------------------------------------------------


def get_password(
    x_auth_password: Annotated[str | None, Header(alias=AUTH_HEADER_PASSWORD)] = None,
) -> str:
    """Return the wallet password sent with the request.

    Raises:
        AuthenticationError: If the header is missing.
    """
    if x_auth_password is None:
        raise ErrInvalidPassword
    return x_auth_password


async def require_password(
    engine: Annotated[WalletEngine, Depends(get_engine)],
    password: Annotated[str, Depends(get_password)],
) -> WalletStore:
    """Unlock the wallet with the request's password.

    Raises:
        NotFoundError: If no wallet exists.
        AuthenticationError: If the password is wrong.
    """
    return await engine.auth_service.unlock_wallet(password)
