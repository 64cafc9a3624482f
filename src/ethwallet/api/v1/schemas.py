"""V1 API request/response Pydantic schemas.

Thin HTTP-contract wrappers; the route code maps engine records onto them.
"""

from __future__ import annotations

from decimal import Decimal  # noqa: TC003 - Pydantic needs this at runtime

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Standard error body ``{"code": "...", "message": "..."}``."""

    code: str
    message: str


# ---------------------------------------------------------------------------
# Wallet
# ---------------------------------------------------------------------------


class PasswordRequest(BaseModel):
    """POST /api/v1/wallet, /api/v1/wallet/unlock."""

    password: str


class WalletResponse(BaseModel):
    """Wallet overview without secrets."""

    current_account_index: int
    account_count: int
    pending_count: int
    token_names: dict[str, str] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------


class AccountCreateRequest(BaseModel):
    """POST /api/v1/accounts."""

    name: str | None = None


class AccountImportRequest(BaseModel):
    """POST /api/v1/accounts/import."""

    private_key: str
    name: str | None = None


class AccountSelectRequest(BaseModel):
    """PUT /api/v1/accounts/current."""

    index: int = Field(ge=-1)


class BalanceResponse(BaseModel):
    symbol: str
    amount: str
    contract_address: str | None = None


class TransactionResponse(BaseModel):
    """A tracked transaction."""

    tx_hash: str
    from_address: str
    to_address: str
    amount: str
    time: str
    tx_type: str
    currency_type: str
    status: str


class AccountResponse(BaseModel):
    """A wallet account with its balances and resolved history."""

    name: str
    address: str
    balances: list[BalanceResponse] = Field(default_factory=list)
    history: list[TransactionResponse] = Field(default_factory=list)


class AccountSummaryResponse(BaseModel):
    """GET /api/v1/accounts/current."""

    name: str
    address: str
    balance: str


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


class TokenRegisterRequest(BaseModel):
    """POST /api/v1/tokens."""

    contract_address: str
    name: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class SendRequest(BaseModel):
    """POST /api/v1/transactions."""

    to: str
    amount: Decimal = Field(gt=0)
    gas_limit: int | None = Field(None, gt=0)


class ReconcileErrorResponse(BaseModel):
    tx_hash: str
    code: str
    message: str


class ReconcileResponse(BaseModel):
    """POST /api/v1/transactions/reconcile."""

    accepted: list[TransactionResponse] = Field(default_factory=list)
    rejected: list[TransactionResponse] = Field(default_factory=list)
    pending: list[TransactionResponse] = Field(default_factory=list)
    errors: list[ReconcileErrorResponse] = Field(default_factory=list)
