"""Pre-defined wallet errors."""

from __future__ import annotations

from ethwallet.errors.categories import (
    AuthenticationError,
    ConsistencyError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)

# -- Authentication --------------------------------------------------------

ErrInvalidPassword = AuthenticationError("invalid password", code="invalid-password")

# -- Validation ------------------------------------------------------------

ErrInvalidAddress = ValidationError("invalid account address", code="invalid-address")
ErrInvalidPrivateKey = ValidationError("invalid private key", code="invalid-private-key")
ErrInvalidAmount = ValidationError("amount must be a positive number", code="invalid-amount")
ErrInvalidAccountIndex = ValidationError(
    "account index out of range", code="invalid-account-index"
)
ErrTransactionNotPending = ValidationError(
    "only pending transactions can be submitted", code="transaction-not-pending"
)

# -- Not Found -------------------------------------------------------------

ErrWalletNotFound = NotFoundError("wallet not created yet", code="wallet-not-found")
ErrNoAccountSelected = NotFoundError(
    "no account selected; create or load an account first", code="no-account"
)
ErrAccountNotFound = NotFoundError("account not found", code="account-not-found")
ErrKeyNotFound = NotFoundError("no key stored for account", code="key-not-found")

# -- Persistence -----------------------------------------------------------

ErrWalletNotCreated = PersistenceError(
    "wallet not created; please try later", code="wallet-not-created"
)

# -- Consistency -----------------------------------------------------------

ErrAccountDuplicate = ConsistencyError("account already exists", code="account-duplicate")
ErrInvalidSelection = ConsistencyError(
    "current account index does not point into the account list", code="invalid-selection"
)
