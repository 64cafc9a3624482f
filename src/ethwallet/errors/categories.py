"""Typed error categories.

Every failure in the wallet core is scoped to the operation that produced it
and surfaces as one of these classes:

- ``ValidationError`` — malformed address, key or request input
- ``AuthenticationError`` — wrong password (never says which part was wrong)
- ``PersistenceError`` — key-value store ``get``/``set`` failed
- ``LedgerError`` — a single ledger provider call failed
- ``ConsistencyError`` — stored records contradict each other
- ``NotFoundError`` — wallet, account or selection is missing
"""

from __future__ import annotations

from ethwallet.errors.wallet_errors import WalletError


class ValidationError(WalletError):
    """Input rejected before any state change."""

    def __init__(self, message: str, *, code: str = "validation-error") -> None:
        super().__init__(message, status_code=400, code=code)


class AuthenticationError(WalletError):
    """Password did not match the stored hash."""

    def __init__(self, message: str, *, code: str = "authentication-error") -> None:
        super().__init__(message, status_code=401, code=code)


class PersistenceError(WalletError):
    """The persistent store could not be read or written."""

    def __init__(self, message: str, *, code: str = "persistence-error") -> None:
        super().__init__(message, status_code=503, code=code)


class LedgerError(WalletError):
    """Error from the Ethereum JSON-RPC provider."""

    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message, status_code=status_code, code="ledger-error")


class ConsistencyError(WalletError):
    """A stored record references state that does not exist."""

    def __init__(self, message: str, *, code: str = "consistency-error") -> None:
        super().__init__(message, status_code=409, code=code)


class NotFoundError(WalletError):
    """The requested wallet entity does not exist."""

    def __init__(self, message: str, *, code: str = "not-found") -> None:
        super().__init__(message, status_code=404, code=code)
