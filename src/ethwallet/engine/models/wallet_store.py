"""WalletStore — the single persisted root object.

Every mutation is a pure transformation returning a new ``WalletStore``;
persistence happens only through :class:`ethwallet.datastore.client.WalletDatastore`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any

from ethwallet.engine.models.account import AccountRecord
from ethwallet.engine.models.transaction import TransactionRecord, TxStatus
from ethwallet.errors.categories import ConsistencyError
from ethwallet.errors.definitions import (
    ErrAccountNotFound,
    ErrInvalidAccountIndex,
    ErrInvalidSelection,
    ErrNoAccountSelected,
    ErrTransactionNotPending,
)
from ethwallet.eth.address import validate_address

NO_ACCOUNT = -1

_DIGEST_RE = re.compile(r"^[0-9a-f]{64}$")


@dataclass(frozen=True, slots=True)
class WalletStore:
    """The wallet: accounts, password hash, token names and pending transactions.

    Attributes:
        current_account_index: Index into ``accounts``, or -1 for none selected.
        accounts: Accounts in insertion order; the index is their identity.
        password_hash: SHA-256 hex digest of the wallet password.
        token_name_map: Token contract address → display name.
        transaction_buffer: Submitted transactions awaiting confirmation, FIFO.
    """

    current_account_index: int = NO_ACCOUNT
    accounts: tuple[AccountRecord, ...] = ()
    password_hash: str = ""
    token_name_map: dict[str, str] = field(default_factory=dict)
    transaction_buffer: tuple[TransactionRecord, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "accounts", tuple(self.accounts))
        object.__setattr__(self, "transaction_buffer", tuple(self.transaction_buffer))
        object.__setattr__(self, "token_name_map", dict(self.token_name_map))
        if not (
            self.current_account_index == NO_ACCOUNT
            or 0 <= self.current_account_index < len(self.accounts)
        ):
            raise ErrInvalidSelection
        if self.password_hash and not _DIGEST_RE.match(self.password_hash):
            msg = "password hash must be a 64-character hex digest"
            raise ConsistencyError(msg, code="invalid-password-hash")

    @classmethod
    def create(cls, password_hash: str) -> WalletStore:
        """A fresh wallet with no accounts, tokens or transactions."""
        return cls(password_hash=password_hash)

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    @property
    def has_selection(self) -> bool:
        return self.current_account_index != NO_ACCOUNT

    def append_account(self, name: str, address: str) -> WalletStore:
        """Append a new empty account and select it."""
        account = AccountRecord(name=name, address=address)
        accounts = (*self.accounts, account)
        return replace(self, accounts=accounts, current_account_index=len(accounts) - 1)

    def current_account(self) -> AccountRecord:
        """Return the selected account.

        Raises:
            NotFoundError: If no account is selected.
        """
        if not self.has_selection:
            raise ErrNoAccountSelected
        return self.accounts[self.current_account_index]

    def find_account_index_or_none(self, address: str) -> int | None:
        """Index of the first account whose address equals *address* exactly."""
        for index, account in enumerate(self.accounts):
            if account.address == address:
                return index
        return None

    def find_account_index(self, address: str) -> int:
        """Index of the first account whose address equals *address* exactly.

        Raises:
            NotFoundError: If no account matches.
        """
        index = self.find_account_index_or_none(address)
        if index is None:
            raise ErrAccountNotFound
        return index

    def select_account(self, index: int) -> WalletStore:
        """Select the account at *index* (or -1 to clear the selection)."""
        if not (index == NO_ACCOUNT or 0 <= index < len(self.accounts)):
            raise ErrInvalidAccountIndex
        return replace(self, current_account_index=index)

    def replace_account(self, index: int, account: AccountRecord) -> WalletStore:
        """Return a copy with the account at *index* swapped for *account*."""
        if not 0 <= index < len(self.accounts):
            raise ErrInvalidAccountIndex
        accounts = list(self.accounts)
        accounts[index] = account
        return replace(self, accounts=tuple(accounts))

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def with_token_name(self, contract_address: str, name: str) -> WalletStore:
        """Map a token contract address to its display name."""
        address = validate_address(contract_address)
        return replace(self, token_name_map={**self.token_name_map, address: name})

    # ------------------------------------------------------------------
    # Transaction buffer
    # ------------------------------------------------------------------

    def submit(self, record: TransactionRecord) -> WalletStore:
        """Append a PENDING record to the transaction buffer."""
        if record.status is not TxStatus.PENDING:
            raise ErrTransactionNotPending
        return replace(self, transaction_buffer=(*self.transaction_buffer, record))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> WalletStore:
        """Create a store from its persisted JSON form."""
        return cls(
            current_account_index=int(data.get("currAcc", NO_ACCOUNT)),
            accounts=tuple(AccountRecord.from_dict(a) for a in data.get("accList", [])),
            password_hash=data.get("walletpw") or "",
            token_name_map=dict(data.get("tnm") or {}),
            transaction_buffer=tuple(
                TransactionRecord.from_dict(t) for t in data.get("txbuf", [])
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted JSON form."""
        return {
            "currAcc": self.current_account_index,
            "accList": [a.to_dict() for a in self.accounts],
            "walletpw": self.password_hash,
            "tnm": dict(self.token_name_map),
            "txbuf": [t.to_dict() for t in self.transaction_buffer],
        }
