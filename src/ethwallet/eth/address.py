"""Address and private key canonicalization.

Both accept the bare hex body or the ``0x``-prefixed form and return the
prefixed form:

- address: 40 chars bare / 42 chars prefixed
- private key: 64 chars bare / 66 chars prefixed

The body check is ASCII-alphanumeric, not hex-strict.
"""

from __future__ import annotations

from ethwallet.errors.definitions import ErrInvalidAddress, ErrInvalidPrivateKey
from ethwallet.errors.wallet_errors import WalletError

_PREFIX = "0x"
ADDRESS_LENGTH = 40
PRIVATE_KEY_LENGTH = 64


def _is_alnum(value: str) -> bool:
    """True if *value* is non-empty and made of ASCII letters and digits only."""
    return value.isascii() and value.isalnum()


def _canonicalize(value: str, body_length: int) -> str | None:
    if len(value) == body_length + len(_PREFIX) and value.startswith(_PREFIX):
        if _is_alnum(value[len(_PREFIX) :]):
            return value
    elif len(value) == body_length and _is_alnum(value):
        return _PREFIX + value
    return None


def validate_address(address: str) -> str:
    """Return the canonical ``0x``-prefixed form of *address*.

    Raises:
        ValidationError: If the length or character set is wrong.
    """
    canonical = _canonicalize(address, ADDRESS_LENGTH)
    if canonical is None:
        raise ErrInvalidAddress
    return canonical


def validate_private_key(private_key: str) -> str:
    """Return the canonical ``0x``-prefixed form of *private_key*.

    Raises:
        ValidationError: If the length or character set is wrong.
    """
    canonical = _canonicalize(private_key, PRIVATE_KEY_LENGTH)
    if canonical is None:
        raise ErrInvalidPrivateKey
    return canonical


def is_valid_address(address: str) -> bool:
    """Check if *address* passes :func:`validate_address`."""
    try:
        validate_address(address)
    except WalletError:
        return False
    return True


def is_valid_private_key(private_key: str) -> bool:
    """Check if *private_key* passes :func:`validate_private_key`."""
    try:
        validate_private_key(private_key)
    except WalletError:
        return False
    return True
