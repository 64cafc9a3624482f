"""py-ethwallet — password-protected multi-account Ethereum wallet engine."""

from __future__ import annotations

__version__ = "0.1.0"
