"""In-memory key-value backend for development and tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ethwallet.config.settings import StoreConfig


class MemoryStore:
    """Process-local dict store.  Contents are lost on close."""

    def __init__(self, config: StoreConfig) -> None:
        """Initialize in-memory store.

        Args:
            config: Store configuration (unused for memory backend).
        """
        self._config = config
        self._data: dict[str, str] = {}

    async def connect(self) -> None:  # noqa: ASYNC910
        """Connect (no-op for in-memory)."""

    async def close(self) -> None:  # noqa: ASYNC910
        """Close and clear the store."""
        self._data.clear()

    async def get(self, key: str) -> str | None:  # noqa: ASYNC910
        """Get a value, or None if the key is absent."""
        return self._data.get(key)

    async def set(self, key: str, value: str) -> None:  # noqa: ASYNC910
        """Set a value, replacing any previous one."""
        self._data[key] = value

    async def delete(self, key: str) -> None:  # noqa: ASYNC910
        """Delete a key (missing keys are ignored)."""
        self._data.pop(key, None)
