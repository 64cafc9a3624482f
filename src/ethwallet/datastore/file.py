"""JSON file key-value backend.

The whole file is one JSON object mapping keys to string values.  Every
update rewrites the file under one lock: it goes to a uniquely named sibling
temp file first and is moved into place with ``os.replace``.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from ethwallet.errors.categories import PersistenceError

if TYPE_CHECKING:
    from ethwallet.config.settings import StoreConfig


class FileStore:
    """Key-value store persisted to a single JSON file."""

    def __init__(self, config: StoreConfig) -> None:
        self._config = config
        self._path = Path(config.path)
        self._write_lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    async def connect(self) -> None:
        """Ensure the parent directory exists."""
        try:
            await asyncio.to_thread(self._path.parent.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            msg = f"cannot prepare store directory {self._path.parent}: {exc}"
            raise PersistenceError(msg) from exc

    async def close(self) -> None:  # noqa: ASYNC910
        """Nothing to release; every call opens the file itself."""

    async def get(self, key: str) -> str | None:
        data = await asyncio.to_thread(self._read)
        return data.get(key)

    async def set(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._update, key, value)

    async def delete(self, key: str) -> None:
        await asyncio.to_thread(self._update, key, None)

    # ------------------------------------------------------------------
    # Blocking helpers (run in a worker thread)
    # ------------------------------------------------------------------

    def _read(self) -> dict[str, str]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            msg = f"cannot read store file {self._path}: {exc}"
            raise PersistenceError(msg) from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            msg = f"store file {self._path} is not valid JSON"
            raise PersistenceError(msg, code="store-corrupted") from exc
        if not isinstance(data, dict):
            msg = f"store file {self._path} does not hold a JSON object"
            raise PersistenceError(msg, code="store-corrupted")
        return data

    def _update(self, key: str, value: str | None) -> None:
        with self._write_lock:
            data = self._read()
            if value is None:
                data.pop(key, None)
            else:
                data[key] = value
            self._write(data)

    def _write(self, data: dict[str, str]) -> None:
        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=self._path.name + ".",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                json.dump(data, tmp, indent=2)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            msg = f"cannot write store file {self._path}: {exc}"
            raise PersistenceError(msg) from exc
