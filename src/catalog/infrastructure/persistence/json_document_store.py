"""JSON-file document store.

Holds every collection in memory as a list of plain dicts and writes the
whole file back after each mutation. One store object is created at
process start (see ``bootstrap.open_store``) and handed to whatever
repositories need it.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path

from catalog.domain.exceptions import StorageFailure
from catalog.infrastructure.logging import get_logger

logger = get_logger(__name__)

DEFAULT_COLLECTIONS = ("products",)


class JsonDocumentStore:

    def __init__(self, file_path: Path, collections: tuple[str, ...] = DEFAULT_COLLECTIONS) -> None:
        self._file_path = file_path
        self._default_collections = collections
        self._data: dict[str, list[dict]] | None = None
        self._write_lock = asyncio.Lock()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def is_loaded(self) -> bool:
        return self._data is not None

    # --- Storage provider interface -------------------------------------------

    async def load(self) -> None:
        """Read the file into memory, creating it if it does not exist yet."""
        if not self._file_path.exists():
            self._data = {name: [] for name in self._default_collections}
            await self.persist()
            logger.info("store_initialized", path=str(self._file_path))
            return

        try:
            text = await asyncio.to_thread(self._file_path.read_text, encoding="utf-8")
            data = json.loads(text)
        except (OSError, ValueError) as exc:
            raise StorageFailure(f"Cannot read {self._file_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise StorageFailure(f"Cannot read {self._file_path}: top level must be an object")

        for name in self._default_collections:
            data.setdefault(name, [])
            if not isinstance(data[name], list):
                raise StorageFailure(f"Cannot read {self._file_path}: {name!r} must be a list")
        self._data = data
        logger.info(
            "store_loaded",
            path=str(self._file_path),
            collections={name: len(data[name]) for name in self._default_collections},
        )

    async def persist(self) -> None:
        """Write every collection to disk.

        The snapshot is serialized before the first suspension point, so a
        concurrent mutation can never produce a half-updated file. The file
        is replaced atomically.
        """
        try:
            payload = json.dumps(
                self._require_data(), indent=2, ensure_ascii=False, allow_nan=False
            ) + "\n"
        except (TypeError, ValueError) as exc:
            raise StorageFailure(f"Cannot serialize {self._file_path}: {exc}") from exc
        async with self._write_lock:
            try:
                await asyncio.to_thread(self._write, payload)
            except OSError as exc:
                logger.error("store_persist_failed", path=str(self._file_path), error=str(exc))
                raise StorageFailure(f"Cannot write {self._file_path}: {exc}") from exc
        logger.debug("store_persisted", path=str(self._file_path))

    async def close(self) -> None:
        """Flush to disk on shutdown."""
        if self._data is not None:
            await self.persist()

    def collection(self, name: str) -> list[dict]:
        """The live list backing a collection; mutate it, then persist()."""
        return self._require_data().setdefault(name, [])

    # --- File helpers ---------------------------------------------------------

    def _require_data(self) -> dict[str, list[dict]]:
        if self._data is None:
            raise StorageFailure("Store used before load()")
        return self._data

    def _write(self, payload: str) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._file_path.with_name(self._file_path.name + ".tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        os.replace(tmp_path, self._file_path)
