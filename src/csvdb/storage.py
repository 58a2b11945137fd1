"""Whole-file load/persist backends for CsvStore.

A backend only moves full file contents; errors are the builtin OSError
family and propagate unchanged.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger("csvdb.storage")


class Storage(Protocol):
    async def load(self, path: Path) -> str: ...

    async def persist(self, path: Path, text: str) -> None: ...


class LocalStorage:
    """UTF-8 files on the local filesystem.

    Blocking file calls run in a worker thread. Writes go to a sibling
    tmp file which then replaces the target, so a failed persist leaves
    the previous content in place.
    """

    async def load(self, path: Path) -> str:
        return await asyncio.to_thread(self._read, path)

    async def persist(self, path: Path, text: str) -> None:
        await asyncio.to_thread(self._write, path, text)

    @staticmethod
    def _read(path: Path) -> str:
        with path.open(encoding="utf-8", newline="") as f:
            return f.read()

    @staticmethod
    def _write(path: Path, text: str) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8", newline="") as f:
                f.write(text)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("persisted %s (%d chars)", path, len(text))


class MemoryStorage:
    """In-process dict of path -> text. Missing paths raise FileNotFoundError."""

    def __init__(self, files: dict[Path | str, str] | None = None) -> None:
        self.files: dict[Path, str] = {Path(p): t for p, t in (files or {}).items()}

    async def load(self, path: Path) -> str:
        try:
            return self.files[Path(path)]
        except KeyError:
            raise FileNotFoundError(2, "No such file", str(path)) from None

    async def persist(self, path: Path, text: str) -> None:
        self.files[Path(path)] = text
