"""CsvStore: CRUD over a delimited text file.

CsvStore is the public API:
    store = CsvStore("people.csv")
    await store.insert({"name": "ada"})          # -> {"name": "ada", "id": "1"}
    await store.get(1)                           # last record with id == 1
    await store.get({"name": "ada"})             # last record matching all pairs
    await store.update({"status": "done"}, 1)    # merge into every match
    await store.delete(1)                        # remove first id match

Every operation loads and decodes the whole file, and every mutation
re-encodes and persists the whole file. Operations on one instance are
serialised by an asyncio.Lock; several instances (or processes) writing
the same file are not supported.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping
from pathlib import Path
from typing import TYPE_CHECKING, Any

from csvdb.codec import Record, Table, column_order, decode_table, encode, header_line
from csvdb.config import CsvConfig, InvalidConfigError
from csvdb.matching import ID_FIELD, ByFields, ById, as_predicate, matches
from csvdb.storage import LocalStorage

if TYPE_CHECKING:
    from collections.abc import Iterable

    from csvdb.storage import Storage

logger = logging.getLogger("csvdb.store")

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _stringify(data: Mapping[str, Any]) -> Record:
    return {k: None if v is None else str(v) for k, v in data.items()}


def next_id(records: Iterable[Mapping[str, Any]]) -> int:
    """One past the largest id, read from each id's leading digits ("7abc" -> 7).

    Ids without leading digits (or absent) count as 0.
    """
    highest = 0
    for record in records:
        m = _LEADING_INT.match(str(record.get(ID_FIELD)))
        if m is None:
            continue
        highest = max(highest, int(m.group(1)))
    return highest + 1


class CsvStore:
    """Delimited-text record store."""

    def __init__(
        self,
        path: Path | str,
        fields: Iterable[str] | None = None,
        *,
        config: CsvConfig | None = None,
        storage: Storage | None = None,
        delimiter: str | None = None,
        header: bool | None = None,
        line_separator: str | None = None,
    ) -> None:
        base = config or CsvConfig()
        self.config = base.with_overrides(
            delimiter=delimiter,
            header=header,
            line_separator=line_separator,
            fields=tuple(fields) if fields is not None else None,
        )
        self.config.require_fields()
        if not self.config.header and ID_FIELD not in (self.config.fields or ()):
            msg = f"fields of a headerless file must include '{ID_FIELD}'"
            raise InvalidConfigError(msg)
        self.path = Path(path)
        self.storage: Storage = storage or LocalStorage()
        self._fields: list[str] = list(self.config.fields or [])
        self._lock = asyncio.Lock()

    @property
    def fields(self) -> list[str]:
        """Column order as of the last load (or the configured fields)."""
        return list(self._fields)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def get(self, predicate: Any = None) -> list[Record] | Record | None:
        """All records, or the last record matching predicate (None if none match).

        predicate is an id value (``1``, ``"1"``), a mapping of field -> value,
        or a ById/ByFields instance.
        """
        selector = as_predicate(predicate)
        async with self._lock:
            table = await self._load()
        if selector is None:
            return table.records
        found: Record | None = None
        for record in table.records:
            if matches(record, selector):
                found = record
        return found

    async def get_next_id(self) -> int:
        async with self._lock:
            table = await self._load()
        return next_id(table.records)

    async def count(self) -> int:
        async with self._lock:
            table = await self._load()
        return len(table.records)

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def insert(self, record: Mapping[str, Any]) -> Record:
        """Append record with a fresh id (any caller id is replaced). Returns the stored copy."""
        self._check_columns(record)
        async with self._lock:
            table = await self._load()
            row = _stringify(record)
            row[ID_FIELD] = str(next_id(table.records))
            table.records.append(row)
            await self._save(table)
        logger.debug("insert %s id=%s", self.path, row[ID_FIELD])
        return row

    async def update(
        self,
        data: Mapping[str, Any] | Iterable[Mapping[str, Any]],
        predicate: Any = None,
    ) -> int:
        """Merge data (one mapping or several) into every record matching predicate.

        A missing predicate selects every record. Returns the number of
        merges applied; the file is rewritten even when nothing matched.
        """
        items = [data] if isinstance(data, Mapping) else list(data)
        for item in items:
            self._check_columns(item)
        selector = as_predicate(predicate) or ByFields()
        async with self._lock:
            table = await self._load()
            updated = 0
            for item in items:
                patch = _stringify(item)
                for record in table.records:
                    if matches(record, selector):
                        record.update(patch)
                        updated += 1
            await self._save(table)
        logger.debug("update %s matched=%d", self.path, updated)
        return updated

    async def delete(self, record_id: Any) -> bool:
        """Remove the first record whose id equals record_id. Returns True if one was removed."""
        selector = as_predicate(record_id)
        if not isinstance(selector, ById):
            msg = f"delete takes an id value, got {record_id!r}"
            raise TypeError(msg)
        async with self._lock:
            table = await self._load()
            removed = False
            for i, record in enumerate(table.records):
                if matches(record, selector):
                    del table.records[i]
                    removed = True
                    break
            await self._save(table)
        logger.debug("delete %s id=%s removed=%s", self.path, record_id, removed)
        return removed

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _check_columns(self, data: Mapping[str, Any]) -> None:
        """Headerless files have a fixed column set; refuse keys outside it."""
        if self.config.header:
            return
        unknown = [k for k in data if k not in (self.config.fields or ())]
        if unknown:
            msg = f"{self.path} has no column for: {', '.join(unknown)}"
            raise ValueError(msg)

    async def _load(self) -> Table:
        text = await self.storage.load(self.path)
        table = decode_table(text, self.config)
        self._fields = list(table.fields)
        logger.debug("load %s records=%d", self.path, len(table.records))
        return table

    async def _save(self, table: Table) -> None:
        if self.config.header:
            order = column_order(table.records, table.fields)
        else:
            order = list(self.config.fields or ())
        if table.records:
            text = encode(table.records, self.config, order)
        else:
            # keep the column names once the last record is gone
            text = header_line(order, self.config) if self.config.header and order else ""
        await self.storage.persist(self.path, text)
        self._fields = order
