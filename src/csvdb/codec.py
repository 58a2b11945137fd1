"""Text <-> records for the unquoted delimiter format.

Layout (defaults shown):
    id,name,status,          # header, trailing delimiter
    1,alpha,open,            # one record per line
    2,beta,done,

No quoting or escaping: a value containing the delimiter or the line
separator breaks the row structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from csvdb.config import InvalidConfigError

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence

    from csvdb.config import CsvConfig

Record = dict[str, "str | None"]


@dataclass
class Table:
    """Decoded file: column order plus rows in file order."""

    fields: list[str] = field(default_factory=list)
    records: list[Record] = field(default_factory=list)


def read_header(line: str, delimiter: str) -> list[str]:
    """Split a header line into trimmed column names, dropping a trailing empty one."""
    names = [name.strip() for name in line.split(delimiter)]
    if names and names[-1] == "":
        names.pop()
    return names


def decode_table(
    text: str,
    config: CsvConfig,
    fields: Sequence[str] | None = None,
) -> Table:
    """Parse file text into a Table.

    With config.header the first line names the columns and overrides
    ``fields``; otherwise ``fields`` (or config.fields) is required.
    Columns past the last name are ignored, missing columns decode as None.
    """
    if fields is None and config.fields is not None:
        fields = config.fields
    if not config.header and not fields:
        msg = "Fields should be specified or in the file header"
        raise InvalidConfigError(msg)

    if text == "":
        return Table(fields=list(fields or []))

    lines = text.split(config.line_separator)
    if config.header:
        names = read_header(lines.pop(0), config.delimiter)
    else:
        names = list(fields or [])

    records: list[Record] = []
    for line in lines:
        if line == "":
            continue
        cols = line.split(config.delimiter)
        records.append({
            name: cols[i] if i < len(cols) else None
            for i, name in enumerate(names)
        })
    return Table(fields=names, records=records)


def decode(
    text: str,
    config: CsvConfig,
    fields: Sequence[str] | None = None,
) -> list[Record]:
    """Parse file text into records (see decode_table)."""
    return decode_table(text, config, fields).records


def column_order(records: Iterable[Mapping[str, Any]], fields: Sequence[str] | None = None) -> list[str]:
    """Return ``fields`` extended by any unseen record keys, in first-seen order."""
    order = list(fields or [])
    seen = set(order)
    for record in records:
        for key in record:
            if key not in seen:
                seen.add(key)
                order.append(key)
    return order


def _cell(value: Any) -> str:
    return "" if value is None else str(value)


def header_line(fields: Sequence[str], config: CsvConfig) -> str:
    return config.delimiter.join(fields) + config.delimiter


def encode(
    records: Sequence[Mapping[str, Any]],
    config: CsvConfig,
    fields: Sequence[str] | None = None,
) -> str:
    """Serialize records to file text.

    Column order is ``fields`` when given (plus any extra keys found in the
    records), else the first record's key order. Every line, the header
    included, ends with a trailing delimiter; lines are joined without a
    final separator.
    """
    if not records:
        return ""

    if fields is None:
        order = list(records[0])
    else:
        order = column_order(records, fields)

    delim = config.delimiter
    lines: list[str] = []
    if config.header:
        lines.append(header_line(order, config))
    for record in records:
        lines.append(delim.join(_cell(record.get(name)) for name in order) + delim)
    return config.line_separator.join(lines)
