"""CsvConfig: per-store format options and the project-local csvdb.toml.

csvdb.toml example:

    [csvdb]
    file = "data.csv"        # relative to the directory holding csvdb.toml
    delimiter = ","
    line_separator = "\\n"
    header = true
    # fields = ["id", "name"]  # required when header = false
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

_CONFIG_FILENAME = "csvdb.toml"
_DEFAULT_FILE = "data.csv"
_DEFAULT_DELIMITER = ","
_DEFAULT_LINE_SEPARATOR = "\n"


class InvalidConfigError(ValueError):
    """Format options that can never decode a record."""


@dataclass(frozen=True)
class CsvConfig:
    """Format options consumed by the codec and the store."""

    delimiter: str = _DEFAULT_DELIMITER
    line_separator: str = _DEFAULT_LINE_SEPARATOR
    header: bool = True
    fields: tuple[str, ...] | None = None   # explicit column names (required without header)
    file: Path = field(default_factory=lambda: Path(_DEFAULT_FILE))

    def __post_init__(self) -> None:
        if not self.delimiter:
            msg = "delimiter must be a non-empty string"
            raise InvalidConfigError(msg)
        if not self.line_separator:
            msg = "line_separator must be a non-empty string"
            raise InvalidConfigError(msg)
        if self.fields is not None and not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))

    def require_fields(self) -> None:
        """Raise unless a field-name source exists (header row or explicit list)."""
        if not self.header and not self.fields:
            msg = "Fields should be specified or in the file header"
            raise InvalidConfigError(msg)

    def with_overrides(self, **overrides: Any) -> CsvConfig:
        """Return a copy with non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def load_config(root: Path | str | None = None) -> CsvConfig:
    """Load csvdb.toml from root (or search upward from cwd if root is None)."""
    root_path = _find_root(Path(root) if root else Path.cwd())
    config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        with config_path.open("rb") as f:
            try:
                raw = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                msg = f"{config_path}: {exc}"
                raise InvalidConfigError(msg) from exc

    section = raw.get("csvdb", {})
    header = section.get("header", True)
    if not isinstance(header, bool):
        msg = f"{config_path}: header must be true or false"
        raise InvalidConfigError(msg)
    fields = section.get("fields")
    if fields is not None and not (
        isinstance(fields, list) and all(isinstance(f, str) for f in fields)
    ):
        msg = f"{config_path}: fields must be a list of strings"
        raise InvalidConfigError(msg)

    cfg = CsvConfig(
        delimiter=str(section.get("delimiter", _DEFAULT_DELIMITER)),
        line_separator=str(section.get("line_separator", _DEFAULT_LINE_SEPARATOR)),
        header=header,
        fields=tuple(fields) if fields is not None else None,
        file=root_path / section.get("file", _DEFAULT_FILE),
    )
    cfg.require_fields()
    return cfg


def _find_root(start: Path) -> Path:
    """Walk upward from start looking for csvdb.toml."""
    for directory in (start, *start.parents):
        if (directory / _CONFIG_FILENAME).exists():
            return directory
    return start


def init_config(
    root: Path,
    *,
    file: str = _DEFAULT_FILE,
    header: bool = True,
    fields: list[str] | None = None,
) -> Path:
    """Write a default csvdb.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"csvdb.toml already exists at {config_path}"
        raise FileExistsError(msg)
    if not header and not fields:
        msg = "Fields should be specified or in the file header"
        raise InvalidConfigError(msg)

    fields_line = (
        "fields = [" + ", ".join(f'"{f}"' for f in fields) + "]"
        if fields
        else '# fields = ["id", "name"]   # required when header = false'
    )
    content = f"""\
[csvdb]
file = "{file}"
delimiter = ","
line_separator = "\\n"
header = {"true" if header else "false"}
{fields_line}
"""
    config_path.write_text(content)
    return config_path
