"""csvdb CLI — record store backed by a delimited text file.

Commands:
    csvdb init                     create csvdb.toml + the data file
    csvdb get [ID] [--where k=v]   dump all records, or the last match as JSON
    csvdb next-id                  print the id the next insert would get
    csvdb insert k=v ...           append a record, print its id
    csvdb update k=v ... --id ID   merge fields into matching records
    csvdb delete ID                remove the first record with that id
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click

from csvdb.codec import header_line
from csvdb.config import CsvConfig, InvalidConfigError, init_config, load_config
from csvdb.store import CsvStore

if TYPE_CHECKING:
    from collections.abc import Coroutine

logger = logging.getLogger("csvdb.cli")

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg(file: str | None) -> CsvConfig:
    try:
        cfg = load_config()
    except InvalidConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if file:
        cfg = cfg.with_overrides(file=Path(file))
    return cfg


def _store(ctx: click.Context) -> CsvStore:
    cfg: CsvConfig = ctx.obj["cfg"]
    return CsvStore(cfg.file, config=cfg)


def _run(coro: Coroutine[Any, Any, Any]) -> Any:
    """Run a store coroutine, turning I/O and config errors into CLI errors."""
    try:
        return asyncio.run(coro)
    except (OSError, InvalidConfigError) as exc:
        raise click.ClickException(str(exc)) from exc


def _pairs(values: tuple[str, ...]) -> dict[str, str]:
    """Parse k=v arguments into an ordered dict."""
    out: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            msg = f"expected key=value, got {item!r}"
            raise click.BadParameter(msg)
        out[key.strip()] = value
    return out


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="csvdb")
@click.option("--file", "file", default=None, help="Data file (overrides csvdb.toml)")
@click.option("--verbose", "-v", is_flag=True, help="Log store operations to stderr")
@click.pass_context
def cli(ctx: click.Context, file: str | None, verbose: bool) -> None:
    """csvdb — record store in a flat delimited file."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(message)s")
    ctx.ensure_object(dict)
    ctx.obj["file"] = file
    if ctx.invoked_subcommand != "init":
        ctx.obj["cfg"] = _load_cfg(file)


# ---------------------------------------------------------------------------
# csvdb init
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
@click.option("--no-header", is_flag=True, help="Data file has no header row")
@click.option("--field", "fields", multiple=True, help="Column name (repeatable)")
@click.pass_context
def init(ctx: click.Context, root: str, no_header: bool, fields: tuple[str, ...]) -> None:
    """Create csvdb.toml and an empty data file in the current project."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, header=not no_header, fields=list(fields) or None)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("csvdb.toml already exists — skipping init")
    except InvalidConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    try:
        cfg = load_config(root_path)
    except InvalidConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    if ctx.obj.get("file"):
        cfg = cfg.with_overrides(file=Path(ctx.obj["file"]))
    if not cfg.file.exists():
        cfg.file.parent.mkdir(parents=True, exist_ok=True)
        header = header_line(cfg.fields, cfg) if cfg.header and cfg.fields else ""
        cfg.file.write_text(header, encoding="utf-8")
        logger.debug("created %s", cfg.file)
    click.echo(f"Data file : {cfg.file}")


# ---------------------------------------------------------------------------
# csvdb get / next-id
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("record_id", required=False)
@click.option("--where", "where", multiple=True, help="field=value filter (repeatable)")
@click.pass_context
def get(ctx: click.Context, record_id: str | None, where: tuple[str, ...]) -> None:
    """Print all records, or the last record matching ID / --where."""
    if record_id is not None and where:
        raise click.UsageError("give either ID or --where, not both")
    predicate: Any = _pairs(where) if where else record_id
    result = _run(_store(ctx).get(predicate))
    if result is None:
        return
    click.echo(json.dumps(result, indent=2))


@cli.command("next-id")
@click.pass_context
def next_id_cmd(ctx: click.Context) -> None:
    """Print the id the next insert would receive."""
    click.echo(_run(_store(ctx).get_next_id()))


# ---------------------------------------------------------------------------
# csvdb insert / update / delete
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("values", nargs=-1, required=True)
@click.pass_context
def insert(ctx: click.Context, values: tuple[str, ...]) -> None:
    """Append a record from field=value pairs and print its id."""
    row = _run(_store(ctx).insert(_pairs(values)))
    click.echo(row["id"])


@cli.command()
@click.argument("values", nargs=-1, required=True)
@click.option("--id", "record_id", default=None, help="Match records by id")
@click.option("--where", "where", multiple=True, help="field=value filter (repeatable)")
@click.pass_context
def update(
    ctx: click.Context,
    values: tuple[str, ...],
    record_id: str | None,
    where: tuple[str, ...],
) -> None:
    """Merge field=value pairs into every matching record."""
    if record_id is not None and where:
        raise click.UsageError("give either --id or --where, not both")
    if record_id is None and not where:
        raise click.UsageError("give --id or --where")
    predicate: Any = _pairs(where) if where else record_id
    n = _run(_store(ctx).update(_pairs(values), predicate))
    click.echo(f"Updated {n}")


@cli.command()
@click.argument("record_id")
@click.pass_context
def delete(ctx: click.Context, record_id: str) -> None:
    """Delete the first record with the given id."""
    if _run(_store(ctx).delete(record_id)):
        click.echo(f"Deleted {record_id}")
    else:
        click.echo(f"Not found: {record_id}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main() -> None:
    cli(standalone_mode=True)


if __name__ == "__main__":
    main()
