"""colbridge command-line interface.

Usage:
    colbridge types
    colbridge roundtrip data.parquet
    colbridge plan query.msgpack --log-level DEBUG
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import cyclopts
import msgspec
import pyarrow as pa
import pyarrow.feather
import pyarrow.parquet
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table as RichTable
from rich.tree import Tree

from .codec import from_host, to_host
from .config import BridgeConfig
from .datatypes import VARIANTS
from .errors import BridgeError, PlanDeserializeError
from .host import HostContext
from .plan import Node, PlanSerializer
from .table import Table

app = cyclopts.App(
    name="colbridge",
    help="Move columnar data and query plans between colbridge and a dataframe host.",
)

console = Console()


def _configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def read_table(path: Path) -> pa.Table:
    """Read a Parquet or Arrow IPC (Feather) file by extension."""
    suffix = path.suffix.lower()
    if suffix in (".parquet", ".pq"):
        return pyarrow.parquet.read_table(path)
    if suffix in (".arrow", ".ipc", ".feather"):
        return pyarrow.feather.read_table(path)
    raise ValueError(f"Unsupported file type '{suffix}', expected .parquet, .arrow, .ipc or .feather")


@app.command
def types(*, log_level: str = "WARNING") -> None:
    """List every data type identifier and whether it is enabled.

    Parameters
    ----------
    log_level
        One of: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING.
    """
    _configure_logging(log_level)
    config = BridgeConfig.from_env()

    table = RichTable(title=f"Data types (host: {config.host_module})")
    table.add_column("Identifier", style="cyan")
    table.add_column("Capability")
    table.add_column("Enabled")
    for name, variant in VARIANTS.items():
        enabled = config.enabled(variant.capability)
        table.add_row(
            name,
            variant.capability or "-",
            "[green]yes[/green]" if enabled else "[red]no[/red]",
        )
    console.print(table)


@app.command
def roundtrip(path: Path, *, log_level: str = "WARNING") -> None:
    """Send a file's columns to the host and back, and compare.

    Parameters
    ----------
    path
        Parquet or Arrow IPC file to read.
    log_level
        One of: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING.

    Examples
    --------
    $ colbridge roundtrip trades.parquet
    $ COLBRIDGE_CAPABILITIES=all colbridge roundtrip trades.arrow --log-level DEBUG
    """
    _configure_logging(log_level)
    ctx = HostContext.load()

    try:
        original = Table.from_arrow(read_table(path))
        returned = from_host(ctx, to_host(ctx, original))
    except (BridgeError, ValueError) as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)

    report = RichTable(title=f"{path.name}: {original.height} rows")
    report.add_column("Column", style="cyan")
    report.add_column("Data type")
    report.add_column("Result")

    failures = 0
    if returned.width != original.width:
        console.print(
            f"[red]Column count changed:[/red] {original.width} -> {returned.width}"
        )
        failures += 1
    for before, after in zip(original.get_columns(), returned.get_columns()):
        problems = []
        if before.name != after.name:
            problems.append(escape(f"name {after.name!r}"))
        if before.dtype != after.dtype:
            problems.append(escape(f"dtype {after.dtype!r}"))
        if before.to_pylist() != after.to_pylist():
            problems.append("values")
        failures += bool(problems)
        result = "[green]ok[/green]" if not problems else "[red]changed: " + ", ".join(problems) + "[/red]"
        report.add_row(escape(before.name), escape(repr(before.dtype)), result)
    console.print(report)

    if failures:
        sys.exit(1)


def _plan_tree(node: Any, label: str = "") -> Tree:
    tree = Tree(f"{label}[bold]{type(node).__name__}[/bold]")
    for name in node.__struct_fields__:
        value = getattr(node, name)
        if isinstance(value, Node):
            tree.add(_plan_tree(value, f"{name}: "))
        elif isinstance(value, list) and value and isinstance(value[0], Node):
            branch = tree.add(f"{name}:")
            for item in value:
                branch.add(_plan_tree(item))
        else:
            tree.add(escape(f"{name}: {value!r}"))
    return tree


@app.command
def plan(path: Path, *, expr: bool = False, log_level: str = "WARNING") -> None:
    """Decode a serialized plan and print it as a tree.

    Parameters
    ----------
    path
        File holding a MessagePack plan blob.
    expr
        The blob holds a single expression instead of a plan.
    log_level
        One of: DEBUG, INFO, WARNING, ERROR, CRITICAL. Default: WARNING.
    """
    _configure_logging(log_level)
    serializer = PlanSerializer()
    blob = path.read_bytes()
    try:
        node = serializer.deserialize_expr(blob) if expr else serializer.deserialize_plan(blob)
    except PlanDeserializeError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}", soft_wrap=True)
        sys.exit(1)
    console.print(_plan_tree(node))
    logging.getLogger(__name__).debug("Decoded %d byte blob: %s", len(blob), msgspec.json.encode(node).decode())


def main() -> None:
    app()


if __name__ == "__main__":
    main()
