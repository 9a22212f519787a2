"""
Human-readable output formatting.

Centralizes CLI output so commands stay thin. Identifier listings are plain
text (one MAC per line) to stay scriptable; summaries use rich.
"""
from __future__ import annotations

from typing import Iterable

import typer
from rich.console import Console
from rich.table import Table

from ..storage.base import SIZE_UNKNOWN, Mode
from ..storage.mac import MAC

_console = Console()


def print_macs(macs: Iterable[MAC]) -> None:
    """Print identifiers, one lowercase hex MAC per line, sorted."""
    for mac in sorted(macs, key=lambda m: m.digest):
        typer.echo(mac.hex())


def write_bytes(data: bytes) -> None:
    """Write raw payload bytes to stdout without a trailing newline."""
    typer.echo(data, nl=False)


def print_put_summary(resource: str, mac: MAC, written: int) -> None:
    typer.echo(f"Stored {resource} {mac.hex()} ({_format_bytes(written)})")


def print_store_info(location: str, protocol: str, mode: Mode, size: int) -> None:
    """
    Print store capabilities as a table.

    Args:
        location: Configured store URL
        protocol: Wire protocol name
        mode: Access mode flags
        size: Total size, or SIZE_UNKNOWN
    """
    modes = [flag.name.lower() for flag in (Mode.READ, Mode.WRITE) if flag in mode]
    table = Table(title="Store")
    table.add_column("Property", style="cyan")
    table.add_column("Value", style="yellow")
    table.add_row("Location", location)
    table.add_row("Protocol", protocol)
    table.add_row("Mode", "+".join(modes) or "none")
    table.add_row("Size", "unknown" if size == SIZE_UNKNOWN else _format_bytes(size))
    _console.print(table)


def _format_bytes(size_bytes: int) -> str:
    """
    Format byte count as human-readable string.

    Returns:
        Formatted string (e.g., "1.5 MB", "42 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    elif size_bytes < 1024 * 1024 * 1024:
        return f"{size_bytes / (1024 * 1024):.1f} MB"
    else:
        return f"{size_bytes / (1024 * 1024 * 1024):.1f} GB"
