"""
Kloset HTTP CLI

Operator commands against an HTTP-backed Kloset store:
- open: Print the store configuration blob
- ls: List identifiers of a resource class
- cat: Print an object (or a packfile byte range)
- put: Upload an object from a file or stdin
- rm: Delete an object
- info: Show store capabilities
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer

from .cli_context import CLIContext
from .operations.mappers import run_and_exit
from .operations.printers import print_macs, print_put_summary, print_store_info, write_bytes
from .storage.base import ResourceClass
from .storage.mac import MAC

app = typer.Typer(name="kloset-http", help="Kloset HTTP storage adapter CLI")


def _parse_resource(name: str) -> ResourceClass:
    return ResourceClass.from_name(name)


def _context(ctx: typer.Context) -> CLIContext:
    """Build the command context from the global options stored by main()."""
    options = ctx.obj
    context = CLIContext.from_options(
        location=options.get("location"),
        token=options.get("token"),
        protocol=options.get("protocol"),
        timeout=options.get("timeout"),
    )
    context.client = options.get("client")
    ctx.call_on_close(context.close)
    return context


@app.callback()
def main(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", envvar="KLOSET_HTTP_LOCATION", help="Store URL (http:// or https://)"),
    token: Optional[str] = typer.Option(None, "--token", envvar="KLOSET_HTTP_TOKEN", help="Bearer token sent with every request"),
    protocol: Optional[str] = typer.Option(None, "--protocol", envvar="KLOSET_HTTP_PROTOCOL", help="Wire protocol: rpc or resource"),
    timeout: Optional[float] = typer.Option(None, "--timeout", envvar="KLOSET_HTTP_TIMEOUT", help="Request timeout in seconds"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log every HTTP exchange"),
) -> None:
    """Kloset HTTP storage adapter CLI."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    options = ctx.ensure_object(dict)
    options.update(location=location, token=token, protocol=protocol, timeout=timeout)


@app.command("open")
def open_store(ctx: typer.Context) -> None:
    """Print the store configuration blob."""

    def _open() -> None:
        write_bytes(_context(ctx).store.open())

    run_and_exit(_open)


@app.command("ls")
def list_resources(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="states, packfiles or locks"),
) -> None:
    """List identifiers of a resource class."""

    def _ls() -> None:
        resource_class = _parse_resource(resource)
        print_macs(_context(ctx).store.list(resource_class))

    run_and_exit(_ls)


@app.command("cat")
def cat_resource(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="state, packfile or lock"),
    mac: str = typer.Argument(..., help="Object MAC (64 hex characters)"),
    offset: Optional[int] = typer.Option(None, "--offset", help="Packfile range start"),
    length: Optional[int] = typer.Option(None, "--length", help="Packfile range length"),
) -> None:
    """Print an object, or a byte range of a packfile."""

    def _cat() -> None:
        resource_class = _parse_resource(resource)
        key = MAC.from_hex(mac)
        store = _context(ctx).store
        if offset is None and length is None:
            write_bytes(store.get(resource_class, key).read())
            return
        if resource_class is not ResourceClass.PACKFILE:
            raise ValueError("--offset/--length are only supported for packfiles")
        if offset is None or length is None:
            raise ValueError("--offset and --length must be given together")
        write_bytes(store.get_range(key, offset, length).read())

    run_and_exit(_cat)


@app.command("put")
def put_resource(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="state, packfile or lock"),
    mac: str = typer.Argument(..., help="Object MAC (64 hex characters)"),
    source: str = typer.Argument(..., help="File to upload, or - for stdin"),
) -> None:
    """Upload an object."""

    def _put() -> None:
        resource_class = _parse_resource(resource)
        key = MAC.from_hex(mac)
        data = sys.stdin.buffer.read() if source == "-" else Path(source).read_bytes()
        written = _context(ctx).store.put(resource_class, key, data)
        print_put_summary(resource_class.value, key, written)

    run_and_exit(_put)


@app.command("rm")
def remove_resource(
    ctx: typer.Context,
    resource: str = typer.Argument(..., help="state, packfile or lock"),
    mac: str = typer.Argument(..., help="Object MAC (64 hex characters)"),
) -> None:
    """Delete an object."""

    def _rm() -> None:
        resource_class = _parse_resource(resource)
        key = MAC.from_hex(mac)
        _context(ctx).store.delete(resource_class, key)
        typer.echo(f"Deleted {resource_class.value} {key.hex()}")

    run_and_exit(_rm)


@app.command("info")
def store_info(ctx: typer.Context) -> None:
    """Show store location and capabilities (no network access)."""

    def _info() -> None:
        store = _context(ctx).store
        print_store_info(store.location(), store.protocol, store.mode(), store.size())

    run_and_exit(_info)


if __name__ == "__main__":
    app()
