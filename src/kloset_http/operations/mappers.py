"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and a CLI command wrapper
so every Typer command reports store failures the same way.
"""
from __future__ import annotations

import typer
from typing import Callable, TypeVar

T = TypeVar('T')

EXIT_CODES = {
    "RemoteError": 1,
    "ConfigError": 2,
    "ValueError": 2,
    "TransportError": 3,
    "DecodeError": 4,
}

# Unknown failures are reported like network failures
FALLBACK_EXIT_CODE = 3


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to standardized exit code.

    Returns:
    - 0: Success
    - 1: Server reported a failure (RemoteError)
    - 2: Invalid configuration or arguments (ConfigError, ValueError)
    - 3: Network failure (TransportError) or unknown error
    - 4: Protocol mismatch (DecodeError)
    """
    return EXIT_CODES.get(type(exc).__name__, FALLBACK_EXIT_CODE)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.

    Executes the given function, prints the error message to stderr and maps
    any exception to an exit code using typer.Exit. This centralizes error
    handling so CLI commands don't need individual try/except blocks.

    Raises:
        typer.Exit: With appropriate exit code if function raises exception
    """
    try:
        return func()
    except typer.Exit:
        raise
    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=exit_code_for(e)) from e
