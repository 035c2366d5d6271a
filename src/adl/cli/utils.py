"""
ADL CLI Utilities.

Shared helpers used across CLI commands.
"""

import logging
import platform

import typer

from .._version import get_version


def version_callback(value: bool) -> None:
    """Display version and environment information."""
    if value:
        typer.echo(f"adlc {get_version()}")
        typer.echo(f"Python {platform.python_version()} ({platform.python_implementation()})")
        raise typer.Exit()


def configure_logging(level: str = "WARNING", verbose: bool = False) -> None:
    """Route library logging to stderr; `--verbose` forces DEBUG."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
