"""
ADL compiler commands: compile, parse, evaluate, backends.

Every command reads exactly one ADL file. Generated output goes to stdout;
diagnostics go to stderr with exit status 1.
"""

import json
import logging
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console
from rich.table import Table

from ..core.errors import AdlError, ParseError
from ..core.manifest import CompilerConfig, find_config, load_config
from ..core.parser import parse_file
from ..stacks import generate, registry
from ..stacks.harness import generate_evaluation_harness
from .utils import configure_logging

logger = logging.getLogger(__name__)

console = Console()


def _load(config: Path | None, source: Path, verbose: bool) -> CompilerConfig:
    cfg = load_config(config or find_config(source.parent))
    configure_logging(cfg.log_level, verbose)
    if cfg.source is not None:
        logger.info("Using config %s (backend=%s)", cfg.source, cfg.backend)
    else:
        logger.info("No adl.toml found, using defaults")
    return cfg


def _fail(error: AdlError) -> NoReturn:
    if isinstance(error, ParseError):
        typer.echo(f"Parse error: {error.format_diagnostic()}", err=True)
    else:
        typer.echo(f"Error: {error}", err=True)
    raise typer.Exit(code=1)


def compile_command(
    file: Path = typer.Argument(..., help="ADL source file"),
    backend: str | None = typer.Option(
        None, "--backend", "-b", help="Backend: 'script' or 'graph' (default from adl.toml)"
    ),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to adl.toml"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Write generated code to a file instead of stdout"
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """
    Compile an ADL file to Python.
    """
    try:
        cfg = _load(config, file, verbose)
        program = parse_file(file)
        source = generate(program, backend, cfg)
    except AdlError as e:
        _fail(e)

    if output is not None:
        output.write_text(source, encoding="utf-8")
        typer.echo(f"Wrote {output}", err=True)
    else:
        typer.echo(source, nl=False)


def parse_command(
    file: Path = typer.Argument(..., help="ADL source file"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """
    Parse an ADL file and print its AST as JSON.
    """
    configure_logging(verbose=verbose)
    try:
        program = parse_file(file)
    except AdlError as e:
        _fail(e)

    typer.echo(program.model_dump_json(indent=2))


def evaluate_command(
    file: Path = typer.Argument(..., help="ADL source file"),
    module: str | None = typer.Option(
        None, "--module", "-m", help="Import name of the compiled module (default: file stem)"
    ),
    node: str | None = typer.Option(
        None, "--node", "-n", help="Entry node (default: first public node)"
    ),
    args: str = typer.Option("[]", "--args", help="Default node arguments as a JSON array"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """
    Print an evaluation harness for a graph-compiled ADL file.

    The harness runs one entry node and writes the result to __evaluate.json.
    """
    configure_logging(verbose=verbose)
    try:
        default_args = json.loads(args)
    except json.JSONDecodeError as e:
        typer.echo(f"Error: --args is not valid JSON: {e}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(default_args, list):
        typer.echo("Error: --args must be a JSON array", err=True)
        raise typer.Exit(code=1)

    try:
        program = parse_file(file)
        source = generate_evaluation_harness(
            program, module or file.stem, node_name=node, args=default_args
        )
    except AdlError as e:
        _fail(e)

    typer.echo(source, nl=False)


def backends_command() -> None:
    """
    List available code-generation backends.
    """
    table = Table(title="Backends")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    for name in registry.list_backends():
        table.add_row(name, registry.describe(name))
    console.print(table)
