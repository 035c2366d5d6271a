"""
ADL command-line interface.

    adlc compile agent.adl --backend graph > agent.py
    adlc parse agent.adl
    adlc evaluate agent.adl --node main > run_eval.py
    adlc backends
"""

import typer

from .commands import backends_command, compile_command, evaluate_command, parse_command
from .utils import version_callback

app = typer.Typer(
    help="""adlc – compiler for ADL agent workflows

Commands:
  • compile   ADL source → Python (script or graph backend)
  • parse     ADL source → AST as JSON
  • evaluate  evaluation harness for a graph entry node
  • backends  list available backends
""",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and environment information",
    ),
) -> None:
    """adlc main callback for global options."""
    pass


app.command(name="compile")(compile_command)
app.command(name="parse")(parse_command)
app.command(name="evaluate")(evaluate_command)
app.command(name="backends")(backends_command)


def main() -> None:
    app(standalone_mode=True)


__all__ = ["app", "main"]
