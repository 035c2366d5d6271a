"""
Evaluation harness generation.

The harness is a small companion script that imports the `run_<node>`
entry point of a module compiled with the graph backend, runs it with
JSON-encoded arguments, prints the result and writes it to
`__evaluate.json` in the working directory.
"""

import json
import keyword
import logging
from typing import Any

from ..core import ir
from ..core.errors import InvalidConfigurationError
from ..core.renderer import render
from .graph.templates import HARNESS

logger = logging.getLogger(__name__)

RESULT_FILE = "__evaluate.json"


def _pick_node(program: ir.AdlProgram, node_name: str | None) -> ir.GraphNodeDefinition:
    if node_name is None:
        for node in program.graph_nodes:
            if node.is_entry_point:
                return node
        if program.graph_nodes:
            raise InvalidConfigurationError(
                "All graph nodes are private. Mark one node public, or leave its "
                "visibility unset, to use it as an entry point."
            )
        raise InvalidConfigurationError(
            "No graph nodes found in the program. At least one public graph node is "
            "required as an entry point."
        )

    node = program.get_graph_node(node_name)
    if node is None:
        available = [n.node_name for n in program.graph_nodes]
        raise InvalidConfigurationError(
            f"Node '{node_name}' not found. Available nodes: {available}"
        )
    if not node.is_entry_point:
        raise InvalidConfigurationError(f"Node '{node_name}' is private and has no entry point")
    return node


def _check_module_name(module_name: str) -> None:
    parts = module_name.split(".")
    if not all(part.isidentifier() and not keyword.iskeyword(part) for part in parts):
        raise InvalidConfigurationError(
            f"'{module_name}' is not a valid Python module name. Rename the compiled "
            "module or pass its import name with --module."
        )


def generate_evaluation_harness(
    program: ir.AdlProgram,
    module_name: str,
    node_name: str | None = None,
    args: list[Any] | None = None,
) -> str:
    """
    Render the evaluation script for one entry node.

    Args:
        program: Parsed program the module was compiled from
        module_name: Import name of the compiled graph module
        node_name: Entry node; defaults to the first public node
        args: Default arguments, used when none are passed on the command line

    Returns:
        Python source of the harness

    Raises:
        InvalidConfigurationError: If the node is missing or private, or the
            module name cannot be imported
    """
    _check_module_name(module_name)
    node = _pick_node(program, node_name)
    logger.debug("Evaluation harness for %s.%s", module_name, node.node_name)
    return render(
        HARNESS,
        module_name=module_name,
        node_name=node.node_name,
        node_key=json.dumps(node.node_name),
        result_file=json.dumps(RESULT_FILE),
        default_args=repr(list(args or [])),
    )
