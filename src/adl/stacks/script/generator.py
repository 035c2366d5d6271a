"""
Linear-script backend.

Emits a single Python module that runs top to bottom: the runtime
prelude, builtin helpers, then every statement in source order. Graph
nodes become plain functions and `goto` becomes a call.
"""

import logging

from ...core import ir
from ..base.generator import BaseGenerator

logger = logging.getLogger(__name__)


class ScriptGenerator(BaseGenerator):
    """Straight-line Python in program order."""

    name = "script"

    def emit_program(self, program: ir.AdlProgram) -> list[str]:
        lines = self.emit_body(program.nodes)
        logger.debug("Script body: %d lines from %d nodes", len(lines), len(program.nodes))
        return ["\n".join(lines)]
