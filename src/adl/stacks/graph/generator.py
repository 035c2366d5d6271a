"""
Execution-graph backend.

Emits a module that registers every unit of work as a node of a
runtime `Graph`:

- graph nodes become `@graph.node` functions taking the graph state,
  with parameters unpacked from `state["data"]`
- function definitions stay plain functions and are also registered as
  nodes, so calls between them go through `graph.invoke`
- every other top-level executable statement becomes a synthetic
  `_step_<n>` node; steps are chained with edges in program order

Public nodes (and nodes with no visibility) get a `run_<name>` entry
point; private nodes never do.
"""

import json
import logging
from itertools import pairwise
from typing import Any

from ...core import ir
from ...core.manifest import CompilerConfig
from ...core.renderer import render
from ..base.generator import EXPRESSION_TYPES, TRIVIA_TYPES, module_path, walk
from ..script.generator import ScriptGenerator
from .templates import ENTRY_POINT, GRAPH_SETUP, MAIN_BLOCK

logger = logging.getLogger(__name__)

MODULE_LEVEL_TYPES = (
    *TRIVIA_TYPES,
    ir.ImportStatement,
    ir.ImportNodeStatement,
    ir.ImportToolStatement,
    ir.TypeHint,
    ir.UsesTool,
)


def _ends_in_transfer(nodes: list[Any]) -> bool:
    code = [n for n in nodes if not isinstance(n, TRIVIA_TYPES)]
    return bool(code) and isinstance(code[-1], (ir.ReturnStatement, ir.NodeCall))


class GraphGenerator(ScriptGenerator):
    """Python module built around an execution graph."""

    name = "graph"
    uses_graph = True

    def __init__(self, config: CompilerConfig | None = None, graph_name: str = "adl"):
        super().__init__(config)
        self.graph_name = graph_name
        self.graph_functions: set[str] = set()

    # -- program layout -----------------------------------------------------

    def collect_names(self, program: ir.AdlProgram) -> None:
        super().collect_names(program)
        self.graph_functions = {f.function_name for f in program.functions}

    def emit_program(self, program: ir.AdlProgram) -> list[str]:
        sections = [
            render(
                GRAPH_SETUP,
                name=json.dumps(self.graph_name),
                debug=repr(self.config.graph.debug),
            )
        ]
        steps: list[str] = []
        entry_nodes: list[str] = []

        for node in program.nodes:
            if isinstance(node, ir.NewLine):
                continue
            if isinstance(node, MODULE_LEVEL_TYPES):
                sections.append("\n".join(self.emit_statement(node)))
            elif isinstance(node, ir.FunctionDefinition):
                sections.append("\n".join(self.emit_statement(node)))
                sections.append(self.function_node(node))
            elif isinstance(node, ir.GraphNodeDefinition):
                sections.append("\n".join(self.emit_statement(node)))
                if node.is_entry_point:
                    entry_nodes.append(node.node_name)
                    sections.append(
                        render(
                            ENTRY_POINT,
                            node_name=node.node_name,
                            node_key=json.dumps(node.node_name),
                        )
                    )
            else:
                step, lines = self.step_node(node)
                steps.append(step)
                sections.append("\n".join(lines))

        if len(steps) > 1:
            edges = [f"graph.edge({json.dumps(a)}, {json.dumps(b)})" for a, b in pairwise(steps)]
            sections.append("\n".join(edges))

        sections.append(
            render(
                MAIN_BLOCK,
                start_step=json.dumps(steps[0]) if steps else None,
                entry_node=entry_nodes[0] if entry_nodes else None,
            )
        )
        logger.debug(
            "Graph layout: %d steps, %d nodes, %d entry points",
            len(steps),
            len(program.graph_nodes),
            len(entry_nodes),
        )
        return sections

    def function_node(self, node: ir.FunctionDefinition) -> str:
        """Register a function as a node, staging its result before returning it."""
        name = node.function_name
        holder = self.ctx.fresh_name("result")
        return "\n".join(
            [
                f"@graph.node({json.dumps(name)})",
                f"def _{name}_node(state):",
                f"    {holder} = {name}(*_node_args(state, {len(node.parameters)}))",
                f'    return {{**state, "data": {holder}}}',
            ]
        )

    def step_node(self, node: Any) -> tuple[str, list[str]]:
        """Wrap one top-level statement in a synthetic `_step_<n>` node."""
        step = self.ctx.fresh_name("step")
        with self.ctx.enter("step"):
            if isinstance(node, EXPRESSION_TYPES) and not (
                isinstance(node, ir.BinOpExpression) and node.operator.is_assignment
            ):
                holder = self.ctx.fresh_name("result")
                self.ctx.hoisted.append([])
                try:
                    value = self.expression(node)
                finally:
                    hoisted = self.ctx.hoisted.pop()
                body = [*hoisted, f"{holder} = {value}", f'return {{**state, "data": {holder}}}']
            else:
                body = self.emit_statement(node)
                if not _ends_in_transfer([node]):
                    body.append("return state")

        names = sorted(self.assigned_names(node))
        if names:
            body.insert(0, f"global {', '.join(names)}")
        return step, [f"@graph.node({json.dumps(step)})", f"def {step}(state):", *self.block(body)]

    @staticmethod
    def assigned_names(node: Any) -> set[str]:
        """Module-level names a statement assigns, outside nested definitions."""
        names = set()
        for child in walk([node], into_definitions=False):
            if isinstance(child, ir.Assignment):
                names.add(child.variable_name)
            elif (
                isinstance(child, ir.BinOpExpression)
                and child.operator.is_assignment
                and isinstance(child.left, ir.VariableNameLiteral)
            ):
                names.add(child.left.value)
        return names

    # -- refined rules ------------------------------------------------------

    def annotations_allowed(self) -> bool:
        # Annotated assignment to a `global` name is a SyntaxError
        return self.ctx.scope != "step"

    def visit_function_call(self, node: ir.FunctionCall) -> str:
        name = node.function_name
        if name in self.graph_functions or name in self.ctx.node_names:
            arguments = ", ".join(self.expression(a) for a in node.arguments)
            return f"graph.invoke({json.dumps(name)}, [{arguments}])"
        return super().visit_function_call(node)

    def visit_graph_node(self, node: ir.GraphNodeDefinition) -> list[str]:
        parameters = [p.name for p in node.parameters]
        for parameter in node.parameters:
            if parameter.type_hint is not None:
                self.ctx.type_hints[parameter.name] = parameter.type_hint

        with self.ctx.enter("node", node.return_type), self.ctx.tool_scope():
            body = []
            if parameters:
                body.append(f"[{', '.join(parameters)}] = _node_args(state, {len(parameters)})")
            body.extend(self.emit_body(node.body))
            if not _ends_in_transfer(node.body):
                body.append("return state")

        return [
            f"@graph.node({json.dumps(node.node_name)})",
            f"def {node.node_name}(state):",
            *self.block(body),
        ]

    def visit_node_call(self, node: ir.NodeCall) -> list[str]:
        arguments = ", ".join(self.expression(a) for a in node.arguments)
        key = json.dumps(node.node_name)
        if self.ctx.scope in ("node", "step"):
            return [f'return graph.go_to({key}, {{**state, "data": [{arguments}]}})']
        state = f'{{"messages": _ctx.messages, "data": [{arguments}]}}'
        if self.ctx.scope == "module":
            return [f"graph.run({key}, {state})"]
        return [f"return graph.go_to({key}, {state})"]

    def return_lines(self, value: str | None) -> list[str]:
        if self.ctx.scope in ("node", "step"):
            return [f'return {{**state, "data": {value if value else "None"}}}']
        return super().return_lines(value)

    def visit_import_node_statement(self, node: ir.ImportNodeStatement) -> list[str]:
        module = module_path(node.adl_file)
        alias = f"_{module.replace('.', '_')}_graph"
        names = ", ".join(json.dumps(n) for n in node.imported_nodes)
        return [f"from {module} import graph as {alias}", f"graph.merge({alias}, [{names}])"]
