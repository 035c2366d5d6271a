"""
Base generator for ADL backends.

A generator walks the AST once, depth-first and in source order, and
emits Python source. Dispatch goes through an explicit tag table, so a
node whose tag has no entry fails loudly with UnsupportedConstructError
instead of being skipped.

All mutable state for one generation pass lives in a GenerationContext
that is created fresh by every `generate()` call:
- a counter for fresh temporary names (`_time_start_3`, `_prompt_4`)
- the builtins used, turned into helper source at the end
- type hints seen, used for annotations and prompt response schemas
- the scope stack (module, function, node, step)
- a stack of hoisted lines, emitted before the statement being generated
- tools named by `uses`, waiting for the next prompt
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any

from ...core import ir
from ...core.errors import InvalidConfigurationError, UnsupportedConstructError
from ...core.manifest import CompilerConfig
from ...core.renderer import render
from . import builtins
from .templates import PRELUDE, PROMPT_FUNCTION
from .types import type_to_annotation, type_to_json_schema

logger = logging.getLogger(__name__)

INDENT = "    "

EXPRESSION_TYPES = (
    *ir.LITERAL_TYPES,
    ir.AccessExpression,
    ir.AdlArray,
    ir.AdlObject,
    ir.FunctionCall,
    ir.BinOpExpression,
)

TRIVIA_TYPES = (ir.NewLine, ir.Comment, ir.MultiLineComment)


@dataclass
class GenerationContext:
    """Per-pass generator state. Never shared between `generate()` calls."""

    counter: int = 0
    builtins_used: set[str] = field(default_factory=set)
    type_hints: dict[str, Any] = field(default_factory=dict)
    function_names: set[str] = field(default_factory=set)
    node_names: set[str] = field(default_factory=set)
    tool_names: set[str] = field(default_factory=set)
    pending_tools: list[str] = field(default_factory=list)
    scopes: list[str] = field(default_factory=lambda: ["module"])
    return_types: list[Any] = field(default_factory=list)
    expected_types: list[Any] = field(default_factory=list)
    hoisted: list[list[str]] = field(default_factory=list)

    def next_index(self) -> int:
        self.counter += 1
        return self.counter

    def fresh_name(self, prefix: str) -> str:
        """Unique temporary name, e.g. `_prompt_3`."""
        return f"_{prefix}_{self.next_index()}"

    @property
    def scope(self) -> str:
        return self.scopes[-1]

    @property
    def expected_type(self) -> Any:
        return self.expected_types[-1] if self.expected_types else None

    @contextmanager
    def enter(self, scope: str, return_type: Any = None) -> Iterator[None]:
        self.scopes.append(scope)
        self.return_types.append(return_type)
        try:
            yield
        finally:
            self.scopes.pop()
            self.return_types.pop()

    @contextmanager
    def expecting(self, variable_type: Any) -> Iterator[None]:
        self.expected_types.append(variable_type)
        try:
            yield
        finally:
            self.expected_types.pop()

    def hoist(self, lines: list[str]) -> None:
        self.hoisted[-1].extend(lines)

    @contextmanager
    def tool_scope(self) -> Iterator[None]:
        """`uses` inside a definition never leaks into the enclosing body."""
        saved, self.pending_tools = self.pending_tools, []
        try:
            yield
        finally:
            self.pending_tools = saved

    def take_tools(self) -> list[str]:
        tools, self.pending_tools = self.pending_tools, []
        return tools


# ---------------------------------------------------------------------------
# Source helpers
# ---------------------------------------------------------------------------


def escape_text(text: str, fstring: bool = False, multiline: bool = False) -> str:
    """Escape ADL string text for a double-quoted Python literal."""
    out = []
    i = 0
    while i < len(text):
        char = text[i]
        if char == "\\" and i + 1 < len(text):
            following = text[i + 1]
            # `\$` and `` \` `` only mean something in ADL
            out.append(following if following in "$`" else char + following)
            if fstring and following in "{}":
                out.append(following)
            i += 2
            continue
        if char == '"':
            out.append('\\"')
        elif char == "\n" and not multiline:
            out.append("\\n")
        elif char == "\r":
            out.append("\\r")
        elif fstring and char in "{}":
            out.append(char * 2)
        else:
            out.append(char)
        i += 1
    return "".join(out)


def python_string(segments: list[Any], multiline: bool = False) -> str:
    """Python literal for string segments; an f-string when interpolated."""
    interpolated = any(isinstance(s, ir.InterpolationSegment) for s in segments)
    parts = []
    for segment in segments:
        if isinstance(segment, ir.InterpolationSegment):
            parts.append("{" + segment.variable_name + "}")
        else:
            parts.append(escape_text(segment.value, fstring=interpolated, multiline=multiline))
    quote = '"""' if multiline else '"'
    prefix = "f" if interpolated else ""
    return f"{prefix}{quote}{''.join(parts)}{quote}"


def module_path(path: str) -> str:
    """Python module name for an import path: `./tools/search.py` -> `tools.search`."""
    if path.startswith("./"):
        path = path[2:]
    path = re.sub(r"\.(py|adl|js|ts)$", "", path)
    return path.replace("/", ".")


def indent(lines: list[str]) -> list[str]:
    return [INDENT + line if line else "" for line in lines]


def walk(nodes: list[Any], into_definitions: bool = True) -> Iterator[Any]:
    """Yield every statement-level node, descending into nested bodies."""
    for node in nodes:
        yield node
        if isinstance(node, (ir.FunctionDefinition, ir.GraphNodeDefinition)):
            if into_definitions:
                yield from walk(node.body, into_definitions)
        elif isinstance(node, ir.IfElse):
            yield from walk(node.then_body, into_definitions)
            yield from walk(node.else_body or [], into_definitions)
        elif isinstance(node, (ir.WhileLoop, ir.MessageThread, ir.TimeBlock)):
            yield from walk(node.body, into_definitions)
        elif isinstance(node, ir.MatchBlock):
            cases = [c.body for c in node.cases if isinstance(c, ir.MatchBlockCase)]
            yield from walk(cases, into_definitions)
        elif isinstance(node, ir.Assignment):
            yield from walk([node.value], into_definitions)


# ---------------------------------------------------------------------------
# Visitor
# ---------------------------------------------------------------------------


class BaseGenerator(ABC):
    """
    Visitor over the ADL AST producing Python source.

    Subclasses choose the program layout (`emit_program`) and refine the
    rules that differ between backends (calls, returns, node calls).
    """

    name = "base"
    uses_graph = False

    # tag -> visitor method; the closed set of constructs a backend handles
    DISPATCH: dict[str, str] = {
        "number": "visit_number",
        "string": "visit_string",
        "multiLineString": "visit_multi_line_string",
        "boolean": "visit_boolean",
        "variableName": "visit_variable_name",
        "prompt": "visit_prompt",
        "accessExpression": "visit_access_expression",
        "adlArray": "visit_array",
        "adlObject": "visit_object",
        "functionCall": "visit_function_call",
        "binOpExpression": "visit_bin_op",
        "functionParameter": "visit_function_parameter",
        "function": "visit_function_definition",
        "graphNode": "visit_graph_node",
        "nodeCall": "visit_node_call",
        "usesTool": "visit_uses_tool",
        "assignment": "visit_assignment",
        "returnStatement": "visit_return_statement",
        "typeHint": "visit_type_hint",
        "ifElse": "visit_if_else",
        "whileLoop": "visit_while_loop",
        "matchBlock": "visit_match_block",
        "messageThread": "visit_message_thread",
        "specialVar": "visit_special_var",
        "timeBlock": "visit_time_block",
        "importStatement": "visit_import_statement",
        "importNodeStatement": "visit_import_node_statement",
        "importToolStatement": "visit_import_tool_statement",
        "comment": "visit_comment",
        "multiLineComment": "visit_multi_line_comment",
        "newLine": "visit_new_line",
    }

    def __init__(self, config: CompilerConfig | None = None):
        self.config = config or CompilerConfig()
        self.ctx = GenerationContext()

    # -- entry point --------------------------------------------------------

    def generate(self, program: ir.AdlProgram) -> str:
        """
        Generate Python source for a whole program.

        Args:
            program: Parsed ADL program (not modified)

        Returns:
            Python source text

        Raises:
            UnsupportedConstructError: For a node tag without a rule
            InvalidConfigurationError: For invalid special variables
            MalformedTemplateError: If a template is rendered incorrectly
        """
        self.ctx = GenerationContext()
        self.collect_names(program)

        body_sections = self.emit_program(program)
        sections = [self.prelude(), builtins.helper_source_for(self.ctx.builtins_used)]
        sections.extend(body_sections)

        output = "\n\n\n".join(s.strip("\n") for s in sections if s.strip()) + "\n"
        logger.info(
            "Generated %s code: %d lines, builtins used: %s",
            self.name,
            output.count("\n"),
            sorted(self.ctx.builtins_used) or "none",
        )
        return output

    def collect_names(self, program: ir.AdlProgram) -> None:
        for node in walk(program.nodes):
            if isinstance(node, ir.FunctionDefinition):
                self.ctx.function_names.add(node.function_name)
            elif isinstance(node, ir.GraphNodeDefinition):
                self.ctx.node_names.add(node.node_name)
            elif isinstance(node, ir.ImportNodeStatement):
                self.ctx.node_names.update(node.imported_nodes)
        self.ctx.tool_names = set(self.ctx.function_names)
        for node in program.nodes:
            if isinstance(node, ir.ImportToolStatement):
                self.ctx.tool_names.update(node.imported_tools)
            elif isinstance(node, ir.ImportStatement) and node.import_kind == "named":
                self.ctx.tool_names.update(node.imported_names)

    def prelude(self) -> str:
        return render(
            PRELUDE,
            graph=self.uses_graph,
            default_model=json.dumps(self.config.default_model),
            statelog_host=json.dumps(self.config.statelog_host),
        )

    @abstractmethod
    def emit_program(self, program: ir.AdlProgram) -> list[str]:
        """Top-level sections of the generated module, after prelude and helpers."""
        pass

    # -- dispatch -----------------------------------------------------------

    def visit(self, node: Any) -> str | list[str]:
        tag = getattr(node, "type", None)
        method = self.DISPATCH.get(tag) if isinstance(tag, str) else None
        if method is None:
            raise UnsupportedConstructError(str(tag), self.name)
        return getattr(self, method)(node)

    def expression(self, node: Any) -> str:
        result = self.visit(node)
        if not isinstance(result, str):
            raise UnsupportedConstructError(f"{node.type} used as a value", self.name)
        return result

    def statement_lines(self, node: Any) -> list[str]:
        result = self.visit(node)
        return [result] if isinstance(result, str) else result

    def emit_statement(self, node: Any) -> list[str]:
        """Lines for one statement, preceded by anything it hoisted."""
        self.ctx.hoisted.append([])
        try:
            lines = self.statement_lines(node)
        finally:
            hoisted = self.ctx.hoisted.pop()
        return hoisted + lines

    def emit_body(self, nodes: list[Any]) -> list[str]:
        lines: list[str] = []
        previous = None
        for node in nodes:
            if isinstance(node, ir.NewLine):
                if isinstance(previous, ir.NewLine):
                    lines.append("")
            else:
                lines.extend(self.emit_statement(node))
            previous = node
        return lines

    def block(self, lines: list[str]) -> list[str]:
        """Indent a body, dropping blank edges and adding `pass` if it has no code."""
        while lines and not lines[0]:
            lines = lines[1:]
        while lines and not lines[-1]:
            lines = lines[:-1]
        if not any(line.strip() and not line.lstrip().startswith("#") for line in lines):
            lines = [*lines, "pass"]
        return indent(lines)

    def annotations_allowed(self) -> bool:
        return True

    # -- literals -----------------------------------------------------------

    def visit_number(self, node: ir.NumberLiteral) -> str:
        return node.value

    def visit_boolean(self, node: ir.BooleanLiteral) -> str:
        return "True" if node.value else "False"

    def visit_string(self, node: ir.StringLiteral) -> str:
        return python_string(node.segments)

    def visit_multi_line_string(self, node: ir.MultiLineStringLiteral) -> str:
        return python_string(node.segments, multiline=True)

    def visit_variable_name(self, node: ir.VariableNameLiteral) -> str:
        return node.value

    def visit_prompt(self, node: ir.PromptLiteral) -> str:
        function_name = self.ctx.fresh_name("prompt")
        parameters = ", ".join(node.interpolated_names)
        schema = type_to_json_schema(self.ctx.expected_type)
        source = render(
            PROMPT_FUNCTION,
            function_name=function_name,
            parameters=parameters,
            prompt=python_string(node.segments),
            response_schema=repr(schema),
            config=self.expression(node.config) if node.config else None,
            tools=self.tools_argument(self.ctx.take_tools()),
        )
        self.ctx.hoist(source.rstrip("\n").split("\n"))
        return f"{function_name}({parameters})"

    @staticmethod
    def tools_argument(names: list[str]) -> str | None:
        if not names:
            return None
        return "{" + ", ".join(f"{json.dumps(name)}: {name}" for name in names) + "}"

    # -- expressions --------------------------------------------------------

    def visit_access_expression(self, node: ir.AccessExpression) -> str:
        text = self.expression(node.base)
        for element in node.chain:
            if isinstance(element, ir.PropertyAccess):
                text += f".{element.name}"
            elif isinstance(element, ir.IndexAccess):
                text += f"[{self.expression(element.index)}]"
            else:
                arguments = ", ".join(self.expression(a) for a in element.call.arguments)
                text += f".{element.call.function_name}({arguments})"
        return text

    def visit_array(self, node: ir.AdlArray) -> str:
        return "[" + ", ".join(self.expression(item) for item in node.items) + "]"

    def visit_object(self, node: ir.AdlObject) -> str:
        entries = ", ".join(
            f"{json.dumps(entry.key)}: {self.expression(entry.value)}" for entry in node.entries
        )
        return "{" + entries + "}"

    def visit_function_call(self, node: ir.FunctionCall) -> str:
        arguments = ", ".join(self.expression(a) for a in node.arguments)
        return f"{self.resolve_function(node.function_name)}({arguments})"

    def resolve_function(self, name: str) -> str:
        """User definitions shadow builtins; builtins are recorded for helper emission."""
        if name in self.ctx.function_names or name in self.ctx.node_names:
            return name
        if builtins.is_builtin(name):
            self.ctx.builtins_used.add(name)
            return builtins.resolve_name(name)
        return name

    def visit_bin_op(self, node: ir.BinOpExpression) -> str:
        return f"{self.expression(node.left)} {node.operator.value} {self.expression(node.right)}"

    # -- definitions --------------------------------------------------------

    def visit_function_parameter(self, node: ir.FunctionParameter) -> str:
        if node.type_hint is None:
            return node.name
        return f"{node.name}: {type_to_annotation(node.type_hint)}"

    def docstring_lines(self, doc_string: ir.DocString | None) -> list[str]:
        if doc_string is None:
            return []
        value = doc_string.value.replace('"""', '\\"\\"\\"')
        lines = value.split("\n")
        if len(lines) == 1:
            return [f'"""{value}"""']
        return [f'"""{lines[0]}', *lines[1:], '"""']

    def visit_function_definition(self, node: ir.FunctionDefinition) -> list[str]:
        parameters = ", ".join(self.visit_function_parameter(p) for p in node.parameters)
        returns = f" -> {type_to_annotation(node.return_type)}" if node.return_type else ""
        for parameter in node.parameters:
            if parameter.type_hint is not None:
                self.ctx.type_hints[parameter.name] = parameter.type_hint

        with self.ctx.enter("function", node.return_type), self.ctx.tool_scope():
            body = self.docstring_lines(node.doc_string) + self.emit_body(node.body)
        return [f"def {node.function_name}({parameters}){returns}:", *self.block(body)]

    def visit_graph_node(self, node: ir.GraphNodeDefinition) -> list[str]:
        parameters = ", ".join(self.visit_function_parameter(p) for p in node.parameters)
        returns = f" -> {type_to_annotation(node.return_type)}" if node.return_type else ""
        with self.ctx.enter("node", node.return_type), self.ctx.tool_scope():
            body = self.emit_body(node.body)
        return [f"def {node.node_name}({parameters}){returns}:", *self.block(body)]

    def visit_node_call(self, node: ir.NodeCall) -> list[str]:
        arguments = ", ".join(self.expression(a) for a in node.arguments)
        call = f"{node.node_name}({arguments})"
        if self.ctx.scope == "module":
            return [call]
        return [f"return {call}"]

    # -- statements ---------------------------------------------------------

    def visit_uses_tool(self, node: ir.UsesTool) -> list[str]:
        for name in node.tool_names:
            if name not in self.ctx.tool_names:
                raise InvalidConfigurationError(
                    f"Unknown tool '{name}'. Tools must be functions defined or imported "
                    "in this file"
                )
            if name not in self.ctx.pending_tools:
                self.ctx.pending_tools.append(name)
        return []

    def visit_assignment(self, node: ir.Assignment) -> list[str]:
        name = node.variable_name
        if isinstance(node.value, ir.MessageThread):
            return self.message_thread_lines(node.value, binding=name)
        if isinstance(node.value, ir.TimeBlock):
            return self.time_block_lines(node.value, binding=name)

        if node.type_hint is not None:
            self.ctx.type_hints[name] = node.type_hint
        with self.ctx.expecting(self.ctx.type_hints.get(name)):
            value = self.expression(node.value)

        if node.type_hint is not None and self.annotations_allowed():
            return [f"{name}: {type_to_annotation(node.type_hint)} = {value}"]
        return [f"{name} = {value}"]

    def visit_return_statement(self, node: ir.ReturnStatement) -> list[str]:
        value = None
        if node.value is not None:
            return_type = self.ctx.return_types[-1] if self.ctx.return_types else None
            with self.ctx.expecting(return_type):
                value = self.expression(node.value)
        return self.return_lines(value)

    def return_lines(self, value: str | None) -> list[str]:
        if self.ctx.scope == "module":
            # Nothing to return from at module level; keep the side effects
            return [value] if value else []
        return [f"return {value}" if value else "return"]

    def visit_type_hint(self, node: ir.TypeHint) -> list[str]:
        self.ctx.type_hints[node.variable_name] = node.variable_type
        if not self.annotations_allowed():
            return []
        return [f"{node.variable_name}: {type_to_annotation(node.variable_type)}"]

    def visit_if_else(self, node: ir.IfElse) -> list[str]:
        lines = [f"if {self.expression(node.condition)}:", *self.block(self.emit_body(node.then_body))]
        else_body = node.else_body
        while else_body is not None:
            if len(else_body) == 1 and isinstance(else_body[0], ir.IfElse):
                nested = else_body[0]
                lines.append(f"elif {self.expression(nested.condition)}:")
                lines.extend(self.block(self.emit_body(nested.then_body)))
                else_body = nested.else_body
            else:
                lines.append("else:")
                lines.extend(self.block(self.emit_body(else_body)))
                break
        return lines

    def visit_while_loop(self, node: ir.WhileLoop) -> list[str]:
        return [f"while {self.expression(node.condition)}:", *self.block(self.emit_body(node.body))]

    def visit_match_block(self, node: ir.MatchBlock) -> list[str]:
        """Lower a match block to an if/elif chain on a temporary."""
        subject = self.ctx.fresh_name("match")
        lines = [f"{subject} = {self.expression(node.expression)}"]
        keyword = "if"
        default = None
        for case in node.cases:
            if isinstance(case, ir.Comment):
                lines.extend(self.visit_comment(case))
                continue
            if case.is_default:
                # Arms after `_` can never match
                default = case
                break
            lines.append(f"{keyword} {subject} == {self.expression(case.case_value)}:")
            lines.extend(self.block(self.emit_body([case.body])))
            keyword = "elif"

        if default is not None:
            if keyword == "if":
                lines.extend(self.emit_body([default.body]))
            else:
                lines.append("else:")
                lines.extend(self.block(self.emit_body([default.body])))
        return lines

    def visit_message_thread(self, node: ir.MessageThread) -> list[str]:
        return self.message_thread_lines(node)

    def message_thread_lines(self, node: ir.MessageThread, binding: str | None = None) -> list[str]:
        saved = self.ctx.fresh_name("saved_messages")
        thread = {
            "thread": "MessageThread()",
            "subthread": f"{saved}.subthread()",
            "parallel": f"{saved}.parallel()",
        }[node.thread_type]
        body = self.emit_body(node.body)
        if binding:
            body.append(f"{binding} = _ctx.messages.new_messages()")
        return [
            f"{saved} = _ctx.messages",
            f"_ctx.messages = {thread}",
            "try:",
            *self.block(body),
            "finally:",
            f"{INDENT}_ctx.messages = {saved}",
        ]

    def visit_time_block(self, node: ir.TimeBlock) -> list[str]:
        return self.time_block_lines(node)

    def time_block_lines(self, node: ir.TimeBlock, binding: str | None = None) -> list[str]:
        index = self.ctx.next_index()
        start, end = f"_time_start_{index}", f"_time_end_{index}"
        lines = [f"{start} = time.perf_counter()", *self.emit_body(node.body)]
        lines.append(f"{end} = time.perf_counter()")
        if node.print_time:
            lines.append(f'print(f"Time taken: {{{end} - {start}:.3f}}s")')
        if binding:
            lines.append(f"{binding} = {end} - {start}")
        return lines

    def visit_special_var(self, node: ir.SpecialVar) -> list[str]:
        if node.name not in ir.SPECIAL_VAR_NAMES:
            raise InvalidConfigurationError(
                f"Unknown special variable '@{node.name}'. "
                f"Expected one of: {', '.join(ir.SPECIAL_VAR_NAMES)}"
            )
        value = self.expression(node.value)
        if node.name == "model":
            return [f"_ctx.client = _get_client_with_config(model={value})"]
        return [f"_ctx.messages = MessageThread({value})"]

    # -- imports ------------------------------------------------------------

    def visit_import_statement(self, node: ir.ImportStatement) -> list[str]:
        module = module_path(node.module_path)
        if node.import_kind == "named":
            return [f"from {module} import {', '.join(node.imported_names)}"]
        alias = node.imported_names[0]
        if alias == module:
            return [f"import {module}"]
        return [f"import {module} as {alias}"]

    def visit_import_node_statement(self, node: ir.ImportNodeStatement) -> list[str]:
        return [f"from {module_path(node.adl_file)} import {', '.join(node.imported_nodes)}"]

    def visit_import_tool_statement(self, node: ir.ImportToolStatement) -> list[str]:
        return [f"from {module_path(node.adl_file)} import {', '.join(node.imported_tools)}"]

    # -- trivia -------------------------------------------------------------

    def visit_comment(self, node: ir.Comment) -> list[str]:
        return [f"#{node.content}"]

    def visit_multi_line_comment(self, node: ir.MultiLineComment) -> list[str]:
        return [f"# {line.strip()}".rstrip() for line in node.content.strip("\n").split("\n")]

    def visit_new_line(self, node: ir.NewLine) -> list[str]:
        return []
