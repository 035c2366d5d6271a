"""
Statement and definition nodes for the ADL AST, and the closed `AdlNode` union.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from .expressions import (
    AccessExpression,
    AdlArray,
    AdlObject,
    BinOpExpression,
    BooleanLiteral,
    CallArgument,
    Expression,
    ExpressionUnion,
    FunctionCall,
    MultiLineStringLiteral,
    NumberLiteral,
    PromptLiteral,
    StringLiteral,
    VariableNameLiteral,
)
from .types import VariableType

SPECIAL_VAR_NAMES = ("model", "messages")

# ---------------------------------------------------------------------------
# Definitions
# ---------------------------------------------------------------------------


class FunctionParameter(BaseModel):
    type: Literal["functionParameter"] = "functionParameter"
    name: str
    type_hint: VariableType | None = None

    model_config = ConfigDict(frozen=True)


class DocString(BaseModel):
    type: Literal["docString"] = "docString"
    value: str

    model_config = ConfigDict(frozen=True)


class FunctionDefinition(BaseModel):
    """A function: `def name(params): returnType { body }`, with an optional docstring."""

    type: Literal["function"] = "function"
    function_name: str
    parameters: list[FunctionParameter] = Field(default_factory=list)
    body: list[AdlNode] = Field(default_factory=list)
    return_type: VariableType | None = None
    doc_string: DocString | None = None

    model_config = ConfigDict(frozen=True)


class GraphNodeDefinition(BaseModel):
    """
    A node of the execution graph: `[public|private] node name(params) { body }`.

    Visibility is None when not written. Private nodes get no entry point.
    """

    type: Literal["graphNode"] = "graphNode"
    node_name: str
    parameters: list[FunctionParameter] = Field(default_factory=list)
    body: list[AdlNode] = Field(default_factory=list)
    return_type: VariableType | None = None
    visibility: Literal["public", "private"] | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def is_entry_point(self) -> bool:
        return self.visibility != "private"


class NodeCall(BaseModel):
    """Transfer of control to a graph node: `goto name(args)`."""

    type: Literal["nodeCall"] = "nodeCall"
    node_name: str
    arguments: list[CallArgument] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class UsesTool(BaseModel):
    """`uses search, lookup`: tools offered to the next prompt in the same body."""

    type: Literal["usesTool"] = "usesTool"
    tool_names: list[str] = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Statements
# ---------------------------------------------------------------------------


class Assignment(BaseModel):
    type: Literal["assignment"] = "assignment"
    variable_name: str
    type_hint: VariableType | None = None
    value: AdlNode

    model_config = ConfigDict(frozen=True)


class ReturnStatement(BaseModel):
    type: Literal["returnStatement"] = "returnStatement"
    value: Expression | None = None

    model_config = ConfigDict(frozen=True)


class TypeHint(BaseModel):
    """`name :: type`."""

    type: Literal["typeHint"] = "typeHint"
    variable_name: str
    variable_type: VariableType

    model_config = ConfigDict(frozen=True)


Condition = Annotated[
    BinOpExpression
    | AccessExpression
    | FunctionCall
    | NumberLiteral
    | StringLiteral
    | MultiLineStringLiteral
    | BooleanLiteral
    | VariableNameLiteral
    | PromptLiteral,
    Field(discriminator="type"),
]


class IfElse(BaseModel):
    type: Literal["ifElse"] = "ifElse"
    condition: Condition
    then_body: list[AdlNode] = Field(default_factory=list)
    else_body: list[AdlNode] | None = None

    model_config = ConfigDict(frozen=True)


class WhileLoop(BaseModel):
    type: Literal["whileLoop"] = "whileLoop"
    condition: Condition
    body: list[AdlNode] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class MatchBlockCase(BaseModel):
    """One `value => statement` arm. `case_value` is None for the `_` arm."""

    type: Literal["matchBlockCase"] = "matchBlockCase"
    case_value: Expression | None = None
    body: AdlNode

    model_config = ConfigDict(frozen=True)

    @property
    def is_default(self) -> bool:
        return self.case_value is None


class MatchBlock(BaseModel):
    type: Literal["matchBlock"] = "matchBlock"
    expression: Expression
    cases: list[Annotated[MatchBlockCase | Comment, Field(discriminator="type")]] = Field(
        default_factory=list
    )

    model_config = ConfigDict(frozen=True)


class MessageThread(BaseModel):
    """
    A scoped message history.

    thread    -> fresh, empty history
    subthread -> child of the enclosing history
    parallel  -> sibling branch sharing the enclosing history
    """

    type: Literal["messageThread"] = "messageThread"
    thread_type: Literal["thread", "subthread", "parallel"] = "thread"
    body: list[AdlNode] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class SpecialVar(BaseModel):
    """
    `@model = "..."` or `@messages = [...]`.

    The name is validated by the generators, not here, so that a hand-built
    tree with an unknown name can be represented and rejected.
    """

    type: Literal["specialVar"] = "specialVar"
    name: str
    value: Expression

    model_config = ConfigDict(frozen=True)


class TimeBlock(BaseModel):
    type: Literal["timeBlock"] = "timeBlock"
    body: list[AdlNode] = Field(default_factory=list)
    print_time: bool = False

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Imports
# ---------------------------------------------------------------------------


class ImportStatement(BaseModel):
    """
    Import of Python names.

    named     -> import { a, b } from "mod"
    namespace -> import * as ns from "mod"
    default   -> import thing from "mod"
    """

    type: Literal["importStatement"] = "importStatement"
    import_kind: Literal["named", "namespace", "default"]
    imported_names: list[str]
    module_path: str

    model_config = ConfigDict(frozen=True)


class ImportNodeStatement(BaseModel):
    type: Literal["importNodeStatement"] = "importNodeStatement"
    imported_nodes: list[str]
    adl_file: str

    model_config = ConfigDict(frozen=True)


class ImportToolStatement(BaseModel):
    type: Literal["importToolStatement"] = "importToolStatement"
    imported_tools: list[str]
    adl_file: str

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Trivia
# ---------------------------------------------------------------------------


class Comment(BaseModel):
    type: Literal["comment"] = "comment"
    content: str

    model_config = ConfigDict(frozen=True)


class MultiLineComment(BaseModel):
    type: Literal["multiLineComment"] = "multiLineComment"
    content: str

    model_config = ConfigDict(frozen=True)


class NewLine(BaseModel):
    type: Literal["newLine"] = "newLine"

    model_config = ConfigDict(frozen=True)


AdlNode = Annotated[
    ExpressionUnion
    | FunctionParameter
    | FunctionDefinition
    | GraphNodeDefinition
    | NodeCall
    | UsesTool
    | Assignment
    | ReturnStatement
    | TypeHint
    | IfElse
    | WhileLoop
    | MatchBlock
    | MessageThread
    | SpecialVar
    | TimeBlock
    | ImportStatement
    | ImportNodeStatement
    | ImportToolStatement
    | Comment
    | MultiLineComment
    | NewLine,
    Field(discriminator="type"),
]

for _model in (
    FunctionDefinition,
    GraphNodeDefinition,
    Assignment,
    IfElse,
    WhileLoop,
    MatchBlockCase,
    MatchBlock,
    MessageThread,
    TimeBlock,
):
    _model.model_rebuild()
