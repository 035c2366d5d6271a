"""
Expression nodes for the ADL AST.

Literals, prompts, access chains, data structures, calls and binary
operations. Everything here is produced by the parser and read-only
afterwards; each model carries a `type` tag used as the union
discriminator.

Access chains:
- greeting.length            -> PropertyAccess
- items[0]                   -> IndexAccess
- response.json().title      -> MethodCall followed by PropertyAccess
"""

from __future__ import annotations

from enum import StrEnum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# String and prompt segments
# ---------------------------------------------------------------------------


class TextSegment(BaseModel):
    """Literal text inside a string or prompt."""

    type: Literal["text"] = "text"
    value: str

    model_config = ConfigDict(frozen=True)


class InterpolationSegment(BaseModel):
    """A `${name}` reference inside a string or prompt."""

    type: Literal["interpolation"] = "interpolation"
    variable_name: str

    model_config = ConfigDict(frozen=True)


Segment = Annotated[TextSegment | InterpolationSegment, Field(discriminator="type")]


# ---------------------------------------------------------------------------
# Literals
# ---------------------------------------------------------------------------


class NumberLiteral(BaseModel):
    """A number, kept as its source text (`42`, `-3.5`)."""

    type: Literal["number"] = "number"
    value: str

    model_config = ConfigDict(frozen=True)


class StringLiteral(BaseModel):
    type: Literal["string"] = "string"
    segments: list[Segment] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class MultiLineStringLiteral(BaseModel):
    """A triple-quoted string. Interpolation works as in single-line strings."""

    type: Literal["multiLineString"] = "multiLineString"
    segments: list[Segment] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class BooleanLiteral(BaseModel):
    type: Literal["boolean"] = "boolean"
    value: bool

    model_config = ConfigDict(frozen=True)


class VariableNameLiteral(BaseModel):
    type: Literal["variableName"] = "variableName"
    value: str

    model_config = ConfigDict(frozen=True)


class PromptLiteral(BaseModel):
    """
    A prompt sent to the LLM client.

    Written either as a backtick literal (`` `Summarise ${text}` ``) or as
    `llm("Summarise ${text}", {temperature: 0})`, where the optional object
    is passed through as client configuration.
    """

    type: Literal["prompt"] = "prompt"
    segments: list[Segment] = Field(default_factory=list)
    config: AdlObject | None = None

    model_config = ConfigDict(frozen=True)

    @property
    def interpolated_names(self) -> list[str]:
        """Variable names referenced by the prompt, first occurrence order."""
        seen: list[str] = []
        for segment in self.segments:
            if isinstance(segment, InterpolationSegment) and segment.variable_name not in seen:
                seen.append(segment.variable_name)
        return seen


# ---------------------------------------------------------------------------
# Access chains
# ---------------------------------------------------------------------------


class PropertyAccess(BaseModel):
    kind: Literal["property"] = "property"
    name: str

    model_config = ConfigDict(frozen=True)


class IndexAccess(BaseModel):
    kind: Literal["index"] = "index"
    index: Expression

    model_config = ConfigDict(frozen=True)


class MethodCall(BaseModel):
    kind: Literal["methodCall"] = "methodCall"
    call: FunctionCall

    model_config = ConfigDict(frozen=True)


ChainElement = Annotated[
    PropertyAccess | IndexAccess | MethodCall,
    Field(discriminator="kind"),
]


class AccessExpression(BaseModel):
    """
    A base value followed by one or more property, index or method steps.

    Names are not resolved here; whether `base` exists is decided by the
    generated program at run time.
    """

    type: Literal["accessExpression"] = "accessExpression"
    base: Annotated[VariableNameLiteral | FunctionCall, Field(discriminator="type")]
    chain: list[ChainElement] = Field(min_length=1)

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


class AdlArray(BaseModel):
    type: Literal["adlArray"] = "adlArray"
    items: list[Expression] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class AdlObjectEntry(BaseModel):
    key: str
    value: Expression

    model_config = ConfigDict(frozen=True)


class AdlObject(BaseModel):
    type: Literal["adlObject"] = "adlObject"
    entries: list[AdlObjectEntry] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


# ---------------------------------------------------------------------------
# Calls and operators
# ---------------------------------------------------------------------------


class FunctionCall(BaseModel):
    """Call of a builtin, a user function, or a name imported from Python."""

    type: Literal["functionCall"] = "functionCall"
    function_name: str
    arguments: list[CallArgument] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class BinaryOp(StrEnum):
    """Binary operators. Longer operators are listed first for matching."""

    EQ = "=="
    NE = "!="
    ADD_ASSIGN = "+="
    SUB_ASSIGN = "-="
    MUL_ASSIGN = "*="
    DIV_ASSIGN = "/="
    LE = "<="
    GE = ">="
    ADD = "+"
    SUB = "-"
    MUL = "*"
    DIV = "/"
    LT = "<"
    GT = ">"

    @property
    def is_assignment(self) -> bool:
        return self in (
            BinaryOp.ADD_ASSIGN,
            BinaryOp.SUB_ASSIGN,
            BinaryOp.MUL_ASSIGN,
            BinaryOp.DIV_ASSIGN,
        )


class BinOpExpression(BaseModel):
    """
    Binary operation: left op right.

    Operands are never themselves binary operations; the grammar has no
    precedence climbing.
    """

    type: Literal["binOpExpression"] = "binOpExpression"
    operator: BinaryOp
    left: Operand
    right: Operand

    model_config = ConfigDict(frozen=True)


ExpressionUnion = (
    NumberLiteral
    | StringLiteral
    | MultiLineStringLiteral
    | BooleanLiteral
    | VariableNameLiteral
    | PromptLiteral
    | AccessExpression
    | AdlArray
    | AdlObject
    | FunctionCall
    | BinOpExpression
)

Expression = Annotated[ExpressionUnion, Field(discriminator="type")]

LiteralUnion = (
    NumberLiteral
    | StringLiteral
    | MultiLineStringLiteral
    | BooleanLiteral
    | VariableNameLiteral
    | PromptLiteral
)

# Arguments of function and node calls
CallArgument = Annotated[
    LiteralUnion | AccessExpression | FunctionCall,
    Field(discriminator="type"),
]

# Either side of a binary operation; never another binary operation
Operand = Annotated[
    LiteralUnion | AccessExpression | FunctionCall | AdlObject | AdlArray,
    Field(discriminator="type"),
]

LITERAL_TYPES = (
    NumberLiteral,
    StringLiteral,
    MultiLineStringLiteral,
    BooleanLiteral,
    VariableNameLiteral,
    PromptLiteral,
)

for _model in (
    PromptLiteral,
    IndexAccess,
    MethodCall,
    AccessExpression,
    AdlArray,
    AdlObjectEntry,
    AdlObject,
    FunctionCall,
    BinOpExpression,
):
    _model.model_rebuild()
