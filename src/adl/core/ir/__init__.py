"""
ADL abstract syntax tree.

A closed set of immutable pydantic models, each tagged by a `type` field.
Downstream code dispatches on the tag; nothing outside this set is a node.
"""

from .expressions import (
    LITERAL_TYPES,
    AccessExpression,
    AdlArray,
    AdlObject,
    AdlObjectEntry,
    BinaryOp,
    BinOpExpression,
    BooleanLiteral,
    CallArgument,
    ChainElement,
    Expression,
    FunctionCall,
    IndexAccess,
    InterpolationSegment,
    MethodCall,
    MultiLineStringLiteral,
    NumberLiteral,
    Operand,
    PromptLiteral,
    PropertyAccess,
    Segment,
    StringLiteral,
    TextSegment,
    VariableNameLiteral,
)
from .program import AdlProgram
from .statements import (
    SPECIAL_VAR_NAMES,
    AdlNode,
    Assignment,
    Comment,
    DocString,
    FunctionDefinition,
    FunctionParameter,
    GraphNodeDefinition,
    IfElse,
    ImportNodeStatement,
    ImportStatement,
    ImportToolStatement,
    MatchBlock,
    MatchBlockCase,
    MessageThread,
    MultiLineComment,
    NewLine,
    NodeCall,
    ReturnStatement,
    SpecialVar,
    TimeBlock,
    TypeHint,
    UsesTool,
    WhileLoop,
)
from .types import (
    ArrayType,
    BooleanLiteralType,
    NumberLiteralType,
    PrimitiveType,
    StringLiteralType,
    VariableType,
)

__all__ = [
    # Expressions
    "LITERAL_TYPES",
    "AccessExpression",
    "AdlArray",
    "AdlObject",
    "AdlObjectEntry",
    "BinaryOp",
    "BinOpExpression",
    "BooleanLiteral",
    "CallArgument",
    "ChainElement",
    "Expression",
    "FunctionCall",
    "IndexAccess",
    "InterpolationSegment",
    "MethodCall",
    "MultiLineStringLiteral",
    "NumberLiteral",
    "Operand",
    "PromptLiteral",
    "PropertyAccess",
    "Segment",
    "StringLiteral",
    "TextSegment",
    "VariableNameLiteral",
    # Statements
    "SPECIAL_VAR_NAMES",
    "AdlNode",
    "Assignment",
    "Comment",
    "DocString",
    "FunctionDefinition",
    "FunctionParameter",
    "GraphNodeDefinition",
    "IfElse",
    "ImportNodeStatement",
    "ImportStatement",
    "ImportToolStatement",
    "MatchBlock",
    "MatchBlockCase",
    "MessageThread",
    "MultiLineComment",
    "NewLine",
    "NodeCall",
    "ReturnStatement",
    "SpecialVar",
    "TimeBlock",
    "TypeHint",
    "UsesTool",
    "WhileLoop",
    # Types
    "ArrayType",
    "BooleanLiteralType",
    "NumberLiteralType",
    "PrimitiveType",
    "StringLiteralType",
    "VariableType",
    # Program
    "AdlProgram",
]
