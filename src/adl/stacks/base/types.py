"""
Type-hint translation: ADL types to Python annotations and JSON schemas.

Annotations are used for parameters, return types and annotated
assignments; JSON schemas describe the expected shape of LLM responses.
"""

import json
from typing import Any

from ...core import ir


def _number(text: str) -> int | float:
    return float(text) if "." in text else int(text)


def type_to_annotation(variable_type: ir.VariableType) -> str:
    """
    Render a type hint as Python annotation source.

    Examples:
        number           -> float
        string[]         -> list[str]
        "done"           -> Literal["done"]
    """
    match variable_type:
        case ir.PrimitiveType(value="number"):
            return "float"
        case ir.PrimitiveType(value="string"):
            return "str"
        case ir.PrimitiveType(value="boolean"):
            return "bool"
        case ir.PrimitiveType():
            return "Any"
        case ir.ArrayType(element_type=element):
            return f"list[{type_to_annotation(element)}]"
        case ir.StringLiteralType(value=value):
            return f"Literal[{json.dumps(value)}]"
        case ir.NumberLiteralType(value=value):
            return f"Literal[{_number(value)!r}]"
        case ir.BooleanLiteralType(value=value):
            return f"Literal[{value!r}]"
    return "Any"


def type_to_json_schema(variable_type: ir.VariableType | None) -> dict[str, Any]:
    """JSON schema for a type hint. No hint means a plain string response."""
    match variable_type:
        case None:
            return {"type": "string"}
        case ir.PrimitiveType(value="number"):
            return {"type": "number"}
        case ir.PrimitiveType(value="boolean"):
            return {"type": "boolean"}
        case ir.PrimitiveType():
            return {"type": "string"}
        case ir.ArrayType(element_type=element):
            return {"type": "array", "items": type_to_json_schema(element)}
        case ir.StringLiteralType(value=value):
            return {"type": "string", "enum": [value]}
        case ir.NumberLiteralType(value=value):
            return {"type": "number", "enum": [_number(value)]}
        case ir.BooleanLiteralType(value=value):
            return {"type": "boolean", "enum": [value]}
    return {"type": "string"}
