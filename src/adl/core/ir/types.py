"""
Type-hint shapes for ADL.

Type hints appear in `x :: type` statements, annotated assignments,
function parameters and return types.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class PrimitiveType(BaseModel):
    """One of the builtin scalar types: number, string, boolean."""

    type: Literal["primitiveType"] = "primitiveType"
    value: str = Field(description="number | string | boolean")

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.value


class ArrayType(BaseModel):
    """Homogeneous array: `T[]` or `array<T>`."""

    type: Literal["arrayType"] = "arrayType"
    element_type: VariableType

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.element_type}[]"


class StringLiteralType(BaseModel):
    type: Literal["stringLiteralType"] = "stringLiteralType"
    value: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f'"{self.value}"'


class NumberLiteralType(BaseModel):
    type: Literal["numberLiteralType"] = "numberLiteralType"
    value: str

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return self.value


class BooleanLiteralType(BaseModel):
    type: Literal["booleanLiteralType"] = "booleanLiteralType"
    value: bool

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return "true" if self.value else "false"


VariableType = Annotated[
    PrimitiveType | ArrayType | StringLiteralType | NumberLiteralType | BooleanLiteralType,
    Field(discriminator="type"),
]

ArrayType.model_rebuild()
