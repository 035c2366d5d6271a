"""
Type-hint grammar: `number`, `string`, `boolean`, `T[]`, `array<T>`, and
string/number/boolean literal types.
"""

from .. import ir
from .combinators import choice, keyword, lazy, many, regex, seq, string, transform
from .lexical import space, ws


def _wrap_arrays(values):
    base, suffixes = values
    for _ in suffixes:
        base = ir.ArrayType(element_type=base)
    return base


primitive_type = transform(
    choice(keyword("number"), keyword("string"), keyword("boolean")),
    lambda name: ir.PrimitiveType(value=name),
)

generic_array_type = transform(
    seq(keyword("array"), ws, string("<"), space, lazy(lambda: type_expression), space, string(">")),
    lambda values: ir.ArrayType(element_type=values[4]),
)

string_literal_type = transform(
    regex(r'"[^"\n]*"', "string literal type"),
    lambda text: ir.StringLiteralType(value=text[1:-1]),
)

number_literal_type = transform(
    regex(r"-?\d+(?:\.\d+)?", "number literal type"),
    lambda text: ir.NumberLiteralType(value=text),
)

boolean_literal_type = transform(
    choice(keyword("true"), keyword("false")),
    lambda text: ir.BooleanLiteralType(value=text == "true"),
)

base_type = choice(
    generic_array_type,
    primitive_type,
    string_literal_type,
    number_literal_type,
    boolean_literal_type,
)

type_expression = transform(seq(base_type, many(string("[]"))), _wrap_arrays)
