"""
Scalar literals: numbers, booleans, strings, multi-line strings, backtick
prompts and variable names.

Strings and prompts support `${name}` interpolation; the text between
interpolations is kept as written, escapes included.
"""

from .. import ir
from .combinators import between, choice, keyword, many, memo, regex, seq, string, transform
from .lexical import identifier, ws


def _interpolation():
    return transform(
        seq(string("${"), ws, identifier, ws, string("}")),
        lambda values: ir.InterpolationSegment(variable_name=values[2]),
    )


def _segments(text_pattern: str):
    text = transform(regex(text_pattern, "text"), lambda value: ir.TextSegment(value=value))
    return many(choice(_interpolation(), text))


number = memo(
    transform(
        regex(r"-?\d+(?:\.\d+)?", "number"),
        lambda text: ir.NumberLiteral(value=text),
    )
)

boolean = transform(
    choice(keyword("true"), keyword("false")),
    lambda text: ir.BooleanLiteral(value=text == "true"),
)

string_literal = transform(
    between(
        string('"'),
        _segments(r'(?:[^"\\$\n]|\\.|\$(?!\{))+'),
        string('"', "closing '\"'"),
    ),
    lambda segments: ir.StringLiteral(segments=segments),
)

multi_line_string = transform(
    between(
        string('"""'),
        _segments(r'(?:[^"\\$]|\\[\s\S]|"(?!"")|\$(?!\{))+'),
        string('"""', "closing '\"\"\"'"),
    ),
    lambda segments: ir.MultiLineStringLiteral(segments=segments),
)

backtick_prompt = transform(
    between(
        string("`"),
        _segments(r"(?:[^`\\$]|\\[\s\S]|\$(?!\{))+"),
        string("`", "closing '`'"),
    ),
    lambda segments: ir.PromptLiteral(segments=segments),
)

variable_name = transform(identifier, lambda name: ir.VariableNameLiteral(value=name))

# Multi-line strings must be tried before single-line ones
scalar_literal = memo(choice(multi_line_string, string_literal, number, boolean))
