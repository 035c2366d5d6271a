"""
Expression grammar: prompts, calls, access chains, arrays, objects and
binary operations.

Alternatives are tried in order, so the order of each `choice` below is
part of the grammar. Prompts come before calls (`llm(...)` is a prompt,
not a call), access chains before calls (`fetch(url).body` must not stop
at `fetch(url)`), and binary operations before everything.
"""

from .. import ir
from .combinators import (
    choice,
    label,
    lazy,
    many1,
    memo,
    optional,
    regex,
    sep_by,
    seq,
    string,
    transform,
)
from .lexical import comma, identifier, space, ws
from .literals import backtick_prompt, scalar_literal, string_literal, variable_name


# ---------------------------------------------------------------------------
# Calls
# ---------------------------------------------------------------------------

call_argument = lazy(lambda: choice(prompt, access_expression, function_call, literal))

function_call = memo(
    transform(
        seq(
            identifier,
            string("("),
            space,
            sep_by(call_argument, comma),
            space,
            string(")", "')'"),
        ),
        lambda values: ir.FunctionCall(function_name=values[0], arguments=values[3]),
    )
)

# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

structure_item = lazy(
    lambda: choice(prompt, access_expression, function_call, adl_object, adl_array, literal)
)

adl_array = memo(
    transform(
        seq(
            string("["),
            space,
            sep_by(structure_item, comma),
            optional(comma),
            space,
            string("]", "']'"),
        ),
        lambda values: ir.AdlArray(items=values[2]),
    )
)

object_key = choice(
    identifier,
    transform(regex(r'"[^"\n]*"', "quoted key"), lambda text: text[1:-1]),
)

object_entry = transform(
    seq(object_key, space, string(":"), space, structure_item),
    lambda values: ir.AdlObjectEntry(key=values[0], value=values[4]),
)

adl_object = memo(
    transform(
        seq(
            string("{"),
            space,
            sep_by(object_entry, comma),
            optional(comma),
            space,
            string("}", "'}'"),
        ),
        lambda values: ir.AdlObject(entries=values[2]),
    )
)

# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

llm_prompt = transform(
    seq(
        string("llm("),
        space,
        string_literal,
        optional(transform(seq(comma, adl_object), lambda values: values[1])),
        space,
        string(")", "')'"),
    ),
    lambda values: ir.PromptLiteral(segments=values[2].segments, config=values[3]),
)

prompt = memo(choice(backtick_prompt, llm_prompt))

literal = memo(choice(prompt, scalar_literal, variable_name))

# ---------------------------------------------------------------------------
# Access chains
# ---------------------------------------------------------------------------

method_step = transform(
    seq(string("."), function_call),
    lambda values: ir.MethodCall(call=values[1]),
)

property_step = transform(
    seq(string("."), identifier),
    lambda values: ir.PropertyAccess(name=values[1]),
)

index_step = transform(
    seq(string("["), space, lazy(lambda: structure_item), space, string("]", "']'")),
    lambda values: ir.IndexAccess(index=values[2]),
)


def _access(values):
    base, chain = values
    return ir.AccessExpression(base=base, chain=chain)


chain_step = choice(method_step, property_step, index_step)

access_expression = memo(
    transform(seq(choice(function_call, variable_name), many1(chain_step)), _access)
)

# ---------------------------------------------------------------------------
# Binary operations
# ---------------------------------------------------------------------------

operator = label(
    transform(choice(*(string(op.value) for op in ir.BinaryOp)), ir.BinaryOp),
    "operator",
)

operand = memo(choice(prompt, access_expression, function_call, adl_object, adl_array, literal))

binary_operation = memo(
    transform(
        seq(operand, ws, operator, ws, operand),
        lambda values: ir.BinOpExpression(left=values[0], operator=values[2], right=values[4]),
    )
)

# Right-hand side of assignments, return values and expression statements
value = memo(
    choice(
        binary_operation,
        prompt,
        access_expression,
        function_call,
        adl_array,
        adl_object,
        literal,
    )
)

condition = memo(choice(binary_operation, access_expression, function_call, literal))
