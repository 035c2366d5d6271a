"""
Statement grammar and block bodies.

A body is a sequence of items: newlines, comments and statements. Each
statement must be followed by `;`, a newline, a closing brace, a comment
or the end of input.
"""

from .. import ir
from .combinators import (
    choice,
    keyword,
    lazy,
    many,
    memo,
    node,
    not_followed_by,
    optional,
    regex,
    sep_by,
    seq,
    string,
    transform,
)
from .expressions import (
    access_expression,
    condition,
    function_call,
    literal,
    value,
)
from .lexical import (
    blank,
    comma,
    comment,
    identifier,
    multi_line_comment,
    newline,
    space,
    statement_end,
    ws,
    ws1,
)
from .types import type_expression

# ---------------------------------------------------------------------------
# Bodies
# ---------------------------------------------------------------------------

statement = lazy(lambda: _statement())

terminated_statement = transform(seq(statement, statement_end), lambda values: values[0])

body_item = transform(
    seq(ws, choice(newline, comment, multi_line_comment, terminated_statement)),
    lambda values: values[1],
)

body = transform(
    seq(string("{"), many(body_item), space, string("}", "'}'")),
    lambda values: values[1],
)

# ---------------------------------------------------------------------------
# Simple statements
# ---------------------------------------------------------------------------

type_hint_statement = node(
    ir.TypeHint,
    ("variable_name", identifier),
    ws,
    string("::"),
    ws,
    ("variable_type", type_expression),
)

special_var = node(
    ir.SpecialVar,
    string("@"),
    ("name", choice(keyword("model"), keyword("messages"))),
    ws,
    string("="),
    ws,
    ("value", value),
)

return_statement = transform(
    seq(keyword("return"), optional(transform(seq(ws1, value), lambda values: values[1]))),
    lambda values: ir.ReturnStatement(value=values[1]),
)

# `uses search, lookup`, `use search` or `+search`
uses_tool = transform(
    seq(
        choice(seq(keyword("uses"), ws1), seq(keyword("use"), ws1), string("+")),
        ws,
        identifier,
        many(transform(seq(comma, identifier), lambda values: values[1])),
    ),
    lambda values: ir.UsesTool(tool_names=[values[2], *values[3]]),
)

node_call = transform(
    seq(
        keyword("goto"),
        ws1,
        identifier,
        ws,
        string("("),
        space,
        sep_by(choice(access_expression, function_call, literal), comma),
        space,
        string(")", "')'"),
    ),
    lambda values: ir.NodeCall(node_name=values[2], arguments=values[6]),
)

# ---------------------------------------------------------------------------
# Blocks
# ---------------------------------------------------------------------------

message_thread = transform(
    seq(choice(keyword("thread"), keyword("subthread"), keyword("parallel")), ws, body),
    lambda values: ir.MessageThread(thread_type=values[0], body=values[2]),
)

time_block = transform(
    seq(choice(keyword("printTime"), keyword("time")), ws, body),
    lambda values: ir.TimeBlock(body=values[2], print_time=values[0] == "printTime"),
)

parenthesized_condition = transform(
    seq(string("("), space, condition, space, string(")", "')'")),
    lambda values: values[2],
)

if_else = memo(
    transform(
        seq(
            keyword("if"),
            ws,
            parenthesized_condition,
            ws,
            body,
            optional(
                transform(
                    seq(
                        space,
                        keyword("else"),
                        ws,
                        choice(
                            transform(lazy(lambda: if_else), lambda nested: [nested]),
                            body,
                        ),
                    ),
                    lambda values: values[3],
                )
            ),
        ),
        lambda values: ir.IfElse(condition=values[2], then_body=values[4], else_body=values[5]),
    )
)

while_loop = transform(
    seq(keyword("while"), ws, parenthesized_condition, ws, body),
    lambda values: ir.WhileLoop(condition=values[2], body=values[4]),
)

# ---------------------------------------------------------------------------
# Match blocks
# ---------------------------------------------------------------------------

default_case = transform(
    seq(string("_"), not_followed_by(regex(r"[A-Za-z0-9_]", "identifier"), "identifier")),
    lambda _: None,
)

case_value = choice(default_case, access_expression, literal)

case_body = lazy(lambda: choice(return_statement, node_call, assignment, value))

match_case = transform(
    seq(case_value, ws, string("=>"), ws, case_body, regex(r"[ \t]*[;,]?", "';'")),
    lambda values: ir.MatchBlockCase(case_value=values[0], body=values[4]),
)

match_block = transform(
    seq(
        keyword("match"),
        ws,
        parenthesized_condition,
        ws,
        string("{"),
        many(transform(seq(blank, choice(comment, match_case)), lambda values: values[1])),
        space,
        string("}", "'}'"),
    ),
    lambda values: ir.MatchBlock(expression=values[2], cases=values[5]),
)

# ---------------------------------------------------------------------------
# Assignment
# ---------------------------------------------------------------------------

assignment_type = optional(
    transform(seq(ws, string(":"), ws, type_expression), lambda values: values[3])
)

assignment = transform(
    seq(
        identifier,
        assignment_type,
        ws,
        string("="),
        not_followed_by(string("="), "'='"),
        ws,
        choice(message_thread, time_block, value),
    ),
    lambda values: ir.Assignment(variable_name=values[0], type_hint=values[1], value=values[6]),
)


def _statement():
    from .definitions import function_definition, graph_node_definition
    from .imports import import_statement

    return memo(
        choice(
            import_statement,
            function_definition,
            graph_node_definition,
            type_hint_statement,
            special_var,
            return_statement,
            node_call,
            uses_tool,
            if_else,
            while_loop,
            match_block,
            message_thread,
            time_block,
            assignment,
            value,
        )
    )
