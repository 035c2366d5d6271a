"""
Function and graph-node definitions.

    def summarize(text: string): string {
      summary :: string
      summary = `Summarise ${text}`
      return summary
    }

    public node main(url) {
      page = fetch(url)
      goto summarize_page(page)
    }
"""

from .. import ir
from .combinators import (
    choice,
    commit,
    keyword,
    many,
    optional,
    regex,
    sep_by,
    seq,
    string,
    transform,
)
from .lexical import comma, identifier, space, ws, ws1
from .statements import body, body_item
from .types import type_expression

parameter = transform(
    seq(
        identifier,
        optional(transform(seq(ws, string(":"), ws, type_expression), lambda values: values[3])),
    ),
    lambda values: ir.FunctionParameter(name=values[0], type_hint=values[1]),
)

parameter_list = transform(
    seq(string("("), space, sep_by(parameter, comma), space, string(")", "')'")),
    lambda values: values[2],
)

return_type = optional(
    transform(seq(ws, string(":"), ws, type_expression), lambda values: values[3])
)

doc_string = transform(
    regex(r'"""([\s\S]*?)"""', "docstring"),
    lambda text: ir.DocString(value=text[3:-3].strip()),
)

function_body = transform(
    seq(
        string("{"),
        optional(transform(seq(space, doc_string), lambda values: values[1])),
        many(body_item),
        space,
        string("}", "'}'"),
    ),
    lambda values: {"doc_string": values[1], "body": values[2]},
)

function_definition = transform(
    seq(
        keyword("def"),
        ws1,
        commit(
            seq(identifier, ws, parameter_list, return_type, ws, function_body),
            "Malformed function definition",
        ),
    ),
    lambda values: ir.FunctionDefinition(
        function_name=values[2][0],
        parameters=values[2][2],
        return_type=values[2][3],
        **values[2][5],
    ),
)

visibility = optional(
    transform(
        seq(choice(keyword("public"), keyword("private")), ws1),
        lambda values: values[0],
    )
)

graph_node_definition = transform(
    seq(
        visibility,
        keyword("node"),
        ws1,
        identifier,
        ws,
        parameter_list,
        return_type,
        ws,
        body,
    ),
    lambda values: ir.GraphNodeDefinition(
        visibility=values[0],
        node_name=values[3],
        parameters=values[5],
        return_type=values[6],
        body=values[8],
    ),
)
