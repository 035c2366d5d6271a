"""
Lexical building blocks shared by the ADL grammar: whitespace, names,
punctuation, comments and statement terminators.

Newlines matter between statements (each becomes a NewLine node) but are
free whitespace inside brackets, braces and argument lists.
"""

from .. import ir
from .combinators import (
    choice,
    eof,
    lookahead,
    regex,
    seq,
    string,
    transform,
)

ws = regex(r"[ \t]*", "whitespace")
ws1 = regex(r"[ \t]+", "whitespace")

# Whitespace, newlines and comments, for use inside brackets
space = regex(r"(?:[ \t\r\n]+|//[^\n]*|/\*[\s\S]*?\*/)*", "whitespace")

# Whitespace and newlines only, where comments are kept as nodes
blank = regex(r"[ \t\r\n]*", "whitespace")

identifier = regex(r"[A-Za-z_][A-Za-z0-9_]*", "identifier")

newline = transform(regex(r"\r?\n", "newline"), lambda _: ir.NewLine())

comment = transform(regex(r"//[^\n]*", "comment"), lambda text: ir.Comment(content=text[2:]))

multi_line_comment = transform(
    regex(r"/\*[\s\S]*?\*/", "comment"),
    lambda text: ir.MultiLineComment(content=text[2:-2]),
)


def symbol(text: str):
    """Punctuation with surrounding bracket-style whitespace."""
    return transform(seq(space, string(text), space), lambda values: values[1])


comma = symbol(",")

quoted_path = transform(
    regex(r"\"[^\"\n]*\"|'[^'\n]*'", "quoted path"),
    lambda text: text[1:-1],
)

# Explicit semicolons allow several statements on one line; otherwise the
# statement must be followed by a newline, a closing brace, a comment or EOF.
statement_end = choice(
    regex(r"[ \t]*;[ \t;]*", "';'"),
    seq(
        ws,
        lookahead(
            choice(
                regex(r"\r?\n", "newline"),
                string("}"),
                string("//"),
                string("/*"),
                eof(),
            )
        ),
    ),
)
