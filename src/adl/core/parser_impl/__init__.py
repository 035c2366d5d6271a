"""
ADL parser implementation.

The grammar is assembled from small combinators (see `combinators`) in
modules that mirror the AST: literals, types, expressions, statements,
definitions and imports. `parse_adl` is the only entry point the rest of
the package needs.
"""

import logging
from pathlib import Path

from .. import ir
from ..errors import ParseError, make_parse_error
from .combinators import Source, eof, many, seq, transform
from .lexical import space
from .statements import body_item

logger = logging.getLogger(__name__)

program = transform(
    seq(many(body_item), space, eof()),
    lambda values: ir.AdlProgram(nodes=values[0]),
)


def _describe_unexpected(text: str, position: int) -> str:
    if position < len(text) and text[position] in "\r\n":
        return "Unexpected end of line"
    parts = text[position:].split(None, 1)
    if not parts:
        return "Unexpected end of input"
    return f"Unexpected '{parts[0][:20]}'"


def parse_adl(text: str, file: Path | None = None) -> ir.AdlProgram:
    """
    Parse ADL source text into an AdlProgram.

    Args:
        text: Complete ADL source
        file: Optional path, used only for error locations

    Returns:
        The parsed program

    Raises:
        ParseError: With the furthest position reached and the tokens
            expected there
    """
    result = program(Source(text), 0)
    if result.ok:
        logger.debug(
            "Parsed %d characters into %d top-level nodes", len(text), len(result.value.nodes)
        )
        return result.value

    position = max(result.furthest, result.pos)
    message = result.message or _describe_unexpected(text, position)
    logger.debug("Parse failed at offset %d: %s", position, message)
    raise make_parse_error(message, text, position, result.expected, file=file)


__all__ = ["parse_adl", "ParseError"]
