"""
Parser combinators for ADL.

A parser is a callable `(source, pos) -> ParseResult`. Results are immutable
and carry, besides the value and the new position, the furthest position at
which any alternative failed and what was expected there. That information
survives successful backtracking so the top level can report the most
useful error location.

Combinators:
- string, keyword, regex                   -> terminals
- seq, choice, optional, many, many1       -> composition
- sep_by, between, lookahead, eof          -> helpers
- lazy, label, commit, transform, node     -> recursion, errors, AST building
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import Any

# ---------------------------------------------------------------------------
# Core types
# ---------------------------------------------------------------------------


@dataclass
class Source:
    """Input text plus the per-parse memo table used by `memo`."""

    text: str
    cache: dict[tuple[int, int], ParseResult] = field(default_factory=dict)


@dataclass(frozen=True)
class ParseResult:
    """
    Outcome of running a parser at a position.

    Attributes:
        ok: Whether the parser matched
        value: Parsed value (None on failure)
        pos: Position after the match, or the failure position
        furthest: Furthest position where any attempt failed
        expected: Token descriptions expected at `furthest`
        fatal: A committed failure; ordered choice must not try alternatives
        message: Custom message for committed failures
    """

    ok: bool
    value: Any = None
    pos: int = 0
    furthest: int = -1
    expected: frozenset[str] = frozenset()
    fatal: bool = False
    message: str | None = None


Parser = Callable[[Source, int], ParseResult]


def success(value: Any, pos: int, previous: ParseResult | None = None) -> ParseResult:
    if previous is None:
        return ParseResult(True, value, pos)
    return ParseResult(True, value, pos, previous.furthest, previous.expected)


def failure(pos: int, expected: str | frozenset[str]) -> ParseResult:
    if isinstance(expected, str):
        expected = frozenset({expected})
    return ParseResult(False, None, pos, pos, expected)


def merge(result: ParseResult, other: ParseResult) -> ParseResult:
    """Return `result` carrying whichever furthest-failure info reaches further."""
    if other.furthest > result.furthest:
        return replace(result, furthest=other.furthest, expected=other.expected)
    if other.furthest == result.furthest and other.furthest >= 0:
        return replace(result, expected=result.expected | other.expected)
    return result


# ---------------------------------------------------------------------------
# Terminals
# ---------------------------------------------------------------------------


def string(text: str, name: str | None = None) -> Parser:
    """Match `text` exactly."""
    expected = name or repr(text)

    def parse(src: Source, pos: int) -> ParseResult:
        if src.text.startswith(text, pos):
            return success(text, pos + len(text))
        return failure(pos, expected)

    return parse


_WORD_CHAR = re.compile(r"[A-Za-z0-9_]")


def keyword(word: str) -> Parser:
    """Match `word` only when it is not a prefix of a longer identifier."""
    expected = repr(word)

    def parse(src: Source, pos: int) -> ParseResult:
        end = pos + len(word)
        if src.text.startswith(word, pos) and not (
            end < len(src.text) and _WORD_CHAR.match(src.text, end)
        ):
            return success(word, end)
        return failure(pos, expected)

    return parse


def regex(pattern: str, name: str, flags: int = 0) -> Parser:
    """Match a regular expression anchored at the current position."""
    compiled = re.compile(pattern, flags)

    def parse(src: Source, pos: int) -> ParseResult:
        match = compiled.match(src.text, pos)
        if match:
            return success(match.group(0), match.end())
        return failure(pos, name)

    return parse


def eof() -> Parser:
    def parse(src: Source, pos: int) -> ParseResult:
        if pos >= len(src.text):
            return success(None, pos)
        return failure(pos, "end of input")

    return parse


# ---------------------------------------------------------------------------
# Composition
# ---------------------------------------------------------------------------


def seq(*parsers: Parser) -> Parser:
    """Run parsers in order; the value is the list of their values."""

    def parse(src: Source, pos: int) -> ParseResult:
        values = []
        current = pos
        info = ParseResult(True, None, pos)
        for parser in parsers:
            result = parser(src, current)
            info = merge(info, result)
            if not result.ok:
                return replace(merge(result, info), ok=False, value=None)
            values.append(result.value)
            current = result.pos
        return success(values, current, info)

    return parse


def choice(*parsers: Parser) -> Parser:
    """Ordered choice: the first alternative that matches wins."""

    def parse(src: Source, pos: int) -> ParseResult:
        info = ParseResult(False, None, pos)
        for parser in parsers:
            result = parser(src, pos)
            if result.ok:
                return merge(result, info)
            info = merge(info, result)
            if result.fatal:
                return merge(result, info)
        return replace(info, ok=False, pos=pos)

    return parse


def optional(parser: Parser, default: Any = None) -> Parser:
    def parse(src: Source, pos: int) -> ParseResult:
        result = parser(src, pos)
        if result.ok or result.fatal:
            return result
        return success(default, pos, result)

    return parse


def many(parser: Parser) -> Parser:
    """Zero or more repetitions. Stops on a match that consumes nothing."""

    def parse(src: Source, pos: int) -> ParseResult:
        values = []
        current = pos
        info = ParseResult(True, None, pos)
        while True:
            result = parser(src, current)
            info = merge(info, result)
            if result.fatal:
                return merge(result, info)
            if not result.ok or result.pos == current:
                break
            values.append(result.value)
            current = result.pos
        return success(values, current, info)

    return parse


def many1(parser: Parser) -> Parser:
    repeated = many(parser)

    def parse(src: Source, pos: int) -> ParseResult:
        result = repeated(src, pos)
        if result.ok and not result.value:
            first = parser(src, pos)
            return first if not first.ok else result
        return result

    return parse


def sep_by(parser: Parser, separator: Parser) -> Parser:
    """Zero or more `parser` separated by `separator`. No trailing separator."""
    rest = many(transform(seq(separator, parser), lambda pair: pair[1]))

    def parse(src: Source, pos: int) -> ParseResult:
        first = parser(src, pos)
        if first.fatal:
            return first
        if not first.ok:
            return success([], pos, first)
        tail = rest(src, first.pos)
        if not tail.ok:
            return tail
        return success([first.value, *tail.value], tail.pos, merge(tail, first))

    return parse


def between(open_: Parser, parser: Parser, close: Parser) -> Parser:
    return transform(seq(open_, parser, close), lambda values: values[1])


def lookahead(parser: Parser) -> Parser:
    """Succeed without consuming input if `parser` would match."""

    def parse(src: Source, pos: int) -> ParseResult:
        result = parser(src, pos)
        if result.ok:
            return success(result.value, pos)
        return result

    return parse


def not_followed_by(parser: Parser, name: str) -> Parser:
    def parse(src: Source, pos: int) -> ParseResult:
        result = parser(src, pos)
        if result.ok:
            return failure(pos, f"not {name}")
        return success(None, pos)

    return parse


# ---------------------------------------------------------------------------
# Recursion, errors and AST building
# ---------------------------------------------------------------------------


def lazy(factory: Callable[[], Parser]) -> Parser:
    """Defer construction, for grammars that refer to themselves."""
    cell: list[Parser] = []

    def parse(src: Source, pos: int) -> ParseResult:
        if not cell:
            cell.append(factory())
        return cell[0](src, pos)

    return parse


def memo(parser: Parser) -> Parser:
    """Cache results per (parser, position) for the duration of one parse."""
    key = id(parser)

    def parse(src: Source, pos: int) -> ParseResult:
        cached = src.cache.get((key, pos))
        if cached is None:
            cached = parser(src, pos)
            src.cache[(key, pos)] = cached
        return cached

    return parse


def label(parser: Parser, name: str) -> Parser:
    """Report `name` instead of the inner expectations when nothing matched."""

    def parse(src: Source, pos: int) -> ParseResult:
        result = parser(src, pos)
        if not result.ok and not result.fatal and result.furthest <= pos:
            return failure(pos, name)
        return result

    return parse


def commit(parser: Parser, message: str) -> Parser:
    """Turn failure into a fatal error so enclosing choices stop backtracking."""

    def parse(src: Source, pos: int) -> ParseResult:
        result = parser(src, pos)
        if result.ok or result.fatal:
            return result
        return replace(result, fatal=True, message=message)

    return parse


def transform(parser: Parser, fn: Callable[[Any], Any]) -> Parser:
    """Map a successful value through `fn`."""

    def parse(src: Source, pos: int) -> ParseResult:
        result = parser(src, pos)
        if not result.ok:
            return result
        return replace(result, value=fn(result.value))

    return parse


def node(builder: Callable[..., Any], *items: Parser | tuple[str, Parser]) -> Parser:
    """
    Sequence that captures named fields and builds a value from them.

    Each item is either a parser whose value is discarded or a
    `(field_name, parser)` pair whose value is passed to `builder` as a
    keyword argument.

        node(ir.ReturnStatement, keyword("return"), ws, ("value", expression))
    """
    names = [item[0] if isinstance(item, tuple) else None for item in items]
    parsers = [item[1] if isinstance(item, tuple) else item for item in items]
    sequence = seq(*parsers)

    def build(values: list[Any]) -> Any:
        fields = {name: value for name, value in zip(names, values) if name is not None}
        return builder(**fields)

    return transform(sequence, build)
