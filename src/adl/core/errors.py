"""
Error types for ADL parsing, configuration, and code generation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class AdlError(Exception):
    """Base exception for all ADL errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(AdlError):
    """
    Raised when ADL source cannot be parsed.

    Carries the furthest position the parser reached and the set of token
    descriptions it would have accepted there.

    Examples:
    - Unterminated string or block
    - Malformed import statement
    - Trailing input after the last statement
    """

    def __init__(
        self,
        message: str,
        position: int = 0,
        expected: frozenset[str] | set[str] | None = None,
        source: str = "",
        file: Path | None = None,
    ):
        self.position = position
        self.expected = frozenset(expected or ())
        self.source = source
        self.line, self.column = line_and_column(source, position)
        context = None
        if source:
            context = ErrorContext(
                file=file or Path("<input>"),
                line=self.line,
                column=self.column,
                snippet=_snippet_around(source, self.line),
            )
        super().__init__(message, context)

    def format_diagnostic(self) -> str:
        """Multi-line diagnostic: location, source excerpt with marker, expectations."""
        parts = [str(self)]
        if self.expected:
            parts.append("Expected one of: " + ", ".join(sorted(self.expected)))
        return "\n".join(parts)


class BackendError(AdlError):
    """
    Raised when a backend fails to generate output.

    Examples:
    - Unsupported construct in backend
    - Invalid backend configuration
    - Template rendering errors
    """

    pass


class UnsupportedConstructError(BackendError):
    """Raised when a generator meets a node tag it has no rule for."""

    def __init__(self, tag: str, backend: str = ""):
        self.tag = tag
        self.backend = backend
        where = f" in {backend} backend" if backend else ""
        super().__init__(f"Unsupported construct '{tag}'{where}")


class InvalidConfigurationError(BackendError):
    """
    Raised for invalid generator inputs.

    Examples:
    - Special variable outside {model, messages}
    - Builtin name missing from the registry
    - Unknown backend name
    """

    pass


class MalformedTemplateError(BackendError):
    """Raised when a template references an argument that was not supplied."""

    pass


class ConfigError(AdlError):
    """Raised when adl.toml is unreadable or contains invalid values."""

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source file where error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional code snippet showing the error location
    """

    file: Path
    line: int
    column: int
    snippet: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "agent.adl:10:5"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.snippet:
            return f"{location}\n{self._format_snippet()}"
        return location

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet shows up to 2 lines before and after the error
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def line_and_column(source: str, position: int) -> tuple[int, int]:
    """Convert a 0-based offset into a 1-based (line, column) pair."""
    position = max(0, min(position, len(source)))
    line = source.count("\n", 0, position) + 1
    last_newline = source.rfind("\n", 0, position)
    column = position - last_newline
    return line, column


def _snippet_around(source: str, line: int) -> str:
    lines = source.split("\n")
    start = max(1, line - 2)
    end = min(len(lines), line + 2)
    return "\n".join(lines[start - 1 : end])


def make_parse_error(
    message: str,
    source: str,
    position: int,
    expected: set[str] | frozenset[str] | None = None,
    file: Path | None = None,
) -> ParseError:
    """
    Helper to create a ParseError with context.

    Args:
        message: Error description
        source: Full source text being parsed
        position: 0-based offset of the failure
        expected: Token descriptions accepted at that offset
        file: Source file path, if the text came from a file

    Returns:
        ParseError with context
    """
    return ParseError(message, position=position, expected=expected, source=source, file=file)
