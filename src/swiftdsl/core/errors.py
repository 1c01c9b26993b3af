"""
Error types for SwiftDSL tokenizing, parsing, and sandboxed execution.
"""

from dataclasses import dataclass
from typing import Optional


class SwiftDSLError(Exception):
    """Base exception for all SwiftDSL errors."""

    def __init__(self, message: str, context: Optional["ErrorContext"] = None):
        self.message = message
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            # Tokenizer and parser messages already end with the location
            context = self.context.format(include_location=self.context.location not in self.message)
            if context:
                return f"{context}\n{self.message}"
        return self.message

    @property
    def line(self) -> int | None:
        return self.context.line if self.context else None

    @property
    def column(self) -> int | None:
        return self.context.column if self.context else None


class ParseError(SwiftDSLError):
    """
    Raised when DSL source cannot be parsed.

    Examples:
    - Unexpected tokens
    - Missing closing ``end``, ``}`` or ``)``
    - Malformed argument lists
    """

    pass


class LexError(ParseError):
    """
    Raised when DSL source cannot be tokenized.

    Examples:
    - Unrecognized character
    - Unterminated string literal
    """

    pass


class SecurityError(SwiftDSLError):
    """
    Raised when source tries something the sandbox does not allow.

    Examples:
    - Method name outside the whitelist
    - Forbidden meta-operation (eval, system, require, ...)
    - Call dispatched on a value that is not a DSL builder
    """

    pass


class LimitExceededError(SecurityError):
    """
    Raised when source exceeds a configured resource limit.

    Examples:
    - Source text too long
    - Too many AST nodes
    - Nesting too deep
    """

    pass


@dataclass
class ErrorContext:
    """
    Source location of an error.

    Attributes:
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        snippet: Optional source lines around the error
    """

    line: int
    column: int
    snippet: str | None = None

    @property
    def location(self) -> str:
        return f"line {self.line}, column {self.column}"

    def format(self, include_location: bool = True) -> str:
        """
        Format error context as a human-readable string.

        Args:
            include_location: Lead with "line L, column C"

        Returns:
            Formatted string like: "line 3, column 7"
        """
        parts = [self.location] if include_location else []
        if self.snippet:
            parts.append(self._format_snippet())
        return "\n".join(parts)

    def _format_snippet(self) -> str:
        """Format code snippet with line numbers and error marker."""
        if not self.snippet:
            return ""

        lines = self.snippet.split("\n")
        formatted = []

        # Snippet shows up to 2 lines before the error line
        start_line = max(1, self.line - 2)

        for i, line in enumerate(lines):
            line_num = start_line + i
            prefix = f"{line_num:4d} | "
            formatted.append(prefix + line)

            if line_num == self.line:
                marker_pos = len(prefix) + self.column - 1
                formatted.append(" " * marker_pos + "^^^")

        return "\n".join(formatted)


def snippet_for(source: str, line: int, context_lines: int = 2) -> str:
    """Return the source lines around ``line`` for an ErrorContext snippet."""
    lines = source.split("\n")
    start = max(1, line - context_lines)
    end = min(len(lines), line + context_lines)
    return "\n".join(lines[start - 1 : end])


def with_snippet(error: SwiftDSLError, source: str) -> SwiftDSLError:
    """
    Attach a source snippet to an error that already carries a location.

    Args:
        error: Error raised by the tokenizer or parser
        source: The full DSL source text

    Returns:
        A new error of the same type whose context includes the snippet,
        or the original error when it has no location.
    """
    if error.context is None or error.context.snippet:
        return error
    context = ErrorContext(
        line=error.context.line,
        column=error.context.column,
        snippet=snippet_for(source, error.context.line),
    )
    return type(error)(error.message, context)
