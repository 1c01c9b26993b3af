"""
Tokenizer for the SwiftDSL playground language.

Converts DSL source text into a flat sequence of typed tokens. The
tokenizer has no knowledge of which methods exist; whitelisting happens
in the parser.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum, auto

from swiftdsl.core.errors import ErrorContext, LexError


class TokenKind(StrEnum):
    """Token types for the playground language."""

    # Literals and names
    IDENTIFIER = auto()
    STRING = auto()
    NUMBER = auto()
    SYMBOL = auto()

    # Punctuation
    LPAREN = auto()
    RPAREN = auto()
    LBRACE = auto()
    RBRACE = auto()
    DOT = auto()
    COMMA = auto()
    COLON = auto()
    ARROW = auto()  # =>

    # Keywords
    DO = auto()
    END = auto()

    # End of input
    EOF = auto()


@dataclass(frozen=True, slots=True)
class Token:
    """A single token. ``line`` and ``column`` are 1-indexed."""

    kind: TokenKind
    value: str | int | float | None
    line: int
    column: int

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.line}:{self.column})"


_KEYWORDS: dict[str, TokenKind] = {
    "do": TokenKind.DO,
    "end": TokenKind.END,
}

_PUNCTUATION: dict[str, TokenKind] = {
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "{": TokenKind.LBRACE,
    "}": TokenKind.RBRACE,
    ".": TokenKind.DOT,
    ",": TokenKind.COMMA,
}

_ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
}

_WHITESPACE = " \t\r\n\f\v"

# Number: optional sign, digits with "_" separators, optional decimal part
_NUMBER_RE = re.compile(r"-?\d[\d_]*(\.\d[\d_]*)?")
# Identifier: Ruby-style, may end in ? or !
_IDENT_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*[?!]?")


class _Scanner:
    """Position tracking over the source text."""

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: list[Token] = []

    def advance(self, count: int = 1) -> None:
        for _ in range(count):
            if self.source[self.pos] == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def peek(self, offset: int = 0) -> str:
        idx = self.pos + offset
        return self.source[idx] if idx < len(self.source) else ""

    def emit(self, kind: TokenKind, value: str | int | float | None, line: int, column: int) -> None:
        self.tokens.append(Token(kind, value, line, column))

    def error(self, message: str, line: int | None = None, column: int | None = None) -> LexError:
        line = self.line if line is None else line
        column = self.column if column is None else column
        return LexError(message, ErrorContext(line=line, column=column))

    def directly_after_identifier(self) -> bool:
        """True when the previous token is an identifier ending right here."""
        if not self.tokens:
            return False
        prev = self.tokens[-1]
        if prev.kind != TokenKind.IDENTIFIER or prev.line != self.line:
            return False
        return prev.column + len(str(prev.value)) == self.column


def tokenize(source: str) -> list[Token]:
    """
    Tokenize DSL source into a list of tokens ending with EOF.

    Raises:
        LexError: On the first unrecognized character or an unterminated
            string literal.
    """
    sc = _Scanner(source)
    n = len(source)

    while sc.pos < n:
        c = source[sc.pos]
        line, column = sc.line, sc.column

        if c in _WHITESPACE:
            sc.advance()
            continue

        # Comments run to end of line
        if c == "#":
            while sc.pos < n and source[sc.pos] != "\n":
                sc.advance()
            continue

        if c in ('"', "'"):
            _read_string(sc)
            continue

        if c.isdigit() or (c == "-" and sc.peek(1).isdigit()):
            m = _NUMBER_RE.match(source, sc.pos)
            assert m is not None
            text = m.group(0)
            digits = text.replace("_", "")
            value: int | float = float(digits) if m.group(1) else int(digits)
            sc.emit(TokenKind.NUMBER, value, line, column)
            sc.advance(len(text))
            continue

        if c == ":":
            # "key:" directly after an identifier is always a separator
            if not sc.directly_after_identifier():
                m = _IDENT_RE.match(source, sc.pos + 1)
                if m:
                    sc.emit(TokenKind.SYMBOL, m.group(0), line, column)
                    sc.advance(1 + len(m.group(0)))
                    continue
            sc.emit(TokenKind.COLON, ":", line, column)
            sc.advance()
            continue

        if c.isalpha() or c == "_":
            m = _IDENT_RE.match(source, sc.pos)
            if m is None:
                raise sc.error(f"Unexpected character '{c}' at line {line}, column {column}")
            word = m.group(0)
            kind = _KEYWORDS.get(word, TokenKind.IDENTIFIER)
            sc.emit(kind, word, line, column)
            sc.advance(len(word))
            continue

        if c == "=" and sc.peek(1) == ">":
            sc.emit(TokenKind.ARROW, "=>", line, column)
            sc.advance(2)
            continue

        if c in _PUNCTUATION:
            sc.emit(_PUNCTUATION[c], c, line, column)
            sc.advance()
            continue

        raise sc.error(f"Unexpected character '{c}' at line {line}, column {column}")

    sc.emit(TokenKind.EOF, None, sc.line, sc.column)
    return sc.tokens


def _read_string(sc: _Scanner) -> None:
    """Read a quoted string literal, resolving backslash escapes."""
    quote = sc.peek()
    line, column = sc.line, sc.column
    sc.advance()
    chars: list[str] = []

    while sc.pos < len(sc.source):
        c = sc.peek()
        if c == "\\":
            nxt = sc.peek(1)
            if not nxt:
                break
            # Unknown escapes are kept verbatim
            chars.append(_ESCAPES.get(nxt, "\\" + nxt))
            sc.advance(2)
            continue
        if c == quote:
            sc.advance()
            sc.emit(TokenKind.STRING, "".join(chars), line, column)
            return
        chars.append(c)
        sc.advance()

    raise sc.error(f"Unterminated string at line {line}, column {column}", line, column)
