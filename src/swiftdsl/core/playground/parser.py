"""
Recursive descent parser for the SwiftDSL playground language.

Grammar:
    program      → statement* EOF
    statement    → expression
    expression   → method_chain
    method_chain → primary ("." IDENT arguments? block?)*
    primary      → IDENT arguments? block?
                 | STRING | NUMBER | SYMBOL | "true" | "false" | "nil"
                 | "(" expression ")"
    arguments    → "(" (argument ("," argument)* ","?)? ")"
                 | bare_argument ("," bare_argument)*      (same line only)
    argument     → IDENT ":" expression
                 | (STRING | SYMBOL) "=>" expression
                 | expression
    block        → "do" statement* "end" | "{" statement* "}"

Every method name is checked against the whitelist the moment it is
consumed, so source naming a disallowed method never yields an AST.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from swiftdsl.core.errors import ErrorContext, LimitExceededError, ParseError, SecurityError
from swiftdsl.core.ir.nodes import Block, Literal, LiteralKind, MethodCall, NamedArg
from swiftdsl.core.playground.tokenizer import Token, TokenKind, tokenize
from swiftdsl.core.whitelist import (
    BLOCK_KEYWORD,
    ELEMENT_METHODS,
    HELPER_METHODS,
    LITERAL_IDENTIFIERS,
    MODIFIER_METHODS,
    is_allowed,
)

Expression = MethodCall | Literal | Block
ArgumentNode = Expression | NamedArg

DEFAULT_MAX_NODES = 2_000
DEFAULT_MAX_DEPTH = 32

_BLOCK_CLOSERS: dict[TokenKind, TokenKind] = {
    TokenKind.DO: TokenKind.END,
    TokenKind.LBRACE: TokenKind.RBRACE,
}

_LITERAL_KINDS: dict[TokenKind, LiteralKind] = {
    TokenKind.STRING: LiteralKind.STRING,
    TokenKind.NUMBER: LiteralKind.NUMBER,
    TokenKind.SYMBOL: LiteralKind.SYMBOL,
}


def _describe(tok: Token) -> str:
    if tok.kind == TokenKind.EOF:
        return "end of input"
    if tok.kind in (TokenKind.STRING, TokenKind.NUMBER, TokenKind.SYMBOL, TokenKind.IDENTIFIER):
        return f"{tok.kind} {tok.value!r}"
    return f"'{tok.value}'"


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, tokens: list[Token], max_nodes: int, max_depth: int) -> None:
        if not tokens or tokens[-1].kind != TokenKind.EOF:
            raise ParseError("Token stream must end with EOF")
        self.tokens = tokens
        self.pos = 0
        self.max_nodes = max_nodes
        self.max_depth = max_depth
        self.node_count = 0
        self.depth = 0

    # -- Token helpers --

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def peek(self, offset: int = 0) -> Token:
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return self.tokens[-1]  # EOF

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind, expected: str) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise self.error(f"Expected {expected} but got {_describe(tok)}", tok)
        return self.advance()

    def error(self, message: str, tok: Token) -> ParseError:
        return ParseError(
            f"{message} at line {tok.line}, column {tok.column}",
            ErrorContext(line=tok.line, column=tok.column),
        )

    # -- Resource guards --

    def count_node(self, tok: Token) -> None:
        self.node_count += 1
        if self.node_count > self.max_nodes:
            raise LimitExceededError(
                f"Program is too large (more than {self.max_nodes} nodes)",
                ErrorContext(line=tok.line, column=tok.column),
            )

    @contextmanager
    def nested(self, tok: Token) -> Iterator[None]:
        self.depth += 1
        if self.depth > self.max_depth:
            raise LimitExceededError(
                f"Nesting is too deep (more than {self.max_depth} levels)",
                ErrorContext(line=tok.line, column=tok.column),
            )
        try:
            yield
        finally:
            self.depth -= 1

    # -- Whitelist gate --

    def validate_method(self, tok: Token, chained: bool) -> str:
        name = str(tok.value)
        ctx = ErrorContext(line=tok.line, column=tok.column)
        if not is_allowed(name):
            raise SecurityError(f"Method '{name}' is not allowed in the DSL", ctx)
        if chained and name not in MODIFIER_METHODS:
            raise self.error(f"'{name}' is not a modifier and cannot be chained", tok)
        if not chained and name not in ELEMENT_METHODS and name not in HELPER_METHODS:
            raise self.error(f"Modifier '{name}' must be chained onto an element", tok)
        return name

    def validate_keyword(self, key: str, tok: Token) -> str:
        if key.startswith("_"):
            raise SecurityError(
                f"Keyword '{key}' is not allowed in the DSL",
                ErrorContext(line=tok.line, column=tok.column),
            )
        if key == BLOCK_KEYWORD:
            raise self.error(f"'{BLOCK_KEYWORD}' is reserved and cannot be passed by name", tok)
        return key

    # -- Grammar rules --

    def parse_program(self) -> Block:
        """statement* EOF"""
        start = self.current
        self.count_node(start)
        statements: list[Expression] = []
        while self.current.kind != TokenKind.EOF:
            statements.append(self.parse_expression())
        return Block(statements=statements, line=start.line, column=start.column)

    def parse_expression(self, bare_args: bool = True, do_block: bool = True) -> Expression:
        """method_chain"""
        return self.parse_method_chain(bare_args, do_block)

    def parse_method_chain(self, bare_args: bool, do_block: bool) -> Expression:
        """primary ('.' IDENT arguments? block?)*"""
        expr = self.parse_primary(bare_args, do_block)

        while self.current.kind == TokenKind.DOT:
            self.advance()
            name_tok = self.current
            if name_tok.kind != TokenKind.IDENTIFIER:
                raise self.error(f"Expected method name after '.' but got {_describe(name_tok)}", name_tok)
            self.advance()
            method = self.validate_method(name_tok, chained=True)
            self.count_node(name_tok)
            args = self.parse_call_arguments(name_tok, bare_args)
            block = self.parse_optional_block(do_block)
            expr = MethodCall(
                receiver=expr,
                method=method,
                args=args,
                block=block,
                line=name_tok.line,
                column=name_tok.column,
            )

        return expr

    def parse_primary(self, bare_args: bool, do_block: bool) -> Expression:
        """IDENT call | literal | '(' expression ')'"""
        tok = self.current

        if tok.kind in _LITERAL_KINDS:
            self.advance()
            self.count_node(tok)
            return Literal(kind=_LITERAL_KINDS[tok.kind], value=tok.value, line=tok.line, column=tok.column)

        if tok.kind == TokenKind.IDENTIFIER:
            if tok.value in LITERAL_IDENTIFIERS:
                self.advance()
                self.count_node(tok)
                value = LITERAL_IDENTIFIERS[str(tok.value)]
                kind = LiteralKind.NIL if value is None else LiteralKind.BOOLEAN
                return Literal(kind=kind, value=value, line=tok.line, column=tok.column)
            return self.parse_call(bare_args, do_block)

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            with self.nested(tok):
                expr = self.parse_expression()
            self.expect(TokenKind.RPAREN, "')'")
            return expr

        if tok.kind == TokenKind.EOF:
            raise self.error("Unexpected end of input", tok)
        raise self.error(f"Unexpected token {_describe(tok)}", tok)

    def parse_call(self, bare_args: bool, do_block: bool) -> MethodCall:
        """IDENT arguments? block?"""
        name_tok = self.advance()
        method = self.validate_method(name_tok, chained=False)
        self.count_node(name_tok)
        args = self.parse_call_arguments(name_tok, bare_args)
        block = self.parse_optional_block(do_block)
        return MethodCall(
            receiver=None,
            method=method,
            args=args,
            block=block,
            line=name_tok.line,
            column=name_tok.column,
        )

    def parse_call_arguments(self, name_tok: Token, bare_args: bool) -> list[ArgumentNode]:
        if self.current.kind == TokenKind.LPAREN:
            return self.parse_paren_arguments()
        if bare_args and self.starts_bare_argument(name_tok):
            return self.parse_bare_arguments()
        return []

    def parse_paren_arguments(self) -> list[ArgumentNode]:
        """'(' (argument (',' argument)* ','?)? ')'"""
        open_tok = self.expect(TokenKind.LPAREN, "'('")
        args: list[ArgumentNode] = []
        with self.nested(open_tok):
            while self.current.kind != TokenKind.RPAREN:
                if self.current.kind == TokenKind.EOF:
                    raise self.error(
                        f"Expected ')' to close '(' from line {open_tok.line}, column {open_tok.column}"
                        f" but got end of input",
                        self.current,
                    )
                args.append(self.parse_argument(bare=False))
                if self.current.kind == TokenKind.COMMA:
                    self.advance()
                elif self.current.kind not in (TokenKind.RPAREN, TokenKind.EOF):
                    raise self.error(f"Expected ',' or ')' but got {_describe(self.current)}", self.current)
        self.advance()
        self.check_duplicate_keys(args)
        return args

    def starts_bare_argument(self, name_tok: Token) -> bool:
        """A parenthesis-free argument list must begin on the method's line."""
        tok = self.current
        if tok.line != name_tok.line:
            return False
        if tok.kind in _LITERAL_KINDS:
            return True
        if tok.kind == TokenKind.IDENTIFIER:
            return tok.value in LITERAL_IDENTIFIERS or self.peek(1).kind == TokenKind.COLON
        return False

    def parse_bare_arguments(self) -> list[ArgumentNode]:
        """bare_argument (',' bare_argument)*"""
        args = [self.parse_argument(bare=True)]
        while self.current.kind == TokenKind.COMMA:
            self.advance()
            args.append(self.parse_argument(bare=True))
        self.check_duplicate_keys(args)
        return args

    def parse_argument(self, bare: bool) -> ArgumentNode:
        """IDENT ':' value | (STRING | SYMBOL) '=>' value | value"""
        tok = self.current

        if tok.kind == TokenKind.IDENTIFIER and self.peek(1).kind == TokenKind.COLON:
            key = self.validate_keyword(str(tok.value), tok)
            self.advance()
            self.advance()
            self.count_node(tok)
            return NamedArg(key=key, value=self.parse_argument_value(bare), line=tok.line, column=tok.column)

        if tok.kind in (TokenKind.STRING, TokenKind.SYMBOL) and self.peek(1).kind == TokenKind.ARROW:
            key = self.validate_keyword(str(tok.value), tok)
            self.advance()
            self.advance()
            self.count_node(tok)
            return NamedArg(key=key, value=self.parse_argument_value(bare), line=tok.line, column=tok.column)

        return self.parse_argument_value(bare)

    def parse_argument_value(self, bare: bool) -> Expression:
        # Bare values stop before '.', so `text "a".bg("b")` chains onto text
        if bare:
            return self.parse_primary(bare_args=False, do_block=False)
        return self.parse_expression(bare_args=False)

    def parse_optional_block(self, do_block: bool) -> Block | None:
        """'do' statement* 'end' | '{' statement* '}'"""
        tok = self.current
        if tok.kind == TokenKind.LBRACE or (tok.kind == TokenKind.DO and do_block):
            return self.parse_block()
        return None

    def parse_block(self) -> Block:
        open_tok = self.advance()
        closer = _BLOCK_CLOSERS[open_tok.kind]
        self.count_node(open_tok)
        statements: list[Expression] = []
        with self.nested(open_tok):
            while self.current.kind != closer:
                if self.current.kind == TokenKind.EOF:
                    expected = "'end'" if closer == TokenKind.END else "'}'"
                    raise self.error(
                        f"Unterminated block: expected {expected} to close '{open_tok.value}' from line "
                        f"{open_tok.line}, column {open_tok.column} but got end of input",
                        self.current,
                    )
                statements.append(self.parse_expression())
        self.advance()
        return Block(statements=statements, line=open_tok.line, column=open_tok.column)

    def check_duplicate_keys(self, args: list[ArgumentNode]) -> None:
        seen: set[str] = set()
        for arg in args:
            if isinstance(arg, NamedArg):
                if arg.key in seen:
                    raise ParseError(
                        f"Duplicate keyword argument '{arg.key}' at line {arg.line}, column {arg.column}",
                        ErrorContext(line=arg.line, column=arg.column),
                    )
                seen.add(arg.key)


def parse(
    tokens: list[Token],
    *,
    max_nodes: int = DEFAULT_MAX_NODES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Block:
    """
    Parse a token list into the program's root block.

    The root block holds the top-level statements in source order. An
    empty token stream (EOF only) produces an empty root block.

    Raises:
        ParseError: If the token stream is malformed.
        SecurityError: If a method name is not whitelisted.
        LimitExceededError: If the program exceeds the node or depth limit.
    """
    parser = _Parser(tokens, max_nodes=max_nodes, max_depth=max_depth)
    return parser.parse_program()


def parse_source(
    source: str,
    *,
    max_source_length: int | None = None,
    max_nodes: int = DEFAULT_MAX_NODES,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> Block:
    """
    Tokenize and parse DSL source text.

    Raises:
        LexError: If tokenization fails.
        ParseError: If parsing fails.
        SecurityError: If a method name is not whitelisted.
        LimitExceededError: If the source exceeds a configured limit.
    """
    if max_source_length is not None and len(source) > max_source_length:
        raise LimitExceededError(
            f"Source is too long ({len(source)} characters, limit {max_source_length})"
        )
    return parse(tokenize(source), max_nodes=max_nodes, max_depth=max_depth)
