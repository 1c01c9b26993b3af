"""
AST node types for the SwiftDSL playground language.

The parser produces a tree of these nodes; the interpreter walks it. Nodes
are frozen, so a parsed tree can be cached and re-executed safely.

Variants (discriminated on ``type``):
- MethodCall: ``text("Hi")``, ``.bg("red")``, ``vstack do ... end``
- NamedArg: ``spacing: 8`` inside an argument list
- Literal: strings, numbers, symbols, booleans, nil
- Block: ``do ... end`` / ``{ ... }`` bodies and the program root
"""

from __future__ import annotations

import typing
from enum import StrEnum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Runtime value types
# ---------------------------------------------------------------------------


class Symbol(str):
    """An interned-name value produced by ``:name`` literals."""

    __slots__ = ()

    def __repr__(self) -> str:
        return f":{str.__str__(self)}"


class LiteralKind(StrEnum):
    """Primitive literal categories."""

    STRING = "string"
    NUMBER = "number"
    SYMBOL = "symbol"
    BOOLEAN = "boolean"
    NIL = "nil"


# ---------------------------------------------------------------------------
# AST node types
# ---------------------------------------------------------------------------


class Literal(BaseModel):
    """A primitive literal value."""

    type: typing.Literal["literal"] = "literal"
    kind: LiteralKind
    value: bool | int | float | str | None = Field(description="The literal value")
    line: int = 0
    column: int = 0

    model_config = ConfigDict(frozen=True)

    def resolve(self) -> typing.Any:
        """Return the runtime value, materialising symbols."""
        if self.kind == LiteralKind.SYMBOL:
            return Symbol(self.value)
        return self.value

    def __str__(self) -> str:
        if self.kind == LiteralKind.NIL:
            return "nil"
        if self.kind == LiteralKind.BOOLEAN:
            return "true" if self.value else "false"
        if self.kind == LiteralKind.SYMBOL:
            return f":{self.value}"
        if self.kind == LiteralKind.STRING:
            return f'"{self.value}"'
        return str(self.value)


class NamedArg(BaseModel):
    """A ``key: value`` argument."""

    type: typing.Literal["named_arg"] = "named_arg"
    key: str
    value: Node
    line: int = 0
    column: int = 0

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.key}: {self.value}"


class Block(BaseModel):
    """A sequence of statements, evaluated lazily by the interpreter."""

    type: typing.Literal["block"] = "block"
    statements: list[Node] = Field(default_factory=list)
    line: int = 0
    column: int = 0

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        body = "; ".join(str(s) for s in self.statements)
        return f"do {body} end" if body else "do end"


class MethodCall(BaseModel):
    """
    A builder call.

    ``receiver`` is None for a bare (top-level) call and holds the
    receiving expression for a chained ``.method`` call.
    """

    type: typing.Literal["method_call"] = "method_call"
    receiver: Node | None = None
    method: str
    args: list[Argument] = Field(default_factory=list)
    block: Block | None = None
    line: int = 0
    column: int = 0

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        prefix = f"{self.receiver}." if self.receiver is not None else ""
        args = f"({', '.join(str(a) for a in self.args)})" if self.args else ""
        block = f" {self.block}" if self.block is not None else ""
        return f"{prefix}{self.method}{args}{block}"


# ---------------------------------------------------------------------------
# Union types
# ---------------------------------------------------------------------------

Node = Annotated[MethodCall | Literal | Block, Field(discriminator="type")]
Argument = Annotated[MethodCall | Literal | Block | NamedArg, Field(discriminator="type")]

# Rebuild models for recursive forward references
NamedArg.model_rebuild()
Block.model_rebuild()
MethodCall.model_rebuild()


AnyNode = MethodCall | Literal | Block | NamedArg


def iter_nodes(node: AnyNode) -> typing.Iterator[AnyNode]:
    """Yield ``node`` and all of its descendants, depth first."""
    stack: list[AnyNode] = [node]
    while stack:
        current = stack.pop()
        yield current
        if isinstance(current, MethodCall):
            if current.block is not None:
                stack.append(current.block)
            stack.extend(reversed(current.args))
            if current.receiver is not None:
                stack.append(current.receiver)
        elif isinstance(current, NamedArg):
            stack.append(current.value)
        elif isinstance(current, Block):
            stack.extend(reversed(current.statements))
