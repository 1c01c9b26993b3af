"""
SwiftDSL intermediate representation.

AST node models produced by the playground parser and consumed by the
interpreter.
"""

from .nodes import (
    AnyNode,
    Argument,
    Block,
    Literal,
    LiteralKind,
    MethodCall,
    NamedArg,
    Node,
    Symbol,
    iter_nodes,
)

__all__ = [
    "AnyNode",
    "Argument",
    "Block",
    "Literal",
    "LiteralKind",
    "MethodCall",
    "NamedArg",
    "Node",
    "Symbol",
    "iter_nodes",
]
