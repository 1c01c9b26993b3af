"""
AST interpreter for the SwiftDSL playground language.

Walks a parsed program against an execution context. Does NOT use Python's
eval(): the only operations performed are literal resolution and calls
resolved through ``Builder.resolve_dsl_method``.

Blocks are never evaluated eagerly. A ``do ... end`` body becomes a
zero-argument closure handed to the receiving method as ``block=``; the
method decides when (and whether) to run it. The closure evaluates its
statements against the same context and returns the last value.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from swiftdsl.core.elements import Builder
from swiftdsl.core.errors import ErrorContext, SecurityError
from swiftdsl.core.ir.nodes import Block, Literal, MethodCall, NamedArg, Node
from swiftdsl.core.whitelist import BLOCK_KEYWORD


def execute(context: Builder, node: Node) -> Any:
    """Evaluate ``node`` against ``context``.

    Args:
        context: Receiver for bare (receiver-less) calls, usually a Sandbox.
        node: A parsed program root or any expression node.

    Returns:
        The value of the expression; for a block, the value of its last
        statement (None when empty).

    Raises:
        SecurityError: If a call targets a value that is not a DSL builder
            or a name the builder does not expose.
        Exception: Anything raised by a builder method propagates unchanged.
    """
    return _interpret(node, context)


def _interpret(node: Node, context: Builder) -> Any:
    if isinstance(node, Literal):
        return node.resolve()

    if isinstance(node, MethodCall):
        return _interpret_chain(node, context)

    if isinstance(node, Block):
        return _run_block(node, context)

    raise TypeError(f"Unknown node type: {type(node).__name__}")


def _run_block(block: Block, context: Builder) -> Any:
    result: Any = None
    for statement in block.statements:
        result = _interpret(statement, context)
    return result


def _interpret_chain(call: MethodCall, context: Builder) -> Any:
    """Evaluate ``a.b(...).c(...)`` left to right without recursing per link."""
    calls: list[MethodCall] = []
    current: Node | None = call
    while isinstance(current, MethodCall):
        calls.append(current)
        current = current.receiver
    calls.reverse()

    # `current` is now whatever sits left of the innermost call
    receiver: Any = context if current is None else _interpret(current, context)
    for link in calls:
        receiver = _dispatch(receiver, link, context)
    return receiver


def _dispatch(receiver: Any, call: MethodCall, context: Builder) -> Any:
    if not isinstance(receiver, Builder):
        raise SecurityError(
            f"Cannot call '{call.method}' on a {type(receiver).__name__} value",
            ErrorContext(line=call.line, column=call.column),
        )
    method = receiver.resolve_dsl_method(call.method)

    args: list[Any] = []
    kwargs: dict[str, Any] = {}
    for arg in call.args:
        if isinstance(arg, NamedArg):
            kwargs[arg.key] = _interpret(arg.value, context)
        else:
            args.append(_interpret(arg, context))

    if call.block is not None:
        kwargs[BLOCK_KEYWORD] = _make_closure(call.block, context)

    return method(*args, **kwargs)


def _make_closure(block: Block, context: Builder) -> Callable[[], Any]:
    def run_block() -> Any:
        return _run_block(block, context)

    return run_block
