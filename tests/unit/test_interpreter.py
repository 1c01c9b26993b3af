"""Tests for the AST interpreter, using a call-recording context."""

from __future__ import annotations

from typing import Any

import pytest

from swiftdsl.core.elements import Builder
from swiftdsl.core.errors import SecurityError
from swiftdsl.core.ir import Literal, LiteralKind, Symbol
from swiftdsl.core.playground.interpreter import execute
from swiftdsl.core.playground.parser import parse_source
from swiftdsl.core.playground.sandbox import Sandbox


class RecordingNode(Builder):
    """Stand-in element: records modifier calls and returns itself."""

    DSL_METHODS = frozenset({"bg", "padding", "p"})

    def __init__(self, log: list[str]) -> None:
        self.log = log

    def bg(self, color: Any) -> RecordingNode:
        self.log.append(f"bg:{color}")
        return self

    def padding(self, amount: Any = 4) -> RecordingNode:
        self.log.append(f"padding:{amount}")
        return self

    def p(self, amount: Any) -> RecordingNode:
        return self


class Recorder(Builder):
    """Stand-in sandbox that logs every call in order."""

    DSL_METHODS = frozenset({"vstack", "card", "text", "button", "option"})

    def __init__(self) -> None:
        self.log: list[str] = []
        self.received: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    def vstack(self, *args: Any, block: Any = None, **kwargs: Any) -> Any:
        self.log.append("vstack:start")
        result = block() if block is not None else None
        self.log.append("vstack:end")
        return result

    def card(self, *args: Any, block: Any = None, **kwargs: Any) -> str:
        # Never runs its block
        self.log.append("card")
        return "card"

    def text(self, value: Any) -> RecordingNode:
        self.log.append(f"text:{value}")
        return RecordingNode(self.log)

    def option(self, *args: Any, **kwargs: Any) -> None:
        self.received.append((args, kwargs))

    def button(self, title: Any) -> None:
        raise ValueError(f"bad button {title!r}")

    def secret(self) -> None:  # public, but not in DSL_METHODS
        self.log.append("secret")


def run(source: str, context: Builder | None = None) -> tuple[Any, Builder]:
    ctx = context or Recorder()
    return execute(ctx, parse_source(source)), ctx


class TestLiterals:
    def test_literal_value_unchanged(self) -> None:
        node = Literal(kind=LiteralKind.NUMBER, value=4)
        assert execute(Recorder(), node) == 4

    def test_symbol_literal(self) -> None:
        node = Literal(kind=LiteralKind.SYMBOL, value="foo")
        value = execute(Recorder(), node)
        assert isinstance(value, Symbol)
        assert value == "foo"

    def test_string_escape_round_trip(self) -> None:
        value, _ = run(r'"a\nb"')
        assert value == "a\nb"

    def test_empty_program(self) -> None:
        value, ctx = run("")
        assert value is None
        assert ctx.log == []


class TestDispatch:
    def test_chain_calls_in_order(self) -> None:
        _, ctx = run('text("Hi").bg("red").padding(4)')
        assert ctx.log == ["text:Hi", "bg:red", "padding:4"]

    def test_chained_calls_go_to_previous_result(self) -> None:
        value, _ = run('text("Hi").bg("red")')
        assert isinstance(value, RecordingNode)

    def test_arguments_evaluated_left_to_right_before_call(self) -> None:
        _, ctx = run('vstack(text("a"), text("b"))')
        assert ctx.log == ["text:a", "text:b", "vstack:start", "vstack:end"]

    def test_positional_and_keyword_arguments_are_separate(self) -> None:
        _, ctx = run('option("m", "Medium", selected: true)')
        assert ctx.received == [(("m", "Medium"), {"selected": True})]

    def test_program_value_is_last_statement(self) -> None:
        value, _ = run('"first"\n"second"')
        assert value == "second"

    def test_long_chain_does_not_recurse(self) -> None:
        value, _ = run('text("a")' + ".p(1)" * 800, Recorder())
        assert isinstance(value, RecordingNode)


class TestBlocks:
    def test_block_is_deferred(self) -> None:
        _, ctx = run('vstack do\n  text("a")\nend')
        assert ctx.log == ["vstack:start", "text:a", "vstack:end"]

    def test_block_not_run_unless_invoked(self) -> None:
        _, ctx = run('card do\n  text("never")\nend')
        assert ctx.log == ["card"]

    def test_block_returns_last_value(self) -> None:
        value, _ = run('vstack do\n  "a"\n  "b"\nend')
        assert value == "b"

    def test_empty_block_returns_none(self) -> None:
        value, _ = run("vstack do\nend")
        assert value is None

    def test_block_uses_same_context(self) -> None:
        _, ctx = run('vstack do\n  vstack do\n    text("deep")\n  end\nend')
        assert ctx.log == ["vstack:start", "vstack:start", "text:deep", "vstack:end", "vstack:end"]


class TestRestrictedDispatch:
    def test_non_builder_receiver_rejected(self) -> None:
        with pytest.raises(SecurityError, match="Cannot call 'bg' on a str value"):
            run('"plain".bg("red")')

    def test_name_outside_dsl_methods_rejected(self) -> None:
        ctx = Recorder()
        # Parses (``link`` is whitelisted) but this context does not expose it
        with pytest.raises(SecurityError):
            run('link("x")', ctx)
        assert ctx.log == []

    def test_public_method_not_listed_is_unreachable(self) -> None:
        ctx = Recorder()
        with pytest.raises(SecurityError):
            ctx.resolve_dsl_method("secret")

    def test_underscore_names_never_resolve(self) -> None:
        class Leaky(Builder):
            DSL_METHODS = frozenset({"_hidden", "__class__"})

            def _hidden(self) -> None:
                pass

        with pytest.raises(SecurityError):
            Leaky().resolve_dsl_method("_hidden")
        with pytest.raises(SecurityError):
            Leaky().resolve_dsl_method("__class__")

    def test_non_callable_attribute_rejected(self) -> None:
        class Data(Builder):
            DSL_METHODS = frozenset({"value"})
            value = 42

        with pytest.raises(SecurityError):
            Data().resolve_dsl_method("value")


class TestErrorPropagation:
    def test_builder_errors_propagate_unchanged(self) -> None:
        with pytest.raises(ValueError, match="bad button 'x'"):
            run('button("x")')

    def test_error_inside_block_propagates(self) -> None:
        ctx = Recorder()
        with pytest.raises(ValueError):
            run('vstack do\n  button("x")\nend', ctx)
        assert ctx.log == ["vstack:start"]


class TestWithSandbox:
    def test_sandbox_builds_tree(self) -> None:
        sandbox = Sandbox()
        execute(sandbox, parse_source('vstack do\n  text("a")\n  text("b")\nend'))
        [root] = sandbox.root_elements
        assert [c.content for c in root.children] == ["a", "b"]
