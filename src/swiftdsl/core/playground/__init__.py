"""
Sandboxed playground engine.

Tokenizer, parser, interpreter, sandbox and orchestrator for running
untrusted DSL source.

Usage:
    from swiftdsl.core.playground import PlaygroundExecutor
    from swiftdsl_ui.runtime.renderer import RenderContext

    result = PlaygroundExecutor().run('text("Hello")', RenderContext())
    # result.html == '<span>Hello</span>'
"""

from swiftdsl.core.playground.executor import ExecutionResult, PlaygroundExecutor
from swiftdsl.core.playground.interpreter import execute
from swiftdsl.core.playground.parser import parse, parse_source
from swiftdsl.core.playground.sandbox import Sandbox
from swiftdsl.core.playground.stimulus import extract_stimulus_controllers
from swiftdsl.core.playground.tokenizer import Token, TokenKind, tokenize

__all__ = [
    "ExecutionResult",
    "PlaygroundExecutor",
    "Sandbox",
    "Token",
    "TokenKind",
    "execute",
    "extract_stimulus_controllers",
    "parse",
    "parse_source",
    "tokenize",
]
