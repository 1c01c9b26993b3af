"""Core SwiftDSL functionality: AST, whitelist, element builders, playground engine, registry."""

from . import ir
from .config import PlaygroundConfig, load_config
from .elements import Builder, Element
from .errors import (
    ErrorContext,
    LexError,
    LimitExceededError,
    ParseError,
    SecurityError,
    SwiftDSLError,
)
from .playground import ExecutionResult, PlaygroundExecutor
from .registry import DslRegistry, MethodMetadata

__all__ = [
    "ir",
    "Builder",
    "Element",
    "ErrorContext",
    "SwiftDSLError",
    "ParseError",
    "LexError",
    "SecurityError",
    "LimitExceededError",
    "PlaygroundConfig",
    "load_config",
    "PlaygroundExecutor",
    "ExecutionResult",
    "DslRegistry",
    "MethodMetadata",
]
