"""
Playground orchestrator.

Runs one piece of untrusted DSL source end to end: parse (with the
whitelist gate and resource limits), execute against a fresh Sandbox,
render the resulting element tree, and package everything as an
``ExecutionResult``. Errors never escape ``run``; they become a failed
result with a single-line message.
"""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from typing import Any, Protocol

from pydantic import BaseModel, ConfigDict, Field

from swiftdsl.core.config import PlaygroundConfig
from swiftdsl.core.elements import Element
from swiftdsl.core.errors import ParseError, SecurityError, SwiftDSLError
from swiftdsl.core.ir.nodes import Block
from swiftdsl.core.playground.interpreter import execute
from swiftdsl.core.playground.parser import parse_source
from swiftdsl.core.playground.sandbox import Sandbox
from swiftdsl.core.playground.stimulus import extract_stimulus_controllers
from swiftdsl.core.registry import DslRegistry

logger = logging.getLogger(__name__)

SYNTAX_ERROR_PREFIX = "Syntax Error"
SECURITY_ERROR_PREFIX = "Security Error"


class RenderContext(Protocol):
    """What the executor needs from the host's rendering environment."""

    trusted: bool

    def render(self, elements: list[Element]) -> str: ...


class ExecutionResult(BaseModel):
    """Outcome of one playground run. ``html`` and ``error`` are exclusive."""

    success: bool
    html: str | None = None
    error: str | None = None
    element_tree: list[dict[str, Any]] | None = Field(default=None, alias="elementTree")
    stimulus_controllers: dict[str, dict[str, Any]] = Field(
        default_factory=dict, alias="stimulusControllers"
    )
    duration_ms: float = Field(default=0.0, alias="durationMs")

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    @classmethod
    def failure(cls, error: str, duration_ms: float = 0.0) -> ExecutionResult:
        return cls(success=False, error=error, duration_ms=duration_ms)


def _single_line(message: str) -> str:
    return " ".join(part.strip() for part in message.splitlines() if part.strip())


def _error_message(error: BaseException) -> str:
    if isinstance(error, SwiftDSLError):
        return _single_line(error.message)
    return _single_line(str(error))


class _ParseCache:
    """Bounded LRU of parsed programs keyed by the sha256 of their source."""

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size
        self._items: OrderedDict[str, Block] = OrderedDict()
        self._lock = threading.Lock()

    @staticmethod
    def key(source: str) -> str:
        return hashlib.sha256(source.encode("utf-8")).hexdigest()

    def get(self, key: str) -> Block | None:
        with self._lock:
            program = self._items.get(key)
            if program is not None:
                self._items.move_to_end(key)
            return program

    def put(self, key: str, program: Block) -> None:
        with self._lock:
            self._items[key] = program
            self._items.move_to_end(key)
            while len(self._items) > self.max_size:
                self._items.popitem(last=False)

    def __len__(self) -> int:
        return len(self._items)


class PlaygroundExecutor:
    """
    Executes playground source safely.

    One executor can serve many concurrent requests: every ``run`` builds
    its own tokens, AST and Sandbox. The only shared state is the optional
    parse cache, which holds immutable ASTs.
    """

    def __init__(
        self,
        config: PlaygroundConfig | None = None,
        registry: DslRegistry | None = None,
    ) -> None:
        self.config = config or PlaygroundConfig()
        self.registry = registry if registry is not None else DslRegistry()
        self._cache = _ParseCache(self.config.cache_size) if self.config.cache_parsed else None

    def parse(self, source: str) -> Block:
        """
        Parse source under the configured limits.

        Raises:
            ParseError: Malformed source (LexError for bad characters).
            SecurityError: Non-whitelisted names or exceeded limits.
        """
        key = None
        if self._cache is not None:
            key = _ParseCache.key(source)
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        program = parse_source(
            source,
            max_source_length=self.config.max_source_length,
            max_nodes=self.config.max_nodes,
            max_depth=self.config.max_depth,
        )
        if self._cache is not None and key is not None:
            self._cache.put(key, program)
        return program

    def run(self, source: str, render_context: RenderContext) -> ExecutionResult:
        """
        Parse, execute and render ``source``.

        Args:
            source: Untrusted DSL source text.
            render_context: Host renderer; helpers are only forwarded to it
                when its ``trusted`` flag is set.

        Returns:
            A successful result with ``html`` and ``element_tree``, or a
            failed result whose ``error`` starts with ``Syntax Error:``,
            ``Security Error:`` or the runtime exception's class name.
        """
        started = time.perf_counter()
        try:
            program = self.parse(source)
            sandbox = Sandbox(render_context, max_component_depth=self.config.max_component_depth)
            value = execute(sandbox, program)

            elements = sandbox.root_elements
            if not elements and isinstance(value, str) and value:
                elements = [Element(tag="span", content=value)]
            html = str(render_context.render(elements))
        except ParseError as e:
            logger.debug("Playground source rejected by parser: %s", e.message)
            return ExecutionResult.failure(
                f"{SYNTAX_ERROR_PREFIX}: {_error_message(e)}", self._elapsed(started)
            )
        except SecurityError as e:
            logger.info("Playground source rejected: %s", e.message)
            return ExecutionResult.failure(
                f"{SECURITY_ERROR_PREFIX}: {_error_message(e)}", self._elapsed(started)
            )
        except Exception as e:
            logger.warning("Playground execution failed", exc_info=True)
            detail = "execution failed" if self.config.production else _error_message(e)
            return ExecutionResult.failure(f"{type(e).__name__}: {detail}", self._elapsed(started))

        duration_ms = self._elapsed(started)
        logger.debug("Rendered %d root elements in %.2fms", len(elements), duration_ms)
        return ExecutionResult(
            success=True,
            html=html,
            element_tree=[element.to_dict() for element in elements],
            stimulus_controllers=extract_stimulus_controllers(source),
            duration_ms=duration_ms,
        )

    @staticmethod
    def _elapsed(started: float) -> float:
        return round((time.perf_counter() - started) * 1000, 3)
