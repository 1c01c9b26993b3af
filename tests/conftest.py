"""Shared pytest fixtures for SwiftDSL tests."""

from pathlib import Path

import pytest

from swiftdsl.core.config import PlaygroundConfig
from swiftdsl.core.playground.executor import PlaygroundExecutor
from swiftdsl_ui.runtime.renderer import RenderContext


@pytest.fixture
def config() -> PlaygroundConfig:
    """Return default playground limits."""
    return PlaygroundConfig()


@pytest.fixture
def executor(config: PlaygroundConfig) -> PlaygroundExecutor:
    """Return an executor with its own core registry."""
    return PlaygroundExecutor(config)


@pytest.fixture
def render_context() -> RenderContext:
    """Return a trusted render context with one translation loaded."""
    return RenderContext(
        trusted=True,
        translations={"en": {"greeting.hello": "Hello, %{name}!"}},
    )


@pytest.fixture
def dsl_file(tmp_path: Path) -> Path:
    """Return a small valid program on disk."""
    path = tmp_path / "hello.dsl"
    path.write_text('vstack do\n  text("Hello")\n  button("Go")\nend\n', encoding="utf-8")
    return path
