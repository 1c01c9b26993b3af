"""
SwiftDSL - a SwiftUI-style declarative UI DSL with a sandboxed playground.

Untrusted DSL source is tokenized, checked against a closed method
whitelist, and interpreted against builder objects. No Python ``eval`` is
involved anywhere in the pipeline.
"""

from __future__ import annotations

import re
from importlib.metadata import version as _metadata_version
from pathlib import Path as _Path

from .core import ir
from .core.errors import LexError, LimitExceededError, ParseError, SecurityError, SwiftDSLError


def _get_version() -> str:
    """Get version from pyproject.toml (editable) or importlib.metadata (installed)."""
    pyproject = _Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        content = pyproject.read_text()
        if match := re.search(r'^version\s*=\s*["\']([^"\']+)["\']', content, re.MULTILINE):
            return match.group(1)

    try:
        return _metadata_version("swiftdsl")
    except Exception:
        return "0.0.0"


__version__ = _get_version()

__all__ = [
    "__version__",
    "ir",
    "SwiftDSLError",
    "ParseError",
    "LexError",
    "SecurityError",
    "LimitExceededError",
]
