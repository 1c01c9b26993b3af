"""
Playground configuration.

Loaded from the ``[playground]`` table of ``swiftdsl.toml``:

    [playground]
    max_source_length = 20000
    max_nodes = 2000
    max_depth = 32
    max_component_depth = 32
    timeout_seconds = 2.0
    production = false
    cache_parsed = false
"""

import logging
import os
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "swiftdsl.toml"
CONFIG_ENV_VAR = "SWIFTDSL_CONFIG"


@dataclass(frozen=True)
class PlaygroundConfig:
    """Limits and behaviour switches for one playground deployment."""

    max_source_length: int = 20_000
    max_nodes: int = 2_000
    max_depth: int = 32  # blocks, argument lists, parentheses
    max_component_depth: int = 32  # nested elements at execution time
    timeout_seconds: float = 2.0  # applied by the host, not the engine
    production: bool = False  # hide runtime error detail from callers
    cache_parsed: bool = False  # content-addressed AST cache
    cache_size: int = 256


def load_config(path: Path | None = None) -> PlaygroundConfig:
    """
    Load playground configuration.

    Resolution order: explicit ``path``, then ``$SWIFTDSL_CONFIG``, then
    ``./swiftdsl.toml``. A missing file yields the defaults.

    Raises:
        ValueError: If the ``[playground]`` table contains an unknown key.
    """
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        path = Path(env_path) if env_path else Path.cwd() / CONFIG_FILENAME

    if not path.exists():
        logger.debug("No config at %s, using defaults", path)
        return PlaygroundConfig()

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    section = data.get("playground", {})

    known = {f.name for f in fields(PlaygroundConfig)}
    unknown = set(section) - known
    if unknown:
        raise ValueError(f"Unknown [playground] keys in {path}: {', '.join(sorted(unknown))}")

    defaults = PlaygroundConfig()
    return PlaygroundConfig(
        max_source_length=int(section.get("max_source_length", defaults.max_source_length)),
        max_nodes=int(section.get("max_nodes", defaults.max_nodes)),
        max_depth=int(section.get("max_depth", defaults.max_depth)),
        max_component_depth=int(
            section.get("max_component_depth", defaults.max_component_depth)
        ),
        timeout_seconds=float(section.get("timeout_seconds", defaults.timeout_seconds)),
        production=bool(section.get("production", defaults.production)),
        cache_parsed=bool(section.get("cache_parsed", defaults.cache_parsed)),
        cache_size=int(section.get("cache_size", defaults.cache_size)),
    )
