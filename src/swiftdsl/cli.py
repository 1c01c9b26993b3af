"""
SwiftDSL command line interface.

Commands:
    render FILE   Run a DSL file through the playground engine, print HTML
    check FILE    Parse and whitelist-check a DSL file without running it
    methods       List the registered DSL element constructors
    serve         Serve the live playground over HTTP

Environment variables:
    LOG_LEVEL        - Logging level (default: WARNING)
    SWIFTDSL_CONFIG  - Path to a swiftdsl.toml with a [playground] table
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from swiftdsl import __version__
from swiftdsl.core.config import PlaygroundConfig, load_config
from swiftdsl.core.errors import ParseError, SecurityError, with_snippet
from swiftdsl.core.ir.nodes import iter_nodes
from swiftdsl.core.playground.executor import PlaygroundExecutor

app = typer.Typer(
    help="SwiftUI-style DSL with a sandboxed playground",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="Path to swiftdsl.toml (default: $SWIFTDSL_CONFIG or ./swiftdsl.toml)"),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"swiftdsl {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")] = False,
    version: Annotated[
        bool,
        typer.Option("--version", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """SwiftDSL tools."""
    log_level = "DEBUG" if verbose else os.getenv("LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def _load(config_path: Path | None) -> PlaygroundConfig:
    try:
        return load_config(config_path)
    except ValueError as e:
        err_console.print(f"[red]Invalid configuration:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e


def _read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as e:
        err_console.print(f"[red]Cannot read {escape(str(path))}:[/red] {escape(str(e))}")
        raise typer.Exit(2) from e


@app.command("render")
def render_command(
    file: Annotated[Path, typer.Argument(help="DSL source file")],
    as_json: Annotated[bool, typer.Option("--json", help="Print the full result as JSON")] = False,
    config: ConfigOption = None,
) -> None:
    """Run a DSL file and print the rendered HTML."""
    from swiftdsl_ui.runtime.renderer import RenderContext

    source = _read_source(file)
    executor = PlaygroundExecutor(_load(config))
    result = executor.run(source, RenderContext(trusted=True))

    if as_json:
        console.print_json(json.dumps(result.model_dump(by_alias=True)))
    elif result.success:
        # Raw HTML; bypass Rich markup parsing
        console.print(result.html, markup=False, highlight=False, soft_wrap=True)
    else:
        err_console.print(f"[red]{escape(result.error or '')}[/red]", highlight=False)

    if not result.success:
        raise typer.Exit(1)


@app.command("check")
def check_command(
    file: Annotated[Path, typer.Argument(help="DSL source file")],
    config: ConfigOption = None,
) -> None:
    """Parse a DSL file and report syntax or whitelist errors."""
    source = _read_source(file)
    executor = PlaygroundExecutor(_load(config))
    try:
        program = executor.parse(source)
    except (ParseError, SecurityError) as e:
        label = "Syntax error" if isinstance(e, ParseError) else "Security error"
        err_console.print(f"[red]{label} in {escape(str(file))}[/red]")
        err_console.print(str(with_snippet(e, source)), markup=False, highlight=False)
        raise typer.Exit(1) from e

    node_count = sum(1 for _ in iter_nodes(program))
    console.print(
        f"[green]OK[/green] {escape(str(file))}: {len(program.statements)} statement(s), {node_count} node(s)"
    )


@app.command("methods")
def methods_command(
    category: Annotated[
        str | None, typer.Option("--category", help="Only show one category")
    ] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """List the DSL element constructors and their parameters."""
    registry = PlaygroundExecutor().registry
    entries = registry.by_category(category) if category else registry.all()

    if as_json:
        console.print_json(json.dumps([entries[name].model_dump() for name in sorted(entries)]))
        return

    if not entries:
        console.print("[dim]No methods found.[/dim]")
        return

    table = Table(title="DSL methods")
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Parameters")
    table.add_column("Description")
    for name in sorted(entries):
        meta = entries[name]
        params = ", ".join(f"{k}: {v}" for k, v in meta.parameters.items())
        table.add_row(name, meta.category, params, meta.description)
    console.print(table)


@app.command("serve")
def serve_command(
    host: Annotated[str, typer.Option("--host", envvar="HOST", help="Bind address")] = "127.0.0.1",
    port: Annotated[int, typer.Option("--port", envvar="PORT", help="Port")] = 8000,
    config: ConfigOption = None,
) -> None:
    """Serve the live playground."""
    import uvicorn

    from swiftdsl_ui.runtime.playground_routes import create_playground_app

    playground = create_playground_app(_load(config))
    console.print(f"[green]Playground:[/green] http://{host}:{port}/playground")
    uvicorn.run(playground, host=host, port=port)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
