"""
Playground route handler.

Creates FastAPI routes for the live DSL playground:
- GET /playground: editor page
- POST /playground/preview: run source, return the JSON execution result
- GET /playground/methods: registry dump for completion and docs

Execution happens in a worker thread under a wall-clock timeout. The engine
has no cancellation hooks, so a timed-out run is abandoned, not killed.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from swiftdsl.core.config import PlaygroundConfig
from swiftdsl.core.playground.executor import ExecutionResult, PlaygroundExecutor
from swiftdsl_ui.runtime.renderer import RenderContext, render_fragment

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = 'vstack(spacing: 4) do\n  text("Hello from SwiftDSL").font_weight("bold")\n  button("Click me").bg("blue-500").text_color("white").px(4).py(2).rounded("lg")\nend\n'


class PreviewRequest(BaseModel):
    source: str = ""


def create_playground_routes(
    executor: PlaygroundExecutor,
    render_context_factory: Callable[[], RenderContext] | None = None,
    prefix: str = "/playground",
) -> APIRouter:
    """
    Create the playground routes.

    Args:
        executor: Shared executor; each request gets its own Sandbox.
        render_context_factory: Builds the per-request render context.
            Defaults to a trusted ``RenderContext``, since the server builds
            it itself.
        prefix: URL prefix for all playground routes.

    Returns:
        APIRouter with playground routes.
    """
    router = APIRouter()
    make_context = render_context_factory or (lambda: RenderContext(trusted=True))
    timeout = executor.config.timeout_seconds

    async def playground_page(request: Request) -> HTMLResponse:
        html = render_fragment(
            "playground/page.html",
            title="SwiftDSL Playground",
            initial_source=DEFAULT_SOURCE,
            preview_url=f"{prefix}/preview",
            methods_url=f"{prefix}/methods",
            method_count=len(executor.registry),
            max_source_length=executor.config.max_source_length,
        )
        return HTMLResponse(content=html)

    async def playground_preview(body: PreviewRequest) -> JSONResponse:
        context = make_context()
        try:
            result = await asyncio.wait_for(
                asyncio.to_thread(executor.run, body.source, context), timeout=timeout
            )
        except TimeoutError:
            logger.warning("Playground run exceeded %.2fs timeout", timeout)
            result = ExecutionResult.failure(
                f"Timeout Error: execution took longer than {timeout:g} seconds"
            )
        return JSONResponse(content=result.model_dump(by_alias=True))

    async def playground_methods() -> JSONResponse:
        registry = executor.registry
        methods: list[dict[str, Any]] = [
            registry[name].model_dump() for name in registry.names()
        ]
        return JSONResponse(content={"version": registry.version, "methods": methods})

    router.get(prefix, response_class=HTMLResponse)(playground_page)
    router.post(f"{prefix}/preview")(playground_preview)
    router.get(f"{prefix}/methods")(playground_methods)

    return router


def create_playground_app(
    config: PlaygroundConfig | None = None,
    executor: PlaygroundExecutor | None = None,
) -> FastAPI:
    """Standalone FastAPI app serving only the playground."""
    executor = executor or PlaygroundExecutor(config)
    app = FastAPI(title="SwiftDSL Playground")
    app.include_router(create_playground_routes(executor))
    return app
