"""
SwiftDSL UI runtime.

Server-side rendering of element trees with Jinja2, and the FastAPI routes
that serve the live playground.

Example usage:
    >>> from swiftdsl_ui.runtime import create_playground_app
    >>> import uvicorn
    >>> uvicorn.run(create_playground_app(), port=8000)
"""

from swiftdsl_ui.runtime.playground_routes import create_playground_app, create_playground_routes
from swiftdsl_ui.runtime.renderer import RenderContext, create_jinja_env, render_elements

__all__ = [
    "RenderContext",
    "create_jinja_env",
    "create_playground_app",
    "create_playground_routes",
    "render_elements",
]
