"""
Jinja2 renderer for element trees.

``RenderContext`` is the host-side render context handed to the playground
executor: it turns the final element tree into HTML and supplies the
enumerated view helpers (``t``, ``asset_path``, ...) that programs may call
when the context is marked trusted.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from markupsafe import Markup

from swiftdsl.core.elements import URL_ATTRIBUTES, Element
from swiftdsl.core.sanitize import validate_url

# Template directory
TEMPLATES_DIR = Path(__file__).parent.parent / "templates"

ELEMENTS_TEMPLATE = "playground/elements.html"

_ATTR_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9\-_:]*$")

MAX_CURRENCY_PRECISION = 10


def _element_attrs_filter(attrs: dict[str, Any]) -> Markup:
    """Serialise attributes; booleans render bare, URLs are re-validated."""
    parts: list[Markup] = []
    for name, value in attrs.items():
        if value is None or value is False or not _ATTR_NAME_RE.match(name):
            continue
        if name.lower().startswith("on"):
            continue
        if name.lower() in URL_ATTRIBUTES:
            value = validate_url(value)
            if value is None:
                continue
        if value is True:
            parts.append(Markup(" {}").format(name))
        else:
            parts.append(Markup(' {}="{}"').format(name, value))
    return Markup("").join(parts)


def create_jinja_env(templates_dir: Path | None = None) -> Environment:
    """Create and configure the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(str(templates_dir or TEMPLATES_DIR)),
        autoescape=select_autoescape(["html"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["element_attrs"] = _element_attrs_filter
    return env


_env: Environment | None = None


def get_jinja_env() -> Environment:
    """Get the shared Jinja2 environment (lazy singleton)."""
    global _env
    if _env is None:
        _env = create_jinja_env()
    return _env


def render_elements(elements: Iterable[Element], env: Environment | None = None) -> Markup:
    template = (env or get_jinja_env()).get_template(ELEMENTS_TEMPLATE)
    return Markup(template.render(elements=list(elements)))


def render_fragment(template_name: str, **kwargs: Any) -> str:
    """
    Render a page or fragment template.

    Args:
        template_name: Template path relative to templates/.
        **kwargs: Template variables.

    Returns:
        Rendered HTML string.
    """
    return get_jinja_env().get_template(template_name).render(**kwargs)


@dataclass
class RenderContext:
    """
    Host render context for playground runs.

    Set ``trusted`` only on contexts the server builds itself; an untrusted
    context never receives helper calls from DSL code.
    """

    trusted: bool = False
    locale: str = "en"
    translations: dict[str, dict[str, str]] = field(default_factory=dict)
    asset_host: str = ""
    currency_unit: str = "$"
    env: Environment | None = None

    def render(self, elements: list[Element]) -> Markup:
        return render_elements(elements, self.env)

    # -- View helpers --

    def t(self, key: Any, default: Any = None, **interpolations: Any) -> str:
        key = str(key)
        message = self.translations.get(self.locale, {}).get(key)
        if message is None:
            message = str(default) if default is not None else key.rsplit(".", 1)[-1].replace("_", " ").capitalize()
        for name, value in interpolations.items():
            message = message.replace(f"%{{{name}}}", str(value))
        return message

    translate = t

    def asset_path(self, path: Any) -> str:
        path = str(path).lstrip("/")
        if ".." in path or validate_url(path) is None:
            raise ValueError(f"Invalid asset path: {path!r}")
        return f"{self.asset_host}/assets/{path}"

    def image_path(self, path: Any) -> str:
        return self.asset_path(f"images/{str(path).lstrip('/')}")

    def number_to_currency(self, number: Any, unit: Any = None, precision: int = 2) -> str:
        if (
            isinstance(precision, bool)
            or not isinstance(precision, int)
            or not 0 <= precision <= MAX_CURRENCY_PRECISION
        ):
            raise ValueError(
                f"precision must be an integer from 0 to {MAX_CURRENCY_PRECISION}, got {precision!r}"
            )
        try:
            amount = float(number)
        except (TypeError, ValueError):
            return str(number)
        symbol = self.currency_unit if unit is None else str(unit)
        sign = "-" if amount < 0 else ""
        return f"{sign}{symbol}{abs(amount):,.{precision}f}"

    def pluralize(self, count: Any, singular: Any, plural: Any = None) -> str:
        word = str(singular) if count == 1 else str(plural or f"{singular}s")
        return f"{count} {word}"
