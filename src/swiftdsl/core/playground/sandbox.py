"""
Execution context for untrusted playground code.

The sandbox is the receiver of every bare call in a program. It exposes the
element constructors (and nothing else) through ``DSL_METHODS``, collects
the elements a program builds, and nests them according to the blocks they
were created in.

Child capture works with a stack of frames. The root frame holds top-level
elements; a constructor given a block pushes a fresh frame, runs the block
and adopts whatever landed in that frame as its children.

Elements passed as positional arguments (``card(text("a"))``) never reach
the constructor's own parameters. Dispatch sets them aside and the element
the constructor creates adopts them before its block runs.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from swiftdsl.core.elements import Builder, Element, class_token
from swiftdsl.core.errors import LimitExceededError, SecurityError
from swiftdsl.core.sanitize import sanitize_identifier
from swiftdsl.core.whitelist import ELEMENT_METHODS, FORBIDDEN_OPERATIONS, HELPER_METHODS

logger = logging.getLogger(__name__)

BlockFn = Callable[[], Any]

_ALIGNMENTS = {
    "top": "start",
    "start": "start",
    "leading": "start",
    "center": "center",
    "bottom": "end",
    "end": "end",
    "trailing": "end",
    "stretch": "stretch",
    "baseline": "baseline",
}
_JUSTIFICATIONS = frozenset({"start", "center", "end", "between", "around", "evenly"})
_DISTRIBUTING = frozenset({"between", "around", "evenly"})

_RESPONSIVE_COLUMNS = {
    1: "grid-cols-1",
    2: "grid-cols-1 sm:grid-cols-2",
    3: "grid-cols-1 sm:grid-cols-2 lg:grid-cols-3",
    4: "grid-cols-1 sm:grid-cols-2 lg:grid-cols-3 xl:grid-cols-4",
    5: "grid-cols-1 sm:grid-cols-2 md:grid-cols-3 lg:grid-cols-4 xl:grid-cols-5",
    6: "grid-cols-2 sm:grid-cols-3 lg:grid-cols-4 xl:grid-cols-6",
}

_ELEVATION_SHADOWS = {0: "", 1: "shadow", 2: "shadow-md", 3: "shadow-lg", 4: "shadow-xl"}


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _alignment(value: Any) -> str:
    return _ALIGNMENTS.get(str(value), "center")


def _justify(value: Any) -> str:
    value = str(value)
    return value if value in _JUSTIFICATIONS else "start"


def _positive(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def _container(tag: str) -> Callable[..., Element]:
    def constructor(
        self: Sandbox, content: Any = None, *, block: BlockFn | None = None, **attrs: Any
    ) -> Element:
        return self.create_element(tag, content, attrs=attrs, block=block)

    constructor.__doc__ = f"Create a ``<{tag}>`` element."
    return constructor


def _forbidden(name: str) -> Callable[..., Any]:
    def operation(self: Sandbox, *args: Any, **kwargs: Any) -> Any:
        logger.info("Blocked forbidden operation %r", name)
        raise SecurityError(f"'{name}' is not allowed in the playground")

    operation.__name__ = name
    return operation


class Sandbox(Builder):
    """Receiver for bare calls in one program run. Not reusable across runs."""

    DSL_METHODS = ELEMENT_METHODS

    def __init__(self, render_context: Any = None, *, max_component_depth: int = 32) -> None:
        self.render_context = render_context
        self.max_component_depth = max_component_depth
        self._frames: list[list[Element]] = [[]]
        self._adoptees: list[Element] = []

    @property
    def root_elements(self) -> list[Element]:
        """Elements created at the top level, in creation order."""
        return list(self._frames[0])

    # -- Dispatch --

    def resolve_dsl_method(self, name: str) -> Callable[..., Any]:
        if name in HELPER_METHODS:
            return self._delegate(name)
        return self._adopting(super().resolve_dsl_method(name))

    def _adopting(self, constructor: Callable[..., Any]) -> Callable[..., Any]:
        """Wrap ``constructor`` so Element arguments become its children."""

        def call(*args: Any, **kwargs: Any) -> Any:
            self._adoptees = [a for a in args if isinstance(a, Element)]
            try:
                return constructor(*(a for a in args if not isinstance(a, Element)), **kwargs)
            finally:
                self._adoptees = []

        return call

    def _delegate(self, name: str) -> Callable[..., Any]:
        """Forward an enumerated helper to the render context, if trusted."""
        context = self.render_context
        if context is None or getattr(context, "trusted", False) is not True:
            raise SecurityError(f"Helper '{name}' is not available in this context")
        helper = getattr(context, name, None)
        if helper is None or not callable(helper):
            raise SecurityError(f"Helper '{name}' is not provided by the render context")
        return helper

    # -- Element creation --

    def create_element(
        self,
        tag: str,
        content: Any = None,
        *,
        classes: tuple[str, ...] = (),
        attrs: dict[str, Any] | None = None,
        block: BlockFn | None = None,
    ) -> Element:
        """Create an element in the current frame, then fill it from ``block``."""
        # Consumed here, before the block can start nested constructors
        adoptees, self._adoptees = self._adoptees, []
        element = Element(tag=tag)
        for child in adoptees:
            self._adopt(element, child)
        if isinstance(content, Element):
            self._adopt(element, content)
        elif content is not None:
            element.content = _text(content)
        element.tw(*(c for c in classes if c))
        if attrs:
            self._apply_attributes(element, attrs)

        self._frames[-1].append(element)
        if block is not None:
            self._capture(element, block)
        return element

    def _capture(self, element: Element, block: BlockFn) -> None:
        if len(self._frames) > self.max_component_depth:
            raise LimitExceededError(
                f"Elements are nested too deeply (more than {self.max_component_depth} levels)"
            )
        self._frames.append([])
        try:
            result = block()
        finally:
            children = self._frames.pop()

        for child in children:
            element.add_child(child)
        if not children and isinstance(result, str):
            element.content = result

    def _adopt(self, parent: Element, child: Element) -> None:
        """Move an element passed as an argument under ``parent``."""
        frame = self._frames[-1]
        for i, candidate in enumerate(frame):
            if candidate is child:
                del frame[i]
                break
        parent.add_child(child)

    def _apply_attributes(self, element: Element, attrs: dict[str, Any]) -> None:
        for key, value in attrs.items():
            if value is None or value is False:
                continue
            if key.startswith("data_"):
                element.data(**{key[len("data_") :]: value})
            else:
                element.attr(key.replace("_", "-"), value)

    # -- Layout --

    def swift_ui(self, *, block: BlockFn | None = None) -> Any:
        """Root wrapper; elements built inside land in the current frame."""
        return block() if block is not None else None

    def vstack(
        self,
        alignment: Any = "center",
        spacing: Any = 8,
        justify: Any = "start",
        *,
        block: BlockFn | None = None,
        **attrs: Any,
    ) -> Element:
        return self._stack("col", "y", "h-full", alignment, spacing, justify, attrs, block)

    def hstack(
        self,
        alignment: Any = "center",
        spacing: Any = 8,
        justify: Any = "start",
        *,
        block: BlockFn | None = None,
        **attrs: Any,
    ) -> Element:
        return self._stack("row", "x", "w-full", alignment, spacing, justify, attrs, block)

    def _stack(
        self,
        direction: str,
        axis: str,
        fill: str,
        alignment: Any,
        spacing: Any,
        justify: Any,
        attrs: dict[str, Any],
        block: BlockFn | None,
    ) -> Element:
        justify = _justify(justify)
        classes = ["flex", f"flex-{direction}", f"items-{_alignment(alignment)}", f"justify-{justify}"]
        if justify in _DISTRIBUTING:
            classes.append(fill)
        elif _positive(spacing):
            classes.append(f"space-{axis}-{class_token(spacing)}")
        return self.create_element("div", classes=tuple(classes), attrs=attrs, block=block)

    def zstack(self, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("div", classes=("relative",), attrs=attrs, block=block)

    def grid(
        self,
        columns: Any = 2,
        spacing: Any = 8,
        *,
        responsive: bool = True,
        block: BlockFn | None = None,
        **attrs: Any,
    ) -> Element:
        if isinstance(columns, bool) or not isinstance(columns, int) or not 1 <= columns <= 12:
            raise ValueError(f"grid columns must be an integer from 1 to 12, got {columns!r}")
        if responsive and columns in _RESPONSIVE_COLUMNS:
            cols = _RESPONSIVE_COLUMNS[columns]
        else:
            cols = f"grid-cols-{columns}"
        classes = ("grid", cols, f"gap-{class_token(spacing)}")
        return self.create_element("div", classes=classes, attrs=attrs, block=block)

    def spacer(self, min_length: Any = None) -> Element:
        element = self.create_element("div", classes=("flex-1",))
        if min_length is not None:
            if not _positive(min_length):
                raise ValueError(f"spacer min_length must be a positive number, got {min_length!r}")
            element.add_style(f"min-height: {class_token(min_length)}px")
        return element

    def divider(self, **attrs: Any) -> Element:
        return self.create_element("hr", classes=("border-t", "border-gray-300"), attrs=attrs)

    def scroll_view(self, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("div", classes=("overflow-auto",), attrs=attrs, block=block)

    # -- Content --

    def text(self, content: Any = None, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("span", content, attrs=attrs, block=block)

    def button(self, title: Any = None, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("button", title, attrs=attrs, block=block)

    def link(
        self,
        title: Any = None,
        destination: Any = "#",
        *,
        block: BlockFn | None = None,
        **attrs: Any,
    ) -> Element:
        element = self.create_element("a", title, block=block)
        element.set_attribute("href", destination)
        if attrs:
            self._apply_attributes(element, attrs)
        return element

    def image(self, src: Any = None, alt: Any = "", **attrs: Any) -> Element:
        if not src:
            raise ValueError("image requires a src")
        element = self.create_element("img")
        element.set_attribute("src", str(src))
        element.set_attribute("alt", _text(alt))
        element.set_attribute("loading", "lazy")
        element.add_style("max-width: 100%; height: auto; display: block")
        if attrs:
            self._apply_attributes(element, attrs)
        return element

    def icon(self, name: Any, size: Any = 16, **attrs: Any) -> Element:
        if not _positive(size):
            raise ValueError(f"icon size must be a positive number, got {size!r}")
        element = self.create_element("span", classes=("inline-block",), attrs=attrs)
        element.attributes["data-icon"] = sanitize_identifier(name)
        px = class_token(size)
        element.add_style(f"width: {px}px; height: {px}px")
        return element

    def card(self, elevation: Any = 1, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        shadow = _ELEVATION_SHADOWS.get(elevation, "shadow")
        classes = ("rounded-lg", "bg-white", shadow)
        return self.create_element("div", classes=classes, attrs=attrs, block=block)

    def list(self, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("ul", attrs=attrs, block=block)

    def list_item(self, content: Any = None, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("li", content, attrs=attrs, block=block)

    # -- Forms --

    def form(self, *, block: BlockFn | None = None, **attrs: Any) -> Element:
        return self.create_element("form", attrs=attrs, block=block)

    def textfield(self, placeholder: Any = "", value: Any = "", **attrs: Any) -> Element:
        attrs.setdefault("type", "text")
        element = self.create_element("input", attrs=attrs)
        element.set_attribute("placeholder", _text(placeholder))
        element.set_attribute("value", _text(value))
        return element

    def input(self, **attrs: Any) -> Element:
        return self.create_element("input", attrs=attrs)

    def select(
        self,
        name: Any = None,
        selected: Any = None,
        *,
        block: BlockFn | None = None,
        **attrs: Any,
    ) -> Element:
        element = self.create_element("select", attrs=attrs, block=block)
        if name is not None:
            element.set_attribute("name", _text(name))
        if selected is not None:
            element.set_attribute("value", _text(selected))
        return element

    def option(self, value: Any, text_content: Any = None, selected: bool = False, **attrs: Any) -> Element:
        label = value if text_content is None else text_content
        element = self.create_element("option", label, attrs=attrs)
        element.set_attribute("value", _text(value))
        if selected:
            element.set_attribute("selected", True)
        return element

    def label(
        self,
        text_content: Any = None,
        for_input: Any = None,
        *,
        block: BlockFn | None = None,
        **attrs: Any,
    ) -> Element:
        element = self.create_element("label", text_content, attrs=attrs, block=block)
        if for_input is not None:
            element.set_attribute("for", sanitize_identifier(for_input))
        return element

    # -- Plain HTML --

    div = _container("div")
    span = _container("span")
    section = _container("section")
    article = _container("article")
    header = _container("header")
    footer = _container("footer")
    nav = _container("nav")
    main = _container("main")
    h1 = _container("h1")
    h2 = _container("h2")
    h3 = _container("h3")
    h4 = _container("h4")
    h5 = _container("h5")
    h6 = _container("h6")
    p = _container("p")
    paragraph = _container("p")


# Meta-operations stay unreachable even if the whitelist were widened
for _name in FORBIDDEN_OPERATIONS:
    setattr(Sandbox, _name, _forbidden(_name))
del _name
