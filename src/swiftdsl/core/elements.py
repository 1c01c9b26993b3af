"""
Element tree builders.

An ``Element`` is a mutable builder: every modifier records a CSS utility
class or attribute and returns the same element, so calls chain SwiftUI
style::

    text("Hi").bg("blue-500").padding(4).rounded("lg")

``Builder`` is the dispatch contract shared with the sandbox: the
interpreter may only invoke names listed in a receiver's ``DSL_METHODS``.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, ClassVar

from swiftdsl.core.errors import SecurityError
from swiftdsl.core.sanitize import (
    sanitize_data_attributes,
    sanitize_identifier,
    sanitize_stimulus_action,
    validate_css,
    validate_url,
)
from swiftdsl.core.whitelist import MODIFIER_METHODS

VOID_TAGS: frozenset[str] = frozenset({"img", "input", "hr", "br", "meta", "source", "wbr"})

_CLASS_RE = re.compile(r"^[A-Za-z0-9:\-_/.\[\]#%!]+$")
_ATTR_NAME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9\-_:]*$")
_HEX_COLOR_RE = re.compile(r"^#[0-9a-fA-F]{3,8}$")
_NAMED_RADII = frozenset({"none", "sm", "md", "lg", "xl", "2xl", "3xl", "full"})

URL_ATTRIBUTES = frozenset({"href", "src", "action", "formaction", "poster"})


class Builder:
    """Base for objects the interpreter may dispatch DSL calls on."""

    DSL_METHODS: ClassVar[frozenset[str]] = frozenset()

    def resolve_dsl_method(self, name: str) -> Callable[..., Any]:
        """
        Look up a DSL-visible method.

        Only public names listed in ``DSL_METHODS`` resolve; anything else
        raises SecurityError even if the object happens to have it.
        """
        if name.startswith("_") or name not in self.DSL_METHODS:
            raise SecurityError(f"'{name}' cannot be called on {type(self).__name__}")
        method = getattr(self, name, None)
        if method is None or not callable(method):
            raise SecurityError(f"'{name}' is not callable on {type(self).__name__}")
        return method


def class_token(value: Any) -> str:
    """Render a modifier argument as a utility-class suffix."""
    if isinstance(value, bool):
        raise ValueError(f"Expected a size or name, got {value!r}")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _utility(prefix: str) -> Callable[..., Element]:
    def modifier(self: Element, value: Any) -> Element:
        return self.tw(f"{prefix}-{class_token(value)}")

    modifier.__name__ = prefix
    modifier.__doc__ = f"Add the ``{prefix}-<value>`` utility class."
    return modifier


def _fixed(*classes: str) -> Callable[..., Element]:
    def modifier(self: Element) -> Element:
        return self.tw(*classes)

    modifier.__doc__ = f"Add ``{' '.join(classes)}``."
    return modifier


def _variant(variant: str) -> Callable[..., Element]:
    def modifier(self: Element, utilities: str) -> Element:
        return self.tw(*(f"{variant}:{u}" for u in str(utilities).split()))

    modifier.__doc__ = f"Apply utilities under the ``{variant}:`` state variant."
    return modifier


def _event(event: str) -> Callable[..., Element]:
    def modifier(self: Element, action: str) -> Element:
        return self.add_action(event, action)

    modifier.__doc__ = f"Bind a Stimulus action to the ``{event}`` event."
    return modifier


@dataclass(eq=False)
class Element(Builder):
    """A node of the element tree."""

    tag: str
    content: str | None = None
    attributes: dict[str, Any] = field(default_factory=dict)
    classes: list[str] = field(default_factory=list)
    children: list[Element] = field(default_factory=list)

    DSL_METHODS: ClassVar[frozenset[str]] = MODIFIER_METHODS

    # -- Tree helpers (not DSL-visible) --

    def add_child(self, child: Element) -> None:
        self.children.append(child)

    def set_attribute(self, name: str, value: Any) -> None:
        # HTML attribute names are case-insensitive
        name = name.lower()
        if name in URL_ATTRIBUTES:
            safe = validate_url(value)
            if safe is None:
                raise ValueError(f"Unsafe URL for '{name}': {value!r}")
            value = safe
        self.attributes[name] = value

    def add_style(self, declaration: str) -> None:
        safe = validate_css(declaration)
        if safe is None:
            raise ValueError(f"Unsafe inline style: {declaration!r}")
        existing = self.attributes.get("style")
        self.attributes["style"] = f"{existing}; {safe}" if existing else safe

    def add_action(self, event: str, action: str) -> Element:
        descriptor = str(action) if "->" in str(action) else f"{event}->{action}"
        safe = sanitize_stimulus_action(descriptor)
        if not safe:
            raise ValueError(f"Invalid action {action!r}, expected 'controller#method'")
        existing = self.attributes.get("data-action")
        self.attributes["data-action"] = f"{existing} {safe}" if existing else safe
        return self

    def html_attributes(self) -> dict[str, Any]:
        """Attributes in render order: class first, then insertion order."""
        attrs: dict[str, Any] = {}
        if self.classes:
            attrs["class"] = " ".join(self.classes)
        for name, value in self.attributes.items():
            if name == "class":
                merged = f"{attrs['class']} {value}" if "class" in attrs else str(value)
                attrs["class"] = merged
            else:
                attrs[name] = value
        return attrs

    def to_dict(self) -> dict[str, Any]:
        """Structured dump for debugging tools."""
        node: dict[str, Any] = {"type": self.tag, "props": self.html_attributes()}
        if self.content is not None:
            node["content"] = self.content
        node["children"] = [child.to_dict() for child in self.children]
        return node

    @property
    def is_void(self) -> bool:
        return self.tag in VOID_TAGS

    # -- Core modifier --

    def tw(self, *classes: str) -> Element:
        """Add one or more utility classes, skipping duplicates."""
        for group in classes:
            for cls in str(group).split():
                if not _CLASS_RE.match(cls):
                    raise ValueError(f"Invalid CSS class: {cls!r}")
                if cls not in self.classes:
                    self.classes.append(cls)
        return self

    # -- Spacing --

    p = _utility("p")
    pt = _utility("pt")
    pr = _utility("pr")
    pb = _utility("pb")
    pl = _utility("pl")
    px = _utility("px")
    py = _utility("py")
    m = _utility("m")
    mt = _utility("mt")
    mr = _utility("mr")
    mb = _utility("mb")
    ml = _utility("ml")
    mx = _utility("mx")
    my = _utility("my")
    gap = _utility("gap")

    def padding(self, amount: Any = 4) -> Element:
        return self.tw(f"p-{class_token(amount)}")

    def margin(self, amount: Any = 4) -> Element:
        return self.tw(f"m-{class_token(amount)}")

    # -- Color --

    def bg(self, color: Any) -> Element:
        """Background color: a Tailwind color name or a hex code."""
        color = str(color)
        if _HEX_COLOR_RE.match(color):
            self.add_style(f"background-color: {color}")
            return self
        return self.tw(f"bg-{color}")

    background = bg

    def text_color(self, color: Any) -> Element:
        color = str(color)
        if _HEX_COLOR_RE.match(color):
            self.add_style(f"color: {color}")
            return self
        return self.tw(f"text-{color}")

    foreground_color = text_color
    border_color = _utility("border")

    # -- Typography --

    font_size = _utility("text")
    text_size = _utility("text")
    font_weight = _utility("font")
    font_family = _utility("font")
    text_align = _utility("text")
    italic = _fixed("italic")
    underline = _fixed("underline")
    text_center = _fixed("text-center")

    # -- Sizing --

    w = _utility("w")
    h = _utility("h")
    width = _utility("w")
    height = _utility("h")
    min_width = _utility("min-w")
    min_height = _utility("min-h")
    max_width = _utility("max-w")
    max_height = _utility("max-h")

    # -- Borders and effects --

    def border(self, width: Any = None) -> Element:
        return self.tw("border" if width is None else f"border-{class_token(width)}")

    def rounded(self, size: Any = "") -> Element:
        size = class_token(size)
        return self.tw("rounded" if not size else f"rounded-{size}")

    def corner_radius(self, radius: Any) -> Element:
        """Named radius as a class, numeric radius as pixels."""
        radius_str = class_token(radius)
        if radius_str in _NAMED_RADII:
            return self.tw(f"rounded-{radius_str}")
        if radius_str == "0":
            return self.tw("rounded-none")
        if not isinstance(radius, (int, float)):
            raise ValueError(f"Invalid corner radius: {radius!r}")
        self.add_style(f"border-radius: {radius_str}px")
        return self

    def shadow(self, size: Any = "") -> Element:
        size = class_token(size)
        return self.tw("shadow" if not size else f"shadow-{size}")

    opacity = _utility("opacity")
    transition = _fixed("transition")

    def animation(self, kind: str = "transition-all", duration: Any = 200) -> Element:
        return self.tw(kind, f"duration-{class_token(duration)}")

    # -- Layout helpers --

    flex = _fixed("flex")
    block = _fixed("block")
    inline = _fixed("inline")
    hidden = _fixed("hidden")
    items_center = _fixed("items-center")
    justify_center = _fixed("justify-center")
    justify_between = _fixed("justify-between")

    # -- State variants --

    hover = _variant("hover")
    focus = _variant("focus")
    active = _variant("active")

    def disabled(self, value: bool = True) -> Element:
        if value:
            self.tw("opacity-50", "cursor-not-allowed")
            self.attributes["disabled"] = True
        else:
            self.attributes.pop("disabled", None)
        return self

    # -- Attributes --

    def data(self, attributes: Any = None, **kwargs: Any) -> Element:
        """
        Set ``data-*`` attributes.

        Accepts keyword attributes, a mapping, or a single ``"key:value"``
        string. Keys and values are sanitized.
        """
        values: dict[str, Any] = {}
        if isinstance(attributes, dict):
            values.update(attributes)
        elif isinstance(attributes, str) and ":" in attributes:
            key, _, value = attributes.partition(":")
            values[key.strip()] = value.strip()
        elif attributes is not None:
            raise ValueError(f"data() expects keyword attributes, got {attributes!r}")
        values.update(kwargs)
        for key, value in sanitize_data_attributes(values).items():
            if value:
                self.attributes[key] = value
        return self

    def attr(self, name: str, value: Any) -> Element:
        name = str(name).lower()
        if not _ATTR_NAME_RE.match(name) or name.startswith("on"):
            raise ValueError(f"Attribute not allowed: {name!r}")
        if name == "style":
            self.add_style(str(value))
        elif name == "class":
            self.tw(str(value))
        else:
            self.set_attribute(name, value)
        return self

    def id(self, value: Any) -> Element:
        self.attributes["id"] = sanitize_identifier(value)
        return self

    def style(self, css: str) -> Element:
        self.add_style(css)
        return self

    def title(self, value: Any) -> Element:
        self.attributes["title"] = str(value)
        return self

    def aria_label(self, value: Any) -> Element:
        self.attributes["aria-label"] = str(value)
        return self

    def role(self, value: Any) -> Element:
        self.attributes["role"] = sanitize_identifier(value)
        return self

    # -- Interaction (Stimulus) --

    on_click = _event("click")
    on_tap = _event("click")
    on_change = _event("change")
    on_input = _event("input")
    on_submit = _event("submit")

    def stimulus_controller(self, name: Any) -> Element:
        name = sanitize_identifier(name)
        if not name:
            raise ValueError("stimulus_controller() requires a controller name")
        existing = self.attributes.get("data-controller")
        if existing and name in existing.split():
            return self
        self.attributes["data-controller"] = f"{existing} {name}" if existing else name
        return self

    def stimulus_target(self, name: Any, controller: Any = None) -> Element:
        if controller is None:
            controllers = str(self.attributes.get("data-controller", "")).split()
            if not controllers:
                raise ValueError("stimulus_target() needs a controller")
            controller = controllers[0]
        key = f"data-{sanitize_identifier(controller)}-target"
        self.attributes[key] = sanitize_identifier(name)
        return self
