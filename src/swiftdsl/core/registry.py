"""
Metadata registry for DSL element constructors.

Describes each constructor's parameters, typical modifiers and examples for
editor completion and the ``methods`` listings. It is advisory: nothing in
the parser or interpreter consults it.

Registries are constructed explicitly and passed to whoever needs them;
there is no process-wide instance.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class MethodMetadata(BaseModel):
    """Completion metadata for one DSL method."""

    name: str
    category: str
    parameters: dict[str, str] = Field(default_factory=dict)
    description: str = ""
    modifiers: list[str] = Field(default_factory=list)
    examples: list[str] = Field(default_factory=list)
    source: str = "core"

    model_config = ConfigDict(frozen=True)


_STACK_MODIFIERS = ["padding", "margin", "gap", "items_center", "justify_center", "bg"]
_TEXT_MODIFIERS = ["font_size", "font_weight", "text_color", "text_align", "italic", "underline"]
_BOX_MODIFIERS = ["padding", "margin", "bg", "rounded", "shadow", "border"]

CORE_METHODS: list[dict[str, Any]] = [
    # Layout
    {
        "name": "vstack",
        "category": "layout",
        "parameters": {"alignment": ":center", "spacing": "8", "justify": ":start"},
        "description": "Vertical stack layout",
        "modifiers": _STACK_MODIFIERS,
        "examples": ["vstack(spacing: 16) do\n  text(\"Hi\")\nend"],
    },
    {
        "name": "hstack",
        "category": "layout",
        "parameters": {"alignment": ":center", "spacing": "8", "justify": ":start"},
        "description": "Horizontal stack layout",
        "modifiers": _STACK_MODIFIERS,
        "examples": ["hstack(spacing: 8) { }"],
    },
    {
        "name": "zstack",
        "category": "layout",
        "description": "Z-axis stack layout (overlapping)",
        "modifiers": ["padding", "margin"],
        "examples": ["zstack { }"],
    },
    {
        "name": "grid",
        "category": "layout",
        "parameters": {"columns": "2", "spacing": "8"},
        "description": "Responsive grid layout",
        "modifiers": ["padding", "margin", "gap"],
        "examples": ["grid(columns: 3, spacing: 16) { }"],
    },
    {
        "name": "spacer",
        "category": "layout",
        "parameters": {"min_length": "Integer"},
        "description": "Flexible space that expands along the stack axis",
        "examples": ["spacer"],
    },
    {
        "name": "divider",
        "category": "layout",
        "description": "Horizontal rule",
        "modifiers": ["border_color", "margin"],
        "examples": ["divider"],
    },
    {
        "name": "scroll_view",
        "category": "layout",
        "description": "Scrollable container",
        "modifiers": ["h", "max_height", "padding"],
        "examples": ["scroll_view do\n  text(\"Long content\")\nend"],
    },
    # Elements
    {
        "name": "text",
        "category": "elements",
        "parameters": {"content": "String"},
        "description": "Text element",
        "modifiers": _TEXT_MODIFIERS,
        "examples": ['text("Hello World")'],
    },
    {
        "name": "button",
        "category": "elements",
        "parameters": {"title": "String"},
        "description": "Button element",
        "modifiers": ["bg", "hover", "disabled", "text_color", "padding", "rounded", "data", "on_click"],
        "examples": ['button("Click Me").bg("blue-500")'],
    },
    {
        "name": "link",
        "category": "elements",
        "parameters": {"title": "String", "destination": "String"},
        "description": "Anchor element",
        "modifiers": ["text_color", "underline", "hover"],
        "examples": ['link("Docs", destination: "/docs")'],
    },
    {
        "name": "image",
        "category": "media",
        "parameters": {"src": "String", "alt": "String"},
        "description": "Lazy-loaded image",
        "modifiers": ["w", "h", "rounded", "shadow"],
        "examples": ['image(src: "/logo.png", alt: "Logo")'],
    },
    {
        "name": "icon",
        "category": "media",
        "parameters": {"name": "String", "size": "16"},
        "description": "Icon placeholder",
        "modifiers": ["text_color"],
        "examples": ['icon("star", size: 24)'],
    },
    {
        "name": "card",
        "category": "containers",
        "parameters": {"elevation": "1"},
        "description": "Card container with elevation shadow",
        "modifiers": _BOX_MODIFIERS,
        "examples": ["card(elevation: 2) do\n  text(\"Content\")\nend"],
    },
    {
        "name": "list",
        "category": "containers",
        "description": "Unordered list",
        "modifiers": ["padding", "margin"],
        "examples": ['list do\n  list_item("One")\nend'],
    },
    {
        "name": "list_item",
        "category": "containers",
        "parameters": {"content": "String"},
        "description": "List item",
        "modifiers": ["padding", "margin"],
        "examples": ['list_item("One")'],
    },
    # Forms
    {
        "name": "form",
        "category": "forms",
        "parameters": {"action": "String", "method": "String"},
        "description": "Form container",
        "modifiers": ["padding", "on_submit"],
        "examples": ['form(action: "/search") { }'],
    },
    {
        "name": "textfield",
        "category": "forms",
        "parameters": {"placeholder": "String", "value": "String"},
        "description": "Single-line text input",
        "modifiers": ["border", "rounded", "padding", "on_input"],
        "examples": ['textfield(placeholder: "Name")'],
    },
    {
        "name": "input",
        "category": "forms",
        "parameters": {"type": "String"},
        "description": "Generic input element",
        "modifiers": ["border", "rounded", "padding"],
        "examples": ['input(type: "checkbox")'],
    },
    {
        "name": "select",
        "category": "forms",
        "parameters": {"name": "String", "selected": "String"},
        "description": "Select box",
        "modifiers": ["border", "rounded", "on_change"],
        "examples": ['select(name: "size") do\n  option("s", "Small")\nend'],
    },
    {
        "name": "option",
        "category": "forms",
        "parameters": {"value": "String", "text_content": "String", "selected": "false"},
        "description": "Select option",
        "examples": ['option("m", "Medium")'],
    },
    {
        "name": "label",
        "category": "forms",
        "parameters": {"text_content": "String", "for_input": "String"},
        "description": "Form label",
        "modifiers": _TEXT_MODIFIERS,
        "examples": ['label("Email", for_input: "email")'],
    },
]

_HTML_TAGS = [
    "div", "span", "section", "article", "header", "footer", "nav", "main",
    "h1", "h2", "h3", "h4", "h5", "h6", "p", "paragraph",
]  # fmt: skip

CORE_METHODS.extend(
    {
        "name": tag,
        "category": "html",
        "parameters": {"content": "String"},
        "description": f"Plain <{'p' if tag == 'paragraph' else tag}> element",
        "modifiers": _BOX_MODIFIERS,
        "examples": [f'{tag}("...")'],
    }
    for tag in _HTML_TAGS
)


class DslRegistry:
    """Thread-safe name -> ``MethodMetadata`` map with a change counter."""

    def __init__(self, *, load_core: bool = True) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, MethodMetadata] = {}
        self._version = 0
        if load_core:
            self.register_bulk(CORE_METHODS)

    @property
    def version(self) -> int:
        """Incremented on every mutation."""
        return self._version

    def register(self, metadata: MethodMetadata | Mapping[str, Any]) -> MethodMetadata:
        entry = metadata if isinstance(metadata, MethodMetadata) else MethodMetadata(**metadata)
        with self._lock:
            if entry.name in self._entries:
                logger.debug("Replacing registry entry %r", entry.name)
            self._entries[entry.name] = entry
            self._version += 1
        return entry

    def register_bulk(self, entries: Iterable[MethodMetadata | Mapping[str, Any]]) -> None:
        for entry in entries:
            self.register(entry)

    def get(self, name: str) -> MethodMetadata | None:
        return self._entries.get(name)

    def __getitem__(self, name: str) -> MethodMetadata:
        return self._entries[name]

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def all(self) -> dict[str, MethodMetadata]:
        with self._lock:
            return dict(self._entries)

    def names(self) -> list[str]:
        return sorted(self._entries)

    def by_category(self, category: str) -> dict[str, MethodMetadata]:
        return {name: meta for name, meta in self.all().items() if meta.category == category}

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._version += 1

    def reload(self) -> None:
        """Drop everything, including custom entries, and re-register the core set."""
        self.clear()
        self.register_bulk(CORE_METHODS)
