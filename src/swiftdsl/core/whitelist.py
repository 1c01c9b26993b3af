"""
The closed set of method names playground source may call.

Three disjoint-by-receiver namespaces:

- ELEMENT_METHODS: element constructors, dispatched on the sandbox
- MODIFIER_METHODS: chainable modifiers, dispatched on elements
- HELPER_METHODS: view helpers forwarded to a trusted render context

Every set is enumerated by hand. Nothing here is derived from reflection,
so adding a public method to a builder class never widens what source
text can reach.
"""

from __future__ import annotations

ELEMENT_METHODS: frozenset[str] = frozenset(
    {
        # Layout
        "swift_ui",
        "vstack",
        "hstack",
        "zstack",
        "grid",
        "spacer",
        "divider",
        "scroll_view",
        # Content
        "text",
        "button",
        "image",
        "icon",
        "link",
        # Containers
        "card",
        "list",
        "list_item",
        # Forms
        "form",
        "textfield",
        "input",
        "select",
        "option",
        "label",
        # Plain HTML
        "div",
        "span",
        "section",
        "article",
        "header",
        "footer",
        "nav",
        "main",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "p",
        "paragraph",
    }
)

SPACING_MODIFIERS: frozenset[str] = frozenset(
    {"p", "pt", "pr", "pb", "pl", "px", "py", "m", "mt", "mr", "mb", "ml", "mx", "my"}
)

MODIFIER_METHODS: frozenset[str] = SPACING_MODIFIERS | frozenset(
    {
        # Spacing aliases
        "padding",
        "margin",
        "gap",
        # Color
        "bg",
        "background",
        "text_color",
        "foreground_color",
        "border_color",
        # Typography
        "font_size",
        "font_weight",
        "text_align",
        "text_size",
        "font_family",
        "italic",
        "underline",
        # Sizing
        "w",
        "h",
        "width",
        "height",
        "min_width",
        "min_height",
        "max_width",
        "max_height",
        # Borders and effects
        "border",
        "rounded",
        "corner_radius",
        "shadow",
        "opacity",
        "transition",
        "animation",
        # Layout helpers
        "flex",
        "block",
        "inline",
        "hidden",
        "items_center",
        "justify_center",
        "justify_between",
        "text_center",
        # State variants
        "hover",
        "focus",
        "active",
        "disabled",
        # Attributes
        "tw",
        "data",
        "attr",
        "id",
        "style",
        "title",
        "aria_label",
        "role",
        # Interaction (Stimulus)
        "on_tap",
        "on_click",
        "on_change",
        "on_input",
        "on_submit",
        "stimulus_controller",
        "stimulus_target",
    }
)

HELPER_METHODS: frozenset[str] = frozenset(
    {
        "t",
        "translate",
        "asset_path",
        "image_path",
        "number_to_currency",
        "pluralize",
    }
)

ALLOWED_METHODS: frozenset[str] = ELEMENT_METHODS | MODIFIER_METHODS | HELPER_METHODS

# Meta-operations the sandbox defines only to refuse. None of these may ever
# appear in ALLOWED_METHODS.
FORBIDDEN_OPERATIONS: frozenset[str] = frozenset(
    {
        "eval",
        "exec",
        "system",
        "spawn",
        "fork",
        "syscall",
        "send",
        "public_send",
        "__send__",
        "instance_eval",
        "instance_exec",
        "class_eval",
        "instance_variable_get",
        "instance_variable_set",
        "method",
        "define_method",
        "const_get",
        "require",
        "require_relative",
        "load",
        "open",
        "puts",
        "print",
        "import",
        "getattr",
        "setattr",
        "globals",
        "locals",
        "compile",
        "__import__",
    }
)

# Named-argument key reserved for the block closure
BLOCK_KEYWORD = "block"

# Bare identifiers that parse as literals rather than calls
LITERAL_IDENTIFIERS: dict[str, bool | None] = {
    "true": True,
    "false": False,
    "nil": None,
}


def is_allowed(name: str) -> bool:
    """Return True if ``name`` may appear as a method name in source."""
    return name in ALLOWED_METHODS and name not in FORBIDDEN_OPERATIONS
