"""
Attribute sanitizers for element builders and the renderer.

- Data attributes: keys are normalised to ``data-*``; values matching
  script-ish patterns are dropped; Stimulus action strings must look like
  ``event->controller#method`` with a known DOM event.
- URLs: ``javascript:``, ``vbscript:``, ``file:`` and non-image ``data:``
  URLs are rejected; relative URLs are allowed.
- CSS: inline style values may not contain expressions, imports or urls.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

ALLOWED_EVENTS: frozenset[str] = frozenset(
    {
        "click",
        "dblclick",
        "mousedown",
        "mouseup",
        "mouseover",
        "mouseout",
        "mousemove",
        "mouseenter",
        "mouseleave",
        "keydown",
        "keyup",
        "keypress",
        "submit",
        "change",
        "input",
        "focus",
        "blur",
        "load",
        "resize",
        "scroll",
        "touchstart",
        "touchend",
        "touchmove",
        "dragstart",
        "dragend",
        "drop",
    }
)

_DANGEROUS_VALUE_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"javascript:",
        r"data:text/html",
        r"vbscript:",
        r"on\w+\s*=",
        r"<\s*(script|iframe|object|embed)",
        r"document\.",
        r"window\.",
        r"eval\(",
        r"setTimeout",
        r"setInterval",
    )
]

_DANGEROUS_URL_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"^\s*javascript:",
        r"^\s*vbscript:",
        r"^\s*file:",
        r"^\s*about:",
        r"^\s*chrome(-extension)?:",
        r"^\s*data:(?!image/(png|jpe?g|gif|webp|svg\+xml)[;,])",
    )
]

_DANGEROUS_CSS_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (r"expression\s*\(", r"@import", r"url\s*\(", r"javascript:", r"behavior\s*:", r"[<>]")
]

_ACTION_TARGET_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9\-_]*#[a-zA-Z][a-zA-Z0-9_]*$")
_KEY_CLEAN_RE = re.compile(r"[^a-zA-Z0-9\-_]")
_IDENTIFIER_CLEAN_RE = re.compile(r"[^a-zA-Z0-9\-_]")

ALLOWED_URL_SCHEMES: frozenset[str] = frozenset({"http", "https", "mailto", "tel"})


def dasherize(name: str) -> str:
    return name.replace("_", "-")


def sanitize_data_key(key: Any) -> str:
    """Normalise a data attribute key to ``data-<safe-name>``."""
    key_str = dasherize(str(key))
    key_str = re.sub(r"^data-", "", key_str)
    key_str = _KEY_CLEAN_RE.sub("", key_str)
    if not re.match(r"^[a-zA-Z]", key_str):
        key_str = f"x-{key_str}"
    return f"data-{key_str}"


def sanitize_data_value(value: Any) -> str:
    """Return the value as text, or ``""`` if it looks like script."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    value_str = str(value)
    for pattern in _DANGEROUS_VALUE_PATTERNS:
        if pattern.search(value_str):
            logger.warning("Blocked unsafe data attribute value: %r", value_str)
            return ""
    return value_str


def sanitize_stimulus_action(action: Any) -> str:
    """
    Validate one or more space-separated Stimulus action descriptors.

    Each must be ``event->controller#method``. Invalid descriptors are
    dropped.
    """
    if not action:
        return ""
    valid: list[str] = []
    for descriptor in str(action).split():
        parts = descriptor.split("->")
        if len(parts) != 2:
            logger.warning("Dropped malformed Stimulus action: %r", descriptor)
            continue
        event, target = parts[0].strip(), parts[1].strip()
        if event not in ALLOWED_EVENTS or not _ACTION_TARGET_RE.match(target):
            logger.warning("Dropped disallowed Stimulus action: %r", descriptor)
            continue
        valid.append(f"{event}->{target}")
    return " ".join(valid)


def sanitize_identifier(value: Any) -> str:
    """Controller/target names: alphanumerics, dash and underscore only."""
    return _IDENTIFIER_CLEAN_RE.sub("", str(value or ""))


def sanitize_data_attribute(key: Any, value: Any) -> tuple[str, str]:
    safe_key = sanitize_data_key(key)
    if safe_key == "data-action":
        return safe_key, sanitize_stimulus_action(value)
    if safe_key == "data-controller":
        return safe_key, " ".join(sanitize_identifier(v) for v in str(value or "").split())
    return safe_key, sanitize_data_value(value)


def sanitize_data_attributes(attributes: dict[str, Any]) -> dict[str, str]:
    return dict(sanitize_data_attribute(k, v) for k, v in attributes.items())


def validate_url(url: Any, allow_relative: bool = True) -> str | None:
    """
    Return ``url`` if it is safe to place in ``href``/``src``, else None.
    """
    if url is None:
        return None
    url_str = str(url).strip()
    if not url_str:
        return None
    for pattern in _DANGEROUS_URL_PATTERNS:
        if pattern.search(url_str):
            logger.warning("Blocked dangerous URL: %r", url_str)
            return None
    try:
        parts = urlsplit(url_str)
    except ValueError:
        logger.warning("Invalid URL: %r", url_str)
        return None
    if not parts.scheme:
        return url_str if allow_relative else None
    if parts.scheme.lower() == "data":
        return url_str
    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES:
        logger.warning("Blocked URL scheme %r: %r", parts.scheme, url_str)
        return None
    return url_str


def validate_css(style: Any) -> str | None:
    """Return the inline style if it contains no dangerous constructs."""
    style_str = str(style or "").strip()
    if not style_str:
        return None
    for pattern in _DANGEROUS_CSS_PATTERNS:
        if pattern.search(style_str):
            logger.warning("Blocked unsafe inline style: %r", style_str)
            return None
    return style_str
