"""
Best-effort extraction of Stimulus wiring from raw playground source.

The editor uses this to attach client-side controllers to the preview.
It scans text with regular expressions and never looks at the AST, so it
can miss or over-report; nothing security-relevant may depend on it.
"""

from __future__ import annotations

import re
from typing import Any

# No two adjacent quantifiers can share a whitespace run, so a failed match
# costs time linear in the run length.
_DATA_KEY = r"""\bdata:?(?:\s*[({]){0,2}\s*["':]?{key}["']?\s*(?:(?::|=>)\s*)?["']([^"'\n]+)["']"""

_CONTROLLER_PATTERNS = [
    re.compile(_DATA_KEY.replace("{key}", "controller")),
    re.compile(r"""stimulus_controller[(\s]\s*["']([^"']+)["']"""),
]
_ACTION_PATTERN = re.compile(_DATA_KEY.replace("{key}", "action"))
_EVENT_MODIFIER_PATTERN = re.compile(
    r"""\bon_(click|tap|change|input|submit)[(\s]\s*["']([\w-]+)#(\w+)["']"""
)
_TARGET_PATTERN = re.compile(
    r"""stimulus_target[(\s]\s*["'](\w+)["']\s*,\s*["']([\w-]+)["']"""
)
_DESCRIPTOR_RE = re.compile(r"(\w+)->([\w-]+)#(\w+)")

_EVENT_ALIASES = {"tap": "click"}


def _entry() -> dict[str, Any]:
    return {"values": {}, "targets": [], "actions": []}


def extract_stimulus_controllers(source: str) -> dict[str, dict[str, Any]]:
    """
    Find the Stimulus controllers a program declares.

    Returns:
        Mapping of controller name to ``{"values", "targets", "actions"}``.
        Actions and targets are only recorded for controllers that are
        declared somewhere in the source.
    """
    controllers: dict[str, dict[str, Any]] = {}

    for pattern in _CONTROLLER_PATTERNS:
        for match in pattern.finditer(source):
            for name in match.group(1).split():
                controllers.setdefault(name, _entry())

    for match in _ACTION_PATTERN.finditer(source):
        for event, controller, method in _DESCRIPTOR_RE.findall(match.group(1)):
            _add_action(controllers, controller, event, method)

    for match in _EVENT_MODIFIER_PATTERN.finditer(source):
        event, controller, method = match.groups()
        _add_action(controllers, controller, _EVENT_ALIASES.get(event, event), method)

    for match in _TARGET_PATTERN.finditer(source):
        target, controller = match.groups()
        if controller in controllers and target not in controllers[controller]["targets"]:
            controllers[controller]["targets"].append(target)

    return controllers


def _add_action(controllers: dict[str, dict[str, Any]], controller: str, event: str, method: str) -> None:
    if controller not in controllers:
        return
    action = {"event": event, "method": method}
    if action not in controllers[controller]["actions"]:
        controllers[controller]["actions"].append(action)
