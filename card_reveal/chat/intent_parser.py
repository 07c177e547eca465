"""Parse play input into structured intents."""

from __future__ import annotations

import re

from .command_registry import COMMAND_ALIASES, COMMAND_MAP
from .intent_schema import Intent

_SLASH_PATTERN = re.compile(r"^/(\w+)(?:\s+(.*))?$")
_SLOT_PATTERN = re.compile(r"^[\d\s,]+$")


def _parse_slots(arg: str) -> list[int]:
    """Card numbers are 1-based on screen and 0-based internally.

    Out-of-range numbers are passed through; toggling them is a no-op.
    """
    slots: list[int] = []
    for part in arg.replace(",", " ").split():
        try:
            number = int(part)
        except ValueError:
            continue
        slots.append(number - 1)
    return slots


def parse_intent(text: str) -> Intent:
    raw = text.strip()
    if not raw:
        return Intent(action="noop", raw=text)
    if _SLOT_PATTERN.match(raw):
        return Intent(action="toggle", raw=text, slots=_parse_slots(raw))
    match = _SLASH_PATTERN.match(raw)
    if not match:
        return Intent(action="unknown", raw=text, command_args={"command": None, "arg": raw})
    command = match.group(1).lower()
    command = COMMAND_ALIASES.get(command, command)
    arg = (match.group(2) or "").strip()
    spec = COMMAND_MAP.get(command)
    if spec is None:
        return Intent(action="unknown", raw=text, command_args={"command": command, "arg": arg})
    if spec.arg_kind == "slots":
        return Intent(action=spec.action, raw=text, slots=_parse_slots(arg))
    if spec.arg_kind == "raw":
        return Intent(action=spec.action, raw=text, command_args={"arg": arg})
    return Intent(action=spec.action, raw=text)
