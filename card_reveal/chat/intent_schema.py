"""Intent schema for play commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Intent:
    action: str
    raw: str
    slots: list[int] = field(default_factory=list)
    command_args: dict[str, Any] = field(default_factory=dict)
