"""Append-only JSONL event stream for a card reveal session."""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from typing import Any

from ..utils import now_utc_iso

# Envelope fields owned by the writer.
RESERVED_KEYS = frozenset({"type", "session_id", "ts"})


@dataclass
class EventWriter:
    path: Path
    session_id: str
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, init=False)

    def emit(self, event_type: str, **payload: Any) -> dict[str, Any]:
        clashes = RESERVED_KEYS.intersection(payload)
        if clashes:
            raise ValueError(f"Event payload for {event_type!r} overrides reserved keys: {sorted(clashes)}")
        event: dict[str, Any] = {"type": event_type, "session_id": self.session_id, "ts": now_utc_iso(), **payload}
        line = json.dumps(event) + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as handle:
                handle.write(line)
        return event


def read_events(path: Path, event_type: str | None = None) -> list[dict[str, Any]]:
    """Parse an events file, skipping blank and malformed lines.

    When `event_type` is given only events of that type are returned.
    """
    if not path.exists():
        return []
    events: list[dict[str, Any]] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        try:
            payload = json.loads(line)
        except json.JSONDecodeError:
            continue
        if not isinstance(payload, dict):
            continue
        if event_type is not None and payload.get("type") != event_type:
            continue
        events.append(payload)
    return events
