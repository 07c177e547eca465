"""Selecting/revealed session state machine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from ..catalog.assets import AssetCatalog
from .assignment import reconcile
from .content import FeatureContent, ImageContent, RevealedContent, TextContent
from .selection import MAX_SELECTED, SelectionController

STATE_SELECTING = "selecting"
STATE_REVEALED = "revealed"


@dataclass(frozen=True)
class RevealView:
    image_ref: str | None = None
    feature: str | None = None
    prompt: str | None = None


class GameSession:
    """Owns the selection, the slot assignment and the session state.

    `generation` increases on every reset; async work started against an older
    generation must not apply its result.
    """

    def __init__(self, catalog: AssetCatalog, rng: Any = None) -> None:
        self.catalog = catalog
        self.rng = rng
        self.selection = SelectionController()
        self.assignment: Mapping[int, RevealedContent] = {}
        self.state = STATE_SELECTING
        self.modal_open = False
        self.generation = 0

    @property
    def selected(self) -> tuple[int, ...]:
        return self.selection.selected

    @property
    def revealed(self) -> bool:
        return self.state == STATE_REVEALED

    def toggle(self, index: int) -> bool:
        if self.state != STATE_SELECTING:
            return False
        if not self.selection.toggle(index):
            return False
        self.assignment = reconcile(self.selection.selected, self.assignment, self.catalog, self.rng)
        if len(self.selection) == MAX_SELECTED:
            self.state = STATE_REVEALED
            self.modal_open = True
            self.selection.lock()
        return True

    def close_modal(self) -> bool:
        if self.state != STATE_REVEALED or not self.modal_open:
            return False
        self.modal_open = False
        return True

    def reset(self) -> None:
        self.selection.clear()
        self.selection.unlock()
        self.assignment = {}
        self.state = STATE_SELECTING
        self.modal_open = False
        self.generation += 1

    def content_at(self, index: int) -> RevealedContent | None:
        return self.assignment.get(index)

    def reveal_view(self) -> RevealView:
        image_ref: str | None = None
        feature: str | None = None
        prompt: str | None = None
        for idx in self.selection.selected:
            content = self.assignment.get(idx)
            if content is None:
                continue
            if isinstance(content, ImageContent):
                image_ref = image_ref or content.ref
            elif isinstance(content, TextContent):
                prompt = prompt or content.text
            elif isinstance(content, FeatureContent):
                feature = feature or content.feature
            else:
                raise TypeError(f"Unknown content variant: {type(content).__name__}")
        return RevealView(image_ref=image_ref, feature=feature, prompt=prompt)
