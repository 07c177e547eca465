"""Slot to content reconciliation."""

from __future__ import annotations

import random
from typing import Any, Mapping, Sequence

from ..catalog.assets import AssetCatalog
from .content import (
    CONTENT_KINDS,
    DEFAULT_FEATURE,
    DEFAULT_IMAGE_REF,
    DEFAULT_PROMPT,
    KIND_FEATURE,
    KIND_IMAGE,
    KIND_TEXT,
    FeatureContent,
    ImageContent,
    RevealedContent,
    TextContent,
    content_kind,
)


def reconcile(
    selection: Sequence[int],
    prior: Mapping[int, RevealedContent],
    catalog: AssetCatalog,
    rng: Any = None,
) -> Mapping[int, RevealedContent]:
    """Assign content to every selected slot.

    Slots that were already assigned keep their content. New slots take the
    kinds not yet present, in canonical order; once all three kinds are in use
    a random kind is drawn instead. When nothing changed, `prior` itself is
    returned.
    """
    chooser = rng if rng is not None else random
    assigned: dict[int, RevealedContent] = {}
    used_kinds: set[str] = set()
    for idx in selection:
        existing = prior.get(idx)
        if existing is not None:
            assigned[idx] = existing
            used_kinds.add(content_kind(existing))

    remaining = [kind for kind in CONTENT_KINDS if kind not in used_kinds]
    for idx in selection:
        if idx in assigned:
            continue
        if remaining:
            kind = remaining.pop(0)
        else:
            kind = chooser.choice(CONTENT_KINDS)
        assigned[idx] = draw_content(kind, catalog, chooser)

    if _same_assignment(prior, assigned):
        return prior
    return assigned


def draw_content(kind: str, catalog: AssetCatalog, rng: Any = None) -> RevealedContent:
    chooser = rng if rng is not None else random
    if kind == KIND_IMAGE:
        return ImageContent(_choose(catalog.images, DEFAULT_IMAGE_REF, chooser))
    if kind == KIND_TEXT:
        return TextContent(_choose(catalog.prompts, DEFAULT_PROMPT, chooser))
    if kind == KIND_FEATURE:
        return FeatureContent(_choose(catalog.features, DEFAULT_FEATURE, chooser))
    raise ValueError(f"Unknown content kind: {kind}")


def _choose(values: Sequence[str], default: str, rng: Any) -> str:
    if not values:
        return default
    return rng.choice(list(values))


def _same_assignment(a: Mapping[int, RevealedContent], b: Mapping[int, RevealedContent]) -> bool:
    if a.keys() != b.keys():
        return False
    for idx, content in b.items():
        other = a[idx]
        if content_kind(other) != content_kind(content) or other.value != content.value:
            return False
    return True
