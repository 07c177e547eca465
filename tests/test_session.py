from __future__ import annotations

import random

from card_reveal.catalog.assets import AssetCatalog
from card_reveal.game.content import FeatureContent, ImageContent, TextContent, content_kind
from card_reveal.game.session import STATE_REVEALED, STATE_SELECTING, GameSession


def _single_catalog() -> AssetCatalog:
    return AssetCatalog.from_lists(
        prompts=["Imagine a world where..."],
        features=["Offline-first sync"],
        images=["/img/a.png"],
    )


def test_third_toggle_reveals_and_opens_modal() -> None:
    session = GameSession(_single_catalog())
    session.toggle(2)
    session.toggle(5)
    assert session.state == STATE_SELECTING
    assert not session.modal_open
    session.toggle(7)

    assert session.state == STATE_REVEALED
    assert session.modal_open
    assert session.selected == (2, 5, 7)
    values = {session.content_at(idx) for idx in (2, 5, 7)}
    assert values == {
        ImageContent("/img/a.png"),
        TextContent("Imagine a world where..."),
        FeatureContent("Offline-first sync"),
    }


def test_toggle_is_noop_while_revealed() -> None:
    session = GameSession(_single_catalog())
    for idx in (0, 1, 2):
        session.toggle(idx)
    before = dict(session.assignment)
    assert not session.toggle(0)
    assert not session.toggle(4)
    assert session.selected == (0, 1, 2)
    assert dict(session.assignment) == before


def test_close_modal_keeps_revealed_state() -> None:
    session = GameSession(_single_catalog())
    assert not session.close_modal()
    for idx in (0, 1, 2):
        session.toggle(idx)
    assert session.close_modal()
    assert session.state == STATE_REVEALED
    assert not session.modal_open
    assert not session.close_modal()


def test_reset_clears_round_and_allows_new_reveal() -> None:
    session = GameSession(_single_catalog(), rng=random.Random(3))
    for idx in (0, 1, 2):
        session.toggle(idx)
    generation = session.generation

    session.reset()
    assert session.state == STATE_SELECTING
    assert session.selected == ()
    assert dict(session.assignment) == {}
    assert not session.modal_open
    assert session.generation == generation + 1

    for idx in (8, 4, 6):
        session.toggle(idx)
    assert session.state == STATE_REVEALED
    kinds = sorted(content_kind(content) for content in session.assignment.values())
    assert kinds == ["feature", "image", "text"]


def test_deselect_during_selection_reassigns_only_new_slot() -> None:
    catalog = AssetCatalog.from_lists(
        prompts=["p1", "p2", "p3"],
        features=["f1", "f2", "f3"],
        images=["/a.png", "/b.png", "/c.png"],
    )
    session = GameSession(catalog, rng=random.Random(9))
    session.toggle(0)
    session.toggle(1)
    kept = session.content_at(0)
    session.toggle(1)
    session.toggle(3)
    assert session.content_at(0) == kept
    assert session.content_at(1) is None


def test_reveal_view_collects_each_kind() -> None:
    session = GameSession(_single_catalog())
    for idx in (2, 5, 7):
        session.toggle(idx)
    view = session.reveal_view()
    assert view.image_ref == "/img/a.png"
    assert view.prompt == "Imagine a world where..."
    assert view.feature == "Offline-first sync"
