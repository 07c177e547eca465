from __future__ import annotations

import json
from pathlib import Path

from card_reveal.catalog.assets import AssetCatalog
from card_reveal.cli import render_board, render_reveal
from card_reveal.engine import CardRevealEngine
from card_reveal.runs.events import read_events
from card_reveal.settings import RevealSettings


def _make_engine(tmp_path: Path) -> CardRevealEngine:
    catalog = AssetCatalog.from_lists(
        prompts=["Imagine a world where..."],
        features=["Offline-first sync"],
        images=["/img/a.png"],
    )
    return CardRevealEngine(
        tmp_path / "events.jsonl",
        catalog,
        settings=RevealSettings(uploads_dir=tmp_path / "uploads"),
        session_id="s-1",
    )


def _events(tmp_path: Path) -> list[dict]:
    return [json.loads(line) for line in (tmp_path / "events.jsonl").read_text(encoding="utf-8").splitlines()]


def test_round_emits_events_in_order(tmp_path: Path) -> None:
    engine = _make_engine(tmp_path)
    for idx in (2, 5, 7):
        engine.toggle(idx)
    engine.close_modal()
    engine.reset()
    engine.finish()

    types = [event["type"] for event in _events(tmp_path)]
    assert types[0] == "session_started"
    assert types.count("card_toggled") == 3
    assert types.count("content_assigned") == 3
    assert types.index("session_revealed") > types.index("content_assigned")
    assert types[-3:] == ["modal_closed", "session_reset", "session_finished"]
    assert all(event["session_id"] == "s-1" for event in _events(tmp_path))
    assert engine.rounds_revealed == 1


def test_noop_toggles_are_not_logged(tmp_path: Path) -> None:
    engine = _make_engine(tmp_path)
    assert not engine.toggle(42)
    assert not engine.close_modal()
    types = [event["type"] for event in _events(tmp_path)]
    assert types == ["session_started"]


def test_board_rendering_marks_selected_cards(tmp_path: Path) -> None:
    engine = _make_engine(tmp_path)
    engine.toggle(0)
    board = render_board(engine.session)
    lines = board.splitlines()
    assert len(lines) == 3
    assert lines[0].startswith("[1* [image] /img/a")
    assert "[5  ]" in lines[1]


def test_reveal_rendering_lists_three_kinds(tmp_path: Path) -> None:
    engine = _make_engine(tmp_path)
    for idx in (2, 5, 7):
        engine.toggle(idx)
    text = render_reveal(engine.session)
    assert "Image:   /img/a.png" in text
    assert "Feature: Offline-first sync" in text
    assert "Prompt:  Imagine a world where..." in text


def test_content_assigned_events_carry_kind_and_value(tmp_path: Path) -> None:
    engine = _make_engine(tmp_path)
    for idx in (2, 5, 7):
        engine.toggle(idx)
    assigned = read_events(tmp_path / "events.jsonl", "content_assigned")
    assert [(event["slot"], event["kind"]) for event in assigned] == [(2, "image"), (5, "text"), (7, "feature")]
    assert assigned[0]["value"] == "/img/a.png"
    revealed = read_events(tmp_path / "events.jsonl", "session_revealed")[0]
    assert revealed["assignment"]["5"] == {"kind": "text", "value": "Imagine a world where..."}
