from __future__ import annotations

from pathlib import Path

from card_reveal.share.preview import (
    PREVIEW_TITLE,
    decode_share_id,
    render_share_page,
    share_preview,
    write_share_page,
)


def test_share_preview_metadata() -> None:
    meta = share_preview("https://cards.test/uploads/card-1.png")
    assert meta["title"] == PREVIEW_TITLE
    assert meta["openGraph"]["images"] == [{"url": "https://cards.test/uploads/card-1.png"}]
    assert meta["twitter"]["card"] == "summary_large_image"
    assert meta["twitter"]["images"] == ["https://cards.test/uploads/card-1.png"]


def test_render_share_page_has_meta_tags() -> None:
    page = render_share_page("https://cards.test/a.png?x=1&y='2'")
    assert "<meta property='og:image' content='https://cards.test/a.png?x=1&amp;y=&#x27;2&#x27;'>" in page
    assert "twitter:card' content='summary_large_image'" in page
    assert f"<title>{PREVIEW_TITLE}</title>" in page


def test_decode_share_id_roundtrip() -> None:
    assert decode_share_id("https%3A%2F%2Fcards.test%2Fa%20b.png") == "https://cards.test/a b.png"


def test_write_share_page(tmp_path: Path) -> None:
    out = write_share_page("https://cards.test/a.png", tmp_path / "site" / "share.html")
    assert out.exists()
    assert "og:image" in out.read_text(encoding="utf-8")
