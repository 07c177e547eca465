from __future__ import annotations

from urllib.parse import parse_qs, unquote, urlparse

import pytest

from card_reveal.share.links import (
    DEFAULT_FALLBACK_URL,
    DEFAULT_SHARE_TEXT,
    build_share_url,
    normalize_platform,
    share_page_url,
)

BASE = "https://cards.example.com"


def test_telegram_without_image_inlines_fallback_in_text() -> None:
    url = build_share_url("telegram", None, base_url=BASE)
    parsed = urlparse(url)
    query = parse_qs(parsed.query)

    assert url.startswith("https://t.me/share/url?text=")
    assert list(query) == ["text"]
    assert query["text"][0] == f"{DEFAULT_SHARE_TEXT} {DEFAULT_FALLBACK_URL}"


def test_x_passes_text_and_url_separately() -> None:
    url = build_share_url("x", None, base_url=BASE)
    query = parse_qs(urlparse(url).query)
    assert url.startswith("https://x.com/intent/tweet?")
    assert query["text"][0] == DEFAULT_SHARE_TEXT
    assert query["url"][0] == DEFAULT_FALLBACK_URL


def test_facebook_uses_share_page_for_uploaded_image() -> None:
    url = build_share_url("Facebook", "/uploads/card-1.png", base_url=BASE)
    query = parse_qs(urlparse(url).query)
    assert url.startswith("https://www.facebook.com/sharer/sharer.php?u=")
    page = query["u"][0]
    assert page.startswith(f"{BASE}/share/")
    assert unquote(page.split("/share/", 1)[1]) == f"{BASE}/uploads/card-1.png"
    assert query["quote"][0] == DEFAULT_SHARE_TEXT


def test_share_page_keeps_absolute_image_urls() -> None:
    page = share_page_url("https://cdn.example.com/a b.png", base_url=BASE)
    assert page == f"{BASE}/share/https%3A%2F%2Fcdn.example.com%2Fa%20b.png"


def test_share_page_falls_back_without_image() -> None:
    assert share_page_url(None, base_url=BASE, fallback_url="https://fallback.test") == "https://fallback.test"


def test_encoding_matches_encode_uri_component() -> None:
    url = build_share_url("x", None, base_url=BASE, share_text="it's (fun)!")
    assert "text=it's%20(fun)!" in url


def test_platform_aliases_and_unknown() -> None:
    assert normalize_platform("Twitter") == "x"
    assert normalize_platform(" TG ") == "telegram"
    with pytest.raises(ValueError):
        build_share_url("myspace", None, base_url=BASE)
