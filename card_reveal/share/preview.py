"""Link-preview page for a shared capture."""

from __future__ import annotations

import html
from pathlib import Path
from typing import Any
from urllib.parse import unquote

from .links import DEFAULT_FALLBACK_URL, DEFAULT_SHARE_TEXT

PREVIEW_TITLE = "Card Prompt Maker"


def share_preview(image_url: str, description: str = DEFAULT_SHARE_TEXT) -> dict[str, Any]:
    return {
        "title": PREVIEW_TITLE,
        "description": description,
        "openGraph": {
            "title": PREVIEW_TITLE,
            "description": description,
            "images": [{"url": image_url}],
            "type": "website",
        },
        "twitter": {
            "card": "summary_large_image",
            "title": PREVIEW_TITLE,
            "description": description,
            "images": [image_url],
        },
    }


def decode_share_id(share_id: str) -> str:
    return unquote(share_id)


def render_share_page(
    image_url: str,
    description: str = DEFAULT_SHARE_TEXT,
    destination_url: str = DEFAULT_FALLBACK_URL,
) -> str:
    meta = share_preview(image_url, description)
    title = html.escape(meta["title"])
    desc = html.escape(meta["description"])
    image = html.escape(image_url, quote=True)
    destination = html.escape(destination_url, quote=True)
    return f"""<!doctype html>
<html>
<head>
  <meta charset='utf-8'>
  <title>{title}</title>
  <meta name='description' content='{desc}'>
  <meta property='og:title' content='{title}'>
  <meta property='og:description' content='{desc}'>
  <meta property='og:image' content='{image}'>
  <meta property='og:type' content='website'>
  <meta name='twitter:card' content='summary_large_image'>
  <meta name='twitter:title' content='{title}'>
  <meta name='twitter:description' content='{desc}'>
  <meta name='twitter:image' content='{image}'>
  <style>
    body {{ font-family: Arial, sans-serif; background: #000; color: #fff; margin: 0; padding: 24px; text-align: center; }}
    img {{ max-width: 100%; max-height: 80vh; border-radius: 12px; }}
    a {{ display: inline-block; margin-top: 16px; padding: 10px 18px; border-radius: 999px; background: #2B7FFF; color: #fff; text-decoration: none; }}
  </style>
</head>
<body>
  <img src='{image}' alt='Card reveal'>
  <div><a href='{destination}'>Try it out</a></div>
</body>
</html>
"""


def write_share_page(image_url: str, out_path: Path, **kwargs: Any) -> Path:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(render_share_page(image_url, **kwargs), encoding="utf-8")
    return out_path
