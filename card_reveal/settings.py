"""Environment-driven configuration."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from .share.links import DEFAULT_FALLBACK_URL, DEFAULT_SHARE_TEXT
from .utils import getenv_flag, getenv_float

DEFAULT_BASE_URL = "http://localhost:8787"


@dataclass(frozen=True)
class RevealSettings:
    data_dir: Path = Path("data")
    public_dir: Path = Path("public")
    uploads_dir: Path = Path("public") / "uploads"
    base_url: str = DEFAULT_BASE_URL
    fallback_url: str = DEFAULT_FALLBACK_URL
    share_text: str = DEFAULT_SHARE_TEXT
    upload_url: str | None = None
    upload_timeout_s: float = 30.0
    open_browser: bool = False

    @classmethod
    def from_env(cls) -> "RevealSettings":
        public_dir = Path(os.getenv("CARD_REVEAL_PUBLIC_DIR") or "public")
        uploads_raw = os.getenv("CARD_REVEAL_UPLOADS_DIR")
        return cls(
            data_dir=Path(os.getenv("CARD_REVEAL_DATA_DIR") or "data"),
            public_dir=public_dir,
            uploads_dir=Path(uploads_raw) if uploads_raw else public_dir / "uploads",
            base_url=(os.getenv("CARD_REVEAL_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
            fallback_url=os.getenv("CARD_REVEAL_FALLBACK_URL") or DEFAULT_FALLBACK_URL,
            share_text=os.getenv("CARD_REVEAL_SHARE_TEXT") or DEFAULT_SHARE_TEXT,
            upload_url=(os.getenv("CARD_REVEAL_UPLOAD_URL") or "").strip() or None,
            upload_timeout_s=getenv_float("CARD_REVEAL_UPLOAD_TIMEOUT", 30.0),
            open_browser=getenv_flag("CARD_REVEAL_OPEN_BROWSER", False),
        )

    def with_overrides(self, **overrides: object) -> "RevealSettings":
        updates = {key: value for key, value in overrides.items() if value is not None}
        if "public_dir" in updates and "uploads_dir" not in updates:
            updates["uploads_dir"] = Path(str(updates["public_dir"])) / "uploads"
        return replace(self, **updates)
