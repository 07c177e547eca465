"""Card reveal session orchestration."""

from __future__ import annotations

import asyncio
import uuid
from pathlib import Path
from typing import Any

from .capture.render import CaptureExporter, RevealRegion
from .capture.upload import LocalUploadStore, HttpUploadStore, UploadStore
from .catalog.assets import AssetCatalog
from .errors import CaptureFailed, UploadFailed
from .game.content import content_to_dict
from .game.session import GameSession
from .runs.events import EventWriter
from .settings import RevealSettings
from .share.links import build_share_url, normalize_platform
from .utils import now_utc_iso


def default_upload_store(settings: RevealSettings) -> UploadStore:
    if settings.upload_url:
        return HttpUploadStore(settings.upload_url, timeout_s=settings.upload_timeout_s)
    return LocalUploadStore(settings.uploads_dir)


class CardRevealEngine:
    def __init__(
        self,
        events_path: Path,
        catalog: AssetCatalog,
        settings: RevealSettings | None = None,
        upload_store: UploadStore | None = None,
        exporter: CaptureExporter | None = None,
        rng: Any = None,
        session_id: str | None = None,
    ) -> None:
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.events = EventWriter(events_path, self.session_id)
        self.settings = settings or RevealSettings()
        self.catalog = catalog
        self.session = GameSession(catalog, rng=rng)
        self.exporter = exporter or CaptureExporter()
        self.upload_store = upload_store or default_upload_store(self.settings)
        self.last_share_url: str | None = None
        self.rounds_revealed = 0
        self._uploaded: tuple[int, str] | None = None
        self.started_at = now_utc_iso()
        self.events.emit(
            "session_started",
            prompts=len(catalog.prompts),
            features=len(catalog.features),
            images=len(catalog.images),
        )

    def toggle(self, index: int) -> bool:
        before = dict(self.session.assignment)
        was_revealed = self.session.revealed
        changed = self.session.toggle(index)
        if not changed:
            return False
        self.events.emit(
            "card_toggled",
            slot=index,
            selected=index in self.session.selected,
            selection=list(self.session.selected),
        )
        for slot, content in self.session.assignment.items():
            if slot not in before:
                self.events.emit("content_assigned", slot=slot, **content_to_dict(content))
        if self.session.revealed and not was_revealed:
            self.rounds_revealed += 1
            self.events.emit(
                "session_revealed",
                selection=list(self.session.selected),
                assignment={str(k): content_to_dict(v) for k, v in self.session.assignment.items()},
            )
        return True

    def close_modal(self) -> bool:
        closed = self.session.close_modal()
        if closed:
            self.events.emit("modal_closed")
        return closed

    def reset(self) -> None:
        self.session.reset()
        self.last_share_url = None
        self._uploaded = None
        self.events.emit("session_reset", generation=self.session.generation)

    def region(self) -> RevealRegion | None:
        if not self.session.revealed:
            return None
        return RevealRegion(view=self.session.reveal_view(), public_dir=self.settings.public_dir)

    async def capture(self) -> bytes | None:
        """Capture the reveal view. Failures are recorded and yield None."""
        try:
            return await self.exporter.capture(self.region())
        except CaptureFailed as exc:
            self.events.emit("capture_failed", error=str(exc))
            return None

    async def save(self, out_dir: Path) -> Path | None:
        token = self.session.generation
        blob = await self.capture()
        if blob is None:
            return None
        if self._is_stale(token, "save"):
            return None
        path = self.exporter.save(blob, out_dir)
        self.events.emit("capture_saved", path=str(path), bytes=len(blob))
        return path

    async def upload(self, blob: bytes) -> str | None:
        try:
            url = await asyncio.to_thread(self.upload_store.upload, blob, "image/png")
        except UploadFailed as exc:
            self.events.emit("upload_failed", error=str(exc))
            return None
        self.events.emit("image_uploaded", url=url)
        return url

    async def share(self, platform: str) -> str | None:
        """Build a share URL for the current reveal.

        Returns None when the session was reset before the capture/upload
        finished; the late result is dropped.
        """
        resolved = normalize_platform(platform)
        token = self.session.generation
        image_url: str | None = None
        if self._uploaded and self._uploaded[0] == token:
            image_url = self._uploaded[1]
        else:
            blob = await self.capture()
            if self._is_stale(token, "share"):
                return None
            if blob is not None:
                image_url = await self.upload(blob)
                if self._is_stale(token, "share"):
                    return None
            if image_url:
                self._uploaded = (token, image_url)
        url = build_share_url(
            resolved,
            image_url,
            base_url=self.settings.base_url,
            share_text=self.settings.share_text,
            fallback_url=self.settings.fallback_url,
        )
        self.last_share_url = url
        self.events.emit(
            "share_link_built",
            platform=resolved,
            image_url=image_url,
            url=url,
            fallback=image_url is None,
        )
        return url

    def _is_stale(self, token: int, action: str) -> bool:
        if self.session.generation == token:
            return False
        self.events.emit(
            "share_discarded" if action == "share" else "capture_discarded",
            generation=token,
            current_generation=self.session.generation,
        )
        return True

    def finish(self) -> None:
        self.events.emit(
            "session_finished",
            started_at=self.started_at,
            finished_at=now_utc_iso(),
            rounds_revealed=self.rounds_revealed,
        )
