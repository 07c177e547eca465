"""Asset catalog: prompts, features and image references for a session."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol
from urllib.error import HTTPError, URLError
from urllib.parse import urljoin
from urllib.request import Request, urlopen

from ..errors import AssetUnavailable
from ..runs.events import EventWriter
from ..utils import read_lines

PROMPTS_FILE = "prompts.txt"
FEATURES_FILE = "features.txt"
IMAGES_FILE = "images.json"


@dataclass(frozen=True)
class AssetCatalog:
    prompts: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    images: tuple[str, ...] = ()

    @classmethod
    def from_lists(cls, prompts=None, features=None, images=None) -> "AssetCatalog":
        return cls(
            prompts=tuple(prompts or ()),
            features=tuple(features or ()),
            images=tuple(images or ()),
        )

    def is_complete(self) -> bool:
        return bool(self.prompts and self.features and self.images)


class AssetSource(Protocol):
    def prompts(self) -> list[str]:
        ...

    def features(self) -> list[str]:
        ...

    def images(self) -> list[str]:
        ...


class DirectoryAssetSource:
    """Reads asset lists from a data directory.

    Missing files count as empty lists; unreadable or malformed files raise
    AssetUnavailable.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = data_dir

    def prompts(self) -> list[str]:
        return self._lines(PROMPTS_FILE)

    def features(self) -> list[str]:
        return self._lines(FEATURES_FILE)

    def images(self) -> list[str]:
        path = self.data_dir / IMAGES_FILE
        if not path.exists():
            return []
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise AssetUnavailable(f"Failed to list images: {exc}") from exc
        return parse_images_manifest(payload)

    def _lines(self, name: str) -> list[str]:
        path = self.data_dir / name
        if not path.exists():
            return []
        try:
            return read_lines(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise AssetUnavailable(f"Failed to load {name}: {exc}") from exc


class HttpAssetSource:
    """Reads asset lists from a running card reveal server."""

    def __init__(self, base_url: str, timeout_s: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout_s = timeout_s

    def prompts(self) -> list[str]:
        return _string_list(self._get_json("/api/prompts").get("prompts"))

    def features(self) -> list[str]:
        return _string_list(self._get_json("/api/features").get("features"))

    def images(self) -> list[str]:
        # Site-relative refs point at the server, not the local public dir.
        refs = parse_images_manifest(self._get_json("/api/images"))
        return [urljoin(f"{self.base_url}/", ref) for ref in refs]

    def _get_json(self, route: str) -> dict[str, Any]:
        url = f"{self.base_url}{route}"
        req = Request(url, headers={"Accept": "application/json"}, method="GET")
        try:
            with urlopen(req, timeout=self.timeout_s) as response:
                raw = response.read().decode("utf-8")
        except HTTPError as exc:
            raise AssetUnavailable(f"Asset request failed ({exc.code}): {url}") from exc
        except URLError as exc:
            raise AssetUnavailable(f"Asset request failed: {exc}") from exc
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise AssetUnavailable(f"Asset response was not JSON: {url}") from exc
        if not isinstance(payload, dict):
            raise AssetUnavailable(f"Asset response was not an object: {url}")
        return payload


def parse_images_manifest(payload: Any) -> list[str]:
    if isinstance(payload, list):
        return _string_list(payload)
    if isinstance(payload, dict) and isinstance(payload.get("images"), list):
        return _string_list(payload["images"])
    return []


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    out: list[str] = []
    for item in value:
        entry = str(item or "").strip()
        if entry:
            out.append(entry)
    return out


def load_catalog(source: AssetSource, events: EventWriter | None = None) -> AssetCatalog:
    """Snapshot all three lists. Never raises; a failing list becomes empty."""
    lists: dict[str, list[str]] = {}
    for name in ("prompts", "features", "images"):
        try:
            lists[name] = list(getattr(source, name)())
        except AssetUnavailable as exc:
            lists[name] = []
            if events:
                events.emit("asset_unavailable", asset=name, error=str(exc))
    return AssetCatalog.from_lists(lists["prompts"], lists["features"], lists["images"])
