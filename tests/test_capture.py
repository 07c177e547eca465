from __future__ import annotations

import asyncio
import io
from pathlib import Path

import pytest
from PIL import Image

from card_reveal.capture.render import (
    DOWNLOAD_FILENAME,
    CaptureExporter,
    RevealRegion,
    gradient_fill,
    resolve_local_ref,
)
from card_reveal.errors import CaptureFailed
from card_reveal.game.session import RevealView


def _write_public_image(public_dir: Path, name: str = "a card.png") -> str:
    images_dir = public_dir / "images"
    images_dir.mkdir(parents=True)
    Image.new("RGB", (200, 300), (0, 200, 0)).save(images_dir / name)
    return "/images/" + name.replace(" ", "%20")


def test_capture_renders_png_at_pixel_ratio(tmp_path: Path) -> None:
    ref = _write_public_image(tmp_path)
    region = RevealRegion(
        view=RevealView(image_ref=ref, feature="Offline-first sync", prompt="Imagine a world where..."),
        public_dir=tmp_path,
    )
    blob = asyncio.run(CaptureExporter(pixel_ratio=2).capture(region))

    image = Image.open(io.BytesIO(blob))
    assert image.format == "PNG"
    assert image.width == 960
    # Background fill shows in the padding.
    assert image.convert("RGB").getpixel((2, 2)) == (0, 0, 0)
    # Image sits inside the frame.
    assert image.convert("RGB").getpixel((480, 600)) == (0, 200, 0)


def test_capture_without_text_is_shorter(tmp_path: Path) -> None:
    ref = _write_public_image(tmp_path)
    exporter = CaptureExporter(pixel_ratio=1)
    bare = exporter.render(RevealRegion(view=RevealView(image_ref=ref), public_dir=tmp_path))
    full = exporter.render(
        RevealRegion(view=RevealView(image_ref=ref, feature="tag", prompt="prompt text"), public_dir=tmp_path)
    )
    assert Image.open(io.BytesIO(bare)).height < Image.open(io.BytesIO(full)).height


def test_capture_uses_gradient_without_image() -> None:
    blob = CaptureExporter(pixel_ratio=1).render(RevealRegion(view=RevealView(prompt="hello")))
    image = Image.open(io.BytesIO(blob)).convert("RGB")
    assert image.getpixel((40, 40)) != (0, 0, 0)


def test_capture_fails_for_detached_region() -> None:
    with pytest.raises(CaptureFailed):
        asyncio.run(CaptureExporter().capture(None))


def test_capture_fails_for_missing_image(tmp_path: Path) -> None:
    region = RevealRegion(view=RevealView(image_ref="/images/missing.png"), public_dir=tmp_path)
    with pytest.raises(CaptureFailed):
        CaptureExporter().render(region)


def test_capture_fails_for_undecodable_image(tmp_path: Path) -> None:
    images_dir = tmp_path / "images"
    images_dir.mkdir()
    (images_dir / "broken.png").write_bytes(b"not a png")
    region = RevealRegion(view=RevealView(image_ref="/images/broken.png"), public_dir=tmp_path)
    with pytest.raises(CaptureFailed):
        CaptureExporter().render(region)


def test_save_uses_download_filename(tmp_path: Path) -> None:
    path = CaptureExporter().save(b"png-bytes", tmp_path / "out")
    assert path.name == DOWNLOAD_FILENAME
    assert path.read_bytes() == b"png-bytes"


def test_resolve_local_ref_unquotes(tmp_path: Path) -> None:
    resolved = resolve_local_ref("/images/image%20693.png", tmp_path / "public")
    assert resolved == (tmp_path / "public").resolve() / "images" / "image 693.png"


def test_resolve_local_ref_stays_inside_public_dir(tmp_path: Path) -> None:
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    Image.new("RGB", (4, 4)).save(tmp_path / "secret.png")
    with pytest.raises(CaptureFailed):
        resolve_local_ref("/images/../../secret.png", public_dir)
    with pytest.raises(CaptureFailed):
        resolve_local_ref("/images/..%2F..%2Fsecret.png", public_dir)


def test_capture_rejects_image_outside_public_dir(tmp_path: Path) -> None:
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    Image.new("RGB", (4, 4)).save(tmp_path / "secret.png")
    region = RevealRegion(view=RevealView(image_ref="/../secret.png"), public_dir=public_dir)
    with pytest.raises(CaptureFailed):
        CaptureExporter(pixel_ratio=1).render(region)


def test_gradient_fill_size() -> None:
    assert gradient_fill((90, 135)).size == (90, 135)
