"""Rasterize the composed reveal view into a PNG artifact."""

from __future__ import annotations

import asyncio
import io
from dataclasses import dataclass
from pathlib import Path
from urllib.error import HTTPError, URLError
from urllib.parse import unquote, urlparse
from urllib.request import Request, urlopen

from PIL import Image, ImageDraw, ImageFont, ImageOps

from ..errors import CaptureFailed
from ..game.session import RevealView

DOWNLOAD_FILENAME = "card-reveal.png"

_REGION_WIDTH = 480
_PADDING = 16
_GAP = 12
_FEATURE_FONT_SIZE = 18
_PROMPT_FONT_SIZE = 22
_PILL_COLOR = (43, 127, 255)
_BORDER_COLOR = (77, 77, 77)
_FRAME_COLOR = (13, 13, 13)
_TEXT_COLOR = (242, 242, 242)
_GRADIENT_STOPS = ((67, 56, 202), (109, 40, 217), (162, 28, 175))


@dataclass(frozen=True)
class RevealRegion:
    """The visual region that gets captured: image, feature tag and prompt."""

    view: RevealView
    public_dir: Path | None = None


class CaptureExporter:
    def __init__(
        self,
        pixel_ratio: int = 2,
        background: str = "#000000",
        fetch_timeout_s: float = 15.0,
    ) -> None:
        self.pixel_ratio = max(1, int(pixel_ratio))
        self.background = background
        self.fetch_timeout_s = fetch_timeout_s

    async def capture(self, region: RevealRegion | None) -> bytes:
        return await asyncio.to_thread(self.render, region)

    def render(self, region: RevealRegion | None) -> bytes:
        if region is None:
            raise CaptureFailed("Reveal region is not attached to a renderable surface")
        try:
            image = self._compose(region)
            buffer = io.BytesIO()
            image.save(buffer, format="PNG")
        except CaptureFailed:
            raise
        except (OSError, ValueError) as exc:
            raise CaptureFailed(f"Capture failed: {exc}") from exc
        return buffer.getvalue()

    def save(self, blob: bytes, out_dir: Path, filename: str = DOWNLOAD_FILENAME) -> Path:
        out_dir.mkdir(parents=True, exist_ok=True)
        path = out_dir / filename
        path.write_bytes(blob)
        return path

    def _compose(self, region: RevealRegion) -> Image.Image:
        scale = self.pixel_ratio
        width = _REGION_WIDTH * scale
        pad = _PADDING * scale
        gap = _GAP * scale
        frame_w = width - 2 * pad
        frame_h = int(frame_w * 1.5)

        view = region.view
        frame = self._image_frame(view.image_ref, region.public_dir, (frame_w, frame_h))

        feature_font = _font(_FEATURE_FONT_SIZE * scale)
        prompt_font = _font(_PROMPT_FONT_SIZE * scale)
        measure = ImageDraw.Draw(Image.new("RGB", (1, 1)))

        pill_h = 0
        if view.feature:
            pill_h = _line_height(measure, feature_font) + 16 * scale
        prompt_lines: list[str] = []
        prompt_h = 0
        inner_pad = 12 * scale
        if view.prompt:
            prompt_lines = wrap_text(measure, view.prompt, prompt_font, frame_w - 2 * inner_pad)
            line_h = _line_height(measure, prompt_font) + 4 * scale
            prompt_h = line_h * len(prompt_lines) + 2 * inner_pad

        height = pad + frame_h + pad
        if pill_h:
            height += gap + pill_h
        if prompt_h:
            height += gap + prompt_h

        canvas = Image.new("RGB", (width, height), self.background)
        draw = ImageDraw.Draw(canvas)
        canvas.paste(frame, (pad, pad))
        draw.rectangle((pad, pad, pad + frame_w - 1, pad + frame_h - 1), outline=_BORDER_COLOR, width=scale)

        y = pad + frame_h
        if pill_h:
            y += gap
            text_w = int(draw.textlength(view.feature, font=feature_font))
            pill_w = min(frame_w, text_w + 32 * scale)
            x0 = (width - pill_w) // 2
            draw.rounded_rectangle((x0, y, x0 + pill_w, y + pill_h), radius=pill_h // 2, fill=_PILL_COLOR)
            text_y = y + (pill_h - _line_height(measure, feature_font)) // 2
            draw.text(((width - text_w) // 2, text_y), view.feature, font=feature_font, fill=(255, 255, 255))
            y += pill_h
        if prompt_h:
            y += gap
            draw.rounded_rectangle(
                (pad, y, pad + frame_w, y + prompt_h),
                radius=12 * scale,
                outline=_BORDER_COLOR,
                width=scale,
            )
            line_h = _line_height(measure, prompt_font) + 4 * scale
            ty = y + inner_pad
            for line in prompt_lines:
                line_w = int(draw.textlength(line, font=prompt_font))
                draw.text(((width - line_w) // 2, ty), line, font=prompt_font, fill=_TEXT_COLOR)
                ty += line_h
        return canvas

    def _image_frame(self, image_ref: str | None, public_dir: Path | None, size: tuple[int, int]) -> Image.Image:
        if not image_ref:
            return gradient_fill(size)
        source = self._load_image(image_ref, public_dir)
        frame = Image.new("RGB", size, _FRAME_COLOR)
        fitted = ImageOps.contain(source.convert("RGB"), size)
        offset = ((size[0] - fitted.width) // 2, (size[1] - fitted.height) // 2)
        frame.paste(fitted, offset)
        return frame

    def _load_image(self, image_ref: str, public_dir: Path | None) -> Image.Image:
        parsed = urlparse(image_ref)
        if parsed.scheme in {"http", "https"}:
            req = Request(image_ref, method="GET")
            try:
                with urlopen(req, timeout=self.fetch_timeout_s) as response:
                    data = response.read()
            except HTTPError as exc:
                raise CaptureFailed(f"Image request failed ({exc.code}): {image_ref}") from exc
            except URLError as exc:
                raise CaptureFailed(f"Image request failed: {exc}") from exc
            image = Image.open(io.BytesIO(data))
            image.load()
            return image
        path = resolve_local_ref(image_ref, public_dir)
        if not path.exists():
            raise CaptureFailed(f"Image not found: {image_ref}")
        with Image.open(path) as image:
            image.load()
            return image.copy()


def resolve_local_ref(image_ref: str, public_dir: Path | None) -> Path:
    """Map a site-relative reference like `/images/a%20b.png` onto disk.

    With a `public_dir` the result must stay inside it; references that climb
    out raise CaptureFailed.
    """
    raw = unquote(urlparse(image_ref).path or image_ref)
    if public_dir is None:
        return Path(raw)
    root = public_dir.resolve()
    path = (root / raw.lstrip("/")).resolve()
    if path != root and root not in path.parents:
        raise CaptureFailed(f"Image reference escapes the public directory: {image_ref}")
    return path


def gradient_fill(size: tuple[int, int]) -> Image.Image:
    # Small diagonal ramp, upscaled.
    small_w, small_h = 32, 48
    small = Image.new("RGB", (small_w, small_h))
    pixels = small.load()
    for y in range(small_h):
        for x in range(small_w):
            t = ((x / (small_w - 1)) + (y / (small_h - 1))) / 2
            pixels[x, y] = _three_stop(t)
    return small.resize(size, Image.Resampling.BICUBIC)


def _three_stop(t: float) -> tuple[int, int, int]:
    start, mid, end = _GRADIENT_STOPS
    if t <= 0.5:
        a, b, local = start, mid, t * 2
    else:
        a, b, local = mid, end, (t - 0.5) * 2
    return tuple(int(round(a[i] + (b[i] - a[i]) * local)) for i in range(3))


def wrap_text(draw: ImageDraw.ImageDraw, text: str, font, max_width: int) -> list[str]:
    words = text.split()
    if not words:
        return []
    lines: list[str] = []
    current = words[0]
    for word in words[1:]:
        candidate = f"{current} {word}"
        if draw.textlength(candidate, font=font) <= max_width:
            current = candidate
        else:
            lines.append(current)
            current = word
    lines.append(current)
    return lines


def _font(size: int):
    return ImageFont.load_default(size=size)


def _line_height(draw: ImageDraw.ImageDraw, font) -> int:
    left, top, right, bottom = draw.textbbox((0, 0), "Hg", font=font)
    return max(1, bottom - top)
