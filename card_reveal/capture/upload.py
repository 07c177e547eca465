"""Persistence collaborators for captured artifacts."""

from __future__ import annotations

import json
import mimetypes
import time
from pathlib import Path
from typing import Any, Protocol, Sequence
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from ..errors import UploadFailed
from ..utils import epoch_ms

UPLOAD_FIELD = "file"
UPLOAD_FILENAME = "card.png"
UPLOADS_ROUTE = "/uploads"


class UploadStore(Protocol):
    def upload(self, payload: bytes, content_type: str) -> str:
        ...


class LocalUploadStore:
    """Writes artifacts into an uploads directory served under `/uploads/`."""

    def __init__(self, uploads_dir: Path, url_prefix: str = UPLOADS_ROUTE) -> None:
        self.uploads_dir = uploads_dir
        self.url_prefix = url_prefix.rstrip("/")

    def upload(self, payload: bytes, content_type: str) -> str:
        if not payload:
            raise UploadFailed("Missing file")
        suffix = mimetypes.guess_extension(content_type or "") or ".png"
        filename = f"card-{epoch_ms()}{suffix}"
        try:
            self.uploads_dir.mkdir(parents=True, exist_ok=True)
            path = self.uploads_dir / filename
            # Two uploads in the same millisecond get a counter suffix.
            counter = 1
            while path.exists():
                path = self.uploads_dir / f"card-{epoch_ms()}-{counter}{suffix}"
                counter += 1
            path.write_bytes(payload)
        except OSError as exc:
            raise UploadFailed(f"Upload failed: {exc}") from exc
        return f"{self.url_prefix}/{path.name}"


class HttpUploadStore:
    """POSTs artifacts to a remote `/api/upload` endpoint."""

    def __init__(self, upload_url: str, timeout_s: float = 30.0) -> None:
        self.upload_url = upload_url
        self.timeout_s = timeout_s

    def upload(self, payload: bytes, content_type: str) -> str:
        status, body = _post_multipart(
            self.upload_url,
            files=[(UPLOAD_FIELD, UPLOAD_FILENAME, payload, content_type)],
            timeout_s=self.timeout_s,
        )
        url = body.get("url")
        if status >= 400 or not isinstance(url, str) or not url:
            raise UploadFailed(f"Upload rejected ({status}): {body.get('error') or body}")
        return url


def _post_multipart(
    url: str,
    *,
    files: Sequence[tuple[str, str, bytes, str | None]],
    timeout_s: float,
) -> tuple[int, dict[str, Any]]:
    boundary = f"----CardRevealBoundary{int(time.time() * 1000)}"
    body = build_multipart_body(boundary, files)
    req = Request(
        url,
        data=body,
        headers={"Content-Type": f"multipart/form-data; boundary={boundary}"},
        method="POST",
    )
    try:
        with urlopen(req, timeout=timeout_s) as response:
            status_code = int(getattr(response, "status", 200))
            raw = response.read().decode("utf-8")
    except HTTPError as exc:
        raw = exc.read().decode("utf-8", errors="replace") if exc.fp else str(exc)
        raise UploadFailed(f"Upload error ({exc.code}): {raw}") from exc
    except URLError as exc:
        raise UploadFailed(f"Upload request failed: {exc}") from exc
    except OSError as exc:
        raise UploadFailed(f"Upload request failed: {exc}") from exc

    try:
        payload_json = json.loads(raw)
    except ValueError:
        payload_json = {"raw": raw}
    if not isinstance(payload_json, dict):
        payload_json = {"raw": payload_json}
    return status_code, payload_json


def build_multipart_body(boundary: str, files: Sequence[tuple[str, str, bytes, str | None]]) -> bytes:
    boundary_bytes = boundary.encode("utf-8")
    payload = bytearray()
    for field_name, filename, blob, mime_type in files:
        payload.extend(b"--")
        payload.extend(boundary_bytes)
        payload.extend(b"\r\n")
        disposition = (
            "Content-Disposition: form-data; "
            f'name="{_multipart_quote(field_name)}"; filename="{_multipart_quote(filename)}"\r\n'
        )
        payload.extend(disposition.encode("utf-8"))
        if mime_type:
            payload.extend(f"Content-Type: {mime_type}\r\n".encode("utf-8"))
        payload.extend(b"\r\n")
        payload.extend(blob)
        payload.extend(b"\r\n")
    payload.extend(b"--")
    payload.extend(boundary_bytes)
    payload.extend(b"--\r\n")
    return bytes(payload)


def _multipart_quote(value: str) -> str:
    return str(value).replace("\\", "\\\\").replace('"', '\\"')
