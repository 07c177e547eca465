"""Asset, upload and share-preview HTTP endpoints (stdlib server).

Endpoints:
  GET  /healthz
  GET  /api/prompts | /api/features | /api/images
  POST /api/upload             (multipart field `file`, or a raw image body)
  GET  /share/<encoded url>    (link-preview page)
  GET  /uploads/<file>, /images/<file>
"""

from __future__ import annotations

import json
import mimetypes
import sys
import time
from email.parser import BytesParser
from email.policy import HTTP
from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import unquote, urlparse

from .capture.upload import UPLOAD_FIELD, LocalUploadStore
from .catalog.assets import DirectoryAssetSource
from .errors import AssetUnavailable, UploadFailed
from .settings import RevealSettings
from .share.preview import decode_share_id, render_share_page

_SAFE_NAME_CHARS = set("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789._-@ ")


def _json_dumps(obj: Any) -> bytes:
    return (json.dumps(obj) + "\n").encode("utf-8")


def safe_filename(name: str) -> str | None:
    # Single path segment only.
    if not name or "/" in name or "\\" in name or name.startswith("."):
        return None
    if any(ch not in _SAFE_NAME_CHARS for ch in name):
        return None
    return name


def parse_multipart_file(content_type: str, body: bytes, field_name: str = UPLOAD_FIELD) -> tuple[bytes, str] | None:
    header = f"Content-Type: {content_type}\r\n\r\n".encode("utf-8")
    message = BytesParser(policy=HTTP).parsebytes(header + body)
    if not message.is_multipart():
        return None
    for part in message.iter_parts():
        if part.get_param("name", header="content-disposition") != field_name:
            continue
        payload = part.get_payload(decode=True)
        if not payload:
            return None
        return payload, part.get_content_type()
    return None


class _Handler(BaseHTTPRequestHandler):
    server_version = "card-reveal/0"

    @property
    def settings(self) -> RevealSettings:
        return self.server.settings  # type: ignore[attr-defined]

    def _send_json(self, status: int, payload: Any) -> None:
        body = _json_dumps(payload)
        self.send_response(status)
        self.send_header("Content-Type", "application/json; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(body)

    def _send_bytes(self, status: int, data: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(data)))
        self.send_header("Access-Control-Allow-Origin", "*")
        self.end_headers()
        self.wfile.write(data)

    def _read_body(self) -> bytes:
        try:
            length = int(self.headers.get("Content-Length", "0"))
        except ValueError:
            return b""
        if length <= 0:
            return b""
        return self.rfile.read(length)

    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002 (BaseHTTPRequestHandler API)
        if getattr(self.server, "quiet", False):
            return
        sys.stderr.write("%s - %s\n" % (self.address_string(), format % args))

    def do_OPTIONS(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler API)
        self.send_response(HTTPStatus.NO_CONTENT)
        self.send_header("Access-Control-Allow-Origin", "*")
        self.send_header("Access-Control-Allow-Headers", "Content-Type")
        self.send_header("Access-Control-Allow-Methods", "GET, POST, OPTIONS")
        self.end_headers()

    def do_GET(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler API)
        path = urlparse(self.path).path
        if path == "/healthz":
            self._send_json(HTTPStatus.OK, {"ok": True, "ts": int(time.time())})
            return
        if path in {"/api/prompts", "/api/features", "/api/images"}:
            self._send_assets(path.rsplit("/", 1)[1])
            return
        if path.startswith("/share/"):
            share_id = path.split("/share/", 1)[1]
            if not share_id:
                self._send_json(HTTPStatus.NOT_FOUND, {"error": "not found"})
                return
            page = render_share_page(
                decode_share_id(share_id),
                description=self.settings.share_text,
                destination_url=self.settings.fallback_url,
            )
            self._send_bytes(HTTPStatus.OK, page.encode("utf-8"), "text/html; charset=utf-8")
            return
        if path.startswith("/uploads/"):
            self._send_static(self.settings.uploads_dir, path.split("/uploads/", 1)[1])
            return
        if path.startswith("/images/"):
            self._send_static(self.settings.public_dir / "images", path.split("/images/", 1)[1])
            return
        self._send_json(HTTPStatus.NOT_FOUND, {"error": "not found"})

    def do_POST(self) -> None:  # noqa: N802 (BaseHTTPRequestHandler API)
        path = urlparse(self.path).path
        if path != "/api/upload":
            self._send_json(HTTPStatus.NOT_FOUND, {"error": "not found"})
            return
        content_type = self.headers.get("Content-Type", "")
        body = self._read_body()
        upload: tuple[bytes, str] | None = None
        if content_type.startswith("multipart/form-data"):
            upload = parse_multipart_file(content_type, body)
        elif content_type.startswith("image/") and body:
            upload = (body, content_type.split(";", 1)[0].strip())
        if not upload:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "Missing file"})
            return
        store = LocalUploadStore(self.settings.uploads_dir)
        try:
            url = store.upload(upload[0], upload[1])
        except UploadFailed:
            self._send_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": "Upload failed"})
            return
        self._send_json(HTTPStatus.OK, {"url": url})

    def _send_assets(self, name: str) -> None:
        source = DirectoryAssetSource(self.settings.data_dir)
        try:
            values = getattr(source, name)()
        except AssetUnavailable:
            label = "list images" if name == "images" else f"load {name}"
            self._send_json(HTTPStatus.INTERNAL_SERVER_ERROR, {"error": f"Failed to {label}"})
            return
        self._send_json(HTTPStatus.OK, {name: values})

    def _send_static(self, root: Path, raw_name: str) -> None:
        filename = safe_filename(unquote(raw_name))
        if not filename:
            self._send_json(HTTPStatus.BAD_REQUEST, {"error": "invalid filename"})
            return
        file_path = root / filename
        if not file_path.is_file():
            self._send_json(HTTPStatus.NOT_FOUND, {"error": "not found"})
            return
        mime, _ = mimetypes.guess_type(file_path.name)
        self._send_bytes(HTTPStatus.OK, file_path.read_bytes(), mime or "application/octet-stream")


def build_server(settings: RevealSettings, host: str = "127.0.0.1", port: int = 8787, quiet: bool = False) -> ThreadingHTTPServer:
    server = ThreadingHTTPServer((host, port), _Handler)
    server.settings = settings  # type: ignore[attr-defined]
    server.quiet = quiet  # type: ignore[attr-defined]
    return server


def serve(settings: RevealSettings, host: str = "127.0.0.1", port: int = 8787) -> int:
    server = build_server(settings, host, port)
    sys.stderr.write(f"Card reveal server listening on {host}:{port}\n")
    sys.stderr.write(f"Data dir: {settings.data_dir.resolve()}\n")
    sys.stderr.write(f"Public dir: {settings.public_dir.resolve()}\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        sys.stderr.write("Shutting down...\n")
    finally:
        server.server_close()
    return 0
