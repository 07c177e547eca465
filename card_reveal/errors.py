"""Recoverable failures of the reveal pipeline."""

from __future__ import annotations


class AssetUnavailable(RuntimeError):
    """An asset list could not be read (unreachable or malformed)."""


class CaptureFailed(RuntimeError):
    """The reveal region could not be rasterized."""


class UploadFailed(RuntimeError):
    """The persistence collaborator was unreachable or rejected the payload."""
