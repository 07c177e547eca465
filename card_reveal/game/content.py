"""Revealed card content: a closed set of three variants."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

KIND_IMAGE = "image"
KIND_TEXT = "text"
KIND_FEATURE = "feature"

# Canonical order used when handing out unused kinds.
CONTENT_KINDS: tuple[str, ...] = (KIND_IMAGE, KIND_TEXT, KIND_FEATURE)

DEFAULT_IMAGE_REF = "/images/image%20693.png"
DEFAULT_PROMPT = "Imagine a world where..."
DEFAULT_FEATURE = "Offline-first sync"


@dataclass(frozen=True)
class ImageContent:
    ref: str
    kind = KIND_IMAGE

    @property
    def value(self) -> str:
        return self.ref


@dataclass(frozen=True)
class TextContent:
    text: str
    kind = KIND_TEXT

    @property
    def value(self) -> str:
        return self.text


@dataclass(frozen=True)
class FeatureContent:
    feature: str
    kind = KIND_FEATURE

    @property
    def value(self) -> str:
        return self.feature


RevealedContent = Union[ImageContent, TextContent, FeatureContent]


def content_kind(content: RevealedContent) -> str:
    if isinstance(content, ImageContent):
        return KIND_IMAGE
    if isinstance(content, TextContent):
        return KIND_TEXT
    if isinstance(content, FeatureContent):
        return KIND_FEATURE
    raise TypeError(f"Unknown content variant: {type(content).__name__}")


def content_to_dict(content: RevealedContent) -> dict[str, str]:
    return {"kind": content_kind(content), "value": content.value}
