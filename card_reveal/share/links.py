"""Outbound share URLs for the supported platforms."""

from __future__ import annotations

from urllib.parse import quote, urljoin

PLATFORM_X = "x"
PLATFORM_FACEBOOK = "facebook"
PLATFORM_TELEGRAM = "telegram"
PLATFORMS: tuple[str, ...] = (PLATFORM_X, PLATFORM_FACEBOOK, PLATFORM_TELEGRAM)

_PLATFORM_ALIASES = {
    "x": PLATFORM_X,
    "twitter": PLATFORM_X,
    "facebook": PLATFORM_FACEBOOK,
    "fb": PLATFORM_FACEBOOK,
    "telegram": PLATFORM_TELEGRAM,
    "tg": PLATFORM_TELEGRAM,
}

DEFAULT_SHARE_TEXT = (
    "Getting inspired using the prompt generator, try it out and use the prompts on daisy.so"
)
DEFAULT_FALLBACK_URL = "https://app.daisy.so/create"
SHARE_ROUTE = "/share"

# Same unreserved set as JavaScript's encodeURIComponent.
_COMPONENT_SAFE = "-_.!~*'()"


def encode_component(value: str) -> str:
    return quote(value, safe=_COMPONENT_SAFE)


def normalize_platform(name: str) -> str:
    key = str(name or "").strip().lower()
    platform = _PLATFORM_ALIASES.get(key)
    if platform is None:
        raise ValueError(f"Unknown share platform: {name!r} (expected one of {', '.join(PLATFORMS)})")
    return platform


def share_page_url(image_url: str | None, *, base_url: str, fallback_url: str = DEFAULT_FALLBACK_URL) -> str:
    """Preview page embedding `image_url`, or the generic destination without one."""
    if not image_url:
        return fallback_url
    base = base_url.rstrip("/")
    absolute = urljoin(f"{base}/", image_url)
    return f"{base}{SHARE_ROUTE}/{encode_component(absolute)}"


def build_share_url(
    platform: str,
    image_url: str | None,
    *,
    base_url: str,
    share_text: str = DEFAULT_SHARE_TEXT,
    fallback_url: str = DEFAULT_FALLBACK_URL,
) -> str:
    resolved = normalize_platform(platform)
    page = share_page_url(image_url, base_url=base_url, fallback_url=fallback_url)
    encoded_text = encode_component(share_text)
    encoded_url = encode_component(page)
    if resolved == PLATFORM_X:
        return f"https://x.com/intent/tweet?text={encoded_text}&url={encoded_url}"
    if resolved == PLATFORM_FACEBOOK:
        return f"https://www.facebook.com/sharer/sharer.php?u={encoded_url}&quote={encoded_text}"
    # Telegram's unfurler ignores a separate url parameter, so the link goes in the text.
    full_text = encode_component(f"{share_text} {page}")
    return f"https://t.me/share/url?text={full_text}"
