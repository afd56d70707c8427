"""YouTube URL helpers."""

from __future__ import annotations

import re
from urllib.parse import parse_qs, urlparse

_VIDEO_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")

# Order matters: specific URL shapes before the generic v= parameter.
_URL_PATTERNS: list[re.Pattern[str]] = [
    re.compile(r"youtube\.com/watch\?v=([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtu\.be/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/embed/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/shorts/([a-zA-Z0-9_-]{11})"),
    re.compile(r"youtube\.com/live/([a-zA-Z0-9_-]{11})"),
    re.compile(r"[?&]v=([a-zA-Z0-9_-]{11})"),
]


def extract_video_id(value: str | None) -> str | None:
    """Extract an 11-character video ID from a URL, or accept a bare ID.

    Args:
        value: A YouTube URL (watch, youtu.be, embed, shorts, live) or an ID.

    Returns:
        The video ID, or ``None`` if nothing recognisable was found.
    """
    if not value:
        return None

    value = value.strip()
    if _VIDEO_ID_RE.match(value):
        return value

    for pattern in _URL_PATTERNS:
        match = pattern.search(value)
        if match:
            return match.group(1)

    return None


def video_id_from_page_url(url: str) -> str | None:
    """Return the ``v`` query parameter of a watch-page URL."""
    values = parse_qs(urlparse(url).query).get("v")
    return values[0] if values else None


def is_watch_page(url: str | None) -> bool:
    return url is not None and "youtube.com/watch" in url
