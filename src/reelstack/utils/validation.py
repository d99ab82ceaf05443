"""Validation and classification helpers for saved video URLs."""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlparse

from reelstack.models.metadata import Platform, UrlClassification


class InvalidVideoURLError(ValueError):
    """Raised when a submitted URL cannot be saved."""


_VIDEO_ID_PATTERN = re.compile(r"^[0-9A-Za-z_-]{11}$")
_PATH_ID_PATTERN = re.compile(r"/(?:shorts|embed|live|v)/([0-9A-Za-z_-]{11})(?:[/?#]|$)")

_YOUTUBE_MARKERS = ("youtube.com", "youtu.be", "/shorts/")
_SHORT_FORM_MARKERS = ("/shorts/", "/reel/", "tiktok.com")


def extract_video_id(url: str) -> Optional[str]:
    """Extract a YouTube video ID from a URL or raw ID string, or ``None`` if none is found."""

    stripped = url.strip()
    if _VIDEO_ID_PATTERN.fullmatch(stripped):
        return stripped

    parsed = urlparse(stripped)
    host = parsed.netloc.lower()
    if host.endswith("youtu.be"):
        candidate = parsed.path.lstrip("/").split("/", 1)[0]
        if _VIDEO_ID_PATTERN.fullmatch(candidate):
            return candidate

    if host.endswith("youtube.com") or host.endswith("youtube-nocookie.com"):
        if parsed.path == "/watch":
            candidate_list = parse_qs(parsed.query).get("v", [])
            if candidate_list and _VIDEO_ID_PATTERN.fullmatch(candidate_list[0]):
                return candidate_list[0]
        else:
            path_match = _PATH_ID_PATTERN.search(parsed.path)
            if path_match:
                return path_match.group(1)

    return None


def classify_url(url: str) -> UrlClassification:
    """Classify ``url`` by substring matching against known platform markers."""

    lowered = url.lower()
    if any(marker in lowered for marker in _YOUTUBE_MARKERS):
        return UrlClassification(
            platform=Platform.YOUTUBE,
            is_short="/shorts/" in lowered,
            video_id=extract_video_id(url),
        )
    if "instagram.com" in lowered:
        return UrlClassification(platform=Platform.INSTAGRAM, is_short="/reel/" in lowered)
    if "tiktok.com" in lowered:
        return UrlClassification(platform=Platform.TIKTOK, is_short=True)
    return UrlClassification(platform=Platform.WEB)


def is_short_form(url: str) -> bool:
    """Return ``True`` when the URL shape suggests short-form content."""

    lowered = url.lower()
    return any(marker in lowered for marker in _SHORT_FORM_MARKERS)


def validate_video_url(url: str) -> str:
    """Return the trimmed URL, raising :class:`InvalidVideoURLError` if it cannot be saved."""

    stripped = (url or "").strip()
    if not stripped:
        raise InvalidVideoURLError("URL must not be empty.")

    parsed = urlparse(stripped)
    if parsed.scheme.lower() not in {"http", "https"} or not parsed.netloc:
        raise InvalidVideoURLError(f"Not an http(s) URL: {url!r}")
    return stripped


__all__ = ["InvalidVideoURLError", "classify_url", "extract_video_id", "is_short_form", "validate_video_url"]
