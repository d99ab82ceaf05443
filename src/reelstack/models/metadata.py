"""Models describing resolved video metadata and the provider payloads it is built from."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from reelstack.models.base import ProviderResponse, ReelStackBaseModel


class Platform(str, Enum):
    """Platform labels derived from URL classification."""

    YOUTUBE = "YouTube"
    INSTAGRAM = "Instagram"
    TIKTOK = "TikTok"
    WEB = "Web"


class UrlClassification(ReelStackBaseModel):
    """Result of matching a URL against known platform domains and path segments."""

    platform: Platform
    is_short: bool = False
    video_id: Optional[str] = None


class VideoMetadata(ReelStackBaseModel):
    """Best-effort descriptive metadata for a saved URL."""

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    thumbnail: str = Field(min_length=1)
    platform: str = Field(min_length=1)
    author: Optional[str] = None


class YouTubeOEmbedResponse(ProviderResponse):
    """Subset of the YouTube oEmbed payload.

    ``thumbnail_url`` is the documented field; some mirrors report ``thumbnail``
    instead, so :attr:`thumbnail_ref` prefers the former and falls back to the latter.
    """

    title: Optional[str] = None
    author_name: Optional[str] = None
    thumbnail_url: Optional[str] = None
    thumbnail: Optional[str] = None

    @property
    def thumbnail_ref(self) -> Optional[str]:
        return _clean(self.thumbnail_url) or _clean(self.thumbnail)


class NoembedResponse(ProviderResponse):
    """Subset of the noembed multi-provider payload.

    A populated ``error`` marks the lookup as failed even on HTTP 200.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    thumbnail_url: Optional[str] = None
    provider_name: Optional[str] = None
    author_name: Optional[str] = None
    author_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def author(self) -> Optional[str]:
        return _clean(self.author_name) or _clean(self.author_url)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


__all__ = ["NoembedResponse", "Platform", "UrlClassification", "VideoMetadata", "YouTubeOEmbedResponse"]
