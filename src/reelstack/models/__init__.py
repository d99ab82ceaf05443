"""Pydantic models for ReelStack."""

from reelstack.models.metadata import NoembedResponse, Platform, UrlClassification, VideoMetadata, YouTubeOEmbedResponse
from reelstack.models.video import MAX_TAG_LENGTH, MAX_TAGS, Video

__all__ = [
    "MAX_TAGS",
    "MAX_TAG_LENGTH",
    "NoembedResponse",
    "Platform",
    "UrlClassification",
    "Video",
    "VideoMetadata",
    "YouTubeOEmbedResponse",
]
