"""Metadata resolution with remote lookups and a local heuristic fallback."""

from __future__ import annotations

import random
from typing import Mapping, Optional

import httpx
from pydantic import ValidationError
from rich.console import Console

from reelstack.config.settings import Settings, get_settings
from reelstack.models.metadata import (
    NoembedResponse,
    Platform,
    UrlClassification,
    VideoMetadata,
    YouTubeOEmbedResponse,
)
from reelstack.utils.validation import classify_url

YOUTUBE_THUMBNAIL_TEMPLATE = "https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"
UNTITLED_TITLE = "Untitled Video"


class MetadataLookupError(RuntimeError):
    """Raised internally when a remote lookup yields no usable payload."""


class MetadataResolver:
    """Turn a bare URL into :class:`VideoMetadata`, degrading through the fallback chain.

    The chain is YouTube oEmbed (YouTube URLs only), then noembed, then a heuristic built
    purely from the URL. :meth:`resolve` never raises.
    """

    def __init__(
        self,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        client: Optional[httpx.AsyncClient] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._console = console or Console(stderr=True)
        self._client = client
        self._rng = rng or random.Random()

    async def resolve(self, url: str) -> VideoMetadata:
        """Resolve best-effort metadata for ``url``.

        Parameters
        ----------
        url:
            User-submitted link; not checked for reachability.

        Returns
        -------
        VideoMetadata
            Metadata from the first tier that produced a usable result.
        """

        classification = classify_url(url)

        if classification.platform is Platform.YOUTUBE:
            try:
                return await self.fetch_youtube_metadata(url, classification)
            except Exception as exc:
                self._console.log(f"[yellow]YouTube oEmbed lookup failed:[/yellow] {exc} (url={url})")

        try:
            return await self.fetch_noembed_metadata(url, classification)
        except Exception as exc:
            self._console.log(f"[yellow]noembed lookup failed; using URL heuristics:[/yellow] {exc} (url={url})")

        return self.heuristic_metadata(url, classification)

    async def fetch_youtube_metadata(self, url: str, classification: UrlClassification) -> VideoMetadata:
        """Query the YouTube oEmbed endpoint.

        Raises
        ------
        MetadataLookupError
            If the endpoint fails or its payload cannot be parsed.
        """

        payload = await self._get_json(self._settings.youtube_oembed_url, {"url": url, "format": "json"})
        try:
            data = YouTubeOEmbedResponse.model_validate(payload)
        except ValidationError as exc:
            raise MetadataLookupError(f"Malformed YouTube oEmbed payload: {exc.error_count()} error(s)") from exc

        title = _first_text(data.title) or self._heuristic_title(classification)
        if classification.video_id:
            thumbnail = YOUTUBE_THUMBNAIL_TEMPLATE.format(video_id=classification.video_id)
        else:
            thumbnail = data.thumbnail_ref or self._placeholder_thumbnail()

        return VideoMetadata(
            title=title,
            description=title,
            thumbnail=thumbnail,
            platform=Platform.YOUTUBE.value,
            author=_first_text(data.author_name),
        )

    async def fetch_noembed_metadata(self, url: str, classification: UrlClassification) -> VideoMetadata:
        """Query the generic noembed endpoint.

        Raises
        ------
        MetadataLookupError
            If the endpoint fails, reports an ``error``, or returns an unparsable payload.
        """

        payload = await self._get_json(self._settings.noembed_url, {"url": url})
        try:
            data = NoembedResponse.model_validate(payload)
        except ValidationError as exc:
            raise MetadataLookupError(f"Malformed noembed payload: {exc.error_count()} error(s)") from exc

        if data.error:
            raise MetadataLookupError(f"noembed reported an error: {data.error}")

        title = _first_text(data.title) or UNTITLED_TITLE
        return VideoMetadata(
            title=title,
            description=_first_text(data.description) or title,
            thumbnail=_first_text(data.thumbnail_url) or self._placeholder_thumbnail(),
            platform=_first_text(data.provider_name) or classification.platform.value,
            author=data.author,
        )

    def heuristic_metadata(self, url: str, classification: Optional[UrlClassification] = None) -> VideoMetadata:
        """Synthesize metadata from the URL alone."""

        classification = classification or classify_url(url)
        platform = classification.platform

        if platform is Platform.YOUTUBE and classification.video_id:
            thumbnail = YOUTUBE_THUMBNAIL_TEMPLATE.format(video_id=classification.video_id)
        else:
            thumbnail = self._placeholder_thumbnail()

        return VideoMetadata(
            title=self._heuristic_title(classification),
            description=f"A saved {platform.value} video.",
            thumbnail=thumbnail,
            platform=platform.value,
        )

    async def _get_json(self, endpoint: str, params: Mapping[str, str]) -> object:
        """GET ``endpoint`` and return the decoded JSON body."""

        try:
            if self._client is not None:
                response = await self._client.get(endpoint, params=params)
            else:
                async with httpx.AsyncClient(
                    timeout=self._settings.http_timeout_seconds,
                    follow_redirects=True,
                ) as client:
                    response = await client.get(endpoint, params=params)
            response.raise_for_status()
            return response.json()
        except httpx.HTTPError as exc:
            raise MetadataLookupError(f"{exc.__class__.__name__}: {exc}") from exc
        except ValueError as exc:
            raise MetadataLookupError(f"Response from {endpoint} is not JSON") from exc

    @staticmethod
    def _heuristic_title(classification: UrlClassification) -> str:
        if classification.platform is Platform.YOUTUBE:
            return "YouTube Short" if classification.is_short else "YouTube Video"
        if classification.platform is Platform.INSTAGRAM:
            return "Instagram Reel" if classification.is_short else "Instagram Video"
        if classification.platform is Platform.TIKTOK:
            return "TikTok Video"
        return UNTITLED_TITLE

    def _placeholder_thumbnail(self) -> str:
        seed = self._rng.randrange(1_000_000_000)
        return self._settings.placeholder_thumbnail.format(seed=seed)


def _first_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


__all__ = ["MetadataLookupError", "MetadataResolver", "YOUTUBE_THUMBNAIL_TEMPLATE"]
