"""Add-flow orchestration: resolve metadata, generate tags, and store the entry."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Union

from rich.console import Console

from reelstack.config.settings import Settings, get_settings
from reelstack.db.store import get_store
from reelstack.db.video_repository import VideoRepository
from reelstack.models.video import Video
from reelstack.services.catalog import Catalog
from reelstack.services.metadata import MetadataResolver
from reelstack.services.query import SortKey, view
from reelstack.services.tagging import TagGenerator
from reelstack.utils.progress import ProcessingStage, ProgressUpdate
from reelstack.utils.validation import validate_video_url

ProgressHandler = Callable[[ProgressUpdate], None]


class SaveVideoError(RuntimeError):
    """Raised when the add-flow fails unexpectedly; the catalog is left unchanged."""


class LibraryService:
    """Coordinate the enrichment pipeline against a shared catalog.

    Saves are serialised with an :class:`asyncio.Lock`, so overlapping submissions run one
    after another and each sees the previous one's committed catalog.
    """

    def __init__(
        self,
        *,
        catalog: Catalog,
        resolver: MetadataResolver,
        tagger: TagGenerator,
        console: Optional[Console] = None,
    ) -> None:
        self._catalog = catalog
        self._resolver = resolver
        self._tagger = tagger
        self._console = console or Console(stderr=True)
        self._save_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, *, settings: Optional[Settings] = None, console: Optional[Console] = None) -> "LibraryService":
        """Wire the default file-backed catalog, resolver, and tagger."""

        settings = settings or get_settings()
        console = console or Console(stderr=True, quiet=settings.console_quiet)
        repository = VideoRepository(get_store(), settings.storage_key, console=console)
        return cls(
            catalog=Catalog(repository, settings=settings, console=console),
            resolver=MetadataResolver(settings=settings, console=console),
            tagger=TagGenerator(settings=settings, console=console),
            console=console,
        )

    @property
    def catalog(self) -> Catalog:
        return self._catalog

    async def save_video(
        self,
        url: str,
        notes: Optional[str] = None,
        *,
        on_progress: Optional[ProgressHandler] = None,
    ) -> Video:
        """Run the full add-flow for ``url``.

        Raises
        ------
        reelstack.utils.validation.InvalidVideoURLError
            If ``url`` is blank or not an http(s) link.
        SaveVideoError
            If any later step fails; nothing is stored in that case.
        """

        cleaned_url = validate_video_url(url)
        self._emit_progress(on_progress, ProcessingStage.VALIDATING, 100, 5, "Validated URL", cleaned_url)

        async with self._save_lock:
            try:
                self._emit_progress(on_progress, ProcessingStage.RESOLVING, 0, 10, "Resolving metadata", cleaned_url)
                metadata = await self._resolver.resolve(cleaned_url)

                self._emit_progress(on_progress, ProcessingStage.TAGGING, 0, 50, "Generating tags", cleaned_url)
                tags = await self._tagger.generate(
                    metadata.title,
                    metadata.description,
                    cleaned_url,
                    metadata.platform,
                )

                self._emit_progress(on_progress, ProcessingStage.STORING, 0, 90, "Saving to catalog", cleaned_url)
                video = self._catalog.add(cleaned_url, metadata, tags, notes)
            except Exception as exc:
                self._console.log(f"[red]Saving {cleaned_url} failed:[/red] {exc}")
                self._emit_progress(on_progress, ProcessingStage.FAILED, 0, 0, str(exc), cleaned_url)
                raise SaveVideoError(f"Could not save {cleaned_url}: {exc}") from exc

        self._emit_progress(on_progress, ProcessingStage.COMPLETE, 100, 100, "Saved", cleaned_url)
        return video

    def delete_video(self, video_id: int) -> bool:
        """Remove a saved video; callers are expected to have confirmed the deletion."""

        return self._catalog.remove(video_id)

    def get_video(self, video_id: int) -> Video:
        return self._catalog.get(video_id)

    def list_videos(self, search_text: str = "", sort_key: Union[SortKey, str, None] = SortKey.DATE_DESC) -> List[Video]:
        """Return the current view of the catalog."""

        return view(self._catalog.snapshot(), search_text, sort_key)

    @staticmethod
    def _emit_progress(
        callback: Optional[ProgressHandler],
        stage: ProcessingStage,
        stage_progress: int,
        overall_progress: int,
        message: str,
        video_url: str,
    ) -> None:
        if callback is None:
            return
        callback(
            ProgressUpdate(
                stage=stage,
                stage_progress=stage_progress,
                overall_progress=overall_progress,
                message=message,
                video_url=video_url,
            )
        )


__all__ = ["LibraryService", "ProgressHandler", "SaveVideoError"]
