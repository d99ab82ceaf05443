"""The persisted catalog of saved videos."""

from __future__ import annotations

from datetime import datetime
from typing import Callable, List, Optional, Sequence, Tuple

from rich.console import Console

from reelstack.config.settings import Settings, get_settings
from reelstack.db.repositories import RecordNotFoundError
from reelstack.db.video_repository import VideoRepository
from reelstack.models.metadata import VideoMetadata
from reelstack.models.video import Video

Clock = Callable[[], datetime]


class VideoNotFoundError(RecordNotFoundError):
    """Raised when no catalog entry has the requested id."""


class Catalog:
    """Own entity creation and mutation; every mutation rewrites the full stored collection."""

    def __init__(
        self,
        repository: VideoRepository,
        *,
        settings: Optional[Settings] = None,
        console: Optional[Console] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._repository = repository
        self._settings = settings or get_settings()
        self._console = console or Console(stderr=True)
        self._clock = clock or datetime.now
        self._videos: List[Video] = repository.load_all()

    # ------------------------------------------------------------------ #
    # Public API                                                         #
    # ------------------------------------------------------------------ #
    def add(
        self,
        url: str,
        metadata: VideoMetadata,
        tags: Sequence[str],
        notes: Optional[str] = None,
    ) -> Video:
        """Create a video entry, append it, and persist the catalog.

        Parameters
        ----------
        url:
            Link the user submitted.
        metadata:
            Output of :class:`reelstack.services.metadata.MetadataResolver`.
        tags:
            Output of :class:`reelstack.services.tagging.TagGenerator`.
        notes:
            Optional free text; blank notes are stored as absent.

        Returns
        -------
        Video
            The newly stored entry.
        """

        now = self._clock()
        video = Video(
            id=self._next_id(now),
            url=url,
            title=metadata.title,
            description=metadata.description,
            thumbnail=metadata.thumbnail,
            platform=metadata.platform,
            tags=list(tags),
            author=metadata.author,
            saved_at=now.strftime(self._settings.saved_at_format),
            notes=notes,
        )

        updated = [*self._videos, video]
        self._repository.save_all(updated)
        self._videos = updated
        self._console.log(f"[green]Catalog:[/green] saved video {video.id} ({video.platform}: {video.title})")
        return video

    def remove(self, video_id: int) -> bool:
        """Remove the entry with ``video_id`` and persist; return whether anything was removed."""

        remaining = [video for video in self._videos if video.id != video_id]
        if len(remaining) == len(self._videos):
            return False

        self._repository.save_all(remaining)
        self._videos = remaining
        self._console.log(f"[green]Catalog:[/green] removed video {video_id}")
        return True

    def get(self, video_id: int) -> Video:
        """Return the entry with ``video_id``."""

        for video in self._videos:
            if video.id == video_id:
                return video
        raise VideoNotFoundError(f"No saved video with id {video_id}.")

    def snapshot(self) -> Tuple[Video, ...]:
        """Return the current collection in storage order."""

        return tuple(self._videos)

    def reload(self) -> None:
        """Re-read the collection from the store."""

        self._videos = self._repository.load_all()

    def __len__(self) -> int:
        return len(self._videos)

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #
    def _next_id(self, now: datetime) -> int:
        """Epoch milliseconds of ``now``, bumped past the newest id so ids stay unique and increasing."""

        candidate = int(now.timestamp() * 1000)
        newest = max((video.id for video in self._videos), default=-1)
        return max(candidate, newest + 1)


__all__ = ["Catalog", "Clock", "VideoNotFoundError"]
