"""Repository for the persisted video catalog."""

from __future__ import annotations

from typing import Optional

from rich.console import Console

from reelstack.db import KeyValueStore
from reelstack.db.repositories import BaseRepository
from reelstack.models.video import Video

DEFAULT_STORAGE_KEY = "reelstack_videos"


class VideoRepository(BaseRepository[Video]):
    """Data access object encapsulating catalog persistence."""

    model_type = Video

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        *,
        console: Optional[Console] = None,
    ) -> None:
        super().__init__(store, key, console=console)

    def _serialize(self, record: Video) -> object:
        return record.to_record()


__all__ = ["DEFAULT_STORAGE_KEY", "VideoRepository"]
