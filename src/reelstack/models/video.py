"""Pydantic model describing a saved catalog entry."""

from __future__ import annotations

from typing import List, Optional

from pydantic import ConfigDict, Field, field_validator

from reelstack.models.base import ReelStackBaseModel

MAX_TAGS = 7
MAX_TAG_LENGTH = 30


class Video(ReelStackBaseModel):
    """Domain model representing one entry of the persisted catalog.

    Instances are created by :meth:`reelstack.services.catalog.Catalog.add` and persisted as a
    JSON array via :class:`reelstack.db.video_repository.VideoRepository`. ``saved_at`` is
    serialised as ``savedAt`` to keep the stored shape stable.
    """

    id: int = Field(ge=0)
    url: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str
    thumbnail: str = Field(min_length=1)
    platform: str = Field(min_length=1)
    tags: List[str] = Field(min_length=1, max_length=MAX_TAGS)
    author: Optional[str] = None
    saved_at: str = Field(alias="savedAt")
    notes: Optional[str] = None

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    @field_validator("tags")
    @classmethod
    def _validate_tags(cls, value: List[str]) -> List[str]:
        for tag in value:
            if not tag or len(tag) >= MAX_TAG_LENGTH or tag != tag.lower():
                raise ValueError(f"Invalid tag {tag!r}: tags must be non-empty, lowercase, under {MAX_TAG_LENGTH} chars")
        return value

    @field_validator("notes")
    @classmethod
    def _normalise_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    def to_record(self) -> dict[str, object]:
        """Return the JSON-ready persisted representation (``None`` fields omitted)."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["MAX_TAGS", "MAX_TAG_LENGTH", "Video"]
