"""Pure filtering and ordering of catalog snapshots for display."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, List, Tuple, Union

from reelstack.models.video import Video


class SortKey(str, Enum):
    """Supported orderings of the catalog view."""

    DATE_DESC = "date_desc"
    DATE_ASC = "date_asc"
    TITLE_ASC = "title_asc"
    TITLE_DESC = "title_desc"
    PLATFORM_ASC = "platform_asc"

    @classmethod
    def parse(cls, value: Union["SortKey", str, None]) -> "SortKey":
        """Return the matching key; unknown or empty values mean :attr:`DATE_DESC`."""

        if isinstance(value, SortKey):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return cls.DATE_DESC


@dataclass(frozen=True, slots=True)
class ViewQuery:
    """Search text and sort key held by the presentation layer."""

    search_text: str = ""
    sort_key: SortKey = SortKey.DATE_DESC


CollationKey = Tuple[Tuple[Tuple[int, str], ...], str, Tuple[int, ...]]


def collation_key(text: str) -> CollationKey:
    """Locale-style sort key: base letters first, then accents, then case (lowercase first).

    Punctuation, whitespace, and symbols weigh less than letters and digits, so
    ``"~intro"`` sorts before ``"apple"`` as it would under an ICU collator.
    """

    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(char for char in decomposed if not unicodedata.combining(char)).casefold()
    primary = tuple((1 if char.isalnum() else 0, char) for char in base)
    accents = decomposed.casefold()
    case = tuple(1 if char.isupper() else 0 for char in text)
    return primary, accents, case


def matches(video: Video, needle: str) -> bool:
    """Case-insensitive substring match on title, description, platform, or any tag."""

    lowered = needle.lower()
    haystacks = (video.title, video.description, video.platform, *video.tags)
    return any(lowered in haystack.lower() for haystack in haystacks)


def filter_videos(videos: Iterable[Video], search_text: str) -> List[Video]:
    """Keep entries matching ``search_text``; blank text keeps everything."""

    needle = (search_text or "").strip()
    if not needle:
        return list(videos)
    return [video for video in videos if matches(video, needle)]


def sort_videos(videos: Iterable[Video], sort_key: Union[SortKey, str, None]) -> List[Video]:
    """Order entries by ``sort_key``; ties fall back to id so each key is a total order."""

    key = SortKey.parse(sort_key)
    items = list(videos)

    if key is SortKey.DATE_ASC:
        return sorted(items, key=lambda video: video.id)
    if key is SortKey.TITLE_ASC:
        return sorted(items, key=_text_then_id(lambda video: video.title))
    if key is SortKey.TITLE_DESC:
        return sorted(items, key=_text_then_id(lambda video: video.title), reverse=True)
    if key is SortKey.PLATFORM_ASC:
        return sorted(items, key=_text_then_id(lambda video: video.platform))
    return sorted(items, key=lambda video: video.id, reverse=True)


def view(
    videos: Iterable[Video],
    search_text: str = "",
    sort_key: Union[SortKey, str, None] = SortKey.DATE_DESC,
) -> List[Video]:
    """Return the visible, ordered subset of ``videos``. Inputs are never mutated."""

    return sort_videos(filter_videos(videos, search_text), sort_key)


def run_query(videos: Iterable[Video], query: ViewQuery) -> List[Video]:
    return view(videos, query.search_text, query.sort_key)


def _text_then_id(field: Callable[[Video], str]) -> Callable[[Video], Tuple[CollationKey, int]]:
    def key(video: Video) -> Tuple[CollationKey, int]:
        return collation_key(field(video)), video.id

    return key


__all__ = [
    "SortKey",
    "ViewQuery",
    "collation_key",
    "filter_videos",
    "matches",
    "run_query",
    "sort_videos",
    "view",
]
