"""Service layer for the ReelStack application."""

from reelstack.services.catalog import Catalog, VideoNotFoundError
from reelstack.services.library import LibraryService, SaveVideoError
from reelstack.services.metadata import MetadataResolver
from reelstack.services.query import SortKey, ViewQuery, view
from reelstack.services.tagging import TagGenerator

__all__ = [
    "Catalog",
    "LibraryService",
    "MetadataResolver",
    "SaveVideoError",
    "SortKey",
    "TagGenerator",
    "VideoNotFoundError",
    "ViewQuery",
    "view",
]
