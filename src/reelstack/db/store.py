"""File-backed keyed storage: each key maps to one JSON file under the data directory."""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

from reelstack.config.settings import get_settings

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class StoreError(RuntimeError):
    """Raised when the backing file cannot be read or written."""


class StoreDecodeError(StoreError):
    """Raised when the backing file exists but is not valid UTF-8 text."""


class JsonFileStore:
    """Store each key as ``<directory>/<key>.json``, replacing files atomically on write."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory).expanduser()

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Return the file backing ``key``."""

        if not _SAFE_KEY.fullmatch(key):
            raise StoreError(f"Unsupported storage key: {key!r}")
        return self._directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except UnicodeDecodeError as exc:
            raise StoreDecodeError(f"{path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise StoreError(f"Failed to read {path}: {exc}") from exc

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StoreError(f"Failed to write {path}: {exc}") from exc


_store: Optional[JsonFileStore] = None


def get_store() -> JsonFileStore:
    """Return the process-wide store rooted at the configured data directory."""

    global _store
    if _store is None:
        _store = JsonFileStore(get_settings().data_dir)
    return _store


__all__ = ["JsonFileStore", "StoreDecodeError", "StoreError", "get_store"]
