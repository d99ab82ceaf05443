"""Local persistence utilities for ReelStack."""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueStore(Protocol):
    """Keyed string storage: one entry per key, read and written in full."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored value for ``key`` or ``None`` when absent."""

    def set(self, key: str, value: str) -> None:
        """Replace the stored value for ``key``."""


__all__ = ["KeyValueStore"]
