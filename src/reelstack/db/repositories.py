"""Generic repository abstractions for collections stored as JSON arrays under one key."""

from __future__ import annotations

import json
from typing import ClassVar, Generic, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ValidationError
from rich.console import Console

from reelstack.db import KeyValueStore
from reelstack.db.store import StoreDecodeError, StoreError

ModelT = TypeVar("ModelT", bound=BaseModel)


class RepositoryError(RuntimeError):
    """Base exception raised for repository layer failures."""


class RecordNotFoundError(RepositoryError):
    """Raised when a requested record cannot be located."""


class BaseRepository(Generic[ModelT]):
    """Reusable building block for key-scoped collection repositories.

    The whole collection is read and written in one go; there is no incremental update.
    Unreadable payloads load as an empty collection and invalid entries are skipped, each
    with a console warning. The stored payload is left untouched until the next save.
    """

    model_type: ClassVar[Type[BaseModel]]

    def __init__(self, store: KeyValueStore, key: str, *, console: Optional[Console] = None) -> None:
        self._store = store
        self._key = key
        self._console = console or Console(stderr=True)

    @property
    def key(self) -> str:
        return self._key

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def load_all(self) -> List[ModelT]:
        """Return every valid record in stored order."""

        try:
            raw = self._store.get(self._key)
        except StoreDecodeError as exc:
            self._console.log(f"[yellow]Stored '{self._key}' cannot be decoded; starting empty:[/yellow] {exc}")
            return []
        except StoreError as exc:
            raise RepositoryError(str(exc)) from exc

        if raw is None or not raw.strip():
            return []

        try:
            payload = json.loads(raw)
        except json.JSONDecodeError as exc:
            self._console.log(f"[yellow]Stored '{self._key}' is not valid JSON; starting empty:[/yellow] {exc}")
            return []

        if not isinstance(payload, list):
            self._console.log(
                f"[yellow]Stored '{self._key}' is a {type(payload).__name__}, expected a list; starting empty.[/yellow]"
            )
            return []

        records: List[ModelT] = []
        for index, item in enumerate(payload):
            try:
                records.append(self.model_type.model_validate(item))  # type: ignore[arg-type]
            except ValidationError as exc:
                self._console.log(
                    f"[yellow]Skipping invalid entry {index} in '{self._key}':[/yellow] "
                    f"{exc.error_count()} validation error(s)"
                )
        return records

    def save_all(self, records: Sequence[ModelT]) -> None:
        """Replace the stored collection with ``records``."""

        payload = json.dumps([self._serialize(record) for record in records], ensure_ascii=False)
        try:
            self._store.set(self._key, payload)
        except StoreError as exc:
            raise RepositoryError(str(exc)) from exc

    def _serialize(self, record: ModelT) -> object:
        return record.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["BaseRepository", "RecordNotFoundError", "RepositoryError"]
