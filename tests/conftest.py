from __future__ import annotations

import io
import random
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace
from typing import Callable, Dict, Iterator, List, Optional, Union

import httpx
import pytest
from rich.console import Console

from reelstack.config.settings import Settings
from reelstack.db.video_repository import VideoRepository
from reelstack.services.catalog import Catalog
from reelstack.services.library import LibraryService
from reelstack.services.metadata import MetadataResolver
from reelstack.services.tagging import TagGenerator

Handler = Callable[[httpx.Request], httpx.Response]


class InMemoryStore:
    """Dict-backed implementation of :class:`reelstack.db.KeyValueStore`."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self.entries: Dict[str, str] = dict(initial or {})
        self.writes = 0

    def get(self, key: str) -> Optional[str]:
        return self.entries.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes += 1
        self.entries[key] = value


class StubAgent:
    """Stands in for a Pydantic AI agent; replays outputs or raises queued exceptions."""

    def __init__(self, *outputs: Union[str, BaseException]) -> None:
        self._outputs: List[Union[str, BaseException]] = list(outputs)
        self.prompts: List[str] = []

    async def run(self, user_prompt: str) -> SimpleNamespace:
        self.prompts.append(user_prompt)
        item = self._outputs.pop(0) if len(self._outputs) > 1 else self._outputs[0]
        if isinstance(item, BaseException):
            raise item
        return SimpleNamespace(output=item)


class SteppingClock:
    """Returns the same instant on every call unless advanced."""

    def __init__(self, start: datetime, step: timedelta = timedelta(0)) -> None:
        self._now = start
        self._step = step

    def __call__(self) -> datetime:
        current = self._now
        self._now = self._now + self._step
        return current


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=200)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key=None,
        anthropic_api_key=None,
        data_dir=tmp_path,
        saved_at_format="%Y-%m-%d",
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> SteppingClock:
    return SteppingClock(datetime(2026, 10, 19, 12, 0, 0), step=timedelta(seconds=1))


@pytest.fixture
def catalog(store: InMemoryStore, settings: Settings, console: Console, clock: SteppingClock) -> Catalog:
    return Catalog(VideoRepository(store, settings.storage_key, console=console), settings=settings, console=console, clock=clock)


def offline_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("network unreachable", request=request)


def make_client(handler: Handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def make_resolver(settings: Settings, console: Console) -> Iterator[Callable[[Handler], MetadataResolver]]:
    def factory(handler: Handler) -> MetadataResolver:
        return MetadataResolver(settings=settings, console=console, client=make_client(handler), rng=random.Random(7))

    yield factory


@pytest.fixture
def offline_library(
    catalog: Catalog,
    settings: Settings,
    console: Console,
    make_resolver: Callable[[Handler], MetadataResolver],
) -> LibraryService:
    return LibraryService(
        catalog=catalog,
        resolver=make_resolver(offline_handler),
        tagger=TagGenerator(settings=settings, console=console),
        console=console,
    )
