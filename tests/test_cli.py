from __future__ import annotations

import io
import json
from typing import Callable

import httpx
import pytest
from rich.console import Console
from typer.testing import CliRunner

from reelstack.cli.commands.library import LibraryExitCode
from reelstack.cli.main import create_app
from reelstack.config.settings import Settings
from reelstack.db.store import StoreError
from reelstack.services.catalog import Catalog
from reelstack.services.library import LibraryService
from reelstack.services.metadata import MetadataResolver
from reelstack.services.tagging import TagGenerator

from conftest import Handler, InMemoryStore

runner = CliRunner()


@pytest.fixture
def output() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def app(offline_library: LibraryService, output: io.StringIO):
    return create_app(console=Console(file=output, width=200), library=offline_library)


def test_add_quiet_prints_stored_entry(app, offline_library: LibraryService) -> None:
    result = runner.invoke(app, ["add", "https://www.tiktok.com/@u/video/1", "--notes", " fun ", "--quiet"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["platform"] == "TikTok"
    assert payload["notes"] == "fun"
    assert payload["tags"] == ["tiktok", "short-form", "viral"]
    assert len(offline_library.catalog) == 1


def test_add_rejects_invalid_url(app, output: io.StringIO) -> None:
    result = runner.invoke(app, ["add", "not-a-url", "--quiet"])

    assert result.exit_code == LibraryExitCode.INVALID_INPUT
    assert "Not an http(s) URL" in output.getvalue()


def test_list_json_filters_and_sorts(app) -> None:
    runner.invoke(app, ["add", "https://www.tiktok.com/@u/video/1", "--quiet"])
    runner.invoke(app, ["add", "https://youtube.com/shorts/abcd1234567", "--quiet"])

    result = runner.invoke(app, ["list", "--search", "TikTok", "--json"])

    assert result.exit_code == 0, result.output
    assert [entry["platform"] for entry in json.loads(result.output)] == ["TikTok"]

    result = runner.invoke(app, ["list", "--sort", "title_asc", "--json"])
    assert [entry["title"] for entry in json.loads(result.output)] == ["TikTok Video", "YouTube Short"]


def test_list_empty_catalog_shows_hint(app, output: io.StringIO) -> None:
    result = runner.invoke(app, ["list"])

    assert result.exit_code == 0
    assert "reelstack add" in output.getvalue()


def test_remove_requires_confirmation(app, offline_library: LibraryService) -> None:
    runner.invoke(app, ["add", "https://vimeo.com/1", "--quiet"])
    video_id = offline_library.catalog.snapshot()[0].id

    declined = runner.invoke(app, ["remove", str(video_id)], input="n\n")
    assert declined.exit_code == 0
    assert len(offline_library.catalog) == 1

    confirmed = runner.invoke(app, ["remove", str(video_id)], input="y\n")
    assert confirmed.exit_code == 0
    assert len(offline_library.catalog) == 0


def test_remove_and_show_unknown_id(app) -> None:
    assert runner.invoke(app, ["remove", "123", "--yes"]).exit_code == LibraryExitCode.NOT_FOUND
    assert runner.invoke(app, ["show", "123"]).exit_code == LibraryExitCode.NOT_FOUND


def test_show_json(app, offline_library: LibraryService) -> None:
    runner.invoke(app, ["add", "https://youtube.com/shorts/abcd1234567", "--quiet"])
    video = offline_library.catalog.snapshot()[0]

    result = runner.invoke(app, ["show", str(video.id), "--json"])

    assert result.exit_code == 0
    assert json.loads(result.output)["savedAt"] == video.saved_at


@pytest.fixture
def bracketed_app(
    catalog: Catalog,
    settings: Settings,
    console: Console,
    make_resolver: Callable[[Handler], MetadataResolver],
    output: io.StringIO,
):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"title": "[live] Concert", "author_name": "[b]Band"})

    library = LibraryService(
        catalog=catalog,
        resolver=make_resolver(handler),
        tagger=TagGenerator(settings=settings, console=console),
        console=console,
    )
    return create_app(console=Console(file=output, width=200), library=library)


def test_bracketed_titles_render_literally(bracketed_app, catalog: Catalog, output: io.StringIO) -> None:
    assert runner.invoke(bracketed_app, ["add", "https://vimeo.com/1", "--quiet"]).exit_code == 0
    video_id = catalog.snapshot()[0].id

    listed = runner.invoke(bracketed_app, ["list"])
    shown = runner.invoke(bracketed_app, ["show", str(video_id)])

    assert listed.exit_code == 0
    assert shown.exit_code == 0
    rendered = output.getvalue()
    assert rendered.count("[live] Concert") == 2
    assert "[b]Band" in rendered


def test_search_text_with_markup_is_echoed_verbatim(bracketed_app, output: io.StringIO) -> None:
    runner.invoke(bracketed_app, ["add", "https://vimeo.com/1", "--quiet"])

    result = runner.invoke(bracketed_app, ["list", "--search", "[/x]"])

    assert result.exit_code == 0, result.output
    assert "No saved videos match [/x]." in output.getvalue()


def test_remove_reports_storage_failure(
    app, offline_library: LibraryService, store: InMemoryStore, monkeypatch: pytest.MonkeyPatch, output: io.StringIO
) -> None:
    runner.invoke(app, ["add", "https://vimeo.com/1", "--quiet"])
    video_id = offline_library.catalog.snapshot()[0].id

    def read_only(key: str, value: str) -> None:
        raise StoreError("disk is read-only")

    monkeypatch.setattr(store, "set", read_only)

    result = runner.invoke(app, ["remove", str(video_id), "--yes"])

    assert result.exit_code == LibraryExitCode.PROCESSING_ERROR
    assert "disk is read-only" in output.getvalue()
    assert len(offline_library.catalog) == 1
