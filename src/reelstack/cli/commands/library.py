"""CLI commands for saving, browsing, and deleting catalog entries."""

from __future__ import annotations

import asyncio
import json
import unicodedata
from functools import lru_cache
from typing import Callable, Optional, Sequence

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import BarColumn, Progress, TaskID, TextColumn
from rich.table import Table

from reelstack.db.repositories import RepositoryError
from reelstack.models.video import Video
from reelstack.services.catalog import VideoNotFoundError
from reelstack.services.library import LibraryService, SaveVideoError
from reelstack.services.query import SortKey, ViewQuery, run_query
from reelstack.utils.progress import ProgressUpdate
from reelstack.utils.validation import InvalidVideoURLError


class LibraryExitCode:
    """Mapping of meaningful CLI exit codes."""

    SUCCESS = 0
    INVALID_INPUT = 1
    NOT_FOUND = 2
    PROCESSING_ERROR = 4


_WINDOWS_CHAR_REPLACEMENTS = {
    ord("\u00a0"): " ",
    ord("\u2010"): "-",
    ord("\u2011"): "-",
    ord("\u2013"): "-",
    ord("\u2014"): "-",
    ord("\u2018"): "'",
    ord("\u2019"): "'",
    ord("\u201c"): '"',
    ord("\u201d"): '"',
    ord("\u2026"): "...",
}

_SORT_HELP = ", ".join(key.value for key in SortKey)


def register(app: typer.Typer, console: Console, *, library: Optional[LibraryService] = None) -> None:
    """Register CLI commands operating on the saved-video catalog."""

    @lru_cache(maxsize=1)
    def get_library() -> LibraryService:
        if library is not None:
            return library
        return LibraryService.from_settings()

    @app.command("add")
    def add(
        url: str = typer.Argument(..., help="Link to the video to save"),
        notes: Optional[str] = typer.Option(None, "--notes", "-n", help="Optional personal notes"),
        quiet: bool = typer.Option(False, "--quiet", "-q", help="Print the stored entry as JSON only"),
    ) -> None:
        service = get_library()
        try:
            if quiet:
                video = asyncio.run(service.save_video(url, notes))
            else:
                progress = Progress(
                    TextColumn("{task.description}"),
                    BarColumn(),
                    TextColumn("{task.percentage:>3.0f}%"),
                    console=console,
                    transient=True,
                )
                with progress as running_progress:
                    task_id = running_progress.add_task("Saving...", total=100)
                    video = asyncio.run(
                        service.save_video(
                            url,
                            notes,
                            on_progress=_progress_handler_factory(running_progress, task_id),
                        )
                    )
        except InvalidVideoURLError as exc:
            console.print(f"[red]Error:[/red] {escape(str(exc))}")
            raise typer.Exit(code=LibraryExitCode.INVALID_INPUT) from exc
        except SaveVideoError as exc:
            console.print(f"[red]Could not save video:[/red] {escape(str(exc.__cause__ or exc))}")
            raise typer.Exit(code=LibraryExitCode.PROCESSING_ERROR) from exc

        if quiet:
            typer.echo(json.dumps(video.to_record(), ensure_ascii=False, indent=2))
            return

        console.print(_build_video_panel(video, console=console, title="Saved"))

    @app.command("list")
    def list_videos(
        search: str = typer.Option("", "--search", "-s", help="Case-insensitive text to match"),
        sort: str = typer.Option(SortKey.DATE_DESC.value, "--sort", help=f"One of: {_SORT_HELP}"),
        json_output: bool = typer.Option(False, "--json", help="Output the view as JSON"),
    ) -> None:
        query = ViewQuery(search_text=search, sort_key=SortKey.parse(sort))
        videos = run_query(get_library().catalog.snapshot(), query)

        if json_output:
            typer.echo(json.dumps([video.to_record() for video in videos], ensure_ascii=False, indent=2))
            return

        _render_video_table(console, videos, query)

    @app.command("show")
    def show(
        video_id: int = typer.Argument(..., help="Id of the saved video"),
        json_output: bool = typer.Option(False, "--json", help="Output the entry as JSON"),
    ) -> None:
        try:
            video = get_library().get_video(video_id)
        except VideoNotFoundError as exc:
            console.print(f"[red]Not found:[/red] {exc}")
            raise typer.Exit(code=LibraryExitCode.NOT_FOUND) from None

        if json_output:
            typer.echo(json.dumps(video.to_record(), ensure_ascii=False, indent=2))
            return

        console.print(_build_video_panel(video, console=console))

    @app.command("remove")
    def remove(
        video_id: int = typer.Argument(..., help="Id of the saved video"),
        yes: bool = typer.Option(False, "--yes", "-y", help="Delete without asking for confirmation"),
    ) -> None:
        service = get_library()
        try:
            video = service.get_video(video_id)
        except VideoNotFoundError as exc:
            console.print(f"[red]Not found:[/red] {exc}")
            raise typer.Exit(code=LibraryExitCode.NOT_FOUND) from None

        if not yes and not typer.confirm(f"Delete '{video.title}' ({video.id})?", default=False):
            console.print("Kept.")
            return

        try:
            service.delete_video(video_id)
        except RepositoryError as exc:
            console.print(f"[red]Could not delete video:[/red] {escape(str(exc))}")
            raise typer.Exit(code=LibraryExitCode.PROCESSING_ERROR) from exc
        console.print(f"[green]Deleted[/green] {video.id}")


def _progress_handler_factory(progress: Progress, task_id: TaskID) -> Callable[[ProgressUpdate], None]:
    def handler(update: ProgressUpdate) -> None:
        progress.update(
            task_id,
            completed=update.overall_progress,
            description=f"{update.stage.value.title()}...",
        )

    return handler


def _build_video_panel(video: Video, *, console: Optional[Console] = None, title: str = "Video") -> Panel:
    grid = Table.grid(padding=(0, 1))
    grid.add_column()

    encoding = getattr(console, "encoding", None) if console else None

    grid.add_row(f"[bold]{_markup_safe(video.title, encoding)}[/bold]")
    if video.description and video.description != video.title:
        grid.add_row(_markup_safe(video.description, encoding))
    grid.add_row(f"[bold]Platform:[/bold] {_markup_safe(video.platform, encoding)}")
    if video.author:
        grid.add_row(f"[bold]Author:[/bold] {_markup_safe(video.author, encoding)}")
    grid.add_row(f"[bold]Tags:[/bold] {_markup_safe(', '.join(video.tags), encoding)}")
    grid.add_row(f"[bold]URL:[/bold] {escape(video.url)}")
    grid.add_row(f"[bold]Thumbnail:[/bold] {escape(video.thumbnail)}")
    grid.add_row(f"[bold]Saved:[/bold] {escape(video.saved_at)}")
    if video.notes:
        grid.add_row(f"[bold]Notes:[/bold] {_markup_safe(video.notes, encoding)}")

    return Panel.fit(grid, title=f"{title} #{video.id}", border_style="magenta")


def _render_video_table(console: Console, videos: Sequence[Video], query: ViewQuery) -> None:
    if not videos:
        if query.search_text.strip():
            console.print(f"No saved videos match [bold]{escape(query.search_text)}[/bold].")
        else:
            console.print("Your saved videos will appear here. Run `reelstack add <URL>` to get started!")
        return

    encoding = getattr(console, "encoding", None)
    table = Table(title=f"Saved Videos ({query.sort_key.value})")
    table.add_column("ID", no_wrap=True)
    table.add_column("Title", overflow="fold")
    table.add_column("Platform")
    table.add_column("Tags", overflow="fold")
    table.add_column("Saved")
    table.add_column("URL", overflow="fold")

    for video in videos:
        table.add_row(
            str(video.id),
            _markup_safe(video.title, encoding),
            _markup_safe(video.platform, encoding),
            _markup_safe(", ".join(video.tags), encoding),
            escape(video.saved_at),
            escape(video.url),
        )

    console.print(table)


def _markup_safe(text: str, encoding: Optional[str]) -> str:
    """Printable text with rich markup escaped, so brackets in titles render literally."""

    return escape(_ensure_printable(text, encoding))


def _ensure_printable(text: str, encoding: Optional[str]) -> str:
    if not text:
        return text

    normalized = unicodedata.normalize("NFKC", text).translate(_WINDOWS_CHAR_REPLACEMENTS)
    if not encoding:
        return normalized

    try:
        normalized.encode(encoding)
        return normalized
    except (UnicodeEncodeError, LookupError):
        return normalized.encode("ascii", errors="replace").decode("ascii", errors="replace")
