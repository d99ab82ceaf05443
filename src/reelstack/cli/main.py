"""Typer application for the ``reelstack`` command."""

from __future__ import annotations

from typing import Optional, Sequence

import typer
from rich.console import Console

from reelstack.cli.commands import register_commands
from reelstack.services.library import LibraryService

PROG_NAME = "reelstack"


class CLIApplication:
    """Bind the catalog commands to one console and, optionally, a prebuilt library.

    When ``library`` is omitted the commands build a file-backed
    :class:`~reelstack.services.library.LibraryService` from settings on first use, so
    ``reelstack --help`` never touches the data directory.
    """

    def __init__(self, console: Optional[Console] = None, library: Optional[LibraryService] = None) -> None:
        self.console = console or Console()
        self._app = typer.Typer(
            name=PROG_NAME,
            help="Save video links and browse your catalog.",
            add_completion=False,
            rich_markup_mode="rich",
        )
        register_commands(self._app, self.console, library=library)

    @property
    def app(self) -> typer.Typer:
        return self._app

    def run(self, args: Optional[Sequence[str]] = None) -> None:
        """Dispatch ``args`` (``sys.argv[1:]`` when omitted) to the add/list/show/remove commands."""

        self._app(prog_name=PROG_NAME, args=list(args) if args is not None else None)


def create_app(console: Optional[Console] = None, library: Optional[LibraryService] = None) -> typer.Typer:
    """Return the Typer app, wired to ``library`` when one is supplied."""

    return CLIApplication(console=console, library=library).app


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Entry point for the ``reelstack`` script and ``python -m reelstack``."""

    CLIApplication().run(argv)


__all__ = ["CLIApplication", "PROG_NAME", "create_app", "main"]
