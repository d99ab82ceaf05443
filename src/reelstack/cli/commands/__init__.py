"""Command registration utilities for the ReelStack CLI."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from reelstack.cli.commands import library as library_commands
from reelstack.services.library import LibraryService


def register_commands(app: typer.Typer, console: Console, *, library: Optional[LibraryService] = None) -> None:
    """Attach command groups to the provided Typer application."""

    library_commands.register(app, console, library=library)

    @app.callback(invoke_without_command=True)
    def main_callback(ctx: typer.Context) -> None:
        """Save short-form video links and browse them from the terminal."""

        if ctx.invoked_subcommand is None:
            console.print("[bold green]ReelStack ready. Try `reelstack add <URL>`.[/bold green]")


__all__ = ["register_commands"]
