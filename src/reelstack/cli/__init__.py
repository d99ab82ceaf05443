"""Command-line interface package for ReelStack."""

from reelstack.cli.main import CLIApplication, create_app

__all__ = ["CLIApplication", "create_app"]
