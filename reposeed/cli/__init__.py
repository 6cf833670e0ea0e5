"""CLI entry point for reposeed."""

import typer

from reposeed.cli.main import main_command

app = typer.Typer(
    name="reposeed",
    help="reposeed: seed a new git repository from a filtered source export",
    add_completion=False,
)

app.command()(main_command)


__all__ = [
    "app",
    "main_command",
]
