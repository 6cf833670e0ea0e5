"""Leveled output sink passed explicitly through the call chain."""

import typer


class Logger:
    """Writes progress and diagnostics for one run.

    ``out`` is the result channel (stdout). Everything else goes to stderr,
    and ``verbose`` is silent unless verbose output was requested.
    """

    def __init__(self, verbose: bool = False):
        self.verbose_enabled = verbose

    def out(self, message: str) -> None:
        typer.echo(message)

    def info(self, message: str) -> None:
        typer.echo(message, err=True)

    def err(self, message: str) -> None:
        typer.echo(message, err=True)

    def verbose(self, message: str) -> None:
        if self.verbose_enabled:
            typer.echo(message, err=True)


class NullLogger(Logger):
    """Logger that discards everything."""

    def out(self, message: str) -> None:
        pass

    def info(self, message: str) -> None:
        pass

    def err(self, message: str) -> None:
        pass

    def verbose(self, message: str) -> None:
        pass
