"""Console logging context for an analysis run.

A single ``AnalysisLogger`` is built per run and handed to each component,
instead of a module-level logger. Output goes to stderr so that ``--json``
output on stdout stays machine-readable.
"""

from contextlib import nullcontext
from typing import ContextManager

from rich.console import Console
from rich.markup import escape


class AnalysisLogger:
    """Leveled console output with an optional spinner."""

    def __init__(
        self,
        verbose: bool = False,
        silent: bool = False,
        console: Console | None = None,
    ):
        self.verbose = verbose
        self.silent = silent
        self.console = console or Console(stderr=True)

    def debug(self, message: str) -> None:
        if self.verbose and not self.silent:
            self.console.print(f"[dim][DEBUG] {escape(message)}[/dim]")

    def info(self, message: str) -> None:
        if not self.silent:
            self.console.print(escape(message))

    def success(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[green]✓ {escape(message)}[/green]")

    def warn(self, message: str) -> None:
        if not self.silent:
            self.console.print(f"[yellow]⚠ {escape(message)}[/yellow]")

    def error(self, message: str) -> None:
        # Errors are shown even in silent mode
        self.console.print(f"[red]✗ {escape(message)}[/red]")

    def newline(self) -> None:
        if not self.silent:
            self.console.print()

    def status(self, message: str) -> ContextManager:
        """Return a spinner context; a no-op when silent."""
        if self.silent:
            return nullcontext()
        return self.console.status(escape(message))


def silent_logger() -> AnalysisLogger:
    """Logger used by components when the caller passes none."""
    return AnalysisLogger(silent=True)
