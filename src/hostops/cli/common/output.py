"""Output formatting utilities for the CLI."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.theme import Theme

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


def setup_logging(verbose: bool = False) -> None:
    """Route core logging through Rich; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=verbose, markup=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages and tables."""

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    def bullet(self, msg: str) -> None:
        """Print an indented bullet line."""
        console.print(f"  [title]•[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a section header."""
        console.print(f"\n[title]===[/] [bold]{title}[/]")

    def kv(self, items: Mapping[str, Any]) -> None:
        """Print key-value pairs, skipping empty values."""
        for k, v in items.items():
            if v in (None, "", {}):
                continue
            console.print(f"[meta]{k}[/]: {v}")

    def backend_table(self, backend: Any, title: str = "Backend") -> None:
        """
        Expects an object shaped like hostops.core.backends.Backend.
        """
        t = Table(title=title, show_header=False, show_lines=False)
        t.add_column("Field", style="meta", no_wrap=True)
        t.add_column("Value")

        codebase = getattr(backend, "codebase", None)
        labels = getattr(backend, "labels", None) or {}
        rows = [
            ("Name", getattr(backend, "name", None)),
            ("URI", getattr(backend, "uri", None)),
            ("State", getattr(backend, "state", None)),
            ("Repository", getattr(codebase, "repository", None)),
            ("Root directory", getattr(codebase, "root_directory", None)),
            ("Labels", ", ".join(f"{k}={v}" for k, v in labels.items())),
            ("Created", getattr(backend, "create_time", None)),
            ("Updated", getattr(backend, "update_time", None)),
        ]
        for field, value in rows:
            if value:
                t.add_row(field, str(value))

        console.print(t)

    def frameworks_table(
        self, frameworks: Iterable[Any], title: str = "Detected frameworks"
    ) -> None:
        """
        Expects objects with .id and .runtime
        (e.g. hostops.core.frameworks.FrameworkMatch)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Framework", style="ok", no_wrap=True)
        t.add_column("Runtime", style="meta")

        for f in frameworks:
            t.add_row(str(f.id), str(f.runtime))

        console.print(t)


out = Out()
