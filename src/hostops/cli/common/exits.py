"""Exit handling utilities for the CLI."""

from contextlib import contextmanager
from typing import Iterator, NoReturn

import typer

from hostops.cli.common.output import out
from hostops.core.errors import HostopsError

EXIT_INTERRUPTED = 130


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: BaseException, *, message: str, code: int = 1) -> NoReturn:
    """Print an error message and exit, chaining the original exception."""
    out.error(message)
    raise typer.Exit(code) from exc


@contextmanager
def handle_errors() -> Iterator[None]:
    """
    Turn hostops errors and Ctrl-C into a message and an exit code.

    HostopsError exits with 1 and its message; KeyboardInterrupt exits with 130.
    """
    try:
        yield
    except HostopsError as exc:
        exit_from_exc(exc, message=str(exc))
    except KeyboardInterrupt as exc:
        exit_from_exc(exc, message="Cancelled", code=EXIT_INTERRUPTED)
