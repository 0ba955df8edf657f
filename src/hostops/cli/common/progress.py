"""Progress display for long-running operations."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable, Iterator

from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from hostops.cli.common.output import console
from hostops.core.backends import OperationStatus

_MAX_LABEL_WIDTH = 56


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _poll_label(attempt: int, status: OperationStatus) -> str:
    """Render the status column for one poll: DONE, FAILED or RUNNING."""
    if not status.done:
        return f"[yellow]RUNNING[/] (poll {attempt})"
    if status.error:
        return "[red]FAILED[/]"
    return "[green]DONE[/]"


@contextmanager
def operation_progress(
    label: str,
) -> Iterator[Callable[[int, OperationStatus], None]]:
    """
    Show a spinner row with elapsed time while an operation is polled.

    Yields an on_poll callback suitable for hostops.core.poller.poll_operation.
    The live display only starts on the first poll, so prompts shown before
    the operation begins are not drawn over.
    """
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.fields[label]}[/]"),
        TextColumn("status={task.fields[status]}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    )
    task_id = progress.add_task(
        "",
        total=1,
        label=_truncate(label, _MAX_LABEL_WIDTH),
        status="[yellow]PENDING[/]",
    )

    started = False

    def on_poll(attempt: int, status: OperationStatus) -> None:
        nonlocal started
        if not started:
            progress.start()
            started = True
        progress.update(
            task_id,
            status=_poll_label(attempt, status),
            completed=1 if status.done else 0,
        )

    try:
        yield on_poll
    finally:
        if started:
            progress.stop()
