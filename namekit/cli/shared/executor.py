"""Shared execution logic for batch commands."""

import asyncio
import signal
import sys
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime as dt

import typer
from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from namekit.cli.shared.context import TaskContext
from namekit.core.cancellation import CancellationToken
from namekit.core.models import BatchEvent, BatchEventKind, BatchRun, FileEntry, FileStatus
from namekit.core.orchestrator import BatchOrchestrator
from namekit.utils.fs import format_duration
from namekit.utils.logging import get_logger

log = get_logger(__name__)

RunFunction = Callable[[CancellationToken], Awaitable[BatchRun]]

_STATUS_STYLES = {
    FileStatus.PENDING: "dim",
    FileStatus.PROCESSING: "cyan",
    FileStatus.COMPLETED: "green",
    FileStatus.ERROR: "red",
}


class SignalHandler:
    """Context manager mapping interrupt signals to cooperative cancellation.

    The first signal cancels the token so the run stops after the current
    file. A second signal exits immediately with code 130.
    """

    def __init__(
        self,
        console: Console,
        token: CancellationToken,
        context_info: dict | None = None,
    ):
        self.console = console
        self.token = token
        self.context_info = context_info or {}
        self.interrupted = False
        self._original_sigint = None
        self._original_sigterm = None

    def __enter__(self) -> "SignalHandler":
        """Install signal handlers."""
        self._original_sigint = signal.signal(signal.SIGINT, self._handler)
        if hasattr(signal, "SIGTERM"):
            self._original_sigterm = signal.signal(signal.SIGTERM, self._handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        """Restore original signal handlers."""
        signal.signal(signal.SIGINT, self._original_sigint)
        if self._original_sigterm is not None:
            signal.signal(signal.SIGTERM, self._original_sigterm)
        return False

    def _handler(self, signum: int, frame) -> None:  # noqa: ARG002
        """Handle interrupt signals."""
        if self.interrupted:
            sys.exit(130)

        self.interrupted = True
        sig_name = signal.Signals(signum).name

        log.warning(
            "Task Interrupted",
            signal=sig_name,
            interrupted_at=dt.now().isoformat(),
            **self.context_info,
        )

        self.console.print(
            f"\n[yellow]Interrupted by {sig_name}. Stopping after the current file "
            "(press again to exit now)...[/yellow]"
        )
        self.token.cancel()


def run_batch(
    ctx: TaskContext,
    orchestrator: BatchOrchestrator,
    run: RunFunction,
    description: str,
) -> BatchRun:
    """Run one orchestrator pass with a progress bar and Ctrl-C handling.

    Args:
        ctx: Task context
        orchestrator: Orchestrator holding the entries
        run: Coroutine function starting the run with a cancellation token
        description: Progress bar label

    Returns:
        The finished run

    Raises:
        typer.Exit: With code 130 when the run was cancelled
    """
    token = CancellationToken()

    with SignalHandler(ctx.console, token, {"task_id": ctx.task_id}):
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=ctx.console,
            transient=True,
        ) as progress:
            task_id = progress.add_task(description, total=None)

            def on_event(event: BatchEvent) -> None:
                if event.kind == BatchEventKind.RUN_STARTED:
                    progress.update(task_id, total=event.run.total_count, completed=0)
                elif event.kind == BatchEventKind.ENTRY_UPDATED and event.entry is not None:
                    progress.update(
                        task_id,
                        completed=event.run.completed_count,
                        description=f"{description} [dim]{event.entry.original_name}[/dim]",
                    )

            unsubscribe = orchestrator.subscribe(on_event)
            try:
                finished = asyncio.run(_run_and_close(orchestrator, run, token))
            finally:
                unsubscribe()

    log.info(
        "Task finished",
        task_id=ctx.task_id,
        completed=finished.completed_count,
        total=finished.total_count,
        cancelled=token.cancelled,
    )

    if token.cancelled:
        display_entries(ctx.console, orchestrator.entries, title="Cancelled")
        raise typer.Exit(130)

    return finished


async def _run_and_close(
    orchestrator: BatchOrchestrator,
    run: RunFunction,
    token: CancellationToken,
) -> BatchRun:
    try:
        return await run(token)
    finally:
        await orchestrator.suggester.aclose()


def display_entries(console: Console, entries: Iterable[FileEntry], title: str = "Results") -> None:
    """Print entries as a table of name, proposal, status and error."""
    table = Table(title=title, show_header=True, header_style="bold")
    table.add_column("File", style="cyan")
    table.add_column("Proposed")
    table.add_column("Status")
    table.add_column("Error", style="red")

    for entry in entries:
        proposed = entry.proposed_name or ""
        if entry.target_extension:
            proposed = f"{entry.final_stem}.{entry.target_extension}"
        style = _STATUS_STYLES[entry.status]
        table.add_row(
            entry.original_name,
            proposed,
            f"[{style}]{entry.status.value}[/{style}]",
            entry.last_error or "",
        )

    console.print(table)


def summarize(console: Console, run: BatchRun, entries: list[FileEntry], elapsed: float) -> None:
    """Print a one-line summary and exit with code 1 when any entry failed."""
    failed = sum(1 for entry in entries if entry.status == FileStatus.ERROR)
    console.print(
        f"[bold]{run.completed_count}/{run.total_count}[/bold] processed in "
        f"{format_duration(elapsed)}"
        + (f", [red]{failed} failed[/red]" if failed else "")
    )
    if failed:
        raise typer.Exit(1)
