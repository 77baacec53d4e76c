"""Apply command: rename and/or convert files."""

import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from namekit.cli.callbacks import validate_extension
from namekit.cli.shared.context import TaskContext
from namekit.cli.shared.executor import display_entries, run_batch, summarize
from namekit.core.models import RenameMode

console = Console()


def apply(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="Files to rename or convert.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    name: Annotated[
        str | None,
        typer.Option(
            "--name",
            "-n",
            help="New base name (single file only).",
        ),
    ] = None,
    ext: Annotated[
        str | None,
        typer.Option(
            "--ext",
            "-e",
            help="Target extension, e.g. png.",
            callback=validate_extension,
        ),
    ] = None,
    mode: Annotated[
        RenameMode,
        typer.Option(
            "--mode",
            "-m",
            help="Keep the original (create-new) or replace it.",
            case_sensitive=False,
        ),
    ] = RenameMode.CREATE_NEW,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Rename and/or convert files."""
    if name is not None and len(paths) != 1:
        console.print("[red]Error:[/red] --name can only be used with a single file.")
        raise typer.Exit(1)

    if name is None and ext is None:
        console.print("[red]Error:[/red] Nothing to apply. Use --name and/or --ext.")
        raise typer.Exit(1)

    ctx = TaskContext.create(command_prefix="apply", verbose=verbose, console=console)
    orchestrator = ctx.create_orchestrator()

    for entry in orchestrator.add_paths(paths):
        if name is not None:
            orchestrator.update_proposed_name(entry.id, name)
        if ext is not None:
            orchestrator.update_target_extension(entry.id, ext)

    if not orchestrator.has_applicable_entries:
        console.print("[yellow]No changes to apply.[/yellow]")
        return

    async def apply_run(token):
        return await orchestrator.apply_changes(mode, token)

    started = time.monotonic()
    run = run_batch(ctx, orchestrator, apply_run, "Applying changes")
    display_entries(console, orchestrator.entries, title="Applied")
    summarize(console, run, orchestrator.entries, time.monotonic() - started)
