"""Suggest command: AI name suggestions for a set of files."""

import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from namekit.cli.shared.context import TaskContext
from namekit.cli.shared.executor import display_entries, run_batch, summarize
from namekit.core.models import RenameMode

console = Console()


def suggest(
    paths: Annotated[
        list[Path],
        typer.Argument(
            help="Files to name.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    apply: Annotated[
        bool,
        typer.Option(
            "--apply",
            "-a",
            help="Apply the suggested names after generating them.",
        ),
    ] = False,
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
    """Suggest descriptive names for files using the configured AI model."""
    ctx = TaskContext.create(command_prefix="suggest", verbose=verbose, console=console)
    orchestrator = ctx.create_orchestrator()
    orchestrator.add_paths(paths)

    started = time.monotonic()
    run = run_batch(ctx, orchestrator, orchestrator.generate_names, "Suggesting names")
    display_entries(console, orchestrator.entries, title="Suggested names")

    if apply and orchestrator.has_applicable_entries:

        async def apply_run(token):
            return await orchestrator.apply_changes(mode, token)

        run = run_batch(ctx, orchestrator, apply_run, "Applying names")
        display_entries(console, orchestrator.entries, title="Applied")

    summarize(console, run, orchestrator.entries, time.monotonic() - started)
