"""Formats command: list categories and conversion rules."""

from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from namekit.core.formats import (
    CATEGORY_EXTENSIONS,
    available_methods,
    declared_pairs,
    is_implemented_pair,
)

console = Console()


def formats(
    show_all: Annotated[
        bool,
        typer.Option(
            "--all",
            help="Also list declared pairs that have no local implementation.",
        ),
    ] = False,
) -> None:
    """Show known file categories and supported conversions."""
    categories = Table(title="File categories", show_header=True, header_style="bold")
    categories.add_column("Category", style="cyan")
    categories.add_column("Extensions")

    for category, entries in CATEGORY_EXTENSIONS.items():
        extensions = ", ".join(ext for _, ext in entries if ext) or "(keep extension)"
        categories.add_row(category.value, extensions)

    console.print(categories)

    pairs = Table(title="Conversions", show_header=True, header_style="bold")
    pairs.add_column("From", style="cyan")
    pairs.add_column("To", style="cyan")
    pairs.add_column("Methods")
    pairs.add_column("Local")

    for source, target in declared_pairs(implemented_only=not show_all):
        methods = ", ".join(method.value for method in available_methods(source, target))
        local = "[green]yes[/green]" if is_implemented_pair(source, target) else "[dim]no[/dim]"
        pairs.add_row(source or "-", target or "-", methods, local)

    console.print(pairs)
