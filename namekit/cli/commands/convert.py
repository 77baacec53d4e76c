"""Convert command: run the local converter on one file."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from namekit.cli.callbacks import validate_convertible_extension, validate_input_file
from namekit.cli.shared.context import TaskContext
from namekit.converters.image import ImageConverter
from namekit.converters.service import ConversionService
from namekit.exceptions import NamekitError
from namekit.utils.fs import format_size
from namekit.utils.logging import get_logger

console = Console()
log = get_logger(__name__)


def convert(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Image file to convert.",
            callback=validate_input_file,
            resolve_path=True,
        ),
    ],
    to: Annotated[
        str,
        typer.Option(
            "--to",
            "-t",
            help="Target extension, e.g. png.",
            callback=validate_convertible_extension,
        ),
    ],
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging.",
        ),
    ] = False,
) -> None:
    """Convert an image next to the original as <name>_converted.<ext>."""
    ctx = TaskContext.create(command_prefix="convert", verbose=verbose, console=console)
    service = ConversionService([ImageConverter(jpeg_quality=ctx.settings.conversion.jpeg_quality)])

    try:
        output = service.convert(input_file, to)
    except NamekitError as e:
        log.error("Conversion failed", input_file=str(input_file), error=str(e))
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(
        f"[green]Created:[/green] {output} ({format_size(output.stat().st_size)})"
    )
