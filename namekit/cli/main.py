"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from namekit import __version__
from namekit.cli.commands.apply import apply
from namekit.cli.commands.config import config_app
from namekit.cli.commands.convert import convert
from namekit.cli.commands.formats import formats
from namekit.cli.commands.names import suggest

# Load environment variables from .env file
load_dotenv()

# Create main Typer app
app = typer.Typer(
    name="namekit",
    help="Batch rename and convert files with AI name suggestions.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

# Console for output
console = Console()

# Register commands
app.command(name="suggest", help="Suggest names for files using an AI model.")(suggest)
app.command(name="apply", help="Rename and/or convert files.")(apply)
app.command(name="convert", help="Convert a single image to another format.")(convert)
app.command(name="formats", help="List file categories and conversions.")(formats)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]namekit[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """namekit - batch file renaming and conversion.

    Suggest descriptive file names with Gemini or GPT models, then rename
    or convert files in place.
    """
    pass


if __name__ == "__main__":
    app()
