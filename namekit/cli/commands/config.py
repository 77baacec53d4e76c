"""Config command for configuration management."""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from namekit.cli.callbacks import parse_model
from namekit.cli.shared.context import mask_key, mask_settings
from namekit.config import get_settings
from namekit.config.constants import DEFAULT_CONFIG_FILE
from namekit.config.preferences import SettingsStore
from namekit.exceptions import ConfigurationError

# Create config sub-app
config_app = typer.Typer(help="Configuration management.")
console = Console()


@config_app.command("show")
def show(
    as_json: Annotated[
        bool,
        typer.Option(
            "--json",
            help="Print the preferences blob as JSON (keys masked).",
        ),
    ] = False,
) -> None:
    """Show current configuration."""
    settings = get_settings()
    store = SettingsStore.open(settings.preferences_path)
    prefs = store.settings

    if as_json:
        console.print_json(json.dumps(mask_settings(prefs)))
        return

    console.print("\n[bold blue]Current Configuration[/bold blue]\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    # Runtime settings
    table.add_row("Log Level", settings.log_level)
    table.add_row("Log Directory", settings.log_dir)
    table.add_row("Preferences File", str(settings.preferences_path))
    table.add_row("Request Timeout", f"{settings.naming.timeout}s")
    table.add_row("Max Image Payload", str(settings.naming.max_image_bytes))
    table.add_row("Text Excerpt", f"{settings.naming.text_excerpt_chars} chars")
    table.add_row("JPEG Quality", str(settings.conversion.jpeg_quality))

    # Preferences
    table.add_row("AI Model", prefs.ai_model.value)
    table.add_row("Temperature", str(prefs.temperature))
    if prefs.api_keys:
        keys = ", ".join(f"{model.value} ({mask_key(key)})" for model, key in prefs.api_keys.items())
        table.add_row("API Keys", keys)
    else:
        table.add_row("API Keys", "None configured")

    for category, model in prefs.conversion_models.items():
        table.add_row(f"Model for {category.value}", model.value)
    for model, endpoint in prefs.custom_endpoints.items():
        table.add_row(f"Endpoint for {model.value}", endpoint)

    table.add_row("Prompt Templates", ", ".join(c.value for c in prefs.prompt_templates))
    table.add_row("Conversion Rules", str(len(prefs.format_conversions)))

    console.print(table)
    console.print()


# Default configuration template
DEFAULT_CONFIG_TEMPLATE = """# namekit Configuration
# API keys and prompts live in the preferences file, see `namekit config path`.

log_level: "INFO"  # Task log file level: DEBUG, INFO, WARNING, ERROR, CRITICAL
log_dir: ".logs"
# preferences_file: "~/.config/namekit/preferences.json"

naming:
  timeout: 60  # Seconds per request
  max_image_bytes: 4194304  # Inline image cap
  initial_jpeg_quality: 80
  min_jpeg_quality: 10
  jpeg_quality_step: 10
  text_excerpt_chars: 2000  # 0 sends only the file name for text files

conversion:
  jpeg_quality: 90  # 1-100
  free_space_factor: 2  # Required free space as multiple of file size
"""


@config_app.command("init")
def init(
    path: Annotated[
        Path | None,
        typer.Option(
            "--path",
            "-p",
            help="Path to create config file.",
        ),
    ] = None,
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            "-f",
            help="Overwrite existing config file.",
        ),
    ] = False,
) -> None:
    """Initialize a configuration file."""
    config_path = path or Path.cwd() / DEFAULT_CONFIG_FILE

    if config_path.exists() and not force:
        console.print(f"[red]Error:[/red] Config file already exists at {config_path}")
        console.print("Use --force to overwrite.")
        raise typer.Exit(1)

    config_path.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Created config file at:[/green] {config_path}")


@config_app.command("set-key")
def set_key(
    model: Annotated[str, typer.Argument(help='Model, e.g. "Gemini Pro" or GPT4.')],
    api_key: Annotated[str, typer.Argument(help="API key for the model.")],
) -> None:
    """Store the API key for a model in the preferences file."""
    ai_model = parse_model(model)
    settings = get_settings()
    store = SettingsStore.open(settings.preferences_path)

    try:
        store.set_api_key(ai_model, api_key.strip())
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]Saved API key for[/green] {ai_model.value} ({mask_key(api_key.strip())})")


@config_app.command("path")
def path() -> None:
    """Show configuration and preference file locations."""
    settings = get_settings()
    config_file = Path.cwd() / DEFAULT_CONFIG_FILE
    prefs_file = settings.preferences_path

    def status(p: Path) -> str:
        return "[green]exists[/green]" if p.exists() else "[dim]not found[/dim]"

    console.print(f"Config file:      {config_file} ({status(config_file)})")
    console.print(f"Preferences file: {prefs_file} ({status(prefs_file)})")
    console.print("[dim]Environment variables with NAMEKIT_ prefix are also supported.[/dim]")
