"""CLI callback functions."""

from pathlib import Path

import typer

from namekit.core.formats import all_extensions, is_implemented_pair, normalize_extension
from namekit.naming.base import AIModel


def validate_input_file(value: Path) -> Path:
    """Validate input file exists and is a regular file."""
    if not value.exists():
        raise typer.BadParameter(f"File not found: {value}")

    if not value.is_file():
        raise typer.BadParameter(f"Path is not a file: {value}")

    return value


def validate_extension(value: str | None) -> str | None:
    """Normalise an extension option (``.PNG`` -> ``png``)."""
    if value is None:
        return None

    ext = normalize_extension(value)
    if not ext:
        raise typer.BadParameter("Extension must not be empty")

    known = set(all_extensions()) | {"jpeg", "tif", "tiff"}
    if ext not in known:
        raise typer.BadParameter(f"Unknown extension '{ext}'. Run `namekit formats` for options.")

    return ext


def validate_convertible_extension(value: str) -> str:
    """Validate a target extension the local converter can write."""
    ext = validate_extension(value)
    if ext is None or not is_implemented_pair(ext, ext):
        raise typer.BadParameter(f"Cannot convert to '{value}'. Run `namekit formats` for options.")
    return ext


def parse_model(value: str) -> AIModel:
    """Parse a model by display name ("GPT-4") or enum name ("GPT4"), case-insensitive."""
    wanted = value.strip().lower()
    for model in AIModel:
        if wanted in (model.value.lower(), model.name.lower(), model.full_name):
            return model

    options = ", ".join(model.value for model in AIModel)
    raise typer.BadParameter(f"Unknown model '{value}'. Options: {options}")
