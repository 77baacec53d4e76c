"""File system utilities for namekit."""

import os
import shutil
from pathlib import Path

from namekit.config.constants import ILLEGAL_FILENAME_CHARS
from namekit.utils.logging import get_logger

log = get_logger(__name__)

_ILLEGAL_TABLE = str.maketrans("", "", ILLEGAL_FILENAME_CHARS)


def clean_filename(name: str) -> str:
    """Remove characters that are illegal in file names and trim whitespace.

    Args:
        name: Raw name, typically a model suggestion

    Returns:
        Cleaned name (may be empty)
    """
    return name.strip().translate(_ILLEGAL_TABLE).strip()


def get_unique_path(path: Path) -> Path:
    """Get a path that does not exist yet by appending ``_N`` to the stem.

    Args:
        path: Preferred path

    Returns:
        ``path`` itself when free, else the first free ``<stem>_<N><suffix>``
    """
    if not path.exists():
        return path

    stem = path.stem
    suffix = path.suffix
    parent = path.parent

    counter = 1
    while True:
        new_path = parent / f"{stem}_{counter}{suffix}"
        if not new_path.exists():
            return new_path
        counter += 1


def is_writable_dir(path: Path) -> bool:
    """Check whether files can be created in a directory."""
    return path.is_dir() and os.access(path, os.W_OK | os.X_OK)


def free_space(path: Path) -> int:
    """Free bytes on the filesystem holding ``path``."""
    return shutil.disk_usage(path).free


def with_extension(directory: Path, stem: str, extension: str) -> Path:
    """Build ``<directory>/<stem>.<extension>``; an empty extension keeps just the stem."""
    ext = extension.lstrip(".")
    return directory / (f"{stem}.{ext}" if ext else stem)


def move_file(source: Path, destination: Path) -> Path:
    """Move a file, refusing to overwrite an existing destination.

    Raises:
        FileExistsError: If destination exists
    """
    if destination.exists():
        raise FileExistsError(str(destination))
    shutil.move(str(source), str(destination))
    log.debug("File moved", source=str(source), destination=str(destination))
    return destination


def copy_file(source: Path, destination: Path) -> Path:
    """Copy a file with metadata, refusing to overwrite an existing destination.

    Raises:
        FileExistsError: If destination exists
    """
    if destination.exists():
        raise FileExistsError(str(destination))
    shutil.copy2(source, destination)
    log.debug("File copied", source=str(source), destination=str(destination))
    return destination


def format_size(size_bytes: float) -> str:
    """Format bytes as a human-readable size."""
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if abs(size_bytes) < 1024:
            return f"{size_bytes:.1f} {unit}" if unit != "B" else f"{int(size_bytes)} B"
        size_bytes /= 1024
    return f"{size_bytes:.1f} PB"


def format_duration(seconds: float) -> str:
    """Format seconds as ``1m 5s`` / ``42s``."""
    minutes, secs = divmod(int(seconds), 60)
    if minutes > 0:
        return f"{minutes}m {secs}s"
    return f"{secs}s"
