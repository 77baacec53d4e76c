"""Core batch processing: format registry, entries and runs."""

from namekit.core.cancellation import CancellationToken
from namekit.core.formats import FileCategory, ImplementationMethod, category_of
from namekit.core.models import (
    BatchEvent,
    BatchEventKind,
    BatchRun,
    FileEntry,
    FileStatus,
    RenameMode,
)

__all__ = [
    "BatchEvent",
    "BatchEventKind",
    "BatchRun",
    "CancellationToken",
    "FileCategory",
    "FileEntry",
    "FileStatus",
    "ImplementationMethod",
    "RenameMode",
    "category_of",
]
