"""Data models for batch entries and runs."""

import copy
import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from uuid import uuid4

from namekit.core.formats import FileCategory, category_of, normalize_extension
from namekit.exceptions import StateError


class FileStatus(str, Enum):
    """Processing status of a single entry."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    ERROR = "error"


class RenameMode(str, Enum):
    """What happens to the original file when changes are applied."""

    CREATE_NEW = "create-new"
    REPLACE = "replace"


@dataclass
class FileEntry:
    """One file taking part in batch operations."""

    source: Path
    original_name: str = ""
    proposed_name: str | None = None
    target_extension: str = ""
    status: FileStatus = FileStatus.PENDING
    last_error: str | None = None
    selected: bool = True
    id: str = field(default_factory=lambda: uuid4().hex)

    def __post_init__(self) -> None:
        self.source = Path(self.source)
        if not self.original_name:
            self.original_name = self.source.name
        self.target_extension = normalize_extension(self.target_extension)

    @classmethod
    def from_path(cls, path: Path | str) -> "FileEntry":
        """Create a pending entry for an absolute file path."""
        return cls(source=Path(path).resolve())

    @property
    def category(self) -> FileCategory:
        return category_of(self.source.suffix)

    @property
    def source_extension(self) -> str:
        return normalize_extension(self.source.suffix)

    @property
    def final_stem(self) -> str:
        """Proposed name, or the current stem when none is set."""
        return self.proposed_name or self.source.stem

    @property
    def changes_extension(self) -> bool:
        return bool(self.target_extension) and self.target_extension != self.source_extension

    @property
    def has_changes(self) -> bool:
        """Whether applying this entry would rename or convert the file."""
        return self.final_stem != self.source.stem or self.changes_extension

    # -------------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------------

    def _require(self, *allowed: FileStatus) -> None:
        if self.status not in allowed:
            raise StateError(
                f"Entry {self.original_name} cannot leave status {self.status.value} this way"
            )

    def start(self) -> None:
        """Pending -> Processing."""
        self._require(FileStatus.PENDING)
        self.status = FileStatus.PROCESSING

    def complete(self) -> None:
        """Processing -> Completed, clearing any previous error."""
        self._require(FileStatus.PROCESSING)
        self.status = FileStatus.COMPLETED
        self.last_error = None

    def fail(self, message: str) -> None:
        """Processing -> Error."""
        self._require(FileStatus.PROCESSING)
        self.status = FileStatus.ERROR
        self.last_error = message

    def revert(self, message: str) -> None:
        """Processing -> Pending, used when a run is cancelled."""
        self._require(FileStatus.PROCESSING)
        self.status = FileStatus.PENDING
        self.last_error = message

    def reset(self) -> None:
        """Completed or Error -> Pending. Pending entries are left as they are."""
        if self.status == FileStatus.PENDING:
            return
        self._require(FileStatus.COMPLETED, FileStatus.ERROR)
        self.status = FileStatus.PENDING
        self.last_error = None

    def snapshot(self) -> "FileEntry":
        return copy.copy(self)


@dataclass
class BatchRun:
    """Progress of one batch run."""

    total_count: int = 0
    completed_count: int = 0
    started_at: float | None = None
    running: bool = False
    estimated_time_remaining: float | None = None

    @property
    def progress(self) -> float:
        """Completed fraction, 0.0 when the run is empty."""
        if self.total_count <= 0:
            return 0.0
        return self.completed_count / self.total_count

    @property
    def remaining_count(self) -> int:
        return self.total_count - self.completed_count

    @property
    def elapsed(self) -> float | None:
        if self.started_at is None:
            return None
        return time.monotonic() - self.started_at

    def start(self, total: int, now: float | None = None) -> None:
        if self.running:
            raise StateError("A batch run is already in progress")
        self.total_count = total
        self.completed_count = 0
        self.started_at = time.monotonic() if now is None else now
        self.running = True
        self.estimated_time_remaining = None

    def record_completion(self, now: float | None = None) -> None:
        """Advance the completed count and recompute the ETA."""
        if self.completed_count >= self.total_count:
            raise StateError("Run already accounted for every entry")
        self.completed_count += 1

        if self.started_at is not None:
            elapsed = (time.monotonic() if now is None else now) - self.started_at
            self.estimated_time_remaining = (
                elapsed / self.completed_count * self.remaining_count
            )

    def stop(self) -> None:
        self.running = False
        self.started_at = None
        self.estimated_time_remaining = None

    def snapshot(self) -> "BatchRun":
        return copy.copy(self)


class BatchEventKind(str, Enum):
    """Kinds of events pushed to orchestrator subscribers."""

    RUN_STARTED = "run_started"
    ENTRY_UPDATED = "entry_updated"
    RUN_FINISHED = "run_finished"


@dataclass(frozen=True)
class BatchEvent:
    """Notification of a run or entry change; entry and run are copies."""

    kind: BatchEventKind
    run: BatchRun
    entry: FileEntry | None = None
