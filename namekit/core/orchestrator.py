"""Batch orchestrator: sequential naming and apply runs over a list of entries."""

from collections.abc import Awaitable, Callable, Iterable
from pathlib import Path
from typing import Any

import anyio

from namekit.config.constants import CANCELLED_MESSAGE
from namekit.config.preferences import SettingsStore
from namekit.config.settings import ConversionConfig
from namekit.converters.service import ConversionService
from namekit.core.cancellation import CancellationToken
from namekit.core.formats import FileCategory, normalize_extension
from namekit.core.models import (
    BatchEvent,
    BatchEventKind,
    BatchRun,
    FileEntry,
    FileStatus,
    RenameMode,
)
from namekit.exceptions import (
    FileOperationError,
    InsufficientSpaceError,
    NamekitError,
    NoPermissionError,
    SourceMissingError,
    StateError,
    TargetExistsError,
    TargetFolderNotWritableError,
)
from namekit.naming.suggester import NamingSuggester
from namekit.utils.fs import (
    clean_filename,
    copy_file,
    free_space,
    is_writable_dir,
    move_file,
    with_extension,
)
from namekit.utils.logging import get_logger, request_context

log = get_logger(__name__)

BatchListener = Callable[[BatchEvent], None]

# Work done for one entry, and how its result is written back to the entry
EntryWork = Callable[[FileEntry], Awaitable[Any]]
EntryCommit = Callable[[FileEntry, Any], None]


class BatchOrchestrator:
    """Owns the entry list and runs naming or apply passes over it.

    Only one run is active at a time. Entries are processed strictly in list
    order, one at a time; blocking file work runs on a worker thread. Every
    status change is pushed to subscribers as a ``BatchEvent``.

    Cancellation is cooperative: the token is checked before each entry and
    again after the entry's awaited work returns.
    """

    def __init__(
        self,
        store: SettingsStore,
        suggester: NamingSuggester | None = None,
        conversion_service: ConversionService | None = None,
        conversion_config: ConversionConfig | None = None,
    ) -> None:
        self.store = store
        self.suggester = suggester or NamingSuggester()
        self.conversion_service = conversion_service or ConversionService()
        self.conversion_config = conversion_config or ConversionConfig()

        self.entries: list[FileEntry] = []
        self.run = BatchRun()
        self._token: CancellationToken | None = None
        self._listeners: list[BatchListener] = []

    # =========================================================================
    # Events
    # =========================================================================

    def subscribe(self, listener: BatchListener) -> Callable[[], None]:
        """Register an event listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, kind: BatchEventKind, entry: FileEntry | None = None) -> None:
        event = BatchEvent(
            kind=kind,
            run=self.run.snapshot(),
            entry=entry.snapshot() if entry is not None else None,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                log.exception("Batch listener failed", event=kind.value)

    # =========================================================================
    # Entry list
    # =========================================================================

    def get(self, entry_id: str) -> FileEntry:
        """Return the entry with the given id.

        Raises:
            KeyError: If no such entry exists
        """
        for entry in self.entries:
            if entry.id == entry_id:
                return entry
        raise KeyError(entry_id)

    def add_paths(self, paths: Iterable[Path | str]) -> list[FileEntry]:
        """Add regular files as pending entries, skipping duplicates.

        Returns:
            The entries that were added
        """
        known = {entry.source for entry in self.entries}
        added: list[FileEntry] = []

        for raw in paths:
            path = Path(raw).expanduser().resolve()
            if not path.is_file():
                log.warning("Skipping non-file path", path=str(path))
                continue
            if path in known:
                log.debug("Skipping duplicate path", path=str(path))
                continue

            entry = FileEntry.from_path(path)
            self.entries.append(entry)
            known.add(path)
            added.append(entry)
            self._emit(BatchEventKind.ENTRY_UPDATED, entry)

        return added

    def remove_selected(self) -> int:
        """Remove all selected entries; returns how many were removed."""
        self._require_idle()
        before = len(self.entries)
        self.entries = [entry for entry in self.entries if not entry.selected]
        return before - len(self.entries)

    def toggle_selection(self, entry_id: str) -> bool:
        """Flip the selection of one entry; returns the new value."""
        entry = self.get(entry_id)
        entry.selected = not entry.selected
        self._emit(BatchEventKind.ENTRY_UPDATED, entry)
        return entry.selected

    def toggle_select_all(self) -> bool:
        """Select every entry, or deselect all when all are already selected."""
        select = not (self.entries and all(entry.selected for entry in self.entries))
        for entry in self.entries:
            entry.selected = select
        return select

    @property
    def selected_count(self) -> int:
        return sum(1 for entry in self.entries if entry.selected)

    def filtered(self, category: FileCategory | None = None) -> list[FileEntry]:
        """Entries of one category, or all entries when ``category`` is None."""
        if category is None:
            return list(self.entries)
        return [entry for entry in self.entries if entry.category == category]

    def category_counts(self) -> dict[FileCategory, int]:
        """Number of entries per category, for categories that occur."""
        counts: dict[FileCategory, int] = {}
        for entry in self.entries:
            counts[entry.category] = counts.get(entry.category, 0) + 1
        return counts

    @property
    def has_applicable_entries(self) -> bool:
        """Whether an apply run would have anything to do."""
        return any(
            entry.selected
            and entry.status in (FileStatus.PENDING, FileStatus.COMPLETED)
            and entry.has_changes
            for entry in self.entries
        )

    def update_proposed_name(self, entry_id: str, name: str | None) -> FileEntry:
        """Set the proposed base name; an edited finished entry goes back to Pending."""
        entry = self.get(entry_id)
        cleaned = clean_filename(name or "") or None
        self._edit(entry, proposed_name=cleaned)
        return entry

    def update_target_extension(self, entry_id: str, extension: str | None) -> FileEntry:
        """Set the target extension; an empty value keeps the current one."""
        entry = self.get(entry_id)
        self._edit(entry, target_extension=normalize_extension(extension or ""))
        return entry

    def reset(self, entry_id: str) -> FileEntry:
        """Put a Completed or Error entry back to Pending so it can be re-run."""
        entry = self.get(entry_id)
        entry.reset()
        self._emit(BatchEventKind.ENTRY_UPDATED, entry)
        return entry

    def _edit(self, entry: FileEntry, **changes: Any) -> None:
        if entry.status == FileStatus.PROCESSING:
            raise StateError(f"Entry {entry.original_name} is being processed")

        changed = False
        for attr, value in changes.items():
            if getattr(entry, attr) != value:
                setattr(entry, attr, value)
                changed = True

        if changed:
            entry.reset()
            self._emit(BatchEventKind.ENTRY_UPDATED, entry)

    def _require_idle(self) -> None:
        if self.run.running:
            raise StateError("A batch run is already in progress")

    # =========================================================================
    # Runs
    # =========================================================================

    async def generate_names(self, token: CancellationToken | None = None) -> BatchRun:
        """Suggest a name for every selected pending entry.

        Returns:
            Snapshot of the run as it finished
        """
        snapshot = [
            entry
            for entry in self.entries
            if entry.selected and entry.status == FileStatus.PENDING
        ]
        return await self._execute(snapshot, token, self._suggest_one, self._commit_name)

    async def apply_changes(
        self,
        mode: RenameMode = RenameMode.CREATE_NEW,
        token: CancellationToken | None = None,
    ) -> BatchRun:
        """Rename and/or convert every selected entry that has pending changes.

        Entries completed by a naming run still carry their proposed name and
        are re-armed first.

        Returns:
            Snapshot of the run as it finished
        """
        self._require_idle()

        for entry in self.entries:
            if entry.selected and entry.status == FileStatus.COMPLETED and entry.has_changes:
                entry.reset()
                self._emit(BatchEventKind.ENTRY_UPDATED, entry)

        snapshot = [
            entry
            for entry in self.entries
            if entry.selected and entry.status == FileStatus.PENDING and entry.has_changes
        ]

        async def work(entry: FileEntry) -> Path:
            return await self._apply_one(entry, mode)

        return await self._execute(
            snapshot, token, work, self._commit_location, keep_on_cancel=True
        )

    def cancel(self) -> None:
        """Cancel the active run and put in-flight entries back to Pending."""
        if self._token is not None:
            self._token.cancel()
        self._revert_processing()

    def _revert_processing(self) -> None:
        for entry in self.entries:
            if entry.status == FileStatus.PROCESSING:
                entry.revert(CANCELLED_MESSAGE)
                self._emit(BatchEventKind.ENTRY_UPDATED, entry)

    async def _execute(
        self,
        snapshot: list[FileEntry],
        token: CancellationToken | None,
        work: EntryWork,
        commit: EntryCommit,
        keep_on_cancel: bool = False,
    ) -> BatchRun:
        """Run ``work`` over ``snapshot`` sequentially.

        ``commit`` writes a successful result back to the entry. With
        ``keep_on_cancel`` the result is also committed when the run was
        cancelled while the entry was in flight, because the work has
        already taken effect on disk.
        """
        self._require_idle()
        token = token or CancellationToken()

        self._token = token
        self.run.start(len(snapshot))
        self._emit(BatchEventKind.RUN_STARTED)
        log.info("Batch run started", total=len(snapshot))

        try:
            for entry in snapshot:
                if token.cancelled:
                    break
                if entry.status != FileStatus.PENDING or entry not in self.entries:
                    log.debug("Entry changed before processing, skipping", entry=entry.original_name)
                    continue

                entry.start()
                self._emit(BatchEventKind.ENTRY_UPDATED, entry)

                with request_context(file_path=str(entry.source)):
                    result, error = await self._run_entry(entry, work)

                if token.cancelled:
                    if keep_on_cancel and error is None:
                        commit(entry, result)
                    if entry.status == FileStatus.PROCESSING:
                        entry.revert(CANCELLED_MESSAGE)
                    self._emit(BatchEventKind.ENTRY_UPDATED, entry)
                    break

                if error is None:
                    commit(entry, result)
                    entry.complete()
                else:
                    entry.fail(error)

                self.run.record_completion()
                self._emit(BatchEventKind.ENTRY_UPDATED, entry)
        finally:
            if token.cancelled:
                self._revert_processing()
                log.info(
                    "Batch run cancelled",
                    completed=self.run.completed_count,
                    total=self.run.total_count,
                )
            else:
                log.info("Batch run finished", total=self.run.total_count)

            self.run.stop()
            finished = self.run.snapshot()
            self._token = None
            self._emit(BatchEventKind.RUN_FINISHED)

        return finished

    async def _run_entry(self, entry: FileEntry, work: EntryWork) -> tuple[Any, str | None]:
        """Await the work for one entry and translate any failure into a message."""
        try:
            return await work(entry), None
        except NamekitError as e:
            log.warning("Entry failed", error=str(e), error_type=type(e).__name__)
            return None, str(e)
        except PermissionError as e:
            log.warning("Entry failed", error=str(e), error_type=type(e).__name__)
            return None, str(NoPermissionError(Path(e.filename) if e.filename else entry.source))
        except OSError as e:
            log.warning("Entry failed", error=str(e), error_type=type(e).__name__)
            return None, str(FileOperationError(str(e)))
        except Exception as e:
            log.exception("Unexpected error while processing entry")
            return None, str(e) or type(e).__name__

    # -------------------------------------------------------------------------
    # Naming
    # -------------------------------------------------------------------------

    async def _suggest_one(self, entry: FileEntry) -> str:
        # Settings are read per entry so edits made during a run apply to later entries
        return await self.suggester.suggest_name(entry, self.store.settings)

    def _commit_name(self, entry: FileEntry, name: str) -> None:
        entry.proposed_name = name

    # -------------------------------------------------------------------------
    # Apply
    # -------------------------------------------------------------------------

    async def _apply_one(self, entry: FileEntry, mode: RenameMode) -> Path:
        source = entry.source
        if not await anyio.to_thread.run_sync(source.is_file):
            raise SourceMissingError(source)

        if entry.changes_extension:
            return await self._convert_entry(entry, mode)
        return await self._rename_entry(entry, mode)

    async def _convert_entry(self, entry: FileEntry, mode: RenameMode) -> Path:
        source = entry.source
        final = with_extension(source.parent, entry.final_stem, entry.target_extension)

        await anyio.to_thread.run_sync(self._check_conversion_target, source)
        intermediate = await anyio.to_thread.run_sync(
            self.conversion_service.convert, source, entry.target_extension
        )
        await anyio.to_thread.run_sync(_place_converted, intermediate, final)

        if mode == RenameMode.REPLACE:
            await anyio.to_thread.run_sync(_replace_original, source, final)

        log.info("Entry converted", destination=str(final), mode=mode.value)
        return final

    def _check_conversion_target(self, source: Path) -> None:
        directory = source.parent
        if not is_writable_dir(directory):
            raise TargetFolderNotWritableError(directory)

        required = source.stat().st_size * self.conversion_config.free_space_factor
        available = free_space(directory)
        if available < required:
            raise InsufficientSpaceError(required, available)

    async def _rename_entry(self, entry: FileEntry, mode: RenameMode) -> Path:
        source = entry.source
        destination = with_extension(source.parent, entry.final_stem, source.suffix)
        operation = copy_file if mode == RenameMode.CREATE_NEW else move_file

        await anyio.to_thread.run_sync(_rename_file, operation, source, destination)

        log.info("Entry renamed", destination=str(destination), mode=mode.value)
        return destination

    def _commit_location(self, entry: FileEntry, final: Path) -> None:
        """Point the entry at the file it produced and clear the applied changes."""
        entry.source = final
        entry.original_name = final.name
        entry.proposed_name = None
        entry.target_extension = ""


def _place_converted(intermediate: Path, final: Path) -> None:
    """Move the converter output to its final name, removing it on any failure."""
    if final == intermediate:
        return
    try:
        if final.exists():
            raise TargetExistsError(final)
        move_file(intermediate, final)
    except FileExistsError as e:
        intermediate.unlink(missing_ok=True)
        raise TargetExistsError(final) from e
    except BaseException:
        intermediate.unlink(missing_ok=True)
        raise


def _replace_original(source: Path, final: Path) -> None:
    """Delete the source of a conversion; the converted file goes if that fails."""
    if not final.exists():
        raise FileOperationError(f"Converted file missing: {final}")
    try:
        source.unlink()
    except BaseException:
        final.unlink(missing_ok=True)
        raise


def _rename_file(
    operation: Callable[[Path, Path], Path], source: Path, destination: Path
) -> None:
    if destination.exists():
        raise TargetExistsError(destination)
    if not is_writable_dir(destination.parent):
        raise TargetFolderNotWritableError(destination.parent)
    try:
        operation(source, destination)
    except FileExistsError as e:
        raise TargetExistsError(destination) from e
