"""Task execution context - holds initialized state for commands."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.console import Console

from namekit.config import get_settings
from namekit.config.preferences import AppSettings, SettingsStore
from namekit.utils.logging import get_console, get_logger, setup_task_logging

if TYPE_CHECKING:
    from namekit.config.settings import NamekitSettings
    from namekit.core.orchestrator import BatchOrchestrator

log = get_logger(__name__)


@dataclass
class TaskContext:
    """Execution context shared by the batch commands.

    Loads runtime settings and the preference store, sets up task logging
    and builds the orchestrator.
    """

    settings: "NamekitSettings"
    store: SettingsStore
    task_id: str
    log_path: Path
    verbose: bool = False
    console: Console = field(default_factory=get_console)

    @classmethod
    def create(
        cls,
        command_prefix: str = "task",
        verbose: bool = False,
        console: Console | None = None,
    ) -> "TaskContext":
        """Create and initialize a task context.

        Args:
            command_prefix: Prefix for log files (e.g., "suggest", "apply")
            verbose: Show debug logs on the console
            console: Optional Rich console instance
        """
        settings = get_settings()
        console = console or get_console()

        task_id, log_path = setup_task_logging(
            log_dir=settings.log_dir,
            prefix=command_prefix,
            verbose=verbose,
            file_level=settings.log_level,
        )

        if verbose:
            log.info("Logs will be saved to", log_file=str(log_path))

        store = SettingsStore.open(settings.preferences_path)
        log.info(
            "Task Configuration",
            task_id=task_id,
            config=settings.model_dump(),
            preferences=mask_settings(store.settings),
        )

        return cls(
            settings=settings,
            store=store,
            task_id=task_id,
            log_path=log_path,
            verbose=verbose,
            console=console,
        )

    def create_orchestrator(self) -> "BatchOrchestrator":
        """Create a BatchOrchestrator wired to this context's settings."""
        from namekit.converters.image import ImageConverter
        from namekit.converters.service import ConversionService
        from namekit.core.orchestrator import BatchOrchestrator
        from namekit.naming.suggester import NamingSuggester

        service = ConversionService(
            [ImageConverter(jpeg_quality=self.settings.conversion.jpeg_quality)]
        )
        return BatchOrchestrator(
            store=self.store,
            suggester=NamingSuggester(self.settings.naming),
            conversion_service=service,
            conversion_config=self.settings.conversion,
        )


def mask_key(key: str) -> str:
    """Mask an API key, keeping only the last four characters."""
    if not key:
        return ""
    if len(key) <= 8:
        return "***"
    return f"***{key[-4:]}"


def mask_settings(settings: AppSettings) -> dict[str, Any]:
    """Settings blob with API keys masked, safe to log or print."""
    blob = settings.to_blob()
    blob["api_keys"] = {model: mask_key(key) for model, key in blob.get("api_keys", {}).items()}
    return blob
