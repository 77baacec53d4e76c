"""Logging configuration using structlog.

Every command writes a task log file next to the console output. Log lines
carry the request context of the entry being processed (request id, file and
model) so one file's naming or apply attempt can be followed through the log.
"""

import logging
import re
import sys
import uuid
from collections.abc import Generator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

import structlog
from rich.console import Console

if TYPE_CHECKING:
    from structlog.typing import EventDict, WrappedLogger

_log_context: ContextVar[dict[str, str]] = ContextVar("namekit_log_context", default={})

_console: Console | None = None

# Inline image payloads show up in debug output of request bodies
_BASE64_RUN = re.compile(r"(data:image/[^;]+;base64,)?[A-Za-z0-9+/=]{500,}")
_MAX_VALUE_CHARS = 500

_QUIET_LOGGERS = ("httpcore", "httpx", "PIL", "asyncio")


def new_task_id() -> str:
    """Short random id used for task log files and request tracing."""
    return uuid.uuid4().hex[:8]


def get_request_id() -> str | None:
    """Request id of the innermost active ``request_context``, if any."""
    return _log_context.get().get("request_id")


@contextmanager
def request_context(
    request_id: str | None = None,
    file_path: str | None = None,
    model: str | None = None,
) -> Generator[str, None, None]:
    """Attach request details to every log line emitted inside the block.

    Values not given are inherited from an enclosing context; a new request
    id is generated when neither this call nor an enclosing one sets one.

    Example:
        >>> with request_context(file_path="/photos/cat.jpg") as req_id:
        ...     log.info("Suggesting name")  # includes file=/photos/cat.jpg
    """
    values = dict(_log_context.get())
    values["request_id"] = request_id or new_task_id()
    if file_path is not None:
        values["file"] = file_path
    if model is not None:
        values["model"] = model

    token = _log_context.set(values)
    try:
        yield values["request_id"]
    finally:
        _log_context.reset(token)


def _add_log_context(
    _logger: "WrappedLogger", _method_name: str, event_dict: "EventDict"
) -> "EventDict":
    """Add request context values; keys bound on the event itself win."""
    for key, value in _log_context.get().items():
        event_dict.setdefault(key, value)
    return event_dict


def _shorten_values(
    _logger: "WrappedLogger", _method_name: str, event_dict: "EventDict"
) -> "EventDict":
    """Collapse base64 runs and cut long strings or binary values."""
    for key, value in list(event_dict.items()):
        if isinstance(value, (bytes, bytearray)) and len(value) > _MAX_VALUE_CHARS:
            event_dict[key] = f"[BINARY DATA: {len(value)} bytes]"
        elif isinstance(value, str) and len(value) > _MAX_VALUE_CHARS:
            value = _BASE64_RUN.sub(
                lambda m: f"{m.group(1) or ''}[BASE64:{len(m.group(0))} chars]", value
            )
            if len(value) > _MAX_VALUE_CHARS:
                value = f"{value[:_MAX_VALUE_CHARS]}... [{len(value)} chars total]"
            event_dict[key] = value
    return event_dict


class ConsoleHandler(logging.StreamHandler):
    """Stream handler that degrades characters the stream cannot encode."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        encoding = getattr(self.stream, "encoding", None) or "utf-8"
        return message.encode(encoding, errors="replace").decode(encoding)


def get_console() -> Console:
    """Get the shared Rich console used for progress bars and tables."""
    global _console
    if _console is None:
        _console = Console(stderr=True)
    return _console


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def _formatter(
    shared: list[structlog.types.Processor], colors: bool
) -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.dev.ConsoleRenderer(
                colors=colors,
                exception_formatter=structlog.dev.plain_traceback,
                pad_event_to=0,
                pad_level=False,
                sort_keys=False,
            ),
        ],
    )


def setup_logging(
    level: str = "INFO",
    log_file: str | Path | None = None,
    console_level: str | None = None,
    file_level: str | None = None,
) -> None:
    """Configure structlog on top of the stdlib root logger.

    Args:
        level: Root log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path; rotated daily with 7 days retention
        console_level: Level of the stderr handler, defaults to ``level``
        file_level: Level of the file handler, defaults to ``level``
    """
    root_level = _level(level, logging.INFO)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(root_level)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(root_level, logging.WARNING))

    shared: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _add_log_context,
        _shorten_values,
    ]

    console_handler = ConsoleHandler(sys.stderr)
    console_handler.setLevel(_level(console_level, root_level))
    console_handler.setFormatter(_formatter(shared, colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_file, when="midnight", backupCount=7, encoding="utf-8"
        )
        file_handler.suffix = "%Y-%m-%d"
        file_handler.setLevel(_level(file_level, root_level))
        file_handler.setFormatter(_formatter(shared, colors=False))
        root_logger.addHandler(file_handler)

    structlog.configure(
        processors=[*shared, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Commands reconfigure logging per task
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog bound logger."""
    return structlog.get_logger(name)


def create_task_log_path(log_dir: str | Path, prefix: str = "task") -> tuple[str, Path]:
    """Pick a fresh ``<prefix>_<timestamp>_<task id>.log`` path inside ``log_dir``."""
    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)

    task_id = new_task_id()
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    return task_id, directory / f"{prefix}_{timestamp}_{task_id}.log"


def setup_task_logging(
    log_dir: str | Path,
    prefix: str = "task",
    verbose: bool = False,
    file_level: str = "DEBUG",
) -> tuple[str, Path]:
    """Setup logging for a CLI task.

    The console shows WARNING and above unless ``verbose`` is set, so progress
    bars stay readable. The task log file records ``file_level`` and above.

    Returns:
        Tuple of (task_id, log_file_path)
    """
    task_id, log_path = create_task_log_path(log_dir, prefix)
    console_level = "DEBUG" if verbose else "WARNING"

    setup_logging(
        level=min(console_level, file_level, key=lambda name: _level(name, logging.DEBUG)),
        log_file=log_path,
        console_level=console_level,
        file_level=file_level,
    )
    return task_id, log_path
