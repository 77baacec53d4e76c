"""Tests for logging utilities module."""

import io
import logging

from namekit.utils.logging import (
    ConsoleHandler,
    _add_log_context,
    _shorten_values,
    create_task_log_path,
    get_logger,
    get_request_id,
    new_task_id,
    request_context,
    setup_logging,
    setup_task_logging,
)


class TestRequestContext:
    """Tests for request context tracing."""

    def test_new_task_id(self):
        """Test ids are short and unique."""
        ids = {new_task_id() for _ in range(50)}
        assert len(ids) == 50
        assert all(len(i) == 8 for i in ids)

    def test_no_context(self):
        assert get_request_id() is None

    def test_context_manager_restores(self):
        """Test nested contexts restore the outer values."""
        with request_context(file_path="/photos/cat.jpg") as outer:
            assert get_request_id() == outer
            with request_context(request_id="inner001", model="GPT-4"):
                assert get_request_id() == "inner001"
            assert get_request_id() == outer

        assert get_request_id() is None

    def test_nested_context_inherits_file(self):
        """Test an inner context keeps values it does not override."""
        with request_context(file_path="/photos/cat.jpg"):
            with request_context(model="Gemini Pro"):
                event = _add_log_context(None, "info", {"event": "x"})

        assert event["file"] == "/photos/cat.jpg"
        assert event["model"] == "Gemini Pro"

    def test_add_log_context(self):
        """Test context values are added without overwriting event keys."""
        with request_context(request_id="req00001", file_path="cat.jpg", model="Gemini Pro"):
            event = _add_log_context(None, "info", {"event": "x", "model": "explicit"})

        assert event["request_id"] == "req00001"
        assert event["file"] == "cat.jpg"
        assert event["model"] == "explicit"


class TestShortenValues:
    """Tests for the value shortening processor."""

    def test_base64_data_uri(self):
        """Test inline image payloads are collapsed."""
        payload = "data:image/jpeg;base64," + "A" * 1000
        event = _shorten_values(None, "debug", {"event": "x", "body": payload})

        assert event["body"].startswith("data:image/jpeg;base64,[BASE64:")
        assert len(event["body"]) < 100

    def test_long_values(self):
        """Test long strings and binary values are shortened."""
        event = _shorten_values(
            None, "debug", {"event": "x", "text": "y " * 1000, "raw": b"\x00" * 1000}
        )

        assert event["text"].endswith("[2000 chars total]")
        assert event["raw"] == "[BINARY DATA: 1000 bytes]"

    def test_short_values_untouched(self):
        event = _shorten_values(None, "info", {"event": "x", "name": "cat.jpg", "size": 10})

        assert event == {"event": "x", "name": "cat.jpg", "size": 10}


class TestConsoleHandler:
    """Tests for ConsoleHandler."""

    def test_replaces_unencodable_characters(self):
        """Test characters the stream cannot encode are replaced."""
        raw = io.BytesIO()
        stream = io.TextIOWrapper(raw, encoding="ascii")
        handler = ConsoleHandler(stream)
        handler.setFormatter(logging.Formatter("%(message)s"))

        handler.emit(logging.LogRecord("t", logging.INFO, "", 0, "café", None, None))
        stream.flush()

        assert raw.getvalue() == b"caf?\n"


class TestSetup:
    """Tests for logging setup."""

    def test_setup_logging_with_file(self, tmp_path):
        """Test log lines reach the file handler."""
        log_file = tmp_path / "logs" / "test.log"
        setup_logging(level="DEBUG", log_file=str(log_file))

        get_logger("namekit.test").info("Hello file", answer=42)
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = log_file.read_text(encoding="utf-8")
        assert "Hello file" in content
        assert "answer=42" in content

    def test_noisy_loggers_quieted(self):
        """Test third-party loggers are held at WARNING."""
        setup_logging(level="DEBUG")

        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("PIL").level == logging.WARNING

    def test_create_task_log_path(self, tmp_path):
        """Test task log file naming."""
        task_id, path = create_task_log_path(tmp_path / "logs", "apply")

        assert path.parent.exists()
        assert path.name.startswith("apply_")
        assert path.name.endswith(f"_{task_id}.log")

    def test_setup_task_logging_levels(self, tmp_path):
        """Test console is quiet unless verbose, file captures DEBUG."""
        _, log_path = setup_task_logging(tmp_path, prefix="suggest")

        levels = {type(h).__name__: h.level for h in logging.getLogger().handlers}
        assert levels["ConsoleHandler"] == logging.WARNING
        assert levels["TimedRotatingFileHandler"] == logging.DEBUG
        assert logging.getLogger().level == logging.DEBUG
        assert log_path.name.startswith("suggest_")

    def test_setup_task_logging_file_level(self, tmp_path):
        """Test the file level is configurable and filters file output."""
        _, log_path = setup_task_logging(tmp_path, prefix="apply", file_level="ERROR")

        handlers = {type(h).__name__: h for h in logging.getLogger().handlers}
        assert handlers["TimedRotatingFileHandler"].level == logging.ERROR
        assert logging.getLogger().level == logging.WARNING

        get_logger("namekit.test").warning("Only on console")
        get_logger("namekit.test").error("Written to file")
        handlers["TimedRotatingFileHandler"].flush()

        content = log_path.read_text(encoding="utf-8")
        assert "Written to file" in content
        assert "Only on console" not in content
