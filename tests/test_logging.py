"""Tests for structured logging helpers"""

import json
import logging
from logging.handlers import RotatingFileHandler

from semlock.core.logging import (
    ContextLoggerAdapter,
    JSONFormatter,
    flush_logging_handlers,
    setup_logging,
    with_log_context,
)


def _record(msg="hello", **extra):
    record = logging.makeLogRecord({"name": "semlock.test", "levelname": "INFO", "levelno": logging.INFO, "msg": msg})
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Test one-line JSON log records"""

    def test_basic_fields(self):
        payload = json.loads(JSONFormatter().format(_record()))
        assert payload["message"] == "hello"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "semlock.test"
        assert "process" in payload
        assert "parent_process" in payload

    def test_extra_fields_included(self):
        payload = json.loads(JSONFormatter().format(_record(lock_name="jobA")))
        assert payload["lock_name"] == "jobA"

    def test_output_is_single_line(self):
        assert "\n" not in JSONFormatter().format(_record("line one\nline two"))

    def test_bad_message_format_does_not_raise(self):
        record = _record("%s %s")
        record.args = ("only-one",)
        payload = json.loads(JSONFormatter().format(record))
        assert "log-message-format-error" in payload["message"]


class TestLogContext:
    """Test contextual logger adapters"""

    def test_with_log_context_merges_fields(self):
        base = logging.getLogger("semlock.test.context")
        adapter = with_log_context(with_log_context(base, lock_name="jobA"), batch="b1", skipped=None)
        assert isinstance(adapter, ContextLoggerAdapter)
        assert adapter.extra == {"lock_name": "jobA", "batch": "b1"}
        assert adapter.logger is base

    def test_non_logger_passthrough(self):
        sentinel = object()
        assert with_log_context(sentinel, lock_name="x") is sentinel


class TestSetupLogging:
    """Test handler installation"""

    def test_logs_go_to_stderr_not_stdout(self, capsys):
        logger = setup_logging("INFO")
        logger.info("diagnostic line")
        flush_logging_handlers(logger)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "diagnostic line" in captured.err

    def test_json_format(self, capsys):
        logger = setup_logging("INFO", log_format="json")
        logger.info("structured")
        flush_logging_handlers(logger)

        line = capsys.readouterr().err.strip().splitlines()[-1]
        assert json.loads(line)["message"] == "structured"

    def test_invalid_level_falls_back_to_warning(self, capsys):
        setup_logging("LOUD")
        assert logging.getLogger().level == logging.WARNING
        assert "Invalid log level" in capsys.readouterr().err

    def test_env_level_used_when_unset(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        setup_logging(None)
        assert logging.getLogger().level == logging.DEBUG

    def test_log_file_receives_records(self, tmp_path):
        log_file = tmp_path / "logs" / "semlock.log"
        logger = setup_logging("INFO", log_file=log_file)
        logger.info("to file")
        flush_logging_handlers(logger)
        assert "to file" in log_file.read_text(encoding="utf-8")

    def test_rotation_settings_applied(self, tmp_path):
        setup_logging("INFO", log_file=tmp_path / "semlock.log", file_max_bytes=2048, file_backup_count=5)
        rotating = [h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler)]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == 2048
        assert rotating[0].backupCount == 5
