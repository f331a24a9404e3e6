"""Tests for logging configuration."""

import json
import logging
import sys

import pytest

from keepsake.core.logging import (
    JSONFormatter,
    SecretRedactionFilter,
    get_logger,
    redact_secrets,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Undo setup_logging() so later tests keep pytest's capture handlers."""
    handlers, level = logging.root.handlers[:], logging.root.level
    yield
    logging.root.handlers = handlers
    logging.root.setLevel(level)


def _record(message: str, *args, exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="keepsake.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=args,
        exc_info=exc_info,
    )


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_formats_valid_json(self):
        entry = json.loads(JSONFormatter().format(_record("exchanged %s", "project")))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "keepsake.test"
        assert entry["message"] == "exchanged project"
        assert "timestamp" in entry

    def test_escapes_quotes_and_newlines(self):
        line = JSONFormatter().format(_record('say "hi"\nnext line'))
        assert "\n" not in line
        assert json.loads(line)["message"] == 'say "hi"\nnext line'

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record("failed", exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]


class TestSetupLogging:
    """Tests for setup_logging()."""

    def test_access_log_disabled(self):
        setup_logging(level="INFO", format_type="structured")
        assert logging.getLogger("uvicorn.access").disabled is True
        assert isinstance(logging.root.handlers[0].formatter, JSONFormatter)

    def test_dev_format(self):
        setup_logging(level="DEBUG", format_type="dev")
        assert logging.root.level == logging.DEBUG
        assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG

    def test_get_logger_prefix(self):
        assert get_logger("main").name == "keepsake.main"


class TestSecretRedaction:
    """Tests for redact_secrets() and SecretRedactionFilter."""

    def test_share_link_path_redacted(self):
        text = redact_secrets("GET https://keepsake.example/t/Abc-123_xyz?ref=1")
        assert "Abc-123_xyz" not in text
        assert "/t/[REDACTED]?ref=1" in text

    def test_credential_assignments_redacted(self):
        text = redact_secrets("Cookie: kp_session=eyJ.abc.def; token=secret123&x=1")
        assert "eyJ.abc.def" not in text
        assert "secret123" not in text
        assert "kp_session=[REDACTED]" in text
        assert "x=1" in text

    def test_ordinary_messages_untouched(self):
        message = "Token exchanged for project 6f1c2a4e-0000-4000-8000-000000000000"
        assert redact_secrets(message) == message

    def test_filter_rewrites_formatted_message(self):
        record = _record("opened %s", "/t/abc123")

        assert SecretRedactionFilter().filter(record) is True
        assert record.getMessage() == "opened /t/[REDACTED]"

    def test_json_formatter_redacts_exception_text(self):
        try:
            raise ValueError("bad link /t/abc123")
        except ValueError:
            record = _record("failed", exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))
        assert "abc123" not in entry["exception"]

    def test_installed_on_root_handler(self, capsys):
        setup_logging(level="INFO", format_type="dev")
        get_logger("test").info("visited /t/abc123")

        output = capsys.readouterr().out
        assert "abc123" not in output
        assert "/t/[REDACTED]" in output
