"""Tests for lingocat.core.logging — JSON line formatter and root setup."""

from __future__ import annotations

import io
import json
import logging
import sys

import pytest

from lingocat.core.logging import JSONFormatter, setup_logging


def _record(msg: str = "hello %s", args: tuple = ("world",), **extra: object) -> logging.LogRecord:
    record = logging.LogRecord("lingocat.i18n.context", logging.WARNING, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


# ---------------------------------------------------------------------------
# JSONFormatter
# ---------------------------------------------------------------------------


class TestJSONFormatter:
    def test_base_fields(self) -> None:
        payload = json.loads(JSONFormatter().format(_record()))
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "lingocat.i18n.context"
        assert payload["message"] == "hello world"
        assert "timestamp" in payload

    def test_extra_fields_merged(self) -> None:
        record = _record(event="missing_key", key="greeting", language="fr", line=None)
        payload = json.loads(JSONFormatter().format(record))
        assert payload["event"] == "missing_key"
        assert payload["key"] == "greeting"
        assert payload["language"] == "fr"
        assert "line" not in payload

    def test_unknown_extra_ignored(self) -> None:
        payload = json.loads(JSONFormatter().format(_record(unrelated="x")))
        assert "unrelated" not in payload

    def test_non_ascii_kept(self) -> None:
        line = JSONFormatter().format(_record("%s", ("français",)))
        assert "français" in line

    def test_exception_included(self) -> None:
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        payload = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in payload["exception"]


# ---------------------------------------------------------------------------
# setup_logging
# ---------------------------------------------------------------------------


class TestSetupLogging:
    def test_emits_json_lines(self, restore_root) -> None:
        stream = io.StringIO()
        setup_logging("debug", stream=stream)
        logging.getLogger("lingocat.test").info("loaded", extra={"event": "context_init", "language": "en-US"})
        payload = json.loads(stream.getvalue().strip())
        assert payload["event"] == "context_init"
        assert payload["language"] == "en-US"
        assert restore_root.level == logging.DEBUG

    def test_replaces_handlers(self, restore_root) -> None:
        setup_logging("INFO", stream=io.StringIO())
        setup_logging("INFO", stream=io.StringIO())
        assert len(restore_root.handlers) == 1

    def test_default_stream_is_stderr(self, restore_root) -> None:
        setup_logging()
        (handler,) = restore_root.handlers
        assert handler.stream is sys.stderr
        assert restore_root.level == logging.INFO
