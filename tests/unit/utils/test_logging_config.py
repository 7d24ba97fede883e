"""Tests for logging setup and the Rich handler."""

from __future__ import annotations

import json
import logging
from io import StringIO

import pytest
from rich.console import Console

from trackerdash.models import LogLevel, ObservabilityConfig
from trackerdash.utils.logging_config import (
    CorrelationFilter,
    StructuredFormatter,
    get_correlation_id,
    get_logger,
    set_correlation_id,
    setup_logging,
)
from trackerdash.utils.rich_logging import (
    CorrelationRichHandler,
    FileFormatter,
    create_rich_handler,
    strip_rich_markup,
)

pytestmark = [pytest.mark.unit, pytest.mark.observability]


def _record(msg="hello %s", args=("world",), level=logging.INFO):
    return logging.LogRecord(
        name="trackerdash.test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=args,
        exc_info=None,
        func="do_work",
    )


def test_get_logger_namespace():
    assert get_logger("stats").name == "trackerdash.stats"


def test_correlation_id_roundtrip():
    corr_id = set_correlation_id("abc-123")
    assert corr_id == "abc-123"
    assert get_correlation_id() == "abc-123"
    assert set_correlation_id() != "abc-123"


def test_correlation_filter():
    set_correlation_id("req-1")
    record = _record()
    assert CorrelationFilter().filter(record)
    assert record.correlation_id == "req-1"


def test_structured_formatter():
    record = _record()
    record.correlation_id = "req-2"
    record.window = "last_day"

    entry = json.loads(StructuredFormatter().format(record))

    assert entry["message"] == "hello world"
    assert entry["level"] == "INFO"
    assert entry["function"] == "do_work"
    assert entry["correlation_id"] == "req-2"
    assert entry["window"] == "last_day"


def test_strip_rich_markup():
    assert strip_rich_markup("[bright_cyan]last_day[/bright_cyan] ok") == "last_day ok"


def test_file_formatter_strips_markup():
    record = _record(msg="[red]%s[/red]", args=("boom",))
    assert FileFormatter("%(message)s").format(record) == "boom"


def test_rich_handler_colours_selections():
    buffer = StringIO()
    console = Console(file=buffer, force_terminal=False, width=200)
    handler = create_rich_handler(console=console, level=logging.DEBUG)
    assert isinstance(handler, CorrelationRichHandler)

    handler.emit(_record(msg="grouping %s", args=("last_day",)))

    output = buffer.getvalue()
    assert "do_work" in output
    assert "grouping last_day" in output


def test_setup_logging_console_only():
    setup_logging(ObservabilityConfig(log_level=LogLevel.DEBUG))
    logger = logging.getLogger("trackerdash")

    assert logger.level == logging.DEBUG
    assert logger.propagate is False
    assert any(isinstance(h, CorrelationRichHandler) for h in logger.handlers)
    assert get_correlation_id() is not None


def test_setup_logging_structured_file(tmp_path):
    log_file = tmp_path / "logs" / "trackerdash.log"
    setup_logging(
        ObservabilityConfig(
            log_level=LogLevel.INFO,
            log_file=str(log_file),
            structured_logging=True,
        )
    )
    set_correlation_id("file-test")
    logging.getLogger("trackerdash.stats").info("bucketed %d", 3)
    for handler in logging.getLogger("trackerdash").handlers:
        handler.flush()

    entry = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
    assert entry["message"] == "bucketed 3"
    assert entry["correlation_id"] == "file-test"


def test_setup_logging_plain_file_has_no_markup(tmp_path):
    log_file = tmp_path / "trackerdash.log"
    setup_logging(ObservabilityConfig(log_level=LogLevel.INFO, log_file=str(log_file)))
    logging.getLogger("trackerdash.cli").info("[bold]ready[/bold]")
    for handler in logging.getLogger("trackerdash").handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "ready" in content
    assert "[bold]" not in content
