"""Tests for structured logging."""

import json
import logging
import sys
from collections.abc import Iterator

import pytest

from albumrater.infrastructure.observability.logging import (
    CompactExceptionFormatter,
    CorrelationIdFilter,
    CustomJsonFormatter,
    configure_logging,
    get_correlation_id,
    set_correlation_id,
)


@pytest.fixture
def restore_root_logger() -> Iterator[None]:
    """configure_logging replaces root handlers, put pytest's back afterwards."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(message: str = "hello", exc_info=None) -> logging.LogRecord:
    return logging.LogRecord(
        name="albumrater.test",
        level=logging.WARNING,
        pathname=__file__,
        lineno=42,
        msg=message,
        args=(),
        exc_info=exc_info,
    )


class TestCorrelationId:
    """Test correlation ID functionality."""

    def test_set_and_get_correlation_id(self):
        """Test setting and getting correlation ID."""
        result = set_correlation_id("sync-123")
        assert result == "sync-123"
        assert get_correlation_id() == "sync-123"

    def test_set_correlation_id_generates_uuid_when_none(self):
        """Test that setting None generates a UUID."""
        result = set_correlation_id(None)
        assert len(result) == 36
        assert get_correlation_id() == result

    def test_filter_attaches_id_to_record(self):
        """Every record gets the current correlation id."""
        set_correlation_id("batch-7")
        record = _record()

        assert CorrelationIdFilter().filter(record) is True
        assert record.correlation_id == "batch-7"


@pytest.mark.usefixtures("restore_root_logger")
class TestLoggingConfiguration:
    """Test logging configuration."""

    def test_configure_logging_debug_level(self):
        """Test configuring logging with DEBUG level."""
        configure_logging(log_level="DEBUG", json_format=False)
        assert logging.getLogger("test").getEffectiveLevel() <= logging.DEBUG

    def test_configure_logging_installs_single_handler(self):
        """Repeated configuration doesn't stack handlers."""
        configure_logging(log_level="INFO", json_format=True)
        configure_logging(log_level="INFO", json_format=False)

        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, CompactExceptionFormatter)

    def test_httpx_is_quieted(self):
        """httpx request logs are only shown at WARNING and above."""
        configure_logging(log_level="DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING


class TestFormatters:
    """Test output formats."""

    def test_json_formatter_includes_correlation_id(self):
        """JSON lines carry level, logger and correlation id."""
        formatter = CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s")
        record = _record("Rating 8.6/10")
        record.correlation_id = "sync-1"

        payload = json.loads(formatter.format(record))

        assert payload["message"] == "Rating 8.6/10"
        assert payload["level"] == "WARNING"
        assert payload["logger"] == "albumrater.test"
        assert payload["correlation_id"] == "sync-1"

    def test_compact_formatter_shows_exception_chain(self):
        """Root cause comes first, then the wrapping exception."""
        try:
            try:
                raise ConnectionError("connection refused")
            except ConnectionError as e:
                raise RuntimeError("search failed") from e
        except RuntimeError:
            exc_info = sys.exc_info()

        output = CompactExceptionFormatter().formatException(exc_info)

        lines = [line for line in output.splitlines() if line.startswith("╰─►")]
        assert lines == [
            "╰─► ConnectionError: connection refused",
            "╰─► RuntimeError: search failed",
        ]
