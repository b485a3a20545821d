"""
Tests for OpenTelemetry-compliant log formatters.

Tests for JsonFormatter, HumanFormatter, and scoped_logger.
"""

import json
import logging
import sys


def _record(level=logging.INFO, msg="Test message", **extra):
    record = logging.LogRecord(
        name="opentok_native",
        level=level,
        pathname="/site-packages/opentok_native/session/session.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_otel_structure(self):
        """Output follows the OpenTelemetry log data model."""
        from opentok_native._logging import JsonFormatter

        parsed = json.loads(JsonFormatter().format(_record(scope="session")))

        assert parsed["severityText"] == "INFO"
        assert parsed["body"] == "Test message"
        assert parsed["attributes"]["scope"] == "session"
        assert parsed["resource"]["service.name"] == "opentok_native"
        assert parsed["timestamp"].endswith("Z")

    def test_extra_becomes_attributes(self):
        """Fields passed through ``extra`` land in attributes."""
        from opentok_native._logging import JsonFormatter

        parsed = json.loads(JsonFormatter().format(_record(token=7, session_id="s-1")))

        assert parsed["attributes"]["token"] == 7
        assert parsed["attributes"]["session_id"] == "s-1"

    def test_code_location_on_debug(self):
        """DEBUG records carry a package-relative code location."""
        from opentok_native._logging import JsonFormatter

        parsed = json.loads(JsonFormatter().format(_record(level=logging.DEBUG)))

        assert parsed["attributes"]["code.filepath"] == "session/session.py"
        assert parsed["attributes"]["code.lineno"] == 42

    def test_no_code_location_on_info(self):
        """INFO records omit the code location."""
        from opentok_native._logging import JsonFormatter

        parsed = json.loads(JsonFormatter().format(_record()))

        assert "code.filepath" not in parsed["attributes"]

    def test_unserializable_extra(self):
        """Non-JSON values in extra are stringified, not dropped."""
        from opentok_native._logging import JsonFormatter

        parsed = json.loads(JsonFormatter().format(_record(kind_obj=object())))

        assert parsed["attributes"]["kind_obj"].startswith("<object")

    def test_exception_stacktrace(self):
        """exc_info is rendered into exception.stacktrace."""
        from opentok_native._logging import JsonFormatter

        record = _record(level=logging.ERROR)
        try:
            raise RuntimeError("listener failed")
        except RuntimeError:
            record.exc_info = sys.exc_info()

        parsed = json.loads(JsonFormatter().format(record))

        assert "listener failed" in parsed["attributes"]["exception.stacktrace"]


class TestHumanFormatter:
    """Tests for HumanFormatter."""

    def test_plain_line(self):
        """Without colors the line reads LEVEL [scope] message."""
        from opentok_native._logging import HumanFormatter

        output = HumanFormatter(use_colors=False).format(_record(scope="dispatch"))

        assert "INFO" in output
        assert "[dispatch]" in output
        assert output.endswith("Test message")

    def test_session_id_inline(self):
        """A session_id attribute is shown after the message."""
        from opentok_native._logging import HumanFormatter

        output = HumanFormatter(use_colors=False).format(_record(session_id="s-1"))

        assert "(s-1)" in output

    def test_scope_inferred_from_name(self):
        """Without an explicit scope, the logger name is used."""
        from opentok_native._logging import HumanFormatter

        record = _record()
        record.name = "opentok_native.subscriber"

        assert "[subscriber]" in HumanFormatter(use_colors=False).format(record)


class TestScopedLogger:
    """Tests for scoped_logger()."""

    def test_scope_attached(self, caplog):
        """Records from a scoped logger carry its scope."""
        from opentok_native._logging import scoped_logger

        log = scoped_logger("registry")
        with caplog.at_level(logging.INFO, logger="opentok_native"):
            log.info("hello")

        assert caplog.records[-1].scope == "registry"

    def test_extra_merged(self, caplog):
        """Call-site extra is merged with the scope."""
        from opentok_native._logging import scoped_logger

        log = scoped_logger("session")
        with caplog.at_level(logging.INFO, logger="opentok_native"):
            log.info("hello", extra={"token": 3})

        record = caplog.records[-1]
        assert record.scope == "session"
        assert record.token == 3
