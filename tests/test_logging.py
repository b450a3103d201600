"""Tests for the CallLogger around filter."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import MagicMock

import pytest

from servicefilters import CallLogger


def _service(endpoint: str | None = "do_work") -> Any:
    svc = MagicMock()
    svc.current_endpoint = endpoint
    return svc


class TestCallLogger:
    """Tests for CallLogger.__call__()."""

    def test_logs_start_and_end(self) -> None:
        """Start and end lines name the service class and endpoint."""
        mock_logger = MagicMock()
        call_logger = CallLogger(logger=mock_logger)
        result = call_logger(_service(), lambda: "value")

        assert result == "value"
        assert mock_logger.log.call_count == 2
        start_msg = mock_logger.log.call_args_list[0][0][1]
        end_msg = mock_logger.log.call_args_list[1][0][1]
        assert start_msg == "START MagicMock.do_work"
        assert end_msg.startswith("END MagicMock.do_work (")
        assert end_msg.endswith("ms)")

    def test_end_extra_includes_duration(self) -> None:
        mock_logger = MagicMock()
        CallLogger(logger=mock_logger)(_service(), lambda: None)
        extra = mock_logger.log.call_args_list[1][1]["extra"]
        assert extra["endpoint"] == "do_work"
        assert extra["duration_ms"] >= 0

    def test_uses_configured_level(self) -> None:
        mock_logger = MagicMock()
        CallLogger(logger=mock_logger, level=logging.DEBUG)(_service(), lambda: None)
        assert all(call[0][0] == logging.DEBUG for call in mock_logger.log.call_args_list)

    def test_unknown_endpoint_placeholder(self) -> None:
        mock_logger = MagicMock()
        CallLogger(logger=mock_logger)(_service(endpoint=None), lambda: None)
        assert mock_logger.log.call_args_list[0][0][1] == "START MagicMock.<unknown>"

    def test_logs_and_reraises_errors(self) -> None:
        mock_logger = MagicMock()

        def fail() -> None:
            raise ValueError("bad")

        with pytest.raises(ValueError, match="bad"):
            CallLogger(logger=mock_logger)(_service(), fail)
        mock_logger.error.assert_called_once()
        assert "ERROR MagicMock.do_work: bad" in mock_logger.error.call_args[0][0]
        assert mock_logger.error.call_args[1]["exc_info"] is True

    def test_error_logging_can_be_disabled(self) -> None:
        mock_logger = MagicMock()

        def fail() -> None:
            raise ValueError("bad")

        with pytest.raises(ValueError):
            CallLogger(logger=mock_logger, log_errors=False)(_service(), fail)
        mock_logger.error.assert_not_called()

    def test_default_logger_name(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="servicefilters.calls"):
            CallLogger()(_service(), lambda: None)
        assert [r.name for r in caplog.records] == ["servicefilters.calls", "servicefilters.calls"]


class TestCallLoggerAsFilter:
    """CallLogger registered as an around filter on a service."""

    def test_wraps_endpoint(self, service_class: Any, caplog: pytest.LogCaptureFixture) -> None:
        service_class.around_filter(CallLogger())
        with caplog.at_level(logging.INFO, logger="servicefilters.calls"):
            result = service_class().run_filters("do_work")
        assert result.value == "worked"
        messages = [r.getMessage() for r in caplog.records if r.name == "servicefilters.calls"]
        assert messages[0] == "START Service.do_work"
        assert messages[1].startswith("END Service.do_work")
