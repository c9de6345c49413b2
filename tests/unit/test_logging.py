"""Unit tests for logging and observability helpers."""

import logging
from unittest.mock import patch

import logfire
import pytest

from src.core.logging import PACKAGE_LOGGER, configure_logfire, log_with_context, span


@pytest.fixture
def package_logger():
    """Package logger with its handlers restored after the test."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    original_handlers = list(logger.handlers)
    yield logger
    logger.handlers = original_handlers


@pytest.mark.unit
class TestConfigureLogfire:
    """Tests for configure_logfire function."""

    def test_configures_from_settings(self, package_logger):
        """Test Logfire is configured with the token and service name from settings."""
        with (
            patch("src.core.logging.logfire.configure") as mock_configure,
            patch("src.core.logging.settings") as mock_settings,
        ):
            mock_settings.logfire_token = "lf_test"
            mock_settings.service_name = "perfmetrics"
            mock_settings.environment = "test"

            configure_logfire()

        mock_configure.assert_called_once()
        kwargs = mock_configure.call_args.kwargs
        assert kwargs["token"] == "lf_test"
        assert kwargs["service_name"] == "perfmetrics"
        assert kwargs["environment"] == "test"
        assert kwargs["send_to_logfire"] == "if-token-present"

    def test_attaches_logging_handler_once(self, package_logger):
        """Test repeated configuration does not duplicate the Logfire handler."""
        with patch("src.core.logging.logfire.configure"):
            configure_logfire()
            configure_logfire()

        handlers = [h for h in package_logger.handlers if isinstance(h, logfire.LogfireLoggingHandler)]
        assert len(handlers) == 1

    def test_capture_logging_can_be_disabled(self, package_logger):
        """Test no handler is attached when log capture is off."""
        with patch("src.core.logging.logfire.configure"):
            configure_logfire(capture_logging=False)

        assert not any(isinstance(h, logfire.LogfireLoggingHandler) for h in package_logger.handlers)

    def test_span_delegates_to_logfire(self):
        """Test span creates a Logfire span with the given name."""
        with patch("src.core.logging.logfire") as mock_logfire:
            span("metrics_service.calculate_advanced_metrics")

        mock_logfire.span.assert_called_once_with("metrics_service.calculate_advanced_metrics")


@pytest.mark.unit
class TestLogWithContext:
    """Tests for log_with_context function."""

    def test_context_is_attached_as_extra(self, caplog):
        """Test context fields land on the log record."""
        logger = logging.getLogger("tests.structured")

        with caplog.at_level(logging.INFO, logger="tests.structured"):
            log_with_context(logger, "info", "Metrics computed", total_tasks=12)

        record = caplog.records[-1]
        assert record.getMessage() == "Metrics computed"
        assert record.total_tasks == 12

    def test_user_id_included_when_given(self, caplog):
        """Test user_id is added to the context only when provided."""
        logger = logging.getLogger("tests.structured")

        with caplog.at_level(logging.WARNING, logger="tests.structured"):
            log_with_context(logger, "warning", "Audit entry created", user_id="e1", ready=False)
            log_with_context(logger, "warning", "Anonymous entry", ready=True)

        with_user, anonymous = caplog.records[-2:]
        assert with_user.user_id == "e1"
        assert with_user.ready is False
        assert not hasattr(anonymous, "user_id")
        assert anonymous.ready is True
