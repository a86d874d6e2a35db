"""Tests for structured logging configuration."""

from __future__ import annotations

import structlog
from structlog.testing import capture_logs

from core.logging import configure_logging, get_logger, log_context


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_format(self) -> None:
        """configure_logging should set up the console renderer by default."""
        configure_logging()

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_json_format(self) -> None:
        """configure_logging should render JSON in production mode."""
        configure_logging(json_format=True)

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.processors.JSONRenderer)
        configure_logging()

    def test_log_level_is_case_insensitive(self) -> None:
        """configure_logging should accept lower-case level names."""
        configure_logging(log_level="warning")

        logger = get_logger("tests.level")
        logger.info("filtered out")
        logger.warning("kept")
        configure_logging()


class TestGetLogger:
    """Tests for get_logger."""

    def test_logs_key_value_pairs(self) -> None:
        """Events should carry their key/value context."""
        configure_logging()
        logger = get_logger("tests.orders")

        with capture_logs() as logs:
            logger.info("Order created", order_id="o-1", total="41.90")

        assert logs == [
            {"event": "Order created", "order_id": "o-1", "total": "41.90", "log_level": "info"}
        ]


class TestLogContext:
    """Tests for log_context."""

    def test_context_is_bound_inside_block(self) -> None:
        """Bound keys are visible inside the block and gone after it."""
        with log_context(order_id="o-1", channel="pro"):
            assert structlog.contextvars.get_contextvars() == {"order_id": "o-1", "channel": "pro"}

        assert "order_id" not in structlog.contextvars.get_contextvars()
