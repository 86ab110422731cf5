"""Unit tests for the logging configuration module.

This test module validates the structured logging configuration and the
context binding helpers.
"""

import io
import json
import logging

import pytest
import structlog

from rundag.log_config import (
    bind_context,
    bind_correlation_id,
    bind_graph_name,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
    unbind_correlation_id,
)


class TestLoggingConfiguration:
    """Test cases for logging configuration."""

    def test_configure_logging_info_level(self):
        """Test logging configuration with INFO level."""
        configure_logging(level="INFO", json_logs=True)
        logger = get_logger("test")
        assert logger is not None

    def test_configure_logging_lowercase_level(self):
        """Test that level names are case-insensitive."""
        configure_logging(level="debug", json_logs=True)

    def test_configure_logging_invalid_level(self):
        """Test logging configuration with invalid level."""
        with pytest.raises(ValueError, match="Invalid log level"):
            configure_logging(level="INVALID", json_logs=True)

    def test_configure_logging_console_renderer(self):
        """Test logging configuration with console renderer."""
        configure_logging(level="INFO", json_logs=False)
        logger = get_logger("test")
        assert logger is not None

    def test_get_logger_without_name(self):
        """Test getting a logger without a name."""
        configure_logging(level="INFO", json_logs=True)
        assert get_logger() is not None


class TestContextBinding:
    """Test cases for context binding functionality."""

    def setup_method(self):
        """Set up test environment before each test."""
        clear_context()

    def teardown_method(self):
        """Clean up after each test."""
        clear_context()

    def test_bind_graph_name(self):
        """Test tagging the context with a graph name."""
        bind_graph_name("deploy-stacks")

        assert structlog.contextvars.get_contextvars() == {"graph_name": "deploy-stacks"}

    def test_bind_correlation_id(self):
        """Test binding a correlation ID to the logging context."""
        bind_correlation_id("run-12345")

        assert structlog.contextvars.get_contextvars() == {"correlation_id": "run-12345"}

    def test_unbind_correlation_id(self):
        """Test that unbinding removes only the correlation ID."""
        bind_correlation_id("run-12345")
        bind_graph_name("stacks")

        unbind_correlation_id()

        assert structlog.contextvars.get_contextvars() == {"graph_name": "stacks"}

    def test_bind_context_multiple_variables(self):
        """Test binding multiple context variables."""
        bind_context(stack="prod/network", attempt=2)

        assert structlog.contextvars.get_contextvars() == {
            "stack": "prod/network",
            "attempt": 2,
        }

    def test_unbind_context_specific_keys(self):
        """Test unbinding specific context variables."""
        bind_context(stack="prod/network", attempt=2)
        unbind_context("stack")

        assert structlog.contextvars.get_contextvars() == {"attempt": 2}

    def test_clear_context(self):
        """Test clearing all context variables."""
        bind_context(stack="prod/network")
        bind_graph_name("g")
        clear_context()

        assert structlog.contextvars.get_contextvars() == {}


class TestStructuredOutput:
    """Test cases for rendered output."""

    def setup_method(self):
        """Route the root logger to a private stream for each test."""
        self.stream = io.StringIO()
        self.handler = logging.StreamHandler(self.stream)
        root = logging.getLogger()
        root.addHandler(self.handler)
        self.previous_level = root.level
        root.setLevel(logging.DEBUG)
        clear_context()

    def teardown_method(self):
        """Detach the private handler."""
        root = logging.getLogger()
        root.removeHandler(self.handler)
        root.setLevel(self.previous_level)
        clear_context()

    def test_json_output_includes_context(self):
        """Test that JSON events carry bound context and callsite info."""
        configure_logging(level="DEBUG", json_logs=True)
        bind_graph_name("stacks")
        bind_correlation_id("run-7")

        get_logger("rundag.test").info("graph_loaded", node_count=3)

        line = self.stream.getvalue().strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "graph_loaded"
        assert event["node_count"] == 3
        assert event["graph_name"] == "stacks"
        assert event["correlation_id"] == "run-7"
        assert event["level"] == "info"
        assert event["logger"] == "rundag.test"
        assert "timestamp" in event
        assert event["func_name"] == "test_json_output_includes_context"
