"""Tests for the event bus and the logging event handler."""

import logging

import structlog

from kiket_mcp.application.event_handlers import LoggingEventHandler
from kiket_mcp.domain.events import OperationFailed, RetryScheduled, ToolCallCompleted
from kiket_mcp.infrastructure.event_bus import EventBus
from kiket_mcp.logging_config import redact_secrets


def retry_event():
    return RetryScheduled(
        label="getIssue",
        attempt=1,
        max_retries=3,
        delay_ms=1000.0,
        error_kind="server",
        error_message="down",
    )


class TestEventBus:
    """Tests for EventBus."""

    def test_specific_and_global_subscribers(self):
        """Should call type subscribers and catch-all subscribers."""
        bus = EventBus()
        specific, everything = [], []
        bus.subscribe(RetryScheduled, specific.append)
        bus.subscribe_to_all(everything.append)

        bus.publish(retry_event())
        bus.publish(ToolCallCompleted(tool_name="getIssue", registry="issues", duration_ms=1.0))

        assert len(specific) == 1
        assert len(everything) == 2

    def test_handler_failure_isolated(self):
        """Should keep calling handlers and report the failure to error handlers."""
        bus = EventBus()
        received, errors = [], []

        def broken(event):
            raise RuntimeError("bad handler")

        bus.subscribe(RetryScheduled, broken)
        bus.subscribe(RetryScheduled, received.append)
        bus.on_error(lambda exc, event: errors.append(str(exc)))

        bus.publish(retry_event())

        assert len(received) == 1
        assert errors == ["bad handler"]

    def test_unsubscribe(self):
        """Should stop delivering after unsubscribe."""
        bus = EventBus()
        received = []
        bus.subscribe(RetryScheduled, received.append)
        bus.unsubscribe(RetryScheduled, received.append)

        bus.publish(retry_event())

        assert received == []

    def test_event_to_dict(self):
        """Should serialize events with their type and identity."""
        data = retry_event().to_dict()

        assert data["event_type"] == "RetryScheduled"
        assert data["label"] == "getIssue"
        assert "event_id" in data and "occurred_at" in data


class TestLoggingEventHandler:
    """Tests for LoggingEventHandler."""

    def test_levels_by_event_type(self):
        """Should log failures as warnings and completions as debug."""
        handler = LoggingEventHandler()
        failed = OperationFailed(label="x", attempts=1, retriable=False, error_kind="validation", error_message="bad")
        completed = ToolCallCompleted(tool_name="getIssue", registry="issues", duration_ms=1.0)

        with structlog.testing.capture_logs() as logs:
            handler.handle(failed)
            handler.handle(retry_event())
            handler.handle(completed)

        assert [entry["log_level"] for entry in logs] == ["warning", "info", "debug"]
        assert logs[0]["event_type"] == "OperationFailed"
        assert logs[2]["tool_name"] == "getIssue"

    def test_default_level(self):
        """Should keep the configured default level."""
        assert LoggingEventHandler(log_level=logging.ERROR).log_level == logging.ERROR


class TestRedaction:
    """Tests for the redaction processor."""

    def test_bearer_token_redacted(self):
        """Should scrub bearer tokens and key assignments."""
        event = {
            "event": "request",
            "header": "Authorization: Bearer abc.def-123",
            "url": "https://x/?api_key=supersecret&page=1",
            "count": 3,
        }

        result = redact_secrets(None, "info", event)

        assert "abc.def-123" not in result["header"]
        assert "supersecret" not in result["url"]
        assert "page=1" in result["url"]
        assert result["count"] == 3
