# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Tests for ErrorCaptureClient."""

import warnings
from unittest.mock import patch

from error_capture.client import ErrorCaptureClient
from error_capture.errors import TransportError
from error_capture.event import EventBuilder
from error_capture.severity import Severity
from error_capture.transport import Transport


class _FailingTransport(Transport):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.attempts = 0

    def _deliver(self, event):
        self.attempts += 1
        raise TransportError("collector unreachable")


class InvoiceService:
    pass


class TestCaptureMessage:
    """Tests for capture_message."""

    def test_returns_event_id(self, client, transport):
        """Test that the transport's id is returned."""
        event_id = client.capture_message("Cache warmed", level="NOTICE", tags={"cache": "users"})

        assert event_id == transport.events[0].event_id
        assert transport.events[0].level is Severity.INFO
        assert transport.events[0].tags == {"cache": "users"}

    def test_default_level_is_info(self, client, transport):
        """Test the default severity."""
        client.capture_message("hello")

        assert transport.events[0].level is Severity.INFO

    def test_unmapped_level_is_not_sent(self, client, transport, diagnostics):
        """Test that an unknown level fails only the capture call."""
        assert client.capture_message("hello", level="LOUD") is None
        assert transport.events == []
        assert diagnostics.has_log("unmapped level")

    def test_builder_failure_is_contained(self, client, transport, diagnostics):
        """Test that a failing builder never raises into the caller."""
        with patch.object(EventBuilder, "from_message", side_effect=RuntimeError("boom")):
            assert client.capture_message("hello") is None

        assert diagnostics.has_log("Failed to build message event")


class TestCaptureException:
    """Tests for capture_exception."""

    def test_captures_chain(self, client, transport):
        """Test capturing an exception with a cause."""
        try:
            try:
                raise ConnectionError("db down")
            except ConnectionError as e:
                raise RuntimeError("query failed") from e
        except RuntimeError as e:
            event_id = client.capture_exception(e, tags={"query": "users"})

        event = transport.events[0]
        assert event_id == event.event_id
        assert event.level is Severity.ERROR
        assert [link.type for link in event.exception_chain] == ["RuntimeError", "ConnectionError"]

    def test_truncated_chain_sent_under_error_filter(self, diagnostics, transport):
        """Test that chain truncation is non-fatal even when warnings are errors."""
        exc = ValueError("root")
        for i in range(5):
            wrapper = RuntimeError(f"wrap {i}")
            wrapper.__cause__ = exc
            exc = wrapper
        client = ErrorCaptureClient(transport, builder=EventBuilder(chain_limit=2), logger=diagnostics)

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            event_id = client.capture_exception(exc)

        assert event_id is not None
        assert transport.events[0].chain_truncated is True
        assert not diagnostics.has_log("Failed to build exception event")

    def test_transport_failure_is_not_retried(self, diagnostics):
        """Test at-most-once delivery: a failed send is attempted once."""
        transport = _FailingTransport(logger=diagnostics)
        client = ErrorCaptureClient(transport, logger=diagnostics)

        assert client.capture_exception(ValueError("x")) is None
        assert transport.attempts == 1


class TestCaptureRuntimeError:
    """Tests for capture_runtime_error."""

    def test_captures_with_level(self, client, transport):
        """Test that the given native level is mapped."""
        client.capture_runtime_error(RuntimeWarning, "overflow", "calc.py", 10, level=4)

        event = transport.events[0]
        assert event.level is Severity.WARNING
        assert event.message == "RuntimeWarning: overflow"

    def test_unmapped_level(self, client, transport):
        """Test that an unknown level drops the event."""
        assert client.capture_runtime_error(RuntimeWarning, "overflow", "calc.py", 10, level=99) is None
        assert transport.events == []


class TestCaptureLogEvent:
    """Tests for capture_log_event."""

    def test_message_is_prefixed_with_target(self, client, transport):
        """Test the target prefix and priority mapping."""
        event_id = client.capture_log_event(
            "billing", "payment declined", priority=3, tags={"tenant": "acme"}, extra={"amount": 12}
        )

        event = transport.events[0]
        assert event_id == event.event_id
        assert event.message == "billing: payment declined"
        assert event.level is Severity.ERROR
        assert event.target == "billing"
        assert event.extra == {"amount": 12}

    def test_object_target_uses_class_name(self, client, transport):
        """Test that object targets are named by their class."""
        client.capture_log_event(InvoiceService(), "created")

        assert transport.events[0].message == f"{__name__}.InvoiceService: created"

    def test_defaults(self, client, transport):
        """Test default message and priority."""
        client.capture_log_event("worker")

        event = transport.events[0]
        assert event.message == "worker: No message provided"
        assert event.level is Severity.INFO

    def test_named_priority(self, client, transport):
        """Test a named priority."""
        client.capture_log_event("worker", "gone", priority="EMERG")

        assert transport.events[0].level is Severity.FATAL

    def test_unmapped_priority(self, client, transport):
        """Test that an unknown priority returns None."""
        assert client.capture_log_event("worker", "gone", priority=12) is None
        assert transport.events == []


class TestFlushClose:
    """Tests for flush and close delegation."""

    def test_delegates_to_transport(self, client, transport):
        """Test that flush and close reach the transport."""
        with patch.object(transport, "flush") as flush, patch.object(transport, "close") as close:
            client.flush(1.0)
            client.close(0.5)

        flush.assert_called_once_with(1.0)
        close.assert_called_once_with(0.5)
