# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Capture client: builds events, assigns severity and hands them to a transport."""

from collections.abc import Mapping
from typing import Any

from .diagnostics import Logger, get_logger
from .errors import UnmappedLevelError
from .event import NO_MESSAGE, Event, EventBuilder
from .severity import INFO, Severity, map_level
from .transport import DEFAULT_TIMEOUT, Transport


def _target_name(target: Any) -> str:
    if target is None:
        return ""
    if isinstance(target, str):
        return target
    if isinstance(target, type):
        return f"{target.__module__}.{target.__qualname__}"
    cls = type(target)
    return f"{cls.__module__}.{cls.__qualname__}"


class ErrorCaptureClient:
    """Entry point for capturing messages, exceptions and runtime errors.

    Every ``capture_*`` method returns the event id, or ``None`` when the
    event could not be built or sent. None of them raise: failures are
    written to the diagnostic logger.
    """

    def __init__(
        self,
        transport: Transport,
        builder: EventBuilder | None = None,
        logger: Logger | None = None,
    ):
        self.transport = transport
        self.builder = builder or EventBuilder()
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_logger()

    def send(self, event: Event) -> str | None:
        """Send an already built event."""
        return self.transport.send(event)

    def capture_message(
        self,
        message: str,
        level: Severity | int | str = Severity.INFO,
        tags: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        target: str | None = None,
    ) -> str | None:
        """Capture a plain message.

        Args:
            message: The message to capture
            level: Severity, or a native level understood by ``map_level``
            tags: Optional tags
            extra: Optional extra context
            target: Optional name of the emitting component

        Returns:
            Event id, or None if nothing was sent
        """
        try:
            severity = map_level(level)
        except UnmappedLevelError as e:
            self.logger.warning("Message not captured: unmapped level", level=repr(e.level))
            return None
        try:
            event = self.builder.from_message(message, tags=tags, extra=extra, level=severity, target=target)
        except Exception:
            self.logger.exception("Failed to build message event")
            return None
        return self.send(event)

    def capture_exception(
        self,
        exception: BaseException,
        tags: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
        level: Severity = Severity.ERROR,
    ) -> str | None:
        """Capture an exception together with its cause chain."""
        try:
            event = self.builder.from_exception(exception, tags=tags, extra=extra, level=level)
        except Exception:
            self.logger.exception("Failed to build exception event")
            return None
        return self.send(event)

    def capture_runtime_error(
        self,
        error_code: Any,
        error_message: str,
        filename: str,
        lineno: int | None,
        level: Severity | int | str = Severity.ERROR,
        tags: Mapping[str, Any] | None = None,
    ) -> str | None:
        """Capture a runtime error signal (code, message, file, line)."""
        try:
            severity = map_level(level)
        except UnmappedLevelError as e:
            self.logger.warning("Runtime error not captured: unmapped level", level=repr(e.level))
            return None
        try:
            event = self.builder.from_runtime_error(
                error_code, error_message, filename, lineno, level=severity, tags=tags
            )
        except Exception:
            self.logger.exception("Failed to build runtime error event")
            return None
        return self.send(event)

    def capture_log_event(
        self,
        target: Any,
        message: str | None = None,
        priority: int | str = INFO,
        tags: Mapping[str, Any] | None = None,
        extra: Mapping[str, Any] | None = None,
    ) -> str | None:
        """Capture a host log event.

        The message is prefixed with the emitting target, e.g.
        ``"billing.Invoice: payment declined"``.

        Args:
            target: Emitting component; objects are named by their class
            message: Log message; defaults to "No message provided"
            priority: Syslog priority (0-7) or level name; defaults to INFO
            tags: Optional tags
            extra: Optional extra context

        Returns:
            Event id, so callers can show the user a reference, or None
        """
        name = _target_name(target)
        text = message if message else NO_MESSAGE
        formatted = f"{name}: {text}" if name else text
        return self.capture_message(formatted, level=priority, tags=tags, extra=extra, target=name or None)

    def flush(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Wait up to ``timeout`` seconds for queued events."""
        self.transport.flush(timeout)

    def close(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Flush and release the transport."""
        self.transport.close(timeout)
