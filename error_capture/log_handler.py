# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""stdlib ``logging`` handler that forwards records to the capture client."""

import logging
import threading
from typing import Any

from .client import ErrorCaptureClient
from .severity import map_level, python_level_to_priority

# Diagnostics about capture itself and the collector SDK's own chatter
IGNORED_LOGGERS = ("error_capture", "sentry_sdk", "urllib3")


def _in_namespace(name: str, namespace: str) -> bool:
    return name == namespace or name.startswith(namespace + ".")


class CaptureHandler(logging.Handler):
    """Forward log records as events.

    Tags and extra context are read from the record attributes ``tags`` and
    ``context``, i.e. ``logger.error("...", extra={"tags": {...}, "context": {...}})``.
    Records carrying ``exc_info`` are captured as exceptions. The id of the
    last event sent is kept in ``last_event_id`` and set on the record as
    ``event_id``.

    Records from ``IGNORED_LOGGERS`` and from the transport's own logger are
    dropped, as is anything logged on this thread while a record is being
    captured.
    """

    def __init__(self, client: ErrorCaptureClient, level: int = logging.NOTSET):
        super().__init__(level)
        self.client = client
        self.last_event_id: str | None = None
        self._local = threading.local()

    def _ignored(self, name: str) -> bool:
        namespaces = list(IGNORED_LOGGERS)
        transport_logger = getattr(self.client.transport, "stdlib_logger", None)
        if transport_logger is not None:
            namespaces.append(transport_logger.name)
        return any(_in_namespace(name, namespace) for namespace in namespaces)

    def emit(self, record: logging.LogRecord) -> None:
        if getattr(self._local, "emitting", False) or self._ignored(record.name):
            return
        self._local.emitting = True
        try:
            event_id = self._capture(record)
        except Exception:
            self.handleError(record)
            return
        finally:
            self._local.emitting = False

        self.last_event_id = event_id
        record.event_id = event_id

    def _capture(self, record: logging.LogRecord) -> str | None:
        tags = getattr(record, "tags", None)
        context: dict[str, Any] = dict(getattr(record, "context", None) or {})
        context.setdefault("logger", record.name)
        priority = python_level_to_priority(record.levelno)

        exc = record.exc_info[1] if record.exc_info else None
        if exc is not None:
            context.setdefault("log_message", record.getMessage())
            return self.client.capture_exception(exc, tags=tags, extra=context, level=map_level(priority))
        return self.client.capture_log_event(
            record.name, record.getMessage(), priority=priority, tags=tags, extra=context
        )
