# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Console transport that writes events through stdlib logging."""

import logging
from typing import Any

from .event import Event
from .severity import Severity
from .transport import Transport

logger = logging.getLogger(__name__)

_LOG_LEVELS = {
    Severity.DEBUG: logging.DEBUG,
    Severity.INFO: logging.INFO,
    Severity.WARNING: logging.WARNING,
    Severity.ERROR: logging.ERROR,
    Severity.FATAL: logging.CRITICAL,
}


class ConsoleTransport(Transport):
    """Transport for local development: events become log lines.

    The event's own id is returned, so callers can still show a reference.
    """

    def __init__(self, logger_name: str | None = None, **kwargs: Any):
        """Initialize console transport.

        Args:
            logger_name: Optional logger name to use (defaults to module logger)
        """
        super().__init__(**kwargs)
        self.stdlib_logger = logging.getLogger(logger_name) if logger_name else logger

    def _deliver(self, event: Event) -> str | None:
        line = f"[{event.event_id}] {event.message}"
        if event.tags:
            line += " | Tags: " + ", ".join(f"{k}={v}" for k, v in event.tags.items())
        if event.extra:
            line += " | Extra: " + ", ".join(f"{k}={v}" for k, v in event.extra.items())

        self.stdlib_logger.log(_LOG_LEVELS[event.level], line)
        for link in event.exception_chain[1:]:
            self.stdlib_logger.debug(f"Caused by {link.type}: {link.message}")
        return event.event_id
