# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Diagnostic logger writing structured JSON lines to a stream."""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, TextIO

from .logger import Logger

_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class StreamLogger(Logger):
    """Logger that writes one JSON object per diagnostic line.

    Each entry is also emitted through the stdlib logger of the same name, so
    host handlers and pytest's ``caplog`` see diagnostics too. The mirror is
    skipped while no handler is configured for that logger.
    """

    def __init__(self, level: str = "WARNING", name: str | None = None, stream: TextIO | None = None):
        """Initialize the stream logger.

        Args:
            level: Minimum level written to the stream (DEBUG, INFO, WARNING, ERROR)
            name: Logger name; defaults to "error_capture"
            stream: Output stream; defaults to sys.stderr at write time

        Raises:
            ValueError: If level is not recognized
        """
        self.level = level.upper()
        self.name = name or "error_capture"
        self._stream = stream

        if self.level not in _LEVELS:
            raise ValueError(f"Invalid log level: {level}. Must be one of {list(_LEVELS.keys())}")

        self._stdlib_logger = logging.getLogger(self.name)

    def _log(self, level: str, message: str, /, **kwargs: Any) -> None:
        exc_info = kwargs.pop("exc_info", None)

        if _LEVELS[level] >= _LEVELS[self.level]:
            entry: dict[str, Any] = {
                "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
                "level": level,
                "logger": self.name,
                "message": message,
            }
            if kwargs:
                entry["extra"] = kwargs

            stream = self._stream or sys.stderr
            try:
                print(json.dumps(entry, default=str), file=stream, flush=True)
            except (TypeError, ValueError, OSError) as e:
                print(f"{level}: {message} (JSON serialization failed: {e})", file=sys.stderr, flush=True)

        # No handlers would mean logging.lastResort: a second copy on stderr
        if self._stdlib_logger.hasHandlers():
            extra = {"extra": kwargs} if kwargs else None
            self._stdlib_logger.log(_LEVELS[level], message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        kwargs.setdefault("exc_info", True)
        self._log("ERROR", message, **kwargs)
