# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""In-memory diagnostic logger for tests."""

import sys
from typing import Any

from .logger import Logger


class SilentLogger(Logger):
    """Logger that keeps diagnostics in memory without output.

    All entries are kept regardless of level.
    """

    def __init__(self, level: str = "DEBUG", name: str | None = None):
        self.level = level.upper()
        self.name = name or "error_capture"
        self.logs: list[dict[str, Any]] = []

    def _log(self, level: str, message: str, /, **kwargs: Any) -> None:
        entry: dict[str, Any] = {"level": level, "message": message}
        if kwargs:
            entry["extra"] = kwargs
        self.logs.append(entry)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log("DEBUG", message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log("INFO", message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log("WARNING", message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log("ERROR", message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        exc = sys.exc_info()[1]
        if exc is not None:
            kwargs.setdefault("error_type", type(exc).__name__)
            kwargs.setdefault("error_message", str(exc))
        self._log("ERROR", message, **kwargs)

    def clear_logs(self) -> None:
        """Clear all stored entries."""
        self.logs.clear()

    def get_logs(self, level: str | None = None) -> list[dict[str, Any]]:
        """Get stored entries, optionally filtered by level."""
        if level is None:
            return self.logs
        return [log for log in self.logs if log["level"] == level]

    def has_log(self, message: str, level: str | None = None) -> bool:
        """Check whether an entry containing ``message`` was logged.

        Args:
            message: Substring to search for
            level: Optional level to filter by

        Returns:
            True if a matching entry exists
        """
        return any(message in log["message"] for log in self.get_logs(level))
