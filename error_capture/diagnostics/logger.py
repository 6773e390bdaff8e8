# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract diagnostic logger interface."""

from abc import ABC, abstractmethod
from typing import Any


class Logger(ABC):
    """Side channel for problems the capture core must not raise.

    Capture failures (unreachable collector, unmappable level, broken input)
    are written here instead of propagating into the instrumented application.
    """

    @abstractmethod
    def debug(self, message: str, **kwargs: Any) -> None:
        """Log a debug-level diagnostic."""

    @abstractmethod
    def info(self, message: str, **kwargs: Any) -> None:
        """Log an info-level diagnostic."""

    @abstractmethod
    def warning(self, message: str, **kwargs: Any) -> None:
        """Log a warning-level diagnostic."""

    @abstractmethod
    def error(self, message: str, **kwargs: Any) -> None:
        """Log an error-level diagnostic."""

    @abstractmethod
    def exception(self, message: str, **kwargs: Any) -> None:
        """Log an error-level diagnostic from inside an exception handler.

        Args:
            message: The log message
            **kwargs: Additional structured data to log
        """
