# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Factory functions for diagnostic loggers."""

import os

from .logger import Logger
from .silent_logger import SilentLogger
from .stream_logger import StreamLogger

_default_logger: Logger | None = None


def _default(value: str | None, env_var: str, fallback: str) -> str:
    """Pick an explicit value, then the env var, then the fallback."""
    return value or os.getenv(env_var) or fallback


def create_logger(
    logger_type: str | None = None,
    level: str | None = None,
    name: str | None = None,
) -> Logger:
    """Create a diagnostic logger.

    Args:
        logger_type: "stream" or "silent". Defaults to ERROR_CAPTURE_LOG_TYPE
            env or "stream".
        level: Minimum level. Defaults to ERROR_CAPTURE_LOG_LEVEL env or "WARNING".
        name: Logger name. Defaults to ERROR_CAPTURE_LOG_NAME env or "error_capture".

    Returns:
        Logger instance

    Raises:
        ValueError: If logger_type is not recognized

    Example:
        >>> logger = create_logger(logger_type="stream", level="DEBUG")
        >>> logger.warning("Collector unreachable", transport="sentry")
    """
    logger_type = _default(logger_type, "ERROR_CAPTURE_LOG_TYPE", "stream").lower()
    level = _default(level, "ERROR_CAPTURE_LOG_LEVEL", "WARNING").upper()
    name = _default(name, "ERROR_CAPTURE_LOG_NAME", "error_capture")

    if logger_type == "stream":
        return StreamLogger(level=level, name=name)
    elif logger_type == "silent":
        return SilentLogger(level=level, name=name)
    else:
        raise ValueError(
            f"Unknown logger_type: {logger_type}. "
            f"Must be one of: stream, silent"
        )


def get_logger() -> Logger:
    """Return the shared default diagnostic logger, creating it on first use."""
    global _default_logger
    if _default_logger is None:
        _default_logger = create_logger()
    return _default_logger


def set_default_logger(logger: Logger | None) -> None:
    """Replace the shared default diagnostic logger (None resets it)."""
    global _default_logger
    _default_logger = logger
