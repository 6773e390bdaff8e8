# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Diagnostic channel for the error capture core.

Failures that happen while capturing an error are never raised into the host
application; they are written here instead.

Example:
    >>> from error_capture.diagnostics import create_logger
    >>> logger = create_logger(logger_type="silent")
    >>> logger.warning("Event not sent", reason="collector unreachable")
"""

from .factory import create_logger, get_logger, set_default_logger
from .logger import Logger
from .silent_logger import SilentLogger
from .stream_logger import StreamLogger

__all__ = [
    "Logger",
    "SilentLogger",
    "StreamLogger",
    "create_logger",
    "get_logger",
    "set_default_logger",
]
