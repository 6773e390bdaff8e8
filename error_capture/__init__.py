# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Error capture client core.

Leveled, tagged error and event capture with pluggable transports,
process-wide hook installation and DSN redaction for browser instrumentation.

Example:
    >>> from error_capture import CaptureConfig, setup_error_capture
    >>> capture = setup_error_capture(CaptureConfig(api_key="https://public@o1.ingest.sentry.io/1"))
    >>> event_id = capture.client.capture_message("Cache warmed", level="NOTICE")
"""

from .bootstrap import ErrorCapture, setup_error_capture
from .browser import BrowserInstrumentation, build_browser_instrumentation, redact_key
from .client import ErrorCaptureClient
from .config import CaptureConfig
from .errors import (
    CaptureError,
    ConfigurationError,
    MalformedKeyError,
    TransportError,
    TruncatedChainWarning,
    UnmappedLevelError,
)
from .event import Event, EventBuilder, ExceptionLink, StackFrame, iter_exception_chain
from .factory import create_transport
from .log_handler import CaptureHandler
from .registry import HandlerRegistration, HandlerRegistry
from .severity import Severity, map_level
from .transport import Transport

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Core
    "Event",
    "EventBuilder",
    "ExceptionLink",
    "StackFrame",
    "Severity",
    "iter_exception_chain",
    "map_level",
    "redact_key",
    # Capture
    "CaptureHandler",
    "ErrorCaptureClient",
    "HandlerRegistration",
    "HandlerRegistry",
    # Transports
    "Transport",
    "create_transport",
    # Startup
    "BrowserInstrumentation",
    "CaptureConfig",
    "ErrorCapture",
    "build_browser_instrumentation",
    "setup_error_capture",
    # Errors
    "CaptureError",
    "ConfigurationError",
    "MalformedKeyError",
    "TransportError",
    "TruncatedChainWarning",
    "UnmappedLevelError",
]
