# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Exception and warning types raised by the error capture core."""


class CaptureError(Exception):
    """Base class for error capture failures."""


class UnmappedLevelError(CaptureError, ValueError):
    """Raised when a native severity level has no entry in the translation table."""

    def __init__(self, level: object):
        self.level = level
        super().__init__(f"Unmapped severity level: {level!r}")


class MalformedKeyError(CaptureError, ValueError):
    """Raised when a DSN/API key lacks the delimiters needed for redaction."""


class TransportError(CaptureError):
    """Raised by transport drivers when the collector cannot accept an event.

    Never reaches the instrumented application: ``Transport.send`` catches it
    and logs it to the diagnostic channel.
    """


class ConfigurationError(CaptureError):
    """Raised at startup when the capture configuration is unusable."""


class TruncatedChainWarning(UserWarning):
    """Emitted when an exception cause chain is longer than the capture limit."""
