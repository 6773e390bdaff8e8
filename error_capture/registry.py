# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Installation of process-wide error, exception and shutdown hooks.

Python's counterparts of the three native signals are:

- runtime errors: ``warnings.showwarning`` (category, message, file, line)
- uncaught exceptions: ``sys.excepthook``
- process end: ``atexit``

A ``HandlerRegistry`` is created once by the application's startup routine
and passed to whatever needs to register or inspect hooks. Each hook kind is
tracked separately; registering an active kind again returns the existing
registration instead of installing a second hook.
"""

import atexit
import sys
import threading
import warnings
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from .client import ErrorCaptureClient
from .diagnostics import Logger, get_logger
from .errors import TruncatedChainWarning
from .severity import NOTICE, WARN, Severity, map_level

ERROR_HANDLER = "error"
EXCEPTION_HANDLER = "exception"
SHUTDOWN_HANDLER = "shutdown"

DEFAULT_RESERVED_MEMORY_MB = 10

_WARNING_PRIORITIES: dict[type, int] = {
    DeprecationWarning: NOTICE,
    PendingDeprecationWarning: NOTICE,
    ImportWarning: NOTICE,
}


def warning_priority(category: type) -> int:
    """Syslog priority for a warning category; unlisted categories are WARN."""
    for cls in getattr(category, "__mro__", ()):
        if cls in _WARNING_PRIORITIES:
            return _WARNING_PRIORITIES[cls]
    return WARN


def last_uncaught_exception() -> BaseException | None:
    """Return the exception the interpreter recorded as uncaught, if any.

    Reads ``sys.last_exc`` (3.12+), then ``sys.last_value``. In an interactive
    session these hold the last exception shown at the prompt, which the user
    has already seen; pass a custom ``last_error`` provider to
    ``HandlerRegistry`` when that should not be reported as FATAL at exit.
    """
    exc = getattr(sys, "last_exc", None)
    if exc is None:
        exc = getattr(sys, "last_value", None)
    return exc


@dataclass(frozen=True)
class HandlerRegistration:
    """Record of one installed hook.

    Attributes:
        kind: "error", "exception" or "shutdown"
        handler: The installed callable
        call_existing: Whether the previous hook is invoked after capture
        previous: Hook that was installed before, restored by ``restore()``
        reporting_level: Lowest severity sent by the error hook
        reserved_memory_mb: Memory held for the shutdown hook
    """

    kind: str
    handler: Callable[..., Any]
    call_existing: bool = False
    previous: Callable[..., Any] | None = None
    reporting_level: Severity | None = None
    reserved_memory_mb: int | None = None


class HandlerRegistry:
    """Owns the process-wide capture hooks for one ``ErrorCaptureClient``.

    Registration is serialized by a lock. Hook invocation only reads the
    immutable registration captured in the hook's closure.
    """

    def __init__(
        self,
        client: ErrorCaptureClient,
        logger: Logger | None = None,
        last_error: Callable[[], BaseException | None] | None = None,
    ):
        """Initialize the registry.

        Args:
            client: Client used to build and send events
            logger: Diagnostic logger; defaults to the shared one
            last_error: Provider queried at shutdown for a fatal error;
                defaults to ``last_uncaught_exception``
        """
        self.client = client
        self._logger = logger
        self._last_error = last_error or last_uncaught_exception
        self._lock = threading.Lock()
        self._local = threading.local()
        self._registrations: dict[str, HandlerRegistration] = {}
        self._reserved_memory: bytearray | None = None
        self._last_reported: BaseException | None = None

    @property
    def logger(self) -> Logger:
        return self._logger or get_logger()

    def is_active(self, kind: str) -> bool:
        return kind in self._registrations

    def registration(self, kind: str) -> HandlerRegistration | None:
        return self._registrations.get(kind)

    @property
    def active_hooks(self) -> frozenset[str]:
        return frozenset(self._registrations)

    @contextmanager
    def _capturing(self) -> Iterator[None]:
        self._local.active = True
        try:
            yield
        finally:
            self._local.active = False

    def _in_capture(self) -> bool:
        return getattr(self._local, "active", False)

    # Error handler

    def register_error_handler(
        self,
        call_existing: bool = True,
        reporting_level: Severity | int | str = Severity.DEBUG,
    ) -> HandlerRegistration:
        """Install the runtime error (warning) hook.

        Warnings below ``reporting_level`` are not sent; they still reach the
        previous hook when ``call_existing`` is set.

        Args:
            call_existing: Invoke the previously installed hook after capture
            reporting_level: Lowest severity to send

        Returns:
            The new registration, or the existing one if already active

        Raises:
            UnmappedLevelError: If reporting_level cannot be mapped
        """
        threshold = map_level(reporting_level)
        with self._lock:
            existing = self._registrations.get(ERROR_HANDLER)
            if existing is not None:
                return existing

            previous = warnings.showwarning

            def handle_warning(message, category, filename, lineno, file=None, line=None):
                if not self._in_capture():
                    self._capture_warning(message, category, filename, lineno, threshold)
                if call_existing and previous is not None:
                    previous(message, category, filename, lineno, file, line)

            registration = HandlerRegistration(
                kind=ERROR_HANDLER,
                handler=handle_warning,
                call_existing=call_existing,
                previous=previous,
                reporting_level=threshold,
            )
            warnings.showwarning = handle_warning
            self._registrations[ERROR_HANDLER] = registration
            self.logger.debug("Error handler registered", reporting_level=threshold.label)
            return registration

    def _capture_warning(self, message: Any, category: type, filename: str, lineno: int, threshold: Severity) -> None:
        if isinstance(category, type) and issubclass(category, TruncatedChainWarning):
            return
        with self._capturing():
            try:
                severity = map_level(warning_priority(category))
                if severity < threshold:
                    return
                self.client.capture_runtime_error(category, str(message), filename, lineno, level=severity)
            except Exception:
                self.logger.exception("Failed to capture runtime error", filename=filename, lineno=lineno)

    # Exception handler

    def register_exception_handler(self, call_existing: bool = True) -> HandlerRegistration:
        """Install the uncaught exception hook.

        Args:
            call_existing: Invoke the previously installed excepthook after capture

        Returns:
            The new registration, or the existing one if already active
        """
        with self._lock:
            existing = self._registrations.get(EXCEPTION_HANDLER)
            if existing is not None:
                return existing

            previous = sys.excepthook

            def handle_exception(exc_type, exc_value, exc_tb):
                if not self._in_capture():
                    self._capture_uncaught(exc_type, exc_value)
                if call_existing and previous is not None:
                    previous(exc_type, exc_value, exc_tb)

            registration = HandlerRegistration(
                kind=EXCEPTION_HANDLER,
                handler=handle_exception,
                call_existing=call_existing,
                previous=previous,
            )
            sys.excepthook = handle_exception
            self._registrations[EXCEPTION_HANDLER] = registration
            self.logger.debug("Exception handler registered")
            return registration

    def _capture_uncaught(self, exc_type: type, exc_value: BaseException | None) -> None:
        if exc_value is None or issubclass(exc_type, KeyboardInterrupt):
            return
        with self._capturing():
            try:
                self.client.capture_exception(
                    exc_value,
                    tags={"handled": "false", "mechanism": "excepthook"},
                    level=Severity.ERROR,
                )
            except Exception:
                self.logger.exception("Failed to capture uncaught exception")
            self._last_reported = exc_value

    # Shutdown handler

    def register_shutdown_function(self, reserved_memory_mb: int = DEFAULT_RESERVED_MEMORY_MB) -> HandlerRegistration:
        """Install the process-end hook for fatal errors.

        ``reserved_memory_mb`` megabytes are allocated now and released when
        the hook runs, so a report can still be built after an out-of-memory
        failure.

        Returns:
            The new registration, or the existing one if already active

        Raises:
            ValueError: If reserved_memory_mb is negative
        """
        if reserved_memory_mb < 0:
            raise ValueError("reserved_memory_mb must not be negative")
        with self._lock:
            existing = self._registrations.get(SHUTDOWN_HANDLER)
            if existing is not None:
                return existing

            self._reserved_memory = bytearray(reserved_memory_mb * 1024 * 1024)
            registration = HandlerRegistration(
                kind=SHUTDOWN_HANDLER,
                handler=self._handle_shutdown,
                reserved_memory_mb=reserved_memory_mb,
            )
            atexit.register(self._handle_shutdown)
            self._registrations[SHUTDOWN_HANDLER] = registration
            self.logger.debug("Shutdown handler registered", reserved_memory_mb=reserved_memory_mb)
            return registration

    @property
    def reserved_memory_size(self) -> int:
        """Bytes currently held for the shutdown hook."""
        return len(self._reserved_memory) if self._reserved_memory is not None else 0

    def _handle_shutdown(self) -> None:
        self._reserved_memory = None
        try:
            error = self._last_error()
        except Exception:
            self.logger.exception("Failed to read last error at shutdown")
            error = None

        if error is not None and error is not self._last_reported:
            with self._capturing():
                try:
                    self.client.capture_exception(
                        error,
                        tags={"handled": "false", "mechanism": "shutdown"},
                        level=Severity.FATAL,
                    )
                except Exception:
                    self.logger.exception("Failed to capture fatal error at shutdown")
            self._last_reported = error

        self.client.flush()

    # Teardown

    def restore(self) -> None:
        """Uninstall every hook and put the previous ones back.

        A hook that has since been replaced by someone else is left alone.
        """
        with self._lock:
            registration = self._registrations.pop(ERROR_HANDLER, None)
            if registration is not None:
                if warnings.showwarning is registration.handler:
                    warnings.showwarning = registration.previous
                else:
                    self.logger.warning("warnings.showwarning was replaced; not restoring")

            registration = self._registrations.pop(EXCEPTION_HANDLER, None)
            if registration is not None:
                if sys.excepthook is registration.handler:
                    sys.excepthook = registration.previous
                else:
                    self.logger.warning("sys.excepthook was replaced; not restoring")

            registration = self._registrations.pop(SHUTDOWN_HANDLER, None)
            if registration is not None:
                atexit.unregister(registration.handler)
                self._reserved_memory = None
