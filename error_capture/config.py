# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Capture configuration, loaded from a mapping or from environment variables."""

import json
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .browser import RAVENJS_VERSION, redact_key
from .errors import ConfigurationError, MalformedKeyError, UnmappedLevelError
from .registry import DEFAULT_RESERVED_MEMORY_MB
from .severity import DEBUG, Severity, map_level

_TRUE = ("true", "1", "yes", "on")
_FALSE = ("false", "0", "no", "off")


def _as_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_lower = str(value).strip().lower()
    if value_lower in _TRUE:
        return True
    if value_lower in _FALSE:
        return False
    return default


def _as_int(value: Any, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _as_level(value: Any, default: Severity | int | str) -> Severity | int | str:
    """Numeric strings become priorities; other strings stay level names."""
    if value is None or value == "":
        return default
    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value)
    return value


def _as_mapping(value: Any, name: str) -> dict[str, Any]:
    if value is None or value == "":
        return {}
    if isinstance(value, Mapping):
        return dict(value)
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except ValueError as e:
            raise ConfigurationError(f"{name} is not valid JSON: {e}") from e
        if isinstance(parsed, dict):
            return parsed
    raise ConfigurationError(f"{name} must be a mapping")


@dataclass
class CaptureConfig:
    """Settings for ``setup_error_capture``.

    Attributes:
        api_key: DSN of the collector project (required)
        enabled: Master switch; when False nothing is installed
        transport_type: Transport driver ("sentry", "console", "silent")
        transport_options: Driver options (environment, release, timeout, ...)
        attach_log_handler: Forward stdlib log records to the collector
        handle_exceptions: Install the uncaught exception hook
        call_existing_exception_handler: Chain to the previous excepthook
        handle_errors: Install the runtime error (warning) hook
        call_existing_error_handler: Chain to the previous warning hook
        error_reporting_level: Lowest level sent by the warning hook
        handle_shutdown_errors: Install the process-end hook
        reserved_memory_mb: Memory held for the process-end hook
        handle_browser_errors: Prepare browser instrumentation
        use_cdn: Load the browser library from the CDN
        cdn_version: Browser library version for the CDN URL
        script_source: Custom browser library URL
        browser_config: Options for the browser client
        csp_nonce: Nonce for the inline browser script
    """

    api_key: str = ""
    enabled: bool = True
    transport_type: str = "sentry"
    transport_options: dict[str, Any] = field(default_factory=dict)
    attach_log_handler: bool = True
    handle_exceptions: bool = True
    call_existing_exception_handler: bool = True
    handle_errors: bool = True
    call_existing_error_handler: bool = True
    error_reporting_level: Severity | int | str = DEBUG
    handle_shutdown_errors: bool = True
    reserved_memory_mb: int = DEFAULT_RESERVED_MEMORY_MB
    handle_browser_errors: bool = False
    use_cdn: bool = False
    cdn_version: str = RAVENJS_VERSION
    script_source: str | None = None
    browser_config: dict[str, Any] = field(default_factory=dict)
    csp_nonce: str | None = None

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "CaptureConfig":
        """Create a config from a module-style mapping with dashed keys.

        Example:
            >>> CaptureConfig.from_mapping({
            ...     "sentry-api-key": "https://public@o1.ingest.sentry.io/1",
            ...     "handle-javascript-errors": True,
            ...     "ravenjs-config": {"release": "1.2.3"},
            ... })
        """
        defaults = cls()
        return cls(
            api_key=str(values.get("sentry-api-key") or ""),
            enabled=_as_bool(values.get("use-module"), defaults.enabled),
            transport_type=str(values.get("transport") or defaults.transport_type),
            transport_options=_as_mapping(values.get("raven-config"), "raven-config"),
            attach_log_handler=_as_bool(values.get("attach-log-listener"), defaults.attach_log_handler),
            handle_exceptions=_as_bool(values.get("handle-exceptions"), defaults.handle_exceptions),
            call_existing_exception_handler=_as_bool(
                values.get("call-existing-exception-handler"), defaults.call_existing_exception_handler
            ),
            handle_errors=_as_bool(values.get("handle-errors"), defaults.handle_errors),
            call_existing_error_handler=_as_bool(
                values.get("call-existing-error-handler"), defaults.call_existing_error_handler
            ),
            error_reporting_level=_as_level(values.get("error-reporting"), defaults.error_reporting_level),
            handle_shutdown_errors=_as_bool(values.get("handle-shutdown-errors"), defaults.handle_shutdown_errors),
            reserved_memory_mb=_as_int(values.get("reserved-memory-size"), defaults.reserved_memory_mb),
            handle_browser_errors=_as_bool(values.get("handle-javascript-errors"), defaults.handle_browser_errors),
            use_cdn=_as_bool(values.get("use-ravenjs-cdn"), defaults.use_cdn),
            cdn_version=str(values.get("ravenjs-version") or defaults.cdn_version),
            script_source=values.get("ravenjs-source") or None,
            browser_config=_as_mapping(values.get("ravenjs-config"), "ravenjs-config"),
            csp_nonce=values.get("csp-nonce") or None,
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "CaptureConfig":
        """Create a config from ``ERROR_CAPTURE_*`` environment variables.

        ``ERROR_CAPTURE_DSN`` falls back to ``SENTRY_DSN``. Mapping-valued
        settings (transport options, browser config) are JSON objects.
        """
        env = environ if environ is not None else os.environ
        defaults = cls()

        def get(name: str) -> str | None:
            return env.get(f"ERROR_CAPTURE_{name}")

        return cls(
            api_key=get("DSN") or env.get("SENTRY_DSN") or "",
            enabled=_as_bool(get("ENABLED"), defaults.enabled),
            transport_type=get("TRANSPORT") or defaults.transport_type,
            transport_options=_as_mapping(get("TRANSPORT_OPTIONS"), "ERROR_CAPTURE_TRANSPORT_OPTIONS"),
            attach_log_handler=_as_bool(get("ATTACH_LOG_HANDLER"), defaults.attach_log_handler),
            handle_exceptions=_as_bool(get("HANDLE_EXCEPTIONS"), defaults.handle_exceptions),
            call_existing_exception_handler=_as_bool(
                get("CALL_EXISTING_EXCEPTION_HANDLER"), defaults.call_existing_exception_handler
            ),
            handle_errors=_as_bool(get("HANDLE_ERRORS"), defaults.handle_errors),
            call_existing_error_handler=_as_bool(
                get("CALL_EXISTING_ERROR_HANDLER"), defaults.call_existing_error_handler
            ),
            error_reporting_level=_as_level(get("ERROR_REPORTING_LEVEL"), defaults.error_reporting_level),
            handle_shutdown_errors=_as_bool(get("HANDLE_SHUTDOWN_ERRORS"), defaults.handle_shutdown_errors),
            reserved_memory_mb=_as_int(get("RESERVED_MEMORY_MB"), defaults.reserved_memory_mb),
            handle_browser_errors=_as_bool(get("HANDLE_BROWSER_ERRORS"), defaults.handle_browser_errors),
            use_cdn=_as_bool(get("USE_CDN"), defaults.use_cdn),
            cdn_version=get("CDN_VERSION") or defaults.cdn_version,
            script_source=get("SCRIPT_SOURCE") or None,
            browser_config=_as_mapping(get("BROWSER_CONFIG"), "ERROR_CAPTURE_BROWSER_CONFIG"),
            csp_nonce=get("CSP_NONCE") or None,
        )

    def reporting_threshold(self) -> Severity:
        """The error reporting level as a Severity.

        Raises:
            ConfigurationError: If the level cannot be mapped
        """
        try:
            return map_level(self.error_reporting_level)
        except UnmappedLevelError as e:
            raise ConfigurationError(f"Invalid error reporting level: {e.level!r}") from e

    def validate(self) -> None:
        """Fail fast on settings that would break capture at runtime.

        Raises:
            ConfigurationError: If a setting is missing or invalid
        """
        if not self.enabled:
            return
        if not self.api_key or not self.api_key.strip():
            raise ConfigurationError("Missing Sentry API key.")
        self.reporting_threshold()
        if self.reserved_memory_mb < 0:
            raise ConfigurationError("reserved_memory_mb must not be negative")
        if self.handle_browser_errors:
            try:
                redact_key(self.api_key)
            except MalformedKeyError as e:
                raise ConfigurationError(f"API key cannot be exposed to browsers: {e}") from e
            try:
                json.dumps(self.browser_config)
            except (TypeError, ValueError) as e:
                raise ConfigurationError(f"Browser config is not JSON-serializable: {e}") from e
