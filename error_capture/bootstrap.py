# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Startup wiring: build the client and install the configured hooks."""

import logging
from collections.abc import Callable
from dataclasses import dataclass

from .browser import BrowserInstrumentation, build_browser_instrumentation
from .client import ErrorCaptureClient
from .config import CaptureConfig
from .diagnostics import Logger, get_logger
from .factory import create_transport
from .log_handler import CaptureHandler
from .registry import HandlerRegistry
from .transport import Transport


@dataclass
class ErrorCapture:
    """Handles to everything ``setup_error_capture`` created.

    Attributes:
        config: The validated configuration
        client: Client for explicit captures
        registry: Registry owning the process-wide hooks
        log_handler: Handler attached to the root logger, if any
        browser: Browser instrumentation, if enabled
    """

    config: CaptureConfig
    client: ErrorCaptureClient
    registry: HandlerRegistry
    log_handler: CaptureHandler | None = None
    browser: BrowserInstrumentation | None = None

    def close(self) -> None:
        """Uninstall hooks, detach the log handler and close the transport."""
        self.registry.restore()
        if self.log_handler is not None:
            logging.getLogger().removeHandler(self.log_handler)
            self.log_handler = None
        self.client.close()


def setup_error_capture(
    config: CaptureConfig,
    transport: Transport | None = None,
    logger: Logger | None = None,
    last_error: Callable[[], BaseException | None] | None = None,
) -> ErrorCapture | None:
    """Validate ``config`` and install error capture for this process.

    Configuration problems raise before anything is installed, so the host
    fails at startup instead of running without error reporting.

    Args:
        config: Capture configuration
        transport: Transport to use instead of the configured driver
        logger: Diagnostic logger; defaults to the shared one
        last_error: Fatal error provider for the shutdown hook

    Returns:
        ErrorCapture handles, or None when capture is disabled

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    if not config.enabled:
        return None
    config.validate()

    logger = logger or get_logger()
    if transport is None:
        options = dict(config.transport_options)
        if config.transport_type.lower() == "sentry":
            options.setdefault("dsn", config.api_key)
        transport = create_transport(config.transport_type, **options)

    client = ErrorCaptureClient(transport, logger=logger)
    registry = HandlerRegistry(client, logger=logger, last_error=last_error)
    capture = ErrorCapture(config=config, client=client, registry=registry)

    try:
        # Precedes hook installation
        if config.handle_browser_errors:
            capture.browser = build_browser_instrumentation(
                config.api_key,
                config.browser_config,
                use_cdn=config.use_cdn,
                cdn_version=config.cdn_version,
                script_source=config.script_source,
                nonce=config.csp_nonce,
            )
        _install_hooks(capture)
    except Exception:
        capture.close()
        raise

    logger.info(
        "Error capture installed",
        transport=type(transport).__name__,
        hooks=sorted(registry.active_hooks),
    )
    return capture


def _install_hooks(capture: ErrorCapture) -> None:
    config = capture.config
    registry = capture.registry

    if config.attach_log_handler:
        capture.log_handler = CaptureHandler(capture.client)
        logging.getLogger().addHandler(capture.log_handler)

    if config.handle_exceptions:
        registry.register_exception_handler(config.call_existing_exception_handler)

    if config.handle_errors:
        registry.register_error_handler(
            config.call_existing_error_handler,
            config.reporting_threshold(),
        )

    if config.handle_shutdown_errors:
        registry.register_shutdown_function(config.reserved_memory_mb)
