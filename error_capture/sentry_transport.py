# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Transport backed by the Sentry SDK."""

from typing import Any

import sentry_sdk

from .errors import ConfigurationError, TransportError
from .event import Event
from .transport import DEFAULT_TIMEOUT, Transport


class SentryTransport(Transport):
    """Sends events to a Sentry collector through a dedicated SDK client.

    The client is private to this transport: no global hub is initialized and
    default integrations are off, so the SDK installs no excepthook or logging
    hooks of its own. Those are owned by ``HandlerRegistry``.

    Example:
        transport = SentryTransport(dsn="https://public@o1.ingest.sentry.io/1")
        event_id = transport.send(event)
    """

    def __init__(
        self,
        dsn: str,
        environment: str | None = None,
        release: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        options: dict[str, Any] | None = None,
        **kwargs: Any,
    ):
        """Initialize the Sentry transport.

        Args:
            dsn: Sentry DSN for the project
            environment: Environment name (production, staging, development)
            release: Release identifier attached to every event
            timeout: Upper bound in seconds for flushing queued events
            options: Extra keyword options passed to ``sentry_sdk.Client``

        Raises:
            ConfigurationError: If the DSN is empty or rejected by the SDK
        """
        super().__init__(**kwargs)
        if not dsn:
            raise ConfigurationError("Missing Sentry DSN.")

        self.dsn = dsn
        self.environment = environment
        self.timeout = timeout

        client_options: dict[str, Any] = dict(options or {})
        client_options.setdefault("default_integrations", False)
        client_options.setdefault("shutdown_timeout", timeout)
        if environment:
            client_options["environment"] = environment
        if release:
            client_options["release"] = release

        try:
            self._client = sentry_sdk.Client(dsn, **client_options)
        except Exception as e:
            raise ConfigurationError(f"Invalid Sentry configuration: {e}") from e

    @classmethod
    def from_config(cls, options: dict[str, Any]) -> "SentryTransport":
        """Create a SentryTransport from a transport options mapping.

        Known keys (dsn, environment, release, timeout) become arguments;
        everything else is handed to the SDK client.
        """
        options = dict(options)
        return cls(
            dsn=options.pop("dsn", ""),
            environment=options.pop("environment", None),
            release=options.pop("release", None),
            timeout=float(options.pop("timeout", DEFAULT_TIMEOUT)),
            options=options,
        )

    def _deliver(self, event: Event) -> str | None:
        try:
            event_id = self._client.capture_event(event.to_payload())
        except Exception as e:
            raise TransportError(f"Sentry client rejected event: {e}") from e

        if event_id is None:
            # Dropped by sampling or a before_send hook
            self.logger.debug("Event dropped by Sentry client", event_id=event.event_id)
        return event_id

    def flush(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        try:
            self._client.flush(timeout=min(timeout, self.timeout))
        except Exception:
            self.logger.exception("Failed to flush Sentry client")

    def close(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        try:
            self._client.close(timeout=min(timeout, self.timeout))
        except Exception:
            self.logger.exception("Failed to close Sentry client")
