# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Abstract transport interface."""

from abc import ABC, abstractmethod

from .diagnostics import Logger, get_logger
from .errors import TransportError
from .event import Event

DEFAULT_TIMEOUT = 2.0


class Transport(ABC):
    """Ships built events to a collector.

    ``send`` is fire-and-forget from the caller's point of view: delivery
    failures are written to the diagnostic logger and ``None`` is returned.
    Each event is attempted at most once.
    """

    def __init__(self, logger: Logger | None = None):
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_logger()

    @abstractmethod
    def _deliver(self, event: Event) -> str | None:
        """Deliver one event and return the collector's event id.

        Raises:
            TransportError: If the collector did not accept the event
        """

    def send(self, event: Event) -> str | None:
        """Send an event, never raising.

        Args:
            event: The event to send

        Returns:
            The event id, or None if the event was not sent
        """
        try:
            return self._deliver(event)
        except TransportError as e:
            self.logger.warning(
                "Event not sent",
                transport=type(self).__name__,
                event_id=event.event_id,
                error=str(e),
            )
        except Exception:
            self.logger.exception(
                "Transport failed unexpectedly",
                transport=type(self).__name__,
                event_id=event.event_id,
            )
        return None

    def flush(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Wait up to ``timeout`` seconds for queued events to be delivered."""

    def close(self, timeout: float = DEFAULT_TIMEOUT) -> None:
        """Release transport resources."""
