# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Silent transport that keeps events in memory for testing."""

from typing import Any

from .event import Event
from .severity import Severity
from .transport import Transport


class SilentTransport(Transport):
    """Stores sent events in memory instead of shipping them.

    Useful in unit tests that need to assert on what would have been reported.
    """

    def __init__(self, **kwargs: Any):
        super().__init__(**kwargs)
        self.events: list[Event] = []

    def _deliver(self, event: Event) -> str | None:
        self.events.append(event)
        return event.event_id

    def get_events(self, level: Severity | None = None) -> list[Event]:
        """Get sent events, optionally filtered by level."""
        if level is None:
            return self.events
        return [e for e in self.events if e.level == level]

    def clear(self) -> None:
        """Forget all stored events."""
        self.events.clear()

    def has_events(self) -> bool:
        return len(self.events) > 0
