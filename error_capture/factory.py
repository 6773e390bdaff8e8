# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Transport factory dispatching on the driver name."""

from collections.abc import Callable, Mapping
from typing import Any

from .transport import Transport


def _build_console(options: dict[str, Any]) -> Transport:
    from .console_transport import ConsoleTransport

    return ConsoleTransport(logger_name=options.get("logger_name"))


def _build_silent(options: dict[str, Any]) -> Transport:
    from .silent_transport import SilentTransport

    return SilentTransport()


def _build_sentry(options: dict[str, Any]) -> Transport:
    from .sentry_transport import SentryTransport

    return SentryTransport.from_config(options)


_DRIVERS: Mapping[str, Callable[[dict[str, Any]], Transport]] = {
    "console": _build_console,
    "silent": _build_silent,
    "sentry": _build_sentry,
}


def create_transport(transport_type: str, **options: Any) -> Transport:
    """Create a transport by driver name.

    Args:
        transport_type: "sentry", "console" or "silent" (case-insensitive)
        **options: Driver options

    Returns:
        Transport instance

    Raises:
        ValueError: If transport_type is missing or not recognized
        ConfigurationError: If the driver rejects its options
    """
    if not transport_type:
        raise ValueError("transport type is required")

    driver = str(transport_type).lower()
    try:
        build = _DRIVERS[driver]
    except KeyError as exc:
        supported = ", ".join(sorted(_DRIVERS))
        raise ValueError(
            f"Unknown transport driver: {driver}. Supported drivers: {supported}"
        ) from exc
    return build(dict(options))
