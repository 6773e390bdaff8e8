# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Severity levels and translation from native (syslog-style) levels."""

import logging
from enum import IntEnum

from .errors import UnmappedLevelError


class Severity(IntEnum):
    """Severity vocabulary of the reporting service, totally ordered."""

    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    FATAL = 50

    @property
    def label(self) -> str:
        """Wire name of the level (``"debug"`` ... ``"fatal"``)."""
        return self.name.lower()


# Syslog priorities 0 (EMERG) .. 7 (DEBUG)
EMERG = 0
ALERT = 1
CRIT = 2
ERR = 3
WARN = 4
NOTICE = 5
INFO = 6
DEBUG = 7

_PRIORITY_LEVELS: dict[int, Severity] = {
    EMERG: Severity.FATAL,
    ALERT: Severity.FATAL,
    CRIT: Severity.FATAL,
    ERR: Severity.ERROR,
    WARN: Severity.WARNING,
    NOTICE: Severity.INFO,
    INFO: Severity.INFO,
    DEBUG: Severity.DEBUG,
}

_NAMED_LEVELS: dict[str, Severity] = {
    "DEBUG": Severity.DEBUG,
    "INFO": Severity.INFO,
    "NOTICE": Severity.INFO,
    "WARN": Severity.WARNING,
    "ERR": Severity.ERROR,
    "CRIT": Severity.FATAL,
    "ALERT": Severity.FATAL,
    "EMERG": Severity.FATAL,
}


def map_level(level: Severity | int | str) -> Severity:
    """Translate a native level into a ``Severity``.

    Args:
        level: Syslog priority (0-7), syslog level name (DEBUG, INFO, NOTICE,
            WARN, ERR, CRIT, ALERT, EMERG; case-insensitive) or a ``Severity``.

    Returns:
        The mapped Severity

    Raises:
        UnmappedLevelError: If the level is not in the translation table
    """
    if isinstance(level, Severity):
        return level
    # bool is an int subclass; True/False are not priorities
    if isinstance(level, bool):
        raise UnmappedLevelError(level)
    if isinstance(level, int):
        try:
            return _PRIORITY_LEVELS[level]
        except KeyError:
            raise UnmappedLevelError(level) from None
    if isinstance(level, str):
        try:
            return _NAMED_LEVELS[level.strip().upper()]
        except KeyError:
            raise UnmappedLevelError(level) from None
    raise UnmappedLevelError(level)


def python_level_to_priority(levelno: int) -> int:
    """Convert a stdlib ``logging`` level number to a syslog priority.

    Custom levels round down to the nearest standard level.
    """
    if levelno >= logging.CRITICAL:
        return CRIT
    if levelno >= logging.ERROR:
        return ERR
    if levelno >= logging.WARNING:
        return WARN
    if levelno >= logging.INFO:
        return INFO
    return DEBUG
