# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Copilot-for-Consensus contributors

"""Canonical event model and the builders that produce it.

Every capture path (log record, caught exception, runtime warning, uncaught
exception, shutdown-time fatal error) is normalized into one immutable
``Event`` before it reaches a transport.
"""

import traceback
import uuid
import warnings
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from itertools import islice
from types import MappingProxyType
from typing import Any

from .errors import TruncatedChainWarning
from .severity import Severity

DEFAULT_CHAIN_LIMIT = 25
NO_MESSAGE = "No message provided"

_PRIMITIVES = (str, int, float, bool, type(None))


@dataclass(frozen=True)
class StackFrame:
    """One frame of a symbolic stack trace."""

    function: str | None
    filename: str
    lineno: int | None

    def to_dict(self) -> dict[str, Any]:
        return {"function": self.function, "filename": self.filename, "lineno": self.lineno}


@dataclass(frozen=True)
class ExceptionLink:
    """One exception in a cause chain."""

    type: str
    message: str
    frames: tuple[StackFrame, ...] = ()
    module: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Render the link in the collector's exception-value shape."""
        value: dict[str, Any] = {
            "type": self.type,
            "value": self.message,
            "stacktrace": {"frames": [frame.to_dict() for frame in self.frames]},
        }
        if self.module:
            value["module"] = self.module
        return value


@dataclass(frozen=True)
class Event:
    """An immutable, fully normalized error report.

    Attributes:
        message: Human-readable summary; never empty without an exception chain
        level: Severity of the event
        tags: Indexed string key/value pairs
        extra: Free-form context; values are primitives or strings
        timestamp: UTC instant at which the event was built
        exception_chain: Newest exception first, root cause last
        target: Name of the component that emitted the event, if known
        event_id: Locally generated identifier (uuid4 hex)
        chain_truncated: True when the cause chain exceeded the capture limit
    """

    message: str
    level: Severity = Severity.INFO
    tags: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    exception_chain: tuple[ExceptionLink, ...] = ()
    target: str | None = None
    event_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    chain_truncated: bool = False

    def to_payload(self) -> dict[str, Any]:
        """Render the event as a JSON-serializable collector payload.

        The collector expects exception values root cause first, so the chain
        is reversed on the way out.
        """
        payload: dict[str, Any] = {
            "event_id": self.event_id,
            "level": self.level.label,
            "timestamp": self.timestamp.isoformat(),
            "tags": dict(self.tags),
            "extra": dict(self.extra),
        }
        if self.message:
            payload["message"] = {"formatted": self.message}
        if self.target:
            payload["logger"] = self.target
        if self.exception_chain:
            payload["exception"] = {
                "values": [link.to_dict() for link in reversed(self.exception_chain)]
            }
        return payload


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return f"<unprintable {type(value).__name__}>"


def sanitize_tags(tags: Mapping[Any, Any] | None) -> Mapping[str, str]:
    """Return a read-only copy of ``tags`` with keys and values as strings."""
    if not tags:
        return MappingProxyType({})
    try:
        items = list(tags.items())
    except Exception:
        return MappingProxyType({})
    return MappingProxyType({_safe_str(k): _safe_str(v) for k, v in items})


def sanitize_extra(extra: Mapping[Any, Any] | None) -> Mapping[str, Any]:
    """Return a read-only shallow copy of ``extra``.

    Primitive values are kept; anything else is replaced by its string form.
    """
    if not extra:
        return MappingProxyType({})
    try:
        items = list(extra.items())
    except Exception:
        return MappingProxyType({})
    return MappingProxyType({
        _safe_str(k): v if isinstance(v, _PRIMITIVES) else _safe_str(v)
        for k, v in items
    })


def _frames(exc: BaseException) -> tuple[StackFrame, ...]:
    return tuple(
        StackFrame(function=summary.name, filename=summary.filename, lineno=summary.lineno)
        for summary in traceback.extract_tb(exc.__traceback__)
    )


def _link(exc: BaseException) -> ExceptionLink:
    exc_type = type(exc)
    module = exc_type.__module__
    return ExceptionLink(
        type=exc_type.__qualname__,
        message=_safe_str(exc),
        frames=_frames(exc),
        module=None if module == "builtins" else module,
    )


def _next_in_chain(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if exc.__suppress_context__:
        return None
    return exc.__context__


def _walk_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = _next_in_chain(current)


def _warn_truncated(limit: int, stacklevel: int) -> None:
    try:
        warnings.warn(
            f"Exception chain longer than {limit} links; remaining causes dropped",
            TruncatedChainWarning,
            stacklevel=stacklevel + 1,
        )
    except TruncatedChainWarning:
        # Raised under an "error" warnings filter; the truncation is still
        # recorded on the event.
        pass


def iter_exception_chain(exc: BaseException, limit: int = DEFAULT_CHAIN_LIMIT) -> Iterator[ExceptionLink]:
    """Yield links from ``exc`` back to its root cause, at most ``limit`` of them.

    Explicit ``__cause__`` wins over implicit ``__context__``; a suppressed
    context ends the chain, as does a cycle. If links remain after ``limit``
    were produced, a ``TruncatedChainWarning`` is emitted.
    """
    for count, current in enumerate(_walk_chain(exc)):
        if count >= limit:
            _warn_truncated(limit, stacklevel=2)
            return
        yield _link(current)


def _code_name(error_code: Any) -> str:
    if isinstance(error_code, type):
        return error_code.__name__
    return _safe_str(error_code)


class EventBuilder:
    """Builds ``Event`` instances from the inputs the host can produce.

    Builders are best-effort: malformed tags or extra values are coerced to
    strings instead of failing.
    """

    def __init__(self, chain_limit: int = DEFAULT_CHAIN_LIMIT, default_tags: Mapping[str, Any] | None = None):
        if chain_limit < 1:
            raise ValueError("chain_limit must be at least 1")
        self.chain_limit = chain_limit
        self.default_tags = dict(sanitize_tags(default_tags))

    def _tags(self, tags: Mapping[Any, Any] | None) -> Mapping[str, str]:
        merged = dict(self.default_tags)
        merged.update(sanitize_tags(tags))
        return MappingProxyType(merged)

    def from_message(
        self,
        message: str | None,
        tags: Mapping[Any, Any] | None = None,
        extra: Mapping[Any, Any] | None = None,
        level: Severity = Severity.INFO,
        target: str | None = None,
    ) -> Event:
        """Build an event from a plain message."""
        text = _safe_str(message) if message is not None else ""
        return Event(
            message=text or NO_MESSAGE,
            level=level,
            tags=self._tags(tags),
            extra=sanitize_extra(extra),
            target=target,
        )

    def from_exception(
        self,
        exception: BaseException,
        tags: Mapping[Any, Any] | None = None,
        extra: Mapping[Any, Any] | None = None,
        level: Severity = Severity.ERROR,
    ) -> Event:
        """Build an event from an exception and its cause chain.

        The chain is ordered newest first; the root cause is the last link.
        A ``TruncatedChainWarning`` for an over-long chain is emitted only
        after the event is built.
        """
        causes = list(islice(_walk_chain(exception), self.chain_limit + 1))
        truncated = len(causes) > self.chain_limit
        chain = tuple(_link(cause) for cause in causes[: self.chain_limit])
        head = chain[0]
        event = Event(
            message=f"{head.type}: {head.message}" if head.message else head.type,
            level=level,
            tags=self._tags(tags),
            extra=sanitize_extra(extra),
            exception_chain=chain,
            chain_truncated=truncated,
        )
        if truncated:
            _warn_truncated(self.chain_limit, stacklevel=2)
        return event

    def from_runtime_error(
        self,
        error_code: Any,
        error_message: str,
        filename: str,
        lineno: int | None,
        level: Severity = Severity.ERROR,
        tags: Mapping[Any, Any] | None = None,
    ) -> Event:
        """Build an event from a non-exception runtime error signal.

        Args:
            error_code: Error kind; a warning category class or any code value
            error_message: Text of the error
            filename: File the error was raised from
            lineno: Line the error was raised from
            level: Severity already mapped by the caller
            tags: Optional tags
        """
        code = _code_name(error_code)
        text = _safe_str(error_message)
        link = ExceptionLink(
            type=code,
            message=text,
            frames=(StackFrame(function=None, filename=_safe_str(filename), lineno=lineno),),
        )
        return Event(
            message=f"{code}: {text}" if text else code,
            level=level,
            tags=self._tags(tags),
            extra=sanitize_extra({"error_code": code, "file": filename, "line": lineno}),
            exception_chain=(link,),
        )
