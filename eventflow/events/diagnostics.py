"""
eventflow Events — Diagnostic Sink
====================================
Where listener failures go.

The dispatch loop never raises listener failures to its caller.
It builds a ListenerError and hands it to a sink: any callable
taking that single error. The default sink logs it.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

from eventflow.events.errors import (
    AsyncListenerRejection,
    ListenerError,
    ListenerInvocationError,
)

DiagnosticSink = Callable[[ListenerError], None]


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class LoggingDiagnosticSink:
    """Production sink — logs the failure with its traceback."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._logger = logger or logging.getLogger("eventflow.events")

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def __call__(self, error: ListenerError) -> None:
        cause = error.cause
        self._logger.error(
            str(error),
            exc_info=(type(cause), cause, cause.__traceback__),
            extra={
                "event_name": error.event_name,
                "failure_kind": error.kind,
            },
        )


class CollectingDiagnosticSink:
    """
    Test sink — keeps every reported failure.

    Usage:
        sink = CollectingDiagnosticSink()
        dispatcher = EventDispatcher(sink=sink)
        ...
        assert len(sink.invocation_errors) == 1
    """

    def __init__(self) -> None:
        self.errors: List[ListenerError] = []

    def __call__(self, error: ListenerError) -> None:
        self.errors.append(error)

    @property
    def invocation_errors(self) -> List[ListenerInvocationError]:
        return [e for e in self.errors if isinstance(e, ListenerInvocationError)]

    @property
    def async_rejections(self) -> List[AsyncListenerRejection]:
        return [e for e in self.errors if isinstance(e, AsyncListenerRejection)]

    def clear(self) -> None:
        self.errors.clear()

    def __len__(self) -> int:
        return len(self.errors)


def report(sink: DiagnosticSink, error: ListenerError) -> None:
    """
    Hand an error to a sink.

    A sink that raises is logged and otherwise ignored, so a broken
    sink cannot break dispatch.
    """
    try:
        sink(error)
    except Exception:
        logging.getLogger("eventflow.events").exception(
            f"Diagnostic sink {sink!r} failed while reporting: {error}"
        )
