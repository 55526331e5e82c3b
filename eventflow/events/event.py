"""
eventflow Events — Event Base Type
====================================
An Event whose processing may be interrupted once it has been handled.

The dispatcher checks is_stopped() before every listener call.
Once stop() has been called the remaining listeners of that dispatch
are skipped. There is no way to resume propagation.

Payload-carrying events subclass BaseEvent. Any object exposing a
callable is_stopped() is treated as stoppable; plain objects are
dispatched to every listener.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class StoppableEvent(Protocol):
    """Structural contract checked by the dispatch loop."""

    def is_stopped(self) -> bool:
        ...  # pragma: no cover


class BaseEvent:
    """
    Event carrying a one-way propagation flag.

    The flag defaults at class level so dataclass subclasses do not
    need to call super().__init__().
    """

    _stopped: bool = False

    def is_stopped(self) -> bool:
        """True once a listener has stopped propagation."""
        return self._stopped

    def stop(self) -> None:
        """Stop propagation to the remaining listeners. Idempotent."""
        self._stopped = True

    def __repr__(self) -> str:
        return f"{type(self).__name__}(stopped={self._stopped})"


def is_stoppable(event: Any) -> bool:
    """Check whether the dispatch loop should consult event.is_stopped()."""
    return callable(getattr(event, "is_stopped", None))
