"""
eventflow Bridges — Native Bridge Protocol
============================================
A native bridge mirrors dispatch onto a platform notification
primitive, for interop only.

It never takes part in ordering or propagation decisions and never
mutates the dispatcher's registry. The dispatcher calls emit() AFTER
its own listener loop, whether or not propagation was stopped.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol

Listener = Callable[[Any], Any]


class NativeBridge(Protocol):
    """Hooks a dispatcher calls on its native mirror."""

    def emit(self, event_name: str, event: Any) -> None:
        """Mirror a completed dispatch."""
        ...  # pragma: no cover

    def on_listener_added(
        self, event_name: str, listener: Listener, listener_count: int
    ) -> None:
        """A core listener was registered (listener_count after adding)."""
        ...  # pragma: no cover

    def on_name_cleared(self, event_name: str) -> None:
        """The last core listener for event_name was removed."""
        ...  # pragma: no cover


class NullBridge:
    """Default bridge — mirrors nothing."""

    def emit(self, event_name: str, event: Any) -> None:
        return None

    def on_listener_added(
        self, event_name: str, listener: Listener, listener_count: int
    ) -> None:
        return None

    def on_name_cleared(self, event_name: str) -> None:
        return None
