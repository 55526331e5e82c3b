"""
eventflow Events — Errors
===========================
Error types for the listener registry and the dispatch loop.

Two families:
- Registration errors (raised to the caller of add_listener / add_subscriber).
- Listener failures (ListenerError). These are NEVER raised out of
  dispatch. They are built by the dispatch loop and handed to the
  diagnostic sink.
"""

from __future__ import annotations

from typing import Any, Callable


def describe_listener(listener: Callable[..., Any]) -> str:
    """Readable name for a listener (qualname when available)."""
    return getattr(listener, "__qualname__", None) or repr(listener)


class EventBusError(Exception):
    """Base error for eventflow operations."""
    pass


class InvalidListenerError(EventBusError):
    """Listener passed to add_listener is not callable."""

    def __init__(self, event_name: str, listener: Any):
        self.event_name = event_name
        self.listener = listener
        super().__init__(
            f"Listener for event '{event_name}' must be callable, "
            f"got {type(listener).__name__}."
        )


class InvalidPriorityError(EventBusError):
    """Priority passed to add_listener is not an int."""

    def __init__(self, event_name: str, priority: Any):
        self.event_name = event_name
        self.priority = priority
        super().__init__(
            f"Priority for event '{event_name}' must be an int, "
            f"got {type(priority).__name__}."
        )


class InvalidSubscriptionError(EventBusError):
    """Subscriber returned a malformed subscription table."""

    def __init__(self, subscriber: Any, event_name: str, reason: str):
        self.subscriber = subscriber
        self.event_name = event_name
        self.reason = reason
        super().__init__(
            f"Invalid subscription for event '{event_name}' on "
            f"{type(subscriber).__name__}: {reason}"
        )


class DuplicateListenerError(EventBusError):
    """Same listener already registered for this event name."""

    def __init__(self, event_name: str, listener: Callable[..., Any]):
        self.event_name = event_name
        self.listener = listener
        super().__init__(
            f"Listener '{describe_listener(listener)}' already registered "
            f"for event '{event_name}'."
        )


# ══════════════════════════════════════════════════════════════
# LISTENER FAILURES (reported, never raised from dispatch)
# ══════════════════════════════════════════════════════════════

class ListenerError(EventBusError):
    """A listener failed while handling an event."""

    kind = "listener"

    def __init__(
        self,
        event_name: str,
        listener: Callable[..., Any],
        cause: BaseException,
    ):
        self.event_name = event_name
        self.listener = listener
        self.cause = cause
        super().__init__(
            f"{self.describe()} for '{event_name}' "
            f"({describe_listener(listener)}): "
            f"{type(cause).__name__}: {cause}"
        )

    def describe(self) -> str:
        return "Error in event listener"


class ListenerInvocationError(ListenerError):
    """Listener raised synchronously during dispatch."""

    kind = "invocation"


class AsyncListenerRejection(ListenerError):
    """Awaitable returned by a listener completed with an error."""

    kind = "async"

    def describe(self) -> str:
        return "Async error in event listener"
