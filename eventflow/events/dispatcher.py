"""
eventflow Events — Dispatcher
===============================
Routes events to registered listeners in priority order.

Dispatch behavior:
1. Resolve the event name (explicit, else type(event).__name__)
2. Take a sorted snapshot of the listeners for that name
3. Before each listener, stop if the event reports is_stopped()
4. Call the listener with the event as its only argument
5. Catch listener exceptions per listener, report, continue
6. Schedule awaitable results, never await them inline
7. Mirror the dispatch onto the native bridge
8. Return the same event object

Listener failure must NOT:
- Break dispatch of other listeners
- Escape to the caller of dispatch
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TypeVar, Union

from eventflow.bridges.base import NativeBridge, NullBridge
from eventflow.config.settings import DispatcherConfig
from eventflow.events.deferred import DeferredCompletions
from eventflow.events.diagnostics import (
    DiagnosticSink,
    LoggingDiagnosticSink,
    report,
)
from eventflow.events.errors import ListenerInvocationError
from eventflow.events.event import is_stoppable
from eventflow.events.registry import Listener, ListenerEntry, ListenerRegistry
from eventflow.events.subscribers import SubscriberBindings, expand_subscriptions

logger = logging.getLogger("eventflow.events")

E = TypeVar("E")


class EventDispatcher:
    """
    In-memory priority event dispatcher.

    Works everywhere. Mirrors nothing unless given a native bridge.
    Not thread-safe; see LockedEventDispatcher.
    """

    def __init__(
        self,
        config: Optional[DispatcherConfig] = None,
        sink: Optional[DiagnosticSink] = None,
        bridge: Optional[NativeBridge] = None,
    ) -> None:
        self._config = config or DispatcherConfig()
        self._sink: DiagnosticSink = (
            sink if sink is not None
            else LoggingDiagnosticSink(logging.getLogger(self._config.logger_name))
        )
        self._bridge: NativeBridge = bridge if bridge is not None else NullBridge()
        self._registry = ListenerRegistry(
            allow_duplicates=self._config.allow_duplicate_listeners
        )
        self._subscribers = SubscriberBindings()
        self._deferred = DeferredCompletions(self._sink)

    @property
    def config(self) -> DispatcherConfig:
        return self._config

    @property
    def sink(self) -> DiagnosticSink:
        return self._sink

    @property
    def registry(self) -> ListenerRegistry:
        return self._registry

    # ══════════════════════════════════════════════════════════
    # DISPATCH
    # ══════════════════════════════════════════════════════════

    def dispatch(self, event: E, event_name: Optional[str] = None) -> E:
        """
        Dispatch an event to every listener of its name.

        Args:
            event:      Any object. BaseEvent subclasses can stop propagation.
            event_name: Defaults to the event's class name.

        Returns:
            The same event object.

        This method NEVER raises listener failures.
        """
        name = event_name if event_name is not None else type(event).__name__
        listeners = self._snapshot(name)

        if not listeners:
            logger.debug(f"No listeners for event '{name}'")
        else:
            self._run_listeners(name, event, listeners)

        self._bridge.emit(name, event)
        return event

    def _snapshot(self, name: str) -> List[Listener]:
        return self._registry.listeners(name)

    def _run_listeners(
        self, name: str, event: Any, listeners: List[Listener]
    ) -> None:
        stoppable = is_stoppable(event)
        notified = 0
        failed = 0
        deferred = 0

        for listener in listeners:
            if stoppable and self._stop_requested(name, event):
                logger.debug(
                    f"Propagation stopped for '{name}' after {notified + failed} "
                    f"of {len(listeners)} listeners"
                )
                break

            try:
                result = listener(event)
            except Exception as exc:
                failed += 1
                report(self._sink, ListenerInvocationError(name, listener, exc))
                # Continue to next listener — NEVER break dispatch
                continue

            notified += 1
            if result is not None and self._deferred.track(result, name, listener):
                deferred += 1

        logger.debug(
            f"Dispatch complete: {name} — {notified} notified, "
            f"{failed} failed, {deferred} deferred"
        )

    @staticmethod
    def _stop_requested(name: str, event: Any) -> bool:
        """is_stopped(), treating a failing check as stopped."""
        try:
            return bool(event.is_stopped())
        except Exception:
            logger.exception(
                f"is_stopped() failed on {type(event).__name__} for "
                f"'{name}'; halting propagation"
            )
            return True

    # ══════════════════════════════════════════════════════════
    # LISTENERS
    # ══════════════════════════════════════════════════════════

    def add_listener(
        self, event_name: str, listener: Listener, priority: int = 0
    ) -> None:
        """
        Register a listener. Higher priority runs first.

        Raises:
            InvalidListenerError:   listener is not callable
            InvalidPriorityError:   priority is not an int
            DuplicateListenerError: only with allow_duplicate_listeners=False
        """
        self._add(event_name, listener, priority)

    def _add(
        self, event_name: str, listener: Listener, priority: int
    ) -> ListenerEntry:
        entry = self._registry.add(event_name, listener, priority)
        self._bridge.on_listener_added(
            event_name, listener, self._registry.count(event_name)
        )
        return entry

    def remove_listener(self, event_name: str, listener: Listener) -> None:
        """Remove a listener. Unknown names and listeners are ignored."""
        if self._registry.remove(event_name, listener):
            self._after_removal(event_name)

    def _remove_entry(self, event_name: str, entry: ListenerEntry) -> None:
        if self._registry.remove_entry(event_name, entry):
            self._after_removal(event_name)

    def _after_removal(self, event_name: str) -> None:
        if not self._registry.has(event_name):
            self._bridge.on_name_cleared(event_name)

    def get_listeners(
        self, event_name: Optional[str] = None
    ) -> Union[List[Listener], Dict[str, List[Listener]]]:
        """
        Sorted listeners for a name, or a name → listeners dict
        covering every name when event_name is omitted.
        """
        if event_name is not None:
            return self._registry.listeners(event_name)
        return self._registry.all_listeners()

    def get_listener_priority(
        self, event_name: str, listener: Listener
    ) -> Optional[int]:
        return self._registry.priority_of(event_name, listener)

    def has_listeners(self, event_name: Optional[str] = None) -> bool:
        return self._registry.has(event_name)

    # ══════════════════════════════════════════════════════════
    # SUBSCRIBERS
    # ══════════════════════════════════════════════════════════

    def add_subscriber(self, subscriber: Any) -> None:
        """
        Register every listener a subscriber declares.

        Adding the same subscriber again replaces its registrations.

        Raises:
            InvalidSubscriptionError: malformed subscription table
        """
        expanded = expand_subscriptions(subscriber)

        if subscriber in self._subscribers:
            self.remove_subscriber(subscriber)

        bindings = []
        try:
            for event_name, subscription in expanded:
                entry = self._add(
                    event_name, subscription.listener, subscription.priority
                )
                bindings.append((event_name, entry))
        except Exception:
            for event_name, entry in bindings:
                self._remove_entry(event_name, entry)
            raise

        self._subscribers.remember(subscriber, bindings)
        logger.debug(
            f"Subscriber registered: {type(subscriber).__name__} "
            f"({len(bindings)} listeners)"
        )

    def remove_subscriber(self, subscriber: Any) -> None:
        """Remove every listener added for subscriber. No-op if unknown."""
        for event_name, entry in self._subscribers.forget(subscriber):
            self._remove_entry(event_name, entry)

    # ══════════════════════════════════════════════════════════
    # DEFERRED COMPLETIONS
    # ══════════════════════════════════════════════════════════

    @property
    def pending_count(self) -> int:
        """Awaitable listener results not yet completed."""
        return self._deferred.pending_count

    async def wait_pending(self) -> None:
        """Await async listener results scheduled on the running loop."""
        await self._deferred.wait()

    def join_pending(self, timeout: Optional[float] = None) -> bool:
        """Block until results running on the background loop finish."""
        return self._deferred.join(timeout)

    def close(self, timeout: Optional[float] = None) -> None:
        """Stop the background loop, if one was started."""
        self._deferred.close(timeout)
