"""
eventflow Events — Public API
===============================
Priority-ordered publish/subscribe.
Listeners run highest priority first; any listener may stop the rest.
"""

from eventflow.events.diagnostics import (
    CollectingDiagnosticSink,
    DiagnosticSink,
    LoggingDiagnosticSink,
)
from eventflow.events.dispatcher import EventDispatcher
from eventflow.events.errors import (
    AsyncListenerRejection,
    DuplicateListenerError,
    EventBusError,
    InvalidListenerError,
    InvalidPriorityError,
    InvalidSubscriptionError,
    ListenerError,
    ListenerInvocationError,
)
from eventflow.events.event import BaseEvent, StoppableEvent
from eventflow.events.locked import LockedEventDispatcher
from eventflow.events.registry import ListenerEntry, ListenerRegistry, SortState
from eventflow.events.subscribers import EventSubscriber, Subscription

__all__ = [
    "BaseEvent",
    "StoppableEvent",
    "EventDispatcher",
    "LockedEventDispatcher",
    "ListenerRegistry",
    "ListenerEntry",
    "SortState",
    "EventSubscriber",
    "Subscription",
    "DiagnosticSink",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "EventBusError",
    "InvalidListenerError",
    "InvalidPriorityError",
    "InvalidSubscriptionError",
    "DuplicateListenerError",
    "ListenerError",
    "ListenerInvocationError",
    "AsyncListenerRejection",
]
