"""
eventflow
=========
Typed, priority-ordered event dispatcher with an optional Django
signals mirror.
"""

from eventflow.bridges.django_signals import SignalBridge, SignalEventDispatcher
from eventflow.config.settings import DispatcherConfig
from eventflow.events import (
    AsyncListenerRejection,
    BaseEvent,
    CollectingDiagnosticSink,
    EventBusError,
    EventDispatcher,
    EventSubscriber,
    ListenerInvocationError,
    LockedEventDispatcher,
    LoggingDiagnosticSink,
    Subscription,
)
from eventflow.factory import create_dispatcher

__version__ = "0.1.0"

__all__ = [
    "BaseEvent",
    "EventDispatcher",
    "LockedEventDispatcher",
    "SignalEventDispatcher",
    "SignalBridge",
    "EventSubscriber",
    "Subscription",
    "DispatcherConfig",
    "LoggingDiagnosticSink",
    "CollectingDiagnosticSink",
    "EventBusError",
    "ListenerInvocationError",
    "AsyncListenerRejection",
    "create_dispatcher",
]
