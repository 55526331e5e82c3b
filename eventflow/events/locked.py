"""
eventflow Events — Thread-Safe Dispatcher
===========================================
EventDispatcher assumes one logical thread. LockedEventDispatcher
layers mutual exclusion on top for multi-threaded hosts:

- Registry mutation and lookup run under an RLock
- Dispatch takes its sorted snapshot under the lock, then runs the
  listeners OUTSIDE it, so a listener may add or remove listeners
  (or dispatch again) without deadlocking
"""

from __future__ import annotations

from threading import RLock
from typing import Any, Dict, List, Optional, Union

from eventflow.events.dispatcher import EventDispatcher
from eventflow.events.registry import Listener


class LockedEventDispatcher(EventDispatcher):
    """EventDispatcher with a lock around registry access."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._lock = RLock()

    def _snapshot(self, name: str) -> List[Listener]:
        with self._lock:
            return super()._snapshot(name)

    def add_listener(
        self, event_name: str, listener: Listener, priority: int = 0
    ) -> None:
        with self._lock:
            super().add_listener(event_name, listener, priority)

    def remove_listener(self, event_name: str, listener: Listener) -> None:
        with self._lock:
            super().remove_listener(event_name, listener)

    def get_listeners(
        self, event_name: Optional[str] = None
    ) -> Union[List[Listener], Dict[str, List[Listener]]]:
        with self._lock:
            return super().get_listeners(event_name)

    def get_listener_priority(
        self, event_name: str, listener: Listener
    ) -> Optional[int]:
        with self._lock:
            return super().get_listener_priority(event_name, listener)

    def has_listeners(self, event_name: Optional[str] = None) -> bool:
        with self._lock:
            return super().has_listeners(event_name)

    def add_subscriber(self, subscriber: Any) -> None:
        with self._lock:
            super().add_subscriber(subscriber)

    def remove_subscriber(self, subscriber: Any) -> None:
        with self._lock:
            super().remove_subscriber(subscriber)
