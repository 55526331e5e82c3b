"""
eventflow Events — Listener Registry
======================================
Controls which listeners receive which events, and in what order.

Rules:
- Any string is a valid event name
- Multiple listeners per event name allowed
- Order: priority descending, ties by registration order
- Sorting is lazy: add/remove mark a name DIRTY, lookup sorts it
- A name whose last listener is removed is dropped entirely
- In-memory only, single-threaded (see LockedEventDispatcher)
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from enum import Enum
from operator import attrgetter
from typing import Any, Callable, Dict, List, Optional

from eventflow.events.errors import (
    DuplicateListenerError,
    InvalidListenerError,
    InvalidPriorityError,
    describe_listener,
)

logger = logging.getLogger("eventflow.events")

Listener = Callable[[Any], Any]


def is_valid_priority(priority: Any) -> bool:
    """Priorities are plain ints; bool is rejected."""
    return isinstance(priority, int) and not isinstance(priority, bool)


class SortState(Enum):
    """Cache tag for a name's entry sequence."""
    SORTED = "SORTED"
    DIRTY = "DIRTY"


@dataclass(frozen=True)
class ListenerEntry:
    """One registration of a listener under an event name."""

    listener: Listener
    priority: int
    sequence: int  # registry-wide registration counter

    def sort_key(self) -> tuple[int, int]:
        return (-self.priority, self.sequence)


class ListenerRegistry:
    """
    In-memory registry of event listeners.

    Each entry maps an event name to a list of ListenerEntry
    records plus a SortState tag.
    """

    def __init__(self, allow_duplicates: bool = True) -> None:
        self._entries: Dict[str, List[ListenerEntry]] = {}
        self._state: Dict[str, SortState] = {}
        self._counter = itertools.count()
        self._allow_duplicates = allow_duplicates

    # ── Mutation ─────────────────────────────────────────────

    def add(
        self, event_name: str, listener: Listener, priority: int = 0
    ) -> ListenerEntry:
        """
        Append a listener for an event name.

        Raises:
            InvalidListenerError:   listener is not callable
            InvalidPriorityError:   priority is not an int
            DuplicateListenerError: listener already registered and
                                    duplicates are disallowed
        """
        if not callable(listener):
            raise InvalidListenerError(event_name, listener)
        if not is_valid_priority(priority):
            raise InvalidPriorityError(event_name, priority)

        if not self._allow_duplicates and self._first_match(
            event_name, listener
        ) is not None:
            raise DuplicateListenerError(event_name, listener)

        entries = self._entries.setdefault(event_name, [])
        entry = ListenerEntry(
            listener=listener,
            priority=priority,
            sequence=next(self._counter),
        )
        entries.append(entry)
        self._state[event_name] = SortState.DIRTY

        logger.debug(
            f"Listener registered: {describe_listener(listener)} → "
            f"{event_name} (priority: {entry.priority})"
        )
        return entry

    def remove(self, event_name: str, listener: Listener) -> bool:
        """
        Remove the earliest-registered entry matching listener.

        Returns True if an entry was removed. Unknown names and
        listeners are not an error.
        """
        entry = self._first_match(event_name, listener)
        if entry is None:
            return False
        return self.remove_entry(event_name, entry)

    def remove_entry(self, event_name: str, entry: ListenerEntry) -> bool:
        """Remove exactly this entry (identity), leaving equal ones alone."""
        entries = self._entries.get(event_name)
        if entries is None:
            return False

        for index, candidate in enumerate(entries):
            if candidate is entry:
                del entries[index]
                break
        else:
            return False

        if entries:
            self._state[event_name] = SortState.DIRTY
        else:
            del self._entries[event_name]
            self._state.pop(event_name, None)

        logger.debug(
            f"Listener removed: {describe_listener(entry.listener)} → "
            f"{event_name}"
        )
        return True

    def clear(self, event_name: Optional[str] = None) -> None:
        """Drop every listener for a name, or every name."""
        if event_name is None:
            self._entries.clear()
            self._state.clear()
            return
        self._entries.pop(event_name, None)
        self._state.pop(event_name, None)

    # ── Lookup ───────────────────────────────────────────────

    def _sorted_entries(self, event_name: str) -> List[ListenerEntry]:
        entries = self._entries.get(event_name)
        if not entries:
            return []
        if self._state.get(event_name) is not SortState.SORTED:
            entries.sort(key=ListenerEntry.sort_key)
            self._state[event_name] = SortState.SORTED
        return entries

    def entries(self, event_name: str) -> List[ListenerEntry]:
        """Sorted snapshot of the entries for a name (empty if unknown)."""
        return list(self._sorted_entries(event_name))

    def listeners(self, event_name: str) -> List[Listener]:
        """Sorted listeners for a name (empty if unknown)."""
        return [entry.listener for entry in self._sorted_entries(event_name)]

    def all_listeners(self) -> Dict[str, List[Listener]]:
        """Sorted listeners for every name currently present."""
        return {name: self.listeners(name) for name in list(self._entries)}

    def priority_of(
        self, event_name: str, listener: Listener
    ) -> Optional[int]:
        """
        Stored priority of listener, or None if not registered.

        With duplicates, the earliest registration answers.
        """
        entry = self._first_match(event_name, listener)
        return entry.priority if entry is not None else None

    def _first_match(
        self, event_name: str, listener: Listener
    ) -> Optional[ListenerEntry]:
        # by sequence, not list position: the list is reordered by lookups
        matches = [
            entry for entry in self._entries.get(event_name, ())
            if entry.listener == listener
        ]
        return min(matches, key=attrgetter("sequence"), default=None)

    def has(self, event_name: Optional[str] = None) -> bool:
        if event_name is None:
            return any(self._entries.values())
        return bool(self._entries.get(event_name))

    def count(self, event_name: str) -> int:
        return len(self._entries.get(event_name, ()))

    def state_of(self, event_name: str) -> Optional[SortState]:
        """Current cache tag for a name, None if the name is absent."""
        return self._state.get(event_name)

    def names(self) -> frozenset[str]:
        """Return all event names with registered listeners."""
        return frozenset(self._entries.keys())
