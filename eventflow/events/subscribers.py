"""
eventflow Events — Subscribers
================================
A subscriber declares several listener registrations in one table:

    class AuditSubscriber:
        def get_subscribed_events(self):
            return {
                "user.created": self.on_created,
                "user.updated": Subscription(self.on_updated, priority=10),
                "user.deleted": [self.on_deleted, Subscription(self.archive, -5)],
            }

Tables reference methods directly. Method names as strings are
rejected: no dynamic attribute lookup.

expand_subscriptions() flattens a table into (event_name, Subscription)
pairs; SubscriberBindings remembers what was registered per subscriber,
so it can be removed without the caller knowing which methods it used.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import (
    Any,
    Dict,
    List,
    Mapping,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

from eventflow.events.errors import InvalidSubscriptionError
from eventflow.events.registry import Listener, ListenerEntry, is_valid_priority


@dataclass(frozen=True)
class Subscription:
    """One listener of a subscriber, with its priority."""

    listener: Listener
    priority: int = 0


Descriptor = Union[Listener, Subscription, Sequence[Union[Listener, Subscription]]]


@runtime_checkable
class EventSubscriber(Protocol):
    """Object declaring its own listeners."""

    def get_subscribed_events(self) -> Mapping[str, Descriptor]:
        ...  # pragma: no cover


Binding = Tuple[str, ListenerEntry]


# ══════════════════════════════════════════════════════════════
# TABLE EXPANSION
# ══════════════════════════════════════════════════════════════

def _normalize_one(subscriber: Any, event_name: str, item: Any) -> Subscription:
    if isinstance(item, Subscription):
        if not callable(item.listener):
            raise InvalidSubscriptionError(
                subscriber, event_name, "Subscription.listener is not callable."
            )
        if not is_valid_priority(item.priority):
            raise InvalidSubscriptionError(
                subscriber, event_name,
                f"priority must be an int, got {type(item.priority).__name__}.",
            )
        return item
    if isinstance(item, str):
        raise InvalidSubscriptionError(
            subscriber, event_name,
            f"method name '{item}' given; reference the method directly "
            f"(e.g. self.{item}).",
        )
    if callable(item):
        return Subscription(listener=item)
    raise InvalidSubscriptionError(
        subscriber, event_name,
        f"expected a callable or Subscription, got {type(item).__name__}.",
    )


def expand_subscriptions(subscriber: Any) -> List[Tuple[str, Subscription]]:
    """
    Validate and flatten a subscriber's table.

    The whole table is validated before anything is returned, so a
    malformed table registers nothing.

    Raises:
        InvalidSubscriptionError: malformed table or descriptor
    """
    get_events = getattr(subscriber, "get_subscribed_events", None)
    if not callable(get_events):
        raise InvalidSubscriptionError(
            subscriber, "*", "missing get_subscribed_events()."
        )

    table = get_events()
    if not isinstance(table, Mapping):
        raise InvalidSubscriptionError(
            subscriber, "*",
            f"get_subscribed_events() must return a mapping, "
            f"got {type(table).__name__}.",
        )

    expanded: List[Tuple[str, Subscription]] = []
    for event_name, descriptor in table.items():
        if not isinstance(event_name, str):
            raise InvalidSubscriptionError(
                subscriber, repr(event_name), "event name must be a string."
            )
        if isinstance(descriptor, (list, tuple)):
            if not descriptor:
                raise InvalidSubscriptionError(
                    subscriber, event_name, "empty listener list."
                )
            items = descriptor
        else:
            items = (descriptor,)
        for item in items:
            expanded.append((event_name, _normalize_one(subscriber, event_name, item)))
    return expanded


# ══════════════════════════════════════════════════════════════
# BINDING MEMORY
# ══════════════════════════════════════════════════════════════

class SubscriberBindings:
    """
    Remembers which registrations were made for which subscriber.

    Keyed by subscriber identity, not equality. The record holds the
    subscriber itself so its id() cannot be reused while the record
    exists (the registered bound methods keep it alive anyway).
    """

    def __init__(self) -> None:
        self._records: Dict[int, Tuple[Any, List[Binding]]] = {}

    def remember(self, subscriber: Any, bindings: List[Binding]) -> None:
        self._records[id(subscriber)] = (subscriber, list(bindings))

    def forget(self, subscriber: Any) -> List[Binding]:
        """Drop and return the bindings for subscriber ([] if unknown)."""
        record = self._records.pop(id(subscriber), None)
        return record[1] if record is not None else []

    def __contains__(self, subscriber: Any) -> bool:
        return id(subscriber) in self._records

    def __len__(self) -> int:
        return len(self._records)
