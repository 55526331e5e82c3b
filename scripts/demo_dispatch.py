"""
Manual demo runner for the eventflow dispatcher.

Usage:
    python scripts/demo_dispatch.py
    python scripts/demo_dispatch.py --backend memory
    python scripts/demo_dispatch.py --stop-at audit
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

import django  # noqa: E402

from eventflow import (  # noqa: E402
    BaseEvent,
    DispatcherConfig,
    Subscription,
    create_dispatcher,
)
from eventflow.bridges.django_signals import SignalEventDispatcher  # noqa: E402


@dataclass
class OrderPlaced(BaseEvent):
    order_id: str
    total: float


class OrderSubscriber:
    def __init__(self, calls: list[str], stop_at: str | None) -> None:
        self.calls = calls
        self.stop_at = stop_at

    def get_subscribed_events(self):
        return {
            "OrderPlaced": [
                Subscription(self.validate, priority=100),
                Subscription(self.audit, priority=10),
                self.notify,
            ],
        }

    def _record(self, name: str, event: OrderPlaced) -> None:
        self.calls.append(name)
        if name == self.stop_at:
            event.stop()

    def validate(self, event: OrderPlaced) -> None:
        self._record("validate", event)

    def audit(self, event: OrderPlaced) -> None:
        self._record("audit", event)

    def notify(self, event: OrderPlaced) -> None:
        self._record("notify", event)


def run(backend: str, stop_at: str | None) -> None:
    django.setup()

    config = DispatcherConfig.from_django_settings().with_overrides(backend=backend)
    dispatcher = create_dispatcher(config)
    print(f"backend: {type(dispatcher).__name__}")

    calls: list[str] = []
    dispatcher.add_subscriber(OrderSubscriber(calls, stop_at))
    dispatcher.add_listener(
        "OrderPlaced", lambda e: calls.append("fraud-check"), priority=50
    )

    def broken(event: OrderPlaced) -> None:
        raise RuntimeError("listener failure (isolated, logged)")

    dispatcher.add_listener("OrderPlaced", broken, priority=20)

    if isinstance(dispatcher, SignalEventDispatcher):
        def native(sender, event, event_name, **kwargs):
            calls.append(f"signal:{event_name}")

        dispatcher.get_bridge().connect("OrderPlaced", native)

    event = dispatcher.dispatch(OrderPlaced(order_id="A-1", total=42.0))

    print(f"call order: {calls}")
    print(f"stopped:    {event.is_stopped()}")


def main() -> None:
    parser = argparse.ArgumentParser(description="eventflow dispatch demo")
    parser.add_argument(
        "--backend", choices=("auto", "memory", "signals"), default="auto"
    )
    parser.add_argument(
        "--stop-at", choices=("validate", "audit", "notify"), default=None
    )
    args = parser.parse_args()
    run(args.backend, args.stop_at)


if __name__ == "__main__":
    main()
