"""
eventflow Bridges — Django Signals
====================================
Mirrors every dispatch onto django.dispatch.Signal, one signal per
event name, so code that already speaks Django signals can observe
eventflow events.

Native side:
- connect(name, receiver)  → Signal.connect (strong reference)
- emit(name, event)        → Signal.send_robust(sender=type(event),
                              event=event, event_name=name)
- receiver exceptions go to the diagnostic sink, never to the caller
- when the last core listener for a name is removed, the name's
  signal is dropped together with its native receivers

Receivers must accept **kwargs (Django signal contract):

    def on_order_placed(sender, event, event_name, **kwargs): ...

The bridge only mirrors. Native receivers do not see the core's
priorities and do not affect propagation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Set

from django.dispatch import Signal

from eventflow.config.settings import DEFAULT_MAX_LISTENERS, DispatcherConfig
from eventflow.events.diagnostics import (
    DiagnosticSink,
    LoggingDiagnosticSink,
    report,
)
from eventflow.events.dispatcher import EventDispatcher
from eventflow.events.errors import ListenerInvocationError
from eventflow.events.registry import Listener

logger = logging.getLogger("eventflow.bridges")


class SignalBridge:
    """NativeBridge backed by Django signals."""

    def __init__(
        self,
        sink: Optional[DiagnosticSink] = None,
        max_listeners: int = DEFAULT_MAX_LISTENERS,
    ) -> None:
        self._signals: Dict[str, Signal] = {}
        self._sink: DiagnosticSink = (
            sink if sink is not None else LoggingDiagnosticSink(logger)
        )
        self._max_listeners = max_listeners
        self._warned: Set[str] = set()

    # ── Native registration ──────────────────────────────────

    def get_signal(self, event_name: str) -> Signal:
        """Signal for an event name, created on first use."""
        signal = self._signals.get(event_name)
        if signal is None:
            signal = Signal()
            self._signals[event_name] = signal
        return signal

    def connect(
        self,
        event_name: str,
        receiver: Any,
        dispatch_uid: Optional[str] = None,
    ) -> None:
        self.get_signal(event_name).connect(
            receiver, weak=False, dispatch_uid=dispatch_uid
        )

    def disconnect(
        self,
        event_name: str,
        receiver: Any = None,
        dispatch_uid: Optional[str] = None,
    ) -> bool:
        signal = self._signals.get(event_name)
        if signal is None:
            return False
        return signal.disconnect(receiver, dispatch_uid=dispatch_uid)

    def has_receivers(self, event_name: str) -> bool:
        signal = self._signals.get(event_name)
        return signal is not None and signal.has_listeners()

    # ── Listener limit ───────────────────────────────────────

    def set_max_listeners(self, n: int) -> None:
        if n < 0:
            raise ValueError(f"max_listeners must be >= 0, got {n}.")
        self._max_listeners = n
        self._warned.clear()

    def get_max_listeners(self) -> int:
        return self._max_listeners

    # ── NativeBridge hooks ───────────────────────────────────

    def emit(self, event_name: str, event: Any) -> None:
        signal = self._signals.get(event_name)
        if signal is None or not signal.has_listeners():
            return

        responses = signal.send_robust(
            sender=type(event), event=event, event_name=event_name
        )
        for receiver, response in responses:
            if isinstance(response, Exception):
                report(
                    self._sink,
                    ListenerInvocationError(event_name, receiver, response),
                )

    def on_listener_added(
        self, event_name: str, listener: Listener, listener_count: int
    ) -> None:
        if not self._max_listeners or listener_count <= self._max_listeners:
            return
        if event_name in self._warned:
            return
        self._warned.add(event_name)
        logger.warning(
            f"Possible listener leak: {listener_count} listeners for "
            f"'{event_name}' (max {self._max_listeners}). "
            f"Use set_max_listeners() to raise the limit."
        )

    def on_name_cleared(self, event_name: str) -> None:
        self._warned.discard(event_name)
        if self._signals.pop(event_name, None) is not None:
            logger.debug(f"Native signal dropped for '{event_name}'")


class SignalEventDispatcher(EventDispatcher):
    """
    EventDispatcher that also mirrors every dispatch onto Django signals.

    Core listeners run first, in priority order. The signal is sent
    after the core loop, even if a listener stopped propagation.
    """

    def __init__(
        self,
        config: Optional[DispatcherConfig] = None,
        sink: Optional[DiagnosticSink] = None,
        bridge: Optional[SignalBridge] = None,
    ) -> None:
        config = config or DispatcherConfig()
        if sink is None:
            sink = LoggingDiagnosticSink(logging.getLogger(config.logger_name))
        if bridge is None:
            bridge = SignalBridge(sink=sink, max_listeners=config.max_listeners)
        super().__init__(config=config, sink=sink, bridge=bridge)
        self._signal_bridge = bridge

    def get_bridge(self) -> SignalBridge:
        return self._signal_bridge

    def get_signal(self, event_name: str) -> Signal:
        return self._signal_bridge.get_signal(event_name)

    def set_max_listeners(self, n: int) -> None:
        self._signal_bridge.set_max_listeners(n)

    def get_max_listeners(self) -> int:
        return self._signal_bridge.get_max_listeners()
