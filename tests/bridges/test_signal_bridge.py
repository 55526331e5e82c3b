"""
eventflow Bridges — Django Signals Tests
==========================================
Covers:
- Mirroring dispatch onto django.dispatch.Signal
- Mirror runs after the core loop, even when propagation stopped
- Native receiver failures reported, never raised
- Native receivers dropped with the last core listener
- max_listeners warning
"""

import logging

import pytest
from django.dispatch import Signal

from eventflow.bridges.base import NullBridge
from eventflow.bridges.django_signals import SignalBridge, SignalEventDispatcher
from eventflow.config.settings import DispatcherConfig
from eventflow.events.diagnostics import CollectingDiagnosticSink
from eventflow.events.errors import ListenerInvocationError
from eventflow.events.event import BaseEvent


class PaymentCaptured(BaseEvent):
    def __init__(self, amount):
        self.amount = amount


# ══════════════════════════════════════════════════════════════
# FIXTURES
# ══════════════════════════════════════════════════════════════

@pytest.fixture
def sink():
    return CollectingDiagnosticSink()


@pytest.fixture
def dispatcher(sink):
    return SignalEventDispatcher(sink=sink)


# ══════════════════════════════════════════════════════════════
# CONSTRUCTION
# ══════════════════════════════════════════════════════════════

class TestConstruction:
    def test_default_bridge(self, dispatcher):
        assert isinstance(dispatcher.get_bridge(), SignalBridge)

    def test_custom_bridge(self, sink):
        bridge = SignalBridge(sink=sink)
        dispatcher = SignalEventDispatcher(sink=sink, bridge=bridge)
        assert dispatcher.get_bridge() is bridge

    def test_max_listeners_from_config(self):
        dispatcher = SignalEventDispatcher(config=DispatcherConfig(max_listeners=7))
        assert dispatcher.get_max_listeners() == 7

    def test_default_max_listeners(self, dispatcher):
        assert dispatcher.get_max_listeners() == 100

    def test_get_signal_is_stable(self, dispatcher):
        signal = dispatcher.get_signal("x")
        assert isinstance(signal, Signal)
        assert dispatcher.get_signal("x") is signal


# ══════════════════════════════════════════════════════════════
# MIRRORING
# ══════════════════════════════════════════════════════════════

class TestMirroring:
    def test_signal_receives_dispatched_event(self, dispatcher):
        received = []

        def receiver(sender, event, event_name, **kwargs):
            received.append((sender, event, event_name))

        dispatcher.get_bridge().connect("PaymentCaptured", receiver)
        event = dispatcher.dispatch(PaymentCaptured(amount=10))

        assert received == [(PaymentCaptured, event, "PaymentCaptured")]

    def test_mirror_runs_without_core_listeners(self, dispatcher):
        received = []
        dispatcher.get_bridge().connect(
            "x", lambda sender, event, **kw: received.append(event)
        )

        event = dispatcher.dispatch(BaseEvent(), "x")

        assert received == [event]
        assert not dispatcher.has_listeners("x")

    def test_mirror_runs_after_core_listeners(self, dispatcher):
        order = []
        dispatcher.add_listener("x", lambda e: order.append("core"))
        dispatcher.get_bridge().connect(
            "x", lambda sender, **kw: order.append("signal")
        )

        dispatcher.dispatch(BaseEvent(), "x")

        assert order == ["core", "signal"]

    def test_mirror_runs_even_when_stopped(self, dispatcher):
        order = []

        def stopper(event):
            order.append("stopper")
            event.stop()

        dispatcher.add_listener("x", stopper, priority=1)
        dispatcher.add_listener("x", lambda e: order.append("skipped"))
        dispatcher.get_bridge().connect(
            "x", lambda sender, **kw: order.append("signal")
        )

        dispatcher.dispatch(BaseEvent(), "x")

        assert order == ["stopper", "signal"]

    def test_receiver_failure_reported(self, dispatcher, sink):
        def broken(sender, **kwargs):
            raise ValueError("native boom")

        dispatcher.get_bridge().connect("x", broken)
        event = BaseEvent()

        assert dispatcher.dispatch(event, "x") is event
        assert len(sink.invocation_errors) == 1
        error = sink.invocation_errors[0]
        assert isinstance(error, ListenerInvocationError)
        assert error.listener is broken
        assert isinstance(error.cause, ValueError)

    def test_core_and_native_failures_both_reported(self, dispatcher, sink):
        def core_broken(event):
            raise KeyError("core")

        def native_broken(sender, **kwargs):
            raise KeyError("native")

        dispatcher.add_listener("x", core_broken)
        dispatcher.get_bridge().connect("x", native_broken)

        dispatcher.dispatch(BaseEvent(), "x")

        assert [e.listener for e in sink.errors] == [core_broken, native_broken]

    def test_disconnect(self, dispatcher):
        received = []

        def receiver(sender, **kwargs):
            received.append(sender)

        bridge = dispatcher.get_bridge()
        bridge.connect("x", receiver)
        assert bridge.has_receivers("x")
        assert bridge.disconnect("x", receiver) is True
        assert not bridge.has_receivers("x")

        dispatcher.dispatch(BaseEvent(), "x")
        assert received == []

    def test_disconnect_unknown_name(self, dispatcher):
        assert dispatcher.get_bridge().disconnect("nothing", print) is False


# ══════════════════════════════════════════════════════════════
# NAME CLEANUP
# ══════════════════════════════════════════════════════════════

class TestNameCleanup:
    def test_last_core_removal_drops_native_receivers(self, dispatcher):
        received = []

        def core(event):
            return None

        dispatcher.add_listener("x", core)
        dispatcher.get_bridge().connect(
            "x", lambda sender, **kw: received.append(sender)
        )

        dispatcher.remove_listener("x", core)
        dispatcher.dispatch(BaseEvent(), "x")

        assert received == []
        assert not dispatcher.get_bridge().has_receivers("x")

    def test_partial_removal_keeps_native_receivers(self, dispatcher):
        received = []

        def first(event):
            return None

        def second(event):
            return None

        dispatcher.add_listener("x", first)
        dispatcher.add_listener("x", second)
        dispatcher.get_bridge().connect(
            "x", lambda sender, **kw: received.append(sender)
        )

        dispatcher.remove_listener("x", first)
        dispatcher.dispatch(BaseEvent(), "x")

        assert received == [BaseEvent]

    def test_removing_unknown_listener_keeps_native_receivers(self, dispatcher):
        received = []
        dispatcher.get_bridge().connect(
            "x", lambda sender, **kw: received.append(sender)
        )

        dispatcher.remove_listener("x", print)
        dispatcher.dispatch(BaseEvent(), "x")

        assert received == [BaseEvent]


# ══════════════════════════════════════════════════════════════
# LISTENER LIMIT
# ══════════════════════════════════════════════════════════════

class TestListenerLimit:
    def test_warns_once_above_limit(self, dispatcher, caplog):
        dispatcher.set_max_listeners(2)

        with caplog.at_level(logging.WARNING, logger="eventflow.bridges"):
            for i in range(4):
                dispatcher.add_listener("x", lambda e, i=i: None)

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Possible listener leak" in warnings[0].getMessage()
        assert len(dispatcher.get_listeners("x")) == 4

    def test_zero_disables_check(self, dispatcher, caplog):
        dispatcher.set_max_listeners(0)

        with caplog.at_level(logging.WARNING, logger="eventflow.bridges"):
            for i in range(3):
                dispatcher.add_listener("x", lambda e, i=i: None)

        assert not [r for r in caplog.records if r.levelno == logging.WARNING]

    def test_set_and_get(self, dispatcher):
        dispatcher.set_max_listeners(5)
        assert dispatcher.get_max_listeners() == 5
        assert dispatcher.get_bridge().get_max_listeners() == 5

    def test_negative_limit_rejected(self, dispatcher):
        with pytest.raises(ValueError):
            dispatcher.set_max_listeners(-1)


# ══════════════════════════════════════════════════════════════
# NULL BRIDGE
# ══════════════════════════════════════════════════════════════

class TestNullBridge:
    def test_hooks_are_noops(self):
        bridge = NullBridge()
        assert bridge.emit("x", BaseEvent()) is None
        assert bridge.on_listener_added("x", print, 1) is None
        assert bridge.on_name_cleared("x") is None
