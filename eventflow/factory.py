"""
eventflow — Dispatcher Factory
================================
Picks the dispatcher backend for the current environment.

    backend="memory"  → EventDispatcher
    backend="signals" → SignalEventDispatcher (Django signals mirror)
    backend="auto"    → signals inside a configured Django project,
                        memory otherwise
"""

from __future__ import annotations

import logging
from typing import Optional

from eventflow.bridges.django_signals import SignalEventDispatcher
from eventflow.config.settings import DispatcherConfig, django_is_configured
from eventflow.events.diagnostics import DiagnosticSink
from eventflow.events.dispatcher import EventDispatcher

logger = logging.getLogger("eventflow.events")


def resolve_backend(config: DispatcherConfig) -> str:
    if config.backend != "auto":
        return config.backend
    return "signals" if django_is_configured() else "memory"


def create_dispatcher(
    config: Optional[DispatcherConfig] = None,
    sink: Optional[DiagnosticSink] = None,
) -> EventDispatcher:
    """
    Build a dispatcher.

    Without an explicit config, settings are read from Django's
    EVENTFLOW setting when Django is configured.
    """
    if config is None:
        config = DispatcherConfig.from_django_settings()

    backend = resolve_backend(config)
    logger.debug(f"Creating dispatcher (backend: {backend})")

    if backend == "signals":
        return SignalEventDispatcher(config=config, sink=sink)
    return EventDispatcher(config=config, sink=sink)
