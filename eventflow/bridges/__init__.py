"""
eventflow Bridges — Public API
================================
Optional mirrors of dispatch onto native notification primitives.

The Django signals bridge lives in eventflow.bridges.django_signals
and is imported from there (it depends on the dispatcher).
"""

from eventflow.bridges.base import NativeBridge, NullBridge

__all__ = [
    "NativeBridge",
    "NullBridge",
]
