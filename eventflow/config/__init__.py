"""
eventflow Config — Public API
===============================
"""

from eventflow.config.settings import (
    BACKENDS,
    DEFAULT_MAX_LISTENERS,
    DispatcherConfig,
    django_is_configured,
)

__all__ = [
    "BACKENDS",
    "DEFAULT_MAX_LISTENERS",
    "DispatcherConfig",
    "django_is_configured",
]
