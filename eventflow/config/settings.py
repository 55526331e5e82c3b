"""
eventflow Config — Dispatcher Settings
========================================
Dispatcher behaviour is configured with a frozen DispatcherConfig.

Inside a Django project the values can come from settings:

    EVENTFLOW = {
        "backend": "signals",
        "allow_duplicate_listeners": False,
        "max_listeners": 50,
    }
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, Optional

BACKENDS = ("auto", "memory", "signals")

DEFAULT_MAX_LISTENERS = 100


@dataclass(frozen=True)
class DispatcherConfig:
    """
    Dispatcher configuration.

    backend:                   auto | memory | signals (used by create_dispatcher)
    allow_duplicate_listeners: same listener twice under one name → two entries
    max_listeners:             per-name warning threshold for native bridges
                               (0 disables the check)
    logger_name:               logger used by the default diagnostic sink
    """

    backend: str = "auto"
    allow_duplicate_listeners: bool = True
    max_listeners: int = DEFAULT_MAX_LISTENERS
    logger_name: str = "eventflow.events"

    def __post_init__(self) -> None:
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown dispatcher backend '{self.backend}', "
                f"expected one of {', '.join(BACKENDS)}."
            )
        if self.max_listeners < 0:
            raise ValueError(
                f"max_listeners must be >= 0, got {self.max_listeners}."
            )

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "DispatcherConfig":
        """Build a config from a plain dict, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(
                f"Unknown EVENTFLOW setting(s): {', '.join(unknown)}."
            )
        return cls(**dict(values))

    @classmethod
    def from_django_settings(
        cls, settings: Optional[Any] = None
    ) -> "DispatcherConfig":
        """
        Read the EVENTFLOW dict from Django settings.

        Falls back to defaults when Django is not configured or the
        setting is absent.
        """
        if settings is None:
            settings = _configured_django_settings()
            if settings is None:
                return cls()
        values = getattr(settings, "EVENTFLOW", None) or {}
        return cls.from_mapping(values)

    def with_overrides(self, **changes: Any) -> "DispatcherConfig":
        return replace(self, **changes)


def _configured_django_settings() -> Optional[Any]:
    from django.conf import ENVIRONMENT_VARIABLE, settings

    # settings.configured stays False until first access when only the
    # environment variable is set
    if settings.configured or os.environ.get(ENVIRONMENT_VARIABLE):
        return settings
    return None


def django_is_configured() -> bool:
    """True when Django is importable and its settings are configured."""
    return _configured_django_settings() is not None
