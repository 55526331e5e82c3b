"""
eventflow – Django Settings (Demo / Integration Only)
=======================================================
Minimal Django settings for running eventflow inside a Django
process. No database, no apps: the signals backend only needs
django.dispatch.

Usage:
    DJANGO_SETTINGS_MODULE=config.settings python scripts/demo_dispatch.py
"""

import os
from pathlib import Path

# ── Paths ─────────────────────────────────────────────────────
BASE_DIR = Path(__file__).resolve().parent.parent

# ── Security ──────────────────────────────────────────────────
SECRET_KEY = os.environ.get("EVENTFLOW_SECRET_KEY", "eventflow-dev-key")

DEBUG = os.environ.get("EVENTFLOW_DEBUG", "1") == "1"

ALLOWED_HOSTS = []

INSTALLED_APPS = []

# ── Internationalization ──────────────────────────────────────
TIME_ZONE = "UTC"
USE_TZ = True

# ── eventflow ─────────────────────────────────────────────────
# Read by DispatcherConfig.from_django_settings().
EVENTFLOW = {
    "backend": os.environ.get("EVENTFLOW_BACKEND", "signals"),
    "allow_duplicate_listeners": True,
    "max_listeners": 100,
}

# ── Logging ───────────────────────────────────────────────────
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "loggers": {
        "eventflow": {
            "handlers": ["console"],
            "level": os.environ.get("EVENTFLOW_LOG_LEVEL", "INFO"),
        },
    },
}
