# backend/settings/test.py
"""
PATH: backend/settings/test.py

TEST SETTINGS

- In-memory SQLite (Django test runner default for sqlite)
- Backups and logs under a throwaway directory
- Fast password hashing, no throttling, quiet logs
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from .base import *  # noqa: F403
from .base import LOGGING, REST_FRAMEWORK

DEBUG = False

SECRET_KEY = "test-only-secret-key"

APP_DATA_DIR = Path(tempfile.mkdtemp(prefix="inventory-test-"))
BACKUP_DIR = APP_DATA_DIR / "backups"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": str(APP_DATA_DIR / "test.db"),
        "OPTIONS": {
            "transaction_mode": "IMMEDIATE",
        },
    }
}

PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]

OVERPAYMENT_POLICY = "reject"
LOW_STOCK_ALERTS_ENABLED = True
BACKUP_RETENTION = 10

REST_FRAMEWORK = {
    **REST_FRAMEWORK,
    "DEFAULT_THROTTLE_CLASSES": (),
}

LOGGING = {
    **LOGGING,
    "handlers": {"null": {"class": "logging.NullHandler"}},
    "root": {"handlers": ["null"], "level": "WARNING"},
    "loggers": {
        "inventory": {"handlers": ["null"], "level": "DEBUG", "propagate": False},
        "django": {"handlers": ["null"], "level": "ERROR", "propagate": False},
    },
}
