# backend/settings/desktop.py
"""
PATH: backend/settings/desktop.py

PACKAGED DESKTOP SETTINGS

The backend runs on the shop PC beside the desktop shell and only listens
on loopback.

Hardening goals:
- DEBUG off (forced)
- SECRET_KEY must be set (fail-closed); the installer generates one
- SQLite only, under APP_DATA_DIR
- Loopback hosts only
- Admin static served by WhiteNoise (no separate web server)
"""

from __future__ import annotations

from django.core.exceptions import ImproperlyConfigured

from .base import *  # noqa: F403
from .base import APP_DATA_DIR, DATABASES, MIDDLEWARE, env

# ----------------------------
# DEBUG (force off)
# ----------------------------
DEBUG = False

# ----------------------------
# SECRET KEY (fail closed)
# ----------------------------
_secret_key = (env("SECRET_KEY", default="") or "").strip()
if not _secret_key or _secret_key == "dev-insecure-change-me":
    raise ImproperlyConfigured(
        "SECRET_KEY must be set to a strong value for the desktop build."
    )
SECRET_KEY = _secret_key

# ----------------------------
# Hosts (loopback only)
# ----------------------------
ALLOWED_HOSTS = ["localhost", "127.0.0.1"]

# ----------------------------
# Database (SQLite only)
# ----------------------------
if DATABASES["default"]["ENGINE"] != "django.db.backends.sqlite3":
    raise ImproperlyConfigured("The desktop build only supports SQLite.")

# ----------------------------
# Static files (collectstatic into app data)
# ----------------------------
STATIC_ROOT = env("STATIC_ROOT", default=str(APP_DATA_DIR / "static"))

MIDDLEWARE.insert(1, "whitenoise.middleware.WhiteNoiseMiddleware")
STORAGES = {
    "default": {"BACKEND": "django.core.files.storage.FileSystemStorage"},
    "staticfiles": {"BACKEND": "whitenoise.storage.CompressedManifestStaticFilesStorage"},
}

# ----------------------------
# Security headers
# ----------------------------
SECURE_CONTENT_TYPE_NOSNIFF = True
SECURE_REFERRER_POLICY = "same-origin"
X_FRAME_OPTIONS = "DENY"

SESSION_COOKIE_HTTPONLY = True
SESSION_COOKIE_SAMESITE = "Lax"
CSRF_COOKIE_SAMESITE = "Lax"
