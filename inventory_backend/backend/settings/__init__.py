# backend/settings/__init__.py
"""
PATH: backend/settings/__init__.py

Settings package entrypoint.

We intentionally do NOT import a concrete module here.
Use DJANGO_SETTINGS_MODULE to select:
- backend.settings.dev      (local development)
- backend.settings.desktop  (packaged desktop build)
- backend.settings.test     (test runs)
"""
