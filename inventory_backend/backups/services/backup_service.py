# backups/services/backup_service.py

"""
======================================================
PATH: backups/services/backup_service.py
======================================================
DATABASE BACKUPS

Purpose:
- Point-in-time copies of the SQLite database file, taken with the SQLite
  online backup API (consistent even while the app is running).
- Restore copies a backup back into the live database in place.
- Retention: keep the newest BACKUP_RETENTION files.

Rules:
- Backups and restores run under UnitOfWork.exclusive(), so they never
  interleave with a write from this process.
- Both are refused inside an open transaction (the snapshot would miss
  uncommitted work, a restore would be rolled back with it).
- Filenames are backup_<UTC timestamp>.db; anything else in BACKUP_DIR is
  ignored and can never be deleted or restored through here.
"""

from __future__ import annotations

import logging
import re
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone as dt_timezone
from pathlib import Path
from typing import Optional

from django.conf import settings
from django.db import connections
from django.utils import timezone

from core.exceptions import BackupError, InvalidInputError, ReferenceNotFoundError
from core.unit_of_work import UnitOfWork, resolve_uow

logger = logging.getLogger("inventory.backups")

BACKUP_PREFIX = "backup_"
BACKUP_SUFFIX = ".db"
DEFAULT_RETENTION = 10

_FILENAME_RE = re.compile(r"^backup_[0-9A-Za-z_-]+\.db$")


@dataclass(frozen=True)
class BackupInfo:
    filename: str
    size: int
    created_at: datetime

    def as_dict(self) -> dict:
        return {
            "filename": self.filename,
            "size": self.size,
            "created_at": self.created_at.isoformat(),
        }


def backup_dir() -> Path:
    return Path(settings.BACKUP_DIR)


def _info(path: Path) -> BackupInfo:
    stat = path.stat()
    return BackupInfo(
        filename=path.name,
        size=stat.st_size,
        created_at=datetime.fromtimestamp(stat.st_mtime, tz=dt_timezone.utc),
    )


def _validated_path(filename: str) -> Path:
    filename = (filename or "").strip()
    if not _FILENAME_RE.match(filename):
        raise InvalidInputError(f"Not a backup file name: {filename!r}", field="filename")
    path = backup_dir() / filename
    if not path.is_file():
        raise ReferenceNotFoundError(f"Backup not found: {filename}", field="filename")
    return path


def _raw_sqlite_connection(uow: UnitOfWork) -> sqlite3.Connection:
    connection = connections[uow.using]
    if connection.vendor != "sqlite":
        raise BackupError(f"Backups require SQLite; '{uow.using}' is {connection.vendor}")
    connection.ensure_connection()
    return connection.connection


def _refuse_inside_transaction(uow: UnitOfWork, operation: str) -> None:
    if uow.in_transaction:
        raise BackupError(f"Cannot {operation} inside an open transaction")


def _new_filename() -> str:
    stamp = timezone.now().astimezone(dt_timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    return f"{BACKUP_PREFIX}{stamp}{BACKUP_SUFFIX}"


def create_backup(*, uow: Optional[UnitOfWork] = None) -> BackupInfo:
    uow = resolve_uow(uow)
    _refuse_inside_transaction(uow, "create a backup")

    directory = backup_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise BackupError(f"Backup directory not writable: {directory}") from exc

    path = directory / _new_filename()

    with uow.exclusive():
        source = _raw_sqlite_connection(uow)
        try:
            target = sqlite3.connect(str(path))
            try:
                source.backup(target)
            finally:
                target.close()
        except (sqlite3.Error, OSError) as exc:
            path.unlink(missing_ok=True)
            logger.exception("backup failed", extra={"path": str(path)})
            raise BackupError(f"Backup failed: {exc}") from exc

    info = _info(path)
    logger.info("backup created", extra={"backup": info.filename, "size": info.size})
    return info


def list_backups() -> list[BackupInfo]:
    """Newest first. Returns [] if the directory cannot be read."""
    directory = backup_dir()
    try:
        if not directory.is_dir():
            return []
        backups = [
            _info(path)
            for path in directory.iterdir()
            if path.is_file() and _FILENAME_RE.match(path.name)
        ]
    except OSError:
        logger.exception("failed to list backups", extra={"directory": str(directory)})
        return []

    # the timestamp in the name breaks mtime ties
    return sorted(backups, key=lambda b: (b.created_at, b.filename), reverse=True)


def delete_backup(filename: str) -> None:
    path = _validated_path(filename)
    try:
        path.unlink()
    except OSError as exc:
        raise BackupError(f"Failed to delete backup {path.name}: {exc}") from exc
    logger.info("backup deleted", extra={"backup": path.name})


def restore_backup(filename: str, *, uow: Optional[UnitOfWork] = None) -> BackupInfo:
    """
    Copy a backup over the live database.

    The live connection stays open; its pages are replaced in place by the
    SQLite backup API, so no restart is needed.
    """
    uow = resolve_uow(uow)
    path = _validated_path(filename)
    _refuse_inside_transaction(uow, "restore a backup")

    with uow.exclusive():
        target = _raw_sqlite_connection(uow)
        try:
            source = sqlite3.connect(f"{path.resolve().as_uri()}?mode=ro", uri=True)
            try:
                source.backup(target)
            finally:
                source.close()
        except (sqlite3.Error, OSError) as exc:
            logger.exception("restore failed", extra={"backup": path.name})
            raise BackupError(f"Restore failed: {exc}") from exc

    logger.warning("database restored from backup", extra={"backup": path.name})
    return _info(path)


def prune_backups(*, keep: Optional[int] = None) -> list[str]:
    """Delete all but the newest `keep` backups. Returns the deleted names."""
    if keep is None:
        keep = getattr(settings, "BACKUP_RETENTION", DEFAULT_RETENTION)
    if keep < 0:
        raise InvalidInputError("keep cannot be negative", field="keep")

    removed = []
    for info in list_backups()[keep:]:
        delete_backup(info.filename)
        removed.append(info.filename)

    if removed:
        logger.info("old backups pruned", extra={"count": len(removed), "keep": keep})
    return removed


def run_scheduled_backup(*, keep: Optional[int] = None, uow: Optional[UnitOfWork] = None) -> BackupInfo:
    info = create_backup(uow=uow)
    prune_backups(keep=keep)
    return info
