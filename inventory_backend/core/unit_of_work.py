# core/unit_of_work.py

"""
UNIT OF WORK

Every mutating service runs inside one of these.

GUARANTEES:
- All writes inside atomic() commit together or not at all.
- Writers on the same database alias are serialized inside the process
  (re-entrant, so nested services share the caller's unit of work).
- Services never reach for a global connection: the alias travels with the
  UnitOfWork the caller hands in.

SQLite notes:
- The database is opened with transaction_mode=IMMEDIATE (see settings),
  so BEGIN already holds the file write lock.
- A model ValidationError escaping atomic() becomes InvalidInputError, a
  datastore OperationalError (locked or unreadable file) becomes StorageError.
- exclusive() takes the writer lock without opening a transaction; the
  backup service uses it so a snapshot never interleaves with a write.
"""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, TypeVar

from django.core.exceptions import ValidationError
from django.db import DEFAULT_DB_ALIAS, OperationalError, transaction

from core.exceptions import InvalidInputError, StorageError

logger = logging.getLogger("inventory.storage")

T = TypeVar("T")

_WRITE_LOCKS: dict[str, threading.RLock] = {}
_WRITE_LOCKS_GUARD = threading.Lock()


def _write_lock(alias: str) -> threading.RLock:
    with _WRITE_LOCKS_GUARD:
        lock = _WRITE_LOCKS.get(alias)
        if lock is None:
            lock = threading.RLock()
            _WRITE_LOCKS[alias] = lock
        return lock


class UnitOfWork:
    def __init__(self, using: str = DEFAULT_DB_ALIAS):
        self.using = using

    def __repr__(self) -> str:
        return f"UnitOfWork(using={self.using!r})"

    @contextmanager
    def atomic(self) -> Iterator["UnitOfWork"]:
        """
        Open (or join) a transaction holding the process write lock.

        Any exception escaping the block rolls back everything written in it.
        """
        with _write_lock(self.using):
            try:
                with transaction.atomic(using=self.using):
                    yield self
            except ValidationError as exc:
                raise InvalidInputError.from_validation_error(exc) from exc
            except OperationalError as exc:
                logger.error(
                    "datastore failure inside unit of work",
                    extra={"using": self.using, "error": str(exc)},
                )
                raise StorageError(f"Datastore unavailable: {exc}") from exc

    def run(self, fn: Callable[..., T], *args, **kwargs) -> T:
        with self.atomic():
            return fn(*args, **kwargs)

    @contextmanager
    def exclusive(self) -> Iterator["UnitOfWork"]:
        with _write_lock(self.using):
            yield self

    def on_commit(self, fn: Callable[[], None]) -> None:
        transaction.on_commit(fn, using=self.using)

    @property
    def in_transaction(self) -> bool:
        return transaction.get_connection(self.using).in_atomic_block


def resolve_uow(uow: Optional[UnitOfWork] = None) -> UnitOfWork:
    return uow if uow is not None else UnitOfWork()
