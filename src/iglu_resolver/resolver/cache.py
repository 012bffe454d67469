"""
In-process schema cache and lookup history.

This module implements the only shared mutable state of the resolver. One
:class:`SchemaCache` holds two maps, both guarded by a single lock:

- ``key -> CacheEntry``: resolved schemas with the time they were resolved.
- ``key -> {repository name -> HistoryEntry}``: failed attempts per backend,
  stamped with the clock reading of the last attempt.

Design Notes
------------
- **Lazy expiry**: there is no eviction thread. An entry older than the TTL is
  dropped the next time it is read. The cache therefore grows with the number
  of distinct keys; bounding it is up to the embedding application.
- **History expiry**: a repository's history for a key is forgotten once the
  TTL has elapsed since its last attempt. :meth:`SchemaCache.expire_history`
  applies this at the start of every sweep, so an old outage does not leak
  into the error of a later, unrelated lookup.
- **Atomic operations only**: callers get ``get``/``store``/``record_failure``
  and snapshots. No caller ever sees a half-updated entry.
- **Copies in and out**: schemas are deep-copied when stored and when read,
  so mutating a returned schema never changes what the cache serves.
- **TTL 0** disables the schema cache; failure history then only lives for
  the duration of one sweep.
"""

from __future__ import annotations

import copy
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

from iglu_resolver.core.errors import LookupHistory, RegistryError
from iglu_resolver.core.schema_key import SchemaKey
from iglu_resolver.repositories.base import SchemaDocument


@dataclass(frozen=True, slots=True)
class CacheEntry:
    """A resolved schema and the clock reading at resolution time."""

    key: SchemaKey
    schema: SchemaDocument
    resolved_at: float


@dataclass(frozen=True, slots=True)
class HistoryEntry:
    """Failure history of one repository plus the clock reading of its last attempt."""

    history: LookupHistory
    attempted_at: float


class SchemaCache:
    """Thread-safe TTL cache of resolved schemas plus per-key failure history.

    Attributes
    ----------
    ttl : int
        Seconds an entry stays valid; ``0`` disables caching.
    """

    __slots__ = ("ttl", "_clock", "_lock", "_entries", "_history")

    def __init__(self, ttl: int, clock: Callable[[], float] = time.monotonic) -> None:
        if ttl < 0:
            raise ValueError(f"cache TTL must be >= 0, got {ttl}")
        self.ttl: int = ttl
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[SchemaKey, CacheEntry] = {}
        self._history: dict[SchemaKey, dict[str, HistoryEntry]] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl > 0

    def _live(self, stamp: float, now: float) -> bool:
        return self.enabled and now - stamp < self.ttl

    # ------------------------------- Schemas --------------------------------

    def get(self, key: SchemaKey) -> SchemaDocument | None:
        """Return a copy of the live cached schema for ``key``, or ``None``."""
        if not self.enabled:
            return None
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if not self._live(entry.resolved_at, self._clock()):
                del self._entries[key]
                return None
            return copy.deepcopy(entry.schema)

    def store(self, key: SchemaKey, schema: SchemaDocument) -> None:
        """Cache a copy of ``schema`` and forget earlier failures for ``key``."""
        with self._lock:
            if self.enabled:
                self._entries[key] = CacheEntry(key, copy.deepcopy(schema), self._clock())
            self._history.pop(key, None)

    # ------------------------------- History --------------------------------

    def expire_history(self, key: SchemaKey) -> None:
        """Forget repositories whose last failed attempt for ``key`` is older than the TTL."""
        with self._lock:
            per_repo = self._history.get(key)
            if per_repo is None:
                return
            now = self._clock()
            live = {
                name: entry
                for name, entry in per_repo.items()
                if self._live(entry.attempted_at, now)
            }
            if live:
                self._history[key] = live
            else:
                del self._history[key]

    def record_failure(self, key: SchemaKey, repository: str, error: RegistryError) -> LookupHistory:
        """Add ``error`` to the history of ``repository`` for ``key``."""
        with self._lock:
            per_repo = self._history.setdefault(key, {})
            previous = per_repo.get(repository)
            history = previous.history if previous is not None else LookupHistory()
            updated = history.record(error, datetime.now(UTC))
            per_repo[repository] = HistoryEntry(updated, self._clock())
            return updated

    def history(self, key: SchemaKey) -> dict[str, LookupHistory]:
        """Snapshot of the failure history for ``key``."""
        with self._lock:
            return {name: entry.history for name, entry in self._history.get(key, {}).items()}

    # ------------------------------- Housekeeping ---------------------------

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._history.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["CacheEntry", "HistoryEntry", "SchemaCache"]
