"""
Key-Value Store - Capability interface over the persistent ledger.

The engine never talks to a storage backend directly. It needs three
operations per record:
- get(key)                 -> value or None (missing or expired)
- put(key, value)          -> write a snapshot
- extend_lifetime(key, ttl)-> push the record's expiry horizon forward

Keys are tuples: ("session", player), ("sense_result", player, sense_id),
("session_counter",), ("leaderboard",). Values are JSON-compatible
snapshots; stores copy on the way in and out so callers never share
mutable state with the store.

Records without an explicit lifetime never expire (used for singletons).
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable
import logging
import time

logger = logging.getLogger(__name__)

Key = tuple


class KeyValueStore(ABC):
    """Storage capability used by the session store accessor."""

    @abstractmethod
    def get(self, key: Key) -> Any | None:
        """Return a copy of the value, or None if missing or expired."""

    @abstractmethod
    def put(self, key: Key, value: Any):
        """Write a value. Keeps the existing expiry horizon, if any."""

    @abstractmethod
    def extend_lifetime(self, key: Key, ttl: int):
        """Ensure the record lives at least ttl more time units."""

    def has(self, key: Key) -> bool:
        return self.get(key) is not None


@dataclass
class StoredRecord:
    """A value plus its expiry horizon (None = never expires)."""
    value: Any
    expires_at: float | None = None

    def expired(self, now: float) -> bool:
        return self.expires_at is not None and now >= self.expires_at


class InMemoryStore(KeyValueStore):
    """
    In-process store with expiry.

    Usage:
        store = InMemoryStore()
        store.put(("session", "alice"), {...})
        store.extend_lifetime(("session", "alice"), SESSION_TTL)

    The clock is injectable so tests can move time forward.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._records: dict[Key, StoredRecord] = {}

    def get(self, key: Key) -> Any | None:
        record = self._records.get(key)
        if record is None:
            return None
        if record.expired(self.clock()):
            logger.debug("Record %s expired", key)
            del self._records[key]
            return None
        return deepcopy(record.value)

    def put(self, key: Key, value: Any):
        existing = self._records.get(key)
        expires_at = None
        if existing is not None and not existing.expired(self.clock()):
            expires_at = existing.expires_at
        self._records[key] = StoredRecord(value=deepcopy(value), expires_at=expires_at)

    def extend_lifetime(self, key: Key, ttl: int):
        record = self._records.get(key)
        if record is None:
            return
        horizon = self.clock() + ttl
        if record.expires_at is None or record.expires_at < horizon:
            record.expires_at = horizon

    def keys(self) -> list[Key]:
        """List live keys."""
        now = self.clock()
        return [k for k, r in self._records.items() if not r.expired(now)]

    def expires_at(self, key: Key) -> float | None:
        record = self._records.get(key)
        return record.expires_at if record else None
