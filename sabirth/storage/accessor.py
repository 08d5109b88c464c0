"""
Session Store Accessor - Typed access to calibration records.

Wraps a KeyValueStore with:
- get/put for sessions and sense results (refreshing their lifetime)
- the process-wide session counter (saturating u32)
- the leaderboard collection (singleton list)
"""

from __future__ import annotations
import logging

from ..engine_core.state import (
    CalibrationSession,
    SenseResult,
    LeaderboardEntry,
    Sense,
    SESSION_TTL,
    U32_MAX,
    saturating_add,
)
from .store import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_COUNTER_KEY = ("session_counter",)
LEADERBOARD_KEY = ("leaderboard",)


def session_key(player: str) -> tuple:
    return ("session", player)


def sense_result_key(player: str, sense_id: int) -> tuple:
    return ("sense_result", player, sense_id)


class SessionStore:
    """
    Typed accessor over the key-value store.

    Session and sense-result writes always refresh the record's lifetime.
    """

    def __init__(self, store: KeyValueStore, ttl: int = SESSION_TTL):
        self.store = store
        self.ttl = ttl

    # -------------------------------------------------------------------------
    # Sessions
    # -------------------------------------------------------------------------

    def get_session(self, player: str) -> CalibrationSession | None:
        data = self.store.get(session_key(player))
        if data is None:
            return None
        return CalibrationSession.from_dict(data)

    def put_session(self, session: CalibrationSession):
        key = session_key(session.player)
        self.store.put(key, session.to_dict())
        self.store.extend_lifetime(key, self.ttl)
        logger.debug("Stored session %s for %s", session.session_id, session.player)

    # -------------------------------------------------------------------------
    # Sense results
    # -------------------------------------------------------------------------

    def get_sense_result(self, player: str, sense_id: int) -> SenseResult | None:
        if not Sense.is_valid(sense_id):
            return None
        data = self.store.get(sense_result_key(player, sense_id))
        if data is None:
            return None
        return SenseResult.from_dict(data)

    def put_sense_result(self, player: str, result: SenseResult):
        key = sense_result_key(player, result.sense_id)
        self.store.put(key, result.to_dict())
        self.store.extend_lifetime(key, self.ttl)

    # -------------------------------------------------------------------------
    # Singletons
    # -------------------------------------------------------------------------

    def get_counter(self) -> int:
        return self.store.get(SESSION_COUNTER_KEY) or 0

    def increment_counter(self) -> int:
        """Saturating increment; returns the new value."""
        counter = saturating_add(self.get_counter(), 1, limit=U32_MAX)
        self.store.put(SESSION_COUNTER_KEY, counter)
        return counter

    def get_leaderboard(self) -> list[LeaderboardEntry]:
        data = self.store.get(LEADERBOARD_KEY) or []
        return [LeaderboardEntry.from_dict(item) for item in data]

    def append_leaderboard(self, entry: LeaderboardEntry):
        data = self.store.get(LEADERBOARD_KEY) or []
        data.append(entry.to_dict())
        self.store.put(LEADERBOARD_KEY, data)
