"""
Leaderboard - Append-only record of winning exits.

Only attempt_exit's win branch writes here, so every entry already
qualifies (all six senses, total_score <= SCORE_CAP). No filtering,
no deduplication, no cap on length.

Reads sort the whole collection ascending by total_score (lower is
better). The sort is stable, so ties keep insertion order.
"""

from __future__ import annotations

from ..engine_core.state import LeaderboardEntry
from ..storage.accessor import SessionStore


class Leaderboard:
    """Leaderboard maintainer over the session store."""

    def __init__(self, store: SessionStore):
        self.store = store

    def record(self, entry: LeaderboardEntry):
        self.store.append_leaderboard(entry)

    def read(self) -> list[LeaderboardEntry]:
        return sorted(self.store.get_leaderboard(), key=lambda e: e.total_score)

    def __len__(self) -> int:
        return len(self.store.get_leaderboard())
