"""
Tests for the leaderboard.
"""

from ..engine_core.state import LeaderboardEntry
from ..session import Leaderboard
from .conftest import PLAYER, HOUSE, complete_senses


def _entry(player: str, total_score: int, timestamp: int = 0) -> LeaderboardEntry:
    return LeaderboardEntry(player=player, character=0, total_score=total_score, timestamp=timestamp)


class TestLeaderboard:
    """Tests for Leaderboard ordering."""

    def test_empty(self, session_store):
        board = Leaderboard(session_store)
        assert board.read() == []
        assert len(board) == 0

    def test_sorted_ascending(self, session_store):
        board = Leaderboard(session_store)
        for player, score in [("a", 300), ("b", 100), ("c", 200)]:
            board.record(_entry(player, score))

        assert [e.player for e in board.read()] == ["b", "c", "a"]
        assert len(board) == 3

    def test_ties_keep_insertion_order(self, session_store):
        board = Leaderboard(session_store)
        board.record(_entry("first", 50, timestamp=1))
        board.record(_entry("low", 10, timestamp=2))
        board.record(_entry("second", 50, timestamp=3))

        assert [e.player for e in board.read()] == ["low", "first", "second"]

    def test_storage_keeps_append_order(self, session_store):
        board = Leaderboard(session_store)
        board.record(_entry("a", 30))
        board.record(_entry("b", 10))

        assert [e.player for e in session_store.get_leaderboard()] == ["a", "b"]

    def test_repeat_winner_appears_twice(self, manager):
        """Every winning exit is recorded, no deduplication."""
        for session_id, pairs in [(1, [(2, 2)] * 6), (2, [(1, 1)] * 6)]:
            manager.start(PLAYER, HOUSE, 10, 10, session_id=session_id)
            manager.set_character(PLAYER, 1)
            complete_senses(manager, PLAYER, 1, pairs)
            assert manager.attempt_exit(PLAYER).won

        board = manager.get_leaderboard()
        assert [e.total_score for e in board] == [6, 24]
        assert all(e.player == PLAYER for e in board)
