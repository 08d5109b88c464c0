"""
Calibration State - Records owned by the calibration engine.

Three record types:
- CalibrationSession: one per player, the live (or last) attempt
- SenseResult: one per (player, sense), immutable once written
- LeaderboardEntry: one per winning exit, append-only

Design principles:
- Plain dataclasses, no storage knowledge
- Serializable: to_dict()/from_dict() give JSON-compatible snapshots
- Integer domains mirror the ledger types (u32 ids, u64 scores)
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any


# =============================================================================
# Constants
# =============================================================================

U32_MAX = 2**32 - 1
U64_MAX = 2**64 - 1

NUM_SENSES = 6
ALL_SENSES_MASK = 0b11_1111

# Maximum total score to qualify for the leaderboard / trigger a player win.
# Lower is better (fast + exploring fewer cells).
SCORE_CAP = 20_000_000

# Per-sense score ceiling enforced at submission time.
MAX_SENSE_SCORE = 10_000_000_000

# 30 days, in seconds.
SESSION_TTL = 30 * 24 * 60 * 60


class Character(Enum):
    """Playable characters."""
    ALICE = 0
    ROBERT = 1
    CAROL = 2

    @classmethod
    def is_valid(cls, value: int) -> bool:
        return value in {c.value for c in cls}


class Sense(Enum):
    """The six maze sub-challenges."""
    HEARING = 0
    SMELL = 1
    TASTE = 2
    TOUCH = 3
    SIGHT = 4
    PROPRIOCEPTION = 5

    @classmethod
    def is_valid(cls, value: int) -> bool:
        return 0 <= value < NUM_SENSES

    @property
    def bit(self) -> int:
        return 1 << self.value


def saturating_add(a: int, b: int, limit: int = U64_MAX) -> int:
    """Add two unsigned values, clamping at limit instead of wrapping."""
    return min(a + b, limit)


# =============================================================================
# Records
# =============================================================================

@dataclass
class CalibrationSession:
    """
    A player's calibration attempt.

    Keyed by player identity. Deactivated on exit, never deleted.
    """
    player: str
    opponent: str  # house / system player, receives the prize on a loss
    session_id: int  # correlation token handed to the Hub
    player1_points: int
    player2_points: int
    character: int = Character.ALICE.value
    completed_senses: int = 0  # bits 0-5, one per sense
    total_score: int = 0
    active: bool = True

    def is_completed(self, sense_id: int) -> bool:
        """Check whether a sense has already been recorded."""
        return bool(self.completed_senses & (1 << sense_id))

    def mark_completed(self, sense_id: int):
        """Record a sense as completed."""
        if not Sense.is_valid(sense_id):
            raise ValueError(f"Sense id out of range: {sense_id}")
        self.completed_senses |= 1 << sense_id

    @property
    def all_completed(self) -> bool:
        return self.completed_senses == ALL_SENSES_MASK

    @property
    def completed_count(self) -> int:
        return bin(self.completed_senses).count("1")

    def add_score(self, score: int):
        """Add to the running total (saturating)."""
        self.total_score = saturating_add(self.total_score, score)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CalibrationSession:
        return cls(**data)


@dataclass(frozen=True)
class SenseResult:
    """
    Per-sense result.

    The proof accompanying the submission is not stored here; it is meant
    for off-chain verification only.
    """
    sense_id: int
    points: int
    elapsed_time: int
    score: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SenseResult:
        return cls(**data)


@dataclass(frozen=True)
class LeaderboardEntry:
    """A winning exit. Only runs with total_score <= SCORE_CAP are recorded."""
    player: str
    character: int
    total_score: int
    timestamp: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LeaderboardEntry:
        return cls(**data)


@dataclass(frozen=True)
class ExitOutcome:
    """Result of attempt_exit: (won, total_score)."""
    won: bool
    total_score: int
    overloaded: bool = False

    def __iter__(self):
        # Unpacks as the (won, total_score) pair callers expect
        return iter((self.won, self.total_score))
