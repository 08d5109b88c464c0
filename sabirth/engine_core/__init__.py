"""
Engine Core - Records, validation and errors.

Everything here is storage-agnostic and side-effect free.
"""

from .state import (
    CalibrationSession,
    SenseResult,
    LeaderboardEntry,
    ExitOutcome,
    Character,
    Sense,
    SCORE_CAP,
    MAX_SENSE_SCORE,
    ALL_SENSES_MASK,
    SESSION_TTL,
)
from .validation import validate_sense, expected_maze_id, ValidationResult, ValidationRule
from .errors import (
    CalibrationError,
    ErrorKind,
    InvalidInput,
    InvalidCharacter,
    InvalidSense,
    NotAuthorized,
    SessionNotFound,
    SessionNotActive,
    AlreadyCompleted,
    VerificationFailed,
    EscrowUnavailable,
)

__all__ = [
    "CalibrationSession",
    "SenseResult",
    "LeaderboardEntry",
    "ExitOutcome",
    "Character",
    "Sense",
    "SCORE_CAP",
    "MAX_SENSE_SCORE",
    "ALL_SENSES_MASK",
    "SESSION_TTL",
    "validate_sense",
    "expected_maze_id",
    "ValidationResult",
    "ValidationRule",
    "CalibrationError",
    "ErrorKind",
    "InvalidInput",
    "InvalidCharacter",
    "InvalidSense",
    "NotAuthorized",
    "SessionNotFound",
    "SessionNotActive",
    "AlreadyCompleted",
    "VerificationFailed",
    "EscrowUnavailable",
]
