"""
Sense Validation - Consistency checks for a submitted sense result.

Validates that:
1. The maze id binds the submission to the session's character and sense
2. score == points x elapsed_time (checked u64 multiplication)
3. Inputs are non-degenerate and the score is within range
4. A proof payload accompanies the submission

These checks mirror the constraints of the off-chain proof circuit.
The proof itself is not verified here.

Pure and stateless: no storage access, no side effects.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum

from .state import MAX_SENSE_SCORE, U64_MAX


class ValidationRule(Enum):
    """Rules a sense submission can violate."""
    MAZE_MISMATCH = "maze_mismatch"
    OVERFLOW = "overflow"
    SCORE_MISMATCH = "score_mismatch"
    DEGENERATE_INPUT = "degenerate_input"
    SCORE_OUT_OF_RANGE = "score_out_of_range"
    EMPTY_PROOF = "empty_proof"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validation: valid, or the first violated rule."""
    violated: ValidationRule | None = None
    detail: str = ""

    @property
    def valid(self) -> bool:
        return self.violated is None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls()

    @classmethod
    def fail(cls, rule: ValidationRule, detail: str) -> ValidationResult:
        return cls(violated=rule, detail=detail)


def expected_maze_id(character: int, sense_id: int) -> int:
    """Maze id for a (character, sense) pair: (character << 8) | sense_id."""
    return (character << 8) | sense_id


def checked_mul(a: int, b: int, limit: int = U64_MAX) -> int | None:
    """Multiply unsigned values, returning None on overflow."""
    product = a * b
    if product > limit:
        return None
    return product


def _in_u64(value: int) -> bool:
    return isinstance(value, int) and 0 <= value <= U64_MAX


def validate_sense(
    character: int,
    sense_id: int,
    maze_id: int,
    points: int,
    elapsed_time: int,
    score: int,
    proof: bytes,
) -> ValidationResult:
    """
    Validate a sense submission against the session's character.

    Checks run in order and stop at the first failure.
    """
    if maze_id != expected_maze_id(character, sense_id):
        return ValidationResult.fail(
            ValidationRule.MAZE_MISMATCH,
            f"maze_id {maze_id} != expected {expected_maze_id(character, sense_id)}",
        )

    # Values outside u64 cannot come from the circuit
    if not (_in_u64(points) and _in_u64(elapsed_time) and _in_u64(score)):
        return ValidationResult.fail(
            ValidationRule.OVERFLOW, "points, elapsed_time and score must fit in u64"
        )

    product = checked_mul(points, elapsed_time)
    if product is None:
        return ValidationResult.fail(
            ValidationRule.OVERFLOW, f"{points} x {elapsed_time} overflows u64"
        )
    if score != product:
        return ValidationResult.fail(
            ValidationRule.SCORE_MISMATCH,
            f"score {score} != points x elapsed_time ({product})",
        )

    if points == 0 or elapsed_time == 0:
        return ValidationResult.fail(
            ValidationRule.DEGENERATE_INPUT, "points and elapsed_time must be non-zero"
        )
    if score > MAX_SENSE_SCORE:
        return ValidationResult.fail(
            ValidationRule.SCORE_OUT_OF_RANGE,
            f"score {score} exceeds {MAX_SENSE_SCORE}",
        )

    if not proof:
        return ValidationResult.fail(ValidationRule.EMPTY_PROOF, "proof is empty")

    return ValidationResult.ok()
