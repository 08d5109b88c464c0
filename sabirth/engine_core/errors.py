"""
Calibration Errors - Exceptions surfaced by lifecycle operations.

Taxonomy:
1. Input validation (invalid character, invalid sense, bad arguments)
2. Authorization (caller did not authorize the call)
3. Preconditions (no session, session not active, sense already done)
4. Consistency (any verification rule violated)
5. External dependency (escrow Hub unreachable or rejecting)

Every error carries a stable numeric code and a machine-readable name.
No state is mutated when an error is raised, except EscrowUnavailable on
the close path, which leaves the session closed.
"""

from __future__ import annotations
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .validation import ValidationRule


class ErrorKind(Enum):
    """Error categories, used by the API layer to choose a status code."""
    INPUT = "input"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    PRECONDITION = "precondition"
    VERIFICATION = "verification"
    EXTERNAL = "external"


class CalibrationError(Exception):
    """Base class for all lifecycle errors."""
    code: int = 0
    error_code: str = "CALIBRATION_ERROR"
    kind: ErrorKind = ErrorKind.INPUT

    def __init__(self, message: str | None = None):
        self.message = message or self.error_code.replace("_", " ").capitalize()
        super().__init__(self.message)


class SessionNotFound(CalibrationError):
    code = 1
    error_code = "SESSION_NOT_FOUND"
    kind = ErrorKind.NOT_FOUND


class NotAuthorized(CalibrationError):
    code = 2
    error_code = "NOT_AUTHORIZED"
    kind = ErrorKind.AUTHORIZATION


class AlreadyCompleted(CalibrationError):
    code = 3
    error_code = "ALREADY_COMPLETED"
    kind = ErrorKind.PRECONDITION


class InvalidCharacter(CalibrationError):
    code = 7
    error_code = "INVALID_CHARACTER"
    kind = ErrorKind.INPUT


class InvalidSense(CalibrationError):
    code = 8
    error_code = "INVALID_SENSE"
    kind = ErrorKind.INPUT


class VerificationFailed(CalibrationError):
    """
    Raised when a sense submission is internally inconsistent.

    The violated rule is kept for logging and tests; the public error
    does not distinguish between rules.
    """
    code = 9
    error_code = "VERIFICATION_FAILED"
    kind = ErrorKind.VERIFICATION

    def __init__(self, rule: ValidationRule, message: str | None = None):
        self.rule = rule
        super().__init__(message or "Sense verification failed")


class SessionNotActive(CalibrationError):
    code = 10
    error_code = "SESSION_NOT_ACTIVE"
    kind = ErrorKind.PRECONDITION


class EscrowUnavailable(CalibrationError):
    code = 11
    error_code = "ESCROW_UNAVAILABLE"
    kind = ErrorKind.EXTERNAL


class InvalidInput(CalibrationError):
    code = 13
    error_code = "INVALID_INPUT"
    kind = ErrorKind.INPUT
