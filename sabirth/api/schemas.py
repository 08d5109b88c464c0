"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between the game frontend and the
engine. Numeric fields are plain integers; range checks belong to the
engine so that out-of-range values surface with the engine's error codes.

Error Codes:
- INVALID_INPUT: Malformed start request (same player twice, bad ids)
- INVALID_CHARACTER: Character is not 0 (ALICE), 1 (ROBERT) or 2 (CAROL)
- INVALID_SENSE: Sense id is not in 0..5
- NOT_AUTHORIZED: X-Player header missing or acting for someone else
- SESSION_NOT_FOUND: Player has no session
- SESSION_NOT_ACTIVE: Player's session is already closed
- ALREADY_COMPLETED: Sense already recorded on this session
- VERIFICATION_FAILED: Submission is internally inconsistent
- ESCROW_UNAVAILABLE: Hub could not lock or release the stakes
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class ErrorCode(str, Enum):
    """Structured error codes."""
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_CHARACTER = "INVALID_CHARACTER"
    INVALID_SENSE = "INVALID_SENSE"
    NOT_AUTHORIZED = "NOT_AUTHORIZED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_NOT_ACTIVE = "SESSION_NOT_ACTIVE"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    ESCROW_UNAVAILABLE = "ESCROW_UNAVAILABLE"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    SENSE_RESULT_NOT_FOUND = "SENSE_RESULT_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Request Models
# =============================================================================

class StartSessionRequest(BaseModel):
    """Request to start a calibration session."""
    player: str = Field(..., description="Player identity (must match X-Player)")
    opponent: str = Field(..., description="House / system identity")
    player_points: int = Field(..., description="Stake committed by the player")
    house_points: int = Field(..., description="Stake committed by the house")
    session_id: Optional[int] = Field(
        None, description="Hub correlation id (u32); generated when omitted"
    )


class SetCharacterRequest(BaseModel):
    """Request to choose a character."""
    character: int = Field(..., description="0=ALICE, 1=ROBERT, 2=CAROL")


class SubmitSenseRequest(BaseModel):
    """Request to submit one sense completion."""
    sense_id: int = Field(..., description="0=hearing .. 5=proprioception")
    maze_id: int = Field(..., description="(character << 8) | sense_id")
    points: int
    elapsed_time: int = Field(..., description="Time taken, in milliseconds")
    score: int = Field(..., description="points x elapsed_time")
    proof_hex: str = Field(..., description="Hex-encoded proof for off-chain verification")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    code: Optional[int] = Field(None, description="Numeric engine error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionInfo(BaseModel):
    """A calibration session."""
    player: str
    opponent: str
    session_id: int
    character: int
    character_name: str
    completed_senses: int = Field(description="Bitmask, bit i set when sense i is done")
    completed_sense_ids: list[int] = Field(default_factory=list)
    total_score: int
    player1_points: int
    player2_points: int
    active: bool
    api_version: str = "v1"


class SetCharacterResponse(BaseModel):
    session_id: int
    character: int
    character_name: str


class SenseResultInfo(BaseModel):
    """A recorded sense result (the proof is not stored)."""
    sense_id: int
    sense_name: str
    points: int
    elapsed_time: int
    score: int


class ExitResponse(BaseModel):
    """Outcome of attempt_exit."""
    won: bool
    total_score: int
    overloaded: bool = False
    score_cap: int


class LeaderboardEntryInfo(BaseModel):
    rank: int
    player: str
    character: int
    character_name: str
    total_score: int
    timestamp: int


class LeaderboardResponse(BaseModel):
    """Leaderboard, ascending by total_score."""
    entries: list[LeaderboardEntryInfo] = Field(default_factory=list)
    count: int = 0


class EventInfo(BaseModel):
    topic: str
    player: str
    payload: dict[str, Any]
    timestamp: float


class EventsResponse(BaseModel):
    events: list[EventInfo] = Field(default_factory=list)
    count: int = 0


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
    hub_configured: bool
