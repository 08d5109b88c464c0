"""
API Module - HTTP interface for the game frontend.

The frontend:
1. Starts a session (stakes locked in the Hub)
2. Chooses a character
3. Submits each completed sense with its proof
4. Attempts to exit and reads the leaderboard

All lifecycle calls act for the player named in the X-Player header.
"""

from .schemas import (
    # Requests
    StartSessionRequest,
    SetCharacterRequest,
    SubmitSenseRequest,
    # Responses
    SessionInfo,
    SetCharacterResponse,
    SenseResultInfo,
    ExitResponse,
    LeaderboardEntryInfo,
    LeaderboardResponse,
    EventInfo,
    EventsResponse,
    HealthResponse,
    ErrorResponse,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "StartSessionRequest",
    "SetCharacterRequest",
    "SubmitSenseRequest",
    # Responses
    "SessionInfo",
    "SetCharacterResponse",
    "SenseResultInfo",
    "ExitResponse",
    "LeaderboardEntryInfo",
    "LeaderboardResponse",
    "EventInfo",
    "EventsResponse",
    "HealthResponse",
    "ErrorResponse",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
