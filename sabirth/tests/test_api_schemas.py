"""
Tests for API Pydantic schemas.

Validates that:
- Request models accept engine-sized integers
- Error codes cover every engine error
- Responses serialize with enum values as strings
"""

import pytest
from pydantic import ValidationError

from ..api.schemas import (
    ErrorCode,
    ErrorResponse,
    StartSessionRequest,
    SubmitSenseRequest,
    ExitResponse,
    LeaderboardEntryInfo,
    LeaderboardResponse,
)
from ..engine_core import errors


class TestPydanticSchemas:
    """Tests for Pydantic schema validation."""

    def test_start_request_session_id_optional(self):
        request = StartSessionRequest(player="a", opponent="h", player_points=1, house_points=2)
        assert request.session_id is None

    def test_start_request_keeps_large_stakes(self):
        request = StartSessionRequest(
            player="a", opponent="h", player_points=2**100, house_points=0, session_id=1
        )
        assert request.player_points == 2**100

    def test_submit_request_requires_proof(self):
        with pytest.raises(ValidationError):
            SubmitSenseRequest(sense_id=0, maze_id=0, points=1, elapsed_time=1, score=1)

    def test_error_response_schema(self):
        response = ErrorResponse(
            error="Sense verification failed",
            error_code=ErrorCode.VERIFICATION_FAILED,
            code=9,
        )

        data = response.model_dump(mode="json")
        assert data["error_code"] == "VERIFICATION_FAILED"
        assert data["code"] == 9
        assert data["details"] is None
        assert data["api_version"] == "v1"

    def test_exit_response_schema(self):
        data = ExitResponse(won=False, total_score=25_000_000, overloaded=True, score_cap=20_000_000).model_dump()
        assert data == {
            "won": False,
            "total_score": 25_000_000,
            "overloaded": True,
            "score_cap": 20_000_000,
        }

    def test_leaderboard_defaults(self):
        assert LeaderboardResponse().model_dump() == {"entries": [], "count": 0}

        entry = LeaderboardEntryInfo(
            rank=1, player="a", character=2, character_name="CAROL", total_score=5, timestamp=9
        )
        data = LeaderboardResponse(entries=[entry], count=1).model_dump()
        assert data["entries"][0]["character_name"] == "CAROL"


class TestErrorCodes:
    """Every engine error has a matching API error code."""

    @pytest.mark.parametrize("error_class", [
        errors.SessionNotFound,
        errors.NotAuthorized,
        errors.AlreadyCompleted,
        errors.InvalidCharacter,
        errors.InvalidSense,
        errors.VerificationFailed,
        errors.SessionNotActive,
        errors.EscrowUnavailable,
        errors.InvalidInput,
    ])
    def test_engine_error_has_code(self, error_class):
        assert ErrorCode(error_class.error_code).value == error_class.error_code

    def test_numeric_codes(self):
        assert errors.SessionNotFound.code == 1
        assert errors.NotAuthorized.code == 2
        assert errors.AlreadyCompleted.code == 3
        assert errors.InvalidCharacter.code == 7
        assert errors.InvalidSense.code == 8
        assert errors.VerificationFailed.code == 9
        assert errors.SessionNotActive.code == 10
        assert errors.EscrowUnavailable.code == 11
        assert errors.InvalidInput.code == 13
