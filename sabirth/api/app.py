"""
FastAPI Application - REST API for the calibration game.

Endpoints:
    POST   /api/v1/sessions                           Start a session
    GET    /api/v1/sessions/{player}                  Get a player's session
    POST   /api/v1/sessions/{player}/character        Choose a character
    POST   /api/v1/sessions/{player}/senses           Submit a sense completion
    GET    /api/v1/sessions/{player}/senses/{id}      Get a stored sense result
    POST   /api/v1/sessions/{player}/exit             Attempt to exit
    GET    /api/v1/games/{session_id}                 Lookup by session id (unsupported)
    GET    /api/v1/leaderboard                        Leaderboard, ascending
    GET    /api/v1/events                             Recent notifications
    GET    /api/v1/health                             Health check

The acting player is identified by the X-Player header. Every lifecycle
call must act for that player.

Run with: uvicorn --factory sabirth.api.app:create_app
"""

from typing import Annotated, Optional

from fastapi import FastAPI, Header, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from ..config import Settings
from ..engine_core.errors import CalibrationError, ErrorKind
from .service import APIService
from .schemas import (
    StartSessionRequest,
    SetCharacterRequest,
    SubmitSenseRequest,
    SessionInfo,
    SetCharacterResponse,
    SenseResultInfo,
    ExitResponse,
    LeaderboardResponse,
    EventsResponse,
    HealthResponse,
    ErrorResponse,
    ErrorCode,
)

STATUS_BY_KIND = {
    ErrorKind.INPUT: 400,
    ErrorKind.AUTHORIZATION: 401,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.PRECONDITION: 409,
    ErrorKind.VERIFICATION: 422,
    ErrorKind.EXTERNAL: 502,
}

CallerHeader = Annotated[
    Optional[str], Header(description="Identity of the acting player")
]


def create_app(service: APIService | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (built from settings if not provided)
        settings: Optional Settings (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    settings = settings or Settings.from_env()
    api_service = service or APIService.from_settings(settings)

    app = FastAPI(
        title="SA:BIRTH Calibration API",
        description="""
Maze calibration game engine - sessions, sense submissions, escrow and leaderboard.

## Flow

1. `POST /sessions` locks both stakes and opens a session
2. `POST /sessions/{player}/character` picks ALICE, ROBERT or CAROL
3. `POST /sessions/{player}/senses` once per sense (0-5)
4. `POST /sessions/{player}/exit` closes the session and pays out

The player wins when all six senses are recorded and the total score
is at most 20,000,000.
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.service = api_service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        code: Optional[int] = None,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                code=code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request failed validation",
            status_code=400,
            details={"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(CalibrationError)
    async def calibration_error_handler(request: Request, exc: CalibrationError):
        return make_error_response(
            ErrorCode.__members__.get(exc.error_code, ErrorCode.INTERNAL_ERROR),
            exc.message,
            status_code=STATUS_BY_KIND[exc.kind],
            code=exc.code,
        )

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionInfo,
        responses={
            400: {"model": ErrorResponse, "description": "Invalid start request"},
            401: {"model": ErrorResponse},
            502: {"model": ErrorResponse, "description": "Hub could not lock stakes"},
        },
        tags=["Sessions"],
        summary="Start a calibration session",
    )
    def start_session(request: StartSessionRequest, x_player: CallerHeader = None) -> SessionInfo:
        """
        Start a calibration session.

        Locks both stakes in the Hub. A still-active previous session for
        the same player is closed first in favour of the house.
        """
        return api_service.start_session(x_player, request)

    @app.get(
        "/api/v1/sessions/{player}",
        response_model=SessionInfo,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get a player's current or last session",
    )
    def get_session(player: str):
        session = api_service.get_session(player)
        if session is None:
            return make_error_response(
                ErrorCode.SESSION_NOT_FOUND,
                f"No session for {player}",
                status_code=404,
            )
        return session

    @app.post(
        "/api/v1/sessions/{player}/character",
        response_model=SetCharacterResponse,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse},
        },
        tags=["Sessions"],
        summary="Choose a character",
    )
    def set_character(
        player: str,
        request: SetCharacterRequest,
        x_player: CallerHeader = None,
    ) -> SetCharacterResponse:
        return api_service.set_character(x_player, player, request)

    # =========================================================================
    # Sense Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{player}/senses",
        response_model=SenseResultInfo,
        responses={
            400: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Not active or already completed"},
            422: {"model": ErrorResponse, "description": "Verification failed"},
        },
        tags=["Senses"],
        summary="Submit a sense completion",
    )
    def submit_sense(
        player: str,
        request: SubmitSenseRequest,
        x_player: CallerHeader = None,
    ) -> SenseResultInfo:
        """
        Submit the result of one maze sense.

        The score must equal points x elapsed_time and the maze id must be
        (character << 8) | sense_id. The proof is not stored.
        """
        return api_service.submit_sense(x_player, player, request)

    @app.get(
        "/api/v1/sessions/{player}/senses/{sense_id}",
        response_model=SenseResultInfo,
        responses={404: {"model": ErrorResponse}},
        tags=["Senses"],
        summary="Get a stored sense result",
    )
    def get_sense_result(player: str, sense_id: int):
        result = api_service.get_sense_result(player, sense_id)
        if result is None:
            return make_error_response(
                ErrorCode.SENSE_RESULT_NOT_FOUND,
                f"No result for sense {sense_id}",
                status_code=404,
            )
        return result

    # =========================================================================
    # Exit Endpoint
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{player}/exit",
        response_model=ExitResponse,
        responses={
            404: {"model": ErrorResponse},
            409: {"model": ErrorResponse, "description": "Session not active"},
            502: {"model": ErrorResponse, "description": "Hub release failed"},
        },
        tags=["Sessions"],
        summary="Attempt to exit calibration",
    )
    def attempt_exit(player: str, x_player: CallerHeader = None) -> ExitResponse:
        """
        Close the session and settle the stakes.

        A 502 means the session is closed but the payout did not complete.
        """
        return api_service.attempt_exit(x_player, player)

    # =========================================================================
    # Read-only Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{session_id}",
        response_model=SessionInfo,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Lookup by session id (use /sessions/{player})",
    )
    def get_game(session_id: int):
        session = api_service.get_game(session_id)
        if session is None:
            return make_error_response(
                ErrorCode.GAME_NOT_FOUND,
                "Sessions are indexed by player; use /api/v1/sessions/{player}",
                status_code=404,
            )
        return session

    @app.get(
        "/api/v1/leaderboard",
        response_model=LeaderboardResponse,
        tags=["Leaderboard"],
        summary="Leaderboard, lowest score first",
    )
    def get_leaderboard() -> LeaderboardResponse:
        return api_service.get_leaderboard()

    @app.get(
        "/api/v1/events",
        response_model=EventsResponse,
        tags=["System"],
        summary="Recent notifications",
    )
    def get_events(
        limit: Annotated[int, Query(ge=1, le=1000, description="Max events")] = 100,
    ) -> EventsResponse:
        return api_service.recent_events(limit)

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    def health_check() -> HealthResponse:
        return api_service.health()

    @app.get("/", tags=["System"])
    def root():
        return {
            "service": "SA:BIRTH Calibration API",
            "docs": "/api/docs",
            "health": "/api/v1/health",
        }

    return app
