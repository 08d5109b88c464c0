"""
API Service - Business logic layer between the HTTP API and the engine.

The service:
1. Binds the authenticated caller for each lifecycle call
2. Runs lifecycle calls and store reads one at a time (single lock)
3. Converts engine records to response schemas

This layer is framework-agnostic; errors propagate as CalibrationError
and the web layer maps them to status codes.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import threading

from .. import __version__
from ..config import Settings
from ..engine_core.state import (
    CalibrationSession,
    SenseResult,
    Character,
    Sense,
    SCORE_CAP,
    NUM_SENSES,
)
from ..engine_core.errors import InvalidInput
from ..storage import InMemoryStore, JsonFileStore, SessionStore
from ..escrow import EscrowCoordinator, InMemoryHub, HttpHub
from ..session import (
    CalibrationManager,
    CallerAuthorizer,
    CompositeEventSink,
    LoggingEventSink,
    RecordingEventSink,
)
from .schemas import (
    StartSessionRequest,
    SetCharacterRequest,
    SubmitSenseRequest,
    SessionInfo,
    SetCharacterResponse,
    SenseResultInfo,
    ExitResponse,
    LeaderboardEntryInfo,
    LeaderboardResponse,
    EventInfo,
    EventsResponse,
    HealthResponse,
)

logger = logging.getLogger(__name__)


def _character_name(character: int) -> str:
    return Character(character).name if Character.is_valid(character) else "UNKNOWN"


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService.from_settings(Settings.from_env())

        session = service.start_session("alice", request)
        service.set_character("alice", "alice", SetCharacterRequest(character=1))
        outcome = service.attempt_exit("alice", "alice")
    """
    manager: CalibrationManager
    authorizer: CallerAuthorizer
    recorder: RecordingEventSink = field(default_factory=RecordingEventSink)
    _lock: threading.Lock = field(default_factory=threading.Lock)

    @classmethod
    def from_settings(cls, settings: Settings) -> APIService:
        """Wire store, hub, authorizer and event sinks from settings."""
        if settings.store_path:
            store = JsonFileStore(settings.store_path)
        else:
            store = InMemoryStore()

        if settings.hub_url:
            hub = HttpHub(settings.hub_url, timeout=settings.hub_timeout)
        elif settings.is_development:
            logger.warning("No SABIRTH_HUB_URL set, using in-memory hub")
            hub = InMemoryHub()
        else:
            logger.error("No SABIRTH_HUB_URL set, escrow calls will fail")
            hub = None

        authorizer = CallerAuthorizer()
        recorder = RecordingEventSink()
        manager = CalibrationManager(
            store=SessionStore(store, ttl=settings.session_ttl),
            escrow=EscrowCoordinator(hub=hub, game_id=settings.game_id),
            authorizer=authorizer,
            events=CompositeEventSink(LoggingEventSink(), recorder),
        )
        return cls(manager=manager, authorizer=authorizer, recorder=recorder)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start_session(self, caller: str | None, request: StartSessionRequest) -> SessionInfo:
        with self._lock, self.authorizer.authenticated_as(caller):
            session = self.manager.start(
                player=request.player,
                opponent=request.opponent,
                player_points=request.player_points,
                house_points=request.house_points,
                session_id=request.session_id,
            )
        return self._session_to_info(session)

    def set_character(
        self,
        caller: str | None,
        player: str,
        request: SetCharacterRequest,
    ) -> SetCharacterResponse:
        with self._lock, self.authorizer.authenticated_as(caller):
            session_id = self.manager.set_character(player, request.character)
        return SetCharacterResponse(
            session_id=session_id,
            character=request.character,
            character_name=_character_name(request.character),
        )

    def submit_sense(
        self,
        caller: str | None,
        player: str,
        request: SubmitSenseRequest,
    ) -> SenseResultInfo:
        try:
            proof = bytes.fromhex(request.proof_hex)
        except ValueError:
            raise InvalidInput("proof_hex is not valid hex")

        with self._lock, self.authorizer.authenticated_as(caller):
            result = self.manager.submit_sense(
                player=player,
                sense_id=request.sense_id,
                maze_id=request.maze_id,
                points=request.points,
                elapsed_time=request.elapsed_time,
                score=request.score,
                proof=proof,
            )
        return self._sense_result_to_info(result)

    def attempt_exit(self, caller: str | None, player: str) -> ExitResponse:
        with self._lock, self.authorizer.authenticated_as(caller):
            outcome = self.manager.attempt_exit(player)
        return ExitResponse(
            won=outcome.won,
            total_score=outcome.total_score,
            overloaded=outcome.overloaded,
            score_cap=SCORE_CAP,
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_session(self, player: str) -> SessionInfo | None:
        with self._lock:
            session = self.manager.get_session(player)
        return self._session_to_info(session) if session else None

    def get_sense_result(self, player: str, sense_id: int) -> SenseResultInfo | None:
        with self._lock:
            result = self.manager.get_sense_result(player, sense_id)
        return self._sense_result_to_info(result) if result else None

    def get_game(self, session_id: int) -> SessionInfo | None:
        with self._lock:
            session = self.manager.get_game(session_id)
        return self._session_to_info(session) if session else None

    def get_leaderboard(self) -> LeaderboardResponse:
        with self._lock:
            leaderboard = self.manager.get_leaderboard()
        entries = [
            LeaderboardEntryInfo(
                rank=i + 1,
                player=entry.player,
                character=entry.character,
                character_name=_character_name(entry.character),
                total_score=entry.total_score,
                timestamp=entry.timestamp,
            )
            for i, entry in enumerate(leaderboard)
        ]
        return LeaderboardResponse(entries=entries, count=len(entries))

    def recent_events(self, limit: int = 100) -> EventsResponse:
        with self._lock:
            published = list(self.recorder.events)[-limit:] if limit > 0 else []
        events = [
            EventInfo(
                topic=p.event.topic,
                player=p.player,
                payload=p.event.payload(),
                timestamp=p.timestamp,
            )
            for p in published
        ]
        return EventsResponse(events=events, count=len(events))

    def health(self) -> HealthResponse:
        return HealthResponse(
            status="healthy",
            service="sabirth-engine",
            version=__version__,
            hub_configured=self.manager.escrow.hub is not None,
        )

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _session_to_info(self, session: CalibrationSession) -> SessionInfo:
        return SessionInfo(
            player=session.player,
            opponent=session.opponent,
            session_id=session.session_id,
            character=session.character,
            character_name=_character_name(session.character),
            completed_senses=session.completed_senses,
            completed_sense_ids=[
                i for i in range(NUM_SENSES) if session.is_completed(i)
            ],
            total_score=session.total_score,
            player1_points=session.player1_points,
            player2_points=session.player2_points,
            active=session.active,
        )

    def _sense_result_to_info(self, result: SenseResult) -> SenseResultInfo:
        return SenseResultInfo(
            sense_id=result.sense_id,
            sense_name=Sense(result.sense_id).name.lower(),
            points=result.points,
            elapsed_time=result.elapsed_time,
            score=result.score,
        )
