"""
Calibration Manager - The session lifecycle state machine.

LIFECYCLE:
1. start          -> lock both stakes in the Hub, create an Active session
                     (an orphaned Active session is force-closed first,
                     house wins, best-effort)
2. set_character  -> choose ALICE / ROBERT / CAROL, emit "start"
3. submit_sense   -> record one of six senses after validation
4. attempt_exit   -> close the session exactly once, decide the outcome,
                     release the stakes to the winner

States: NoSession -> Active -> Closed. Closed sessions are kept as
read-only history; a new Active session may replace them.

OUTCOME POLICY (attempt_exit):
- Not all six senses recorded     -> house wins
- total_score > SCORE_CAP         -> house wins ("overload")
- Otherwise                       -> player wins, leaderboard entry added

Every operation runs to completion before the next one is observed.
Validation always happens before any mutation.
"""

from __future__ import annotations
from typing import Callable
import logging
import secrets
import time

from ..engine_core.state import (
    CalibrationSession,
    SenseResult,
    LeaderboardEntry,
    ExitOutcome,
    Character,
    Sense,
    SCORE_CAP,
    U32_MAX,
)
from ..engine_core.validation import validate_sense
from ..engine_core.errors import (
    InvalidInput,
    InvalidCharacter,
    InvalidSense,
    SessionNotFound,
    SessionNotActive,
    AlreadyCompleted,
    VerificationFailed,
)
from ..storage.accessor import SessionStore
from ..escrow.coordinator import EscrowCoordinator
from .auth import Authorizer, AllowAllAuthorizer
from .events import (
    EventSink,
    LoggingEventSink,
    SessionStarted,
    SenseCompleted,
    CalibrationComplete,
    Overload,
)
from .leaderboard import Leaderboard

logger = logging.getLogger(__name__)

I128_MIN = -(2**127)
I128_MAX = 2**127 - 1


class CalibrationManager:
    """
    Owns sessions and sense results while a session is active.

    Usage:
        manager = CalibrationManager(store, escrow)

        manager.start("alice", "house", 100, 100, session_id=7)
        manager.set_character("alice", Character.CAROL.value)
        manager.submit_sense("alice", 0, maze_id, points, time_ms, score, proof)
        won, total = manager.attempt_exit("alice")
    """

    def __init__(
        self,
        store: SessionStore,
        escrow: EscrowCoordinator,
        authorizer: Authorizer | None = None,
        events: EventSink | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.escrow = escrow
        self.authorizer = authorizer or AllowAllAuthorizer()
        self.events = events or LoggingEventSink()
        self.clock = clock
        self.leaderboard = Leaderboard(store)

    # =========================================================================
    # Lifecycle operations
    # =========================================================================

    def start(
        self,
        player: str,
        opponent: str,
        player_points: int,
        house_points: int,
        session_id: int | None = None,
    ) -> CalibrationSession:
        """
        Start a calibration session.

        Only the player authorizes (the house is the system wallet); the
        authorization covers the session id and the player's stake.

        Raises:
            InvalidInput: player == opponent, or ids/stakes out of range
            EscrowUnavailable: the Hub could not lock the stakes
        """
        if player == opponent:
            raise InvalidInput("player and opponent must differ")
        if session_id is None:
            session_id = secrets.randbelow(U32_MAX + 1)
        if not 0 <= session_id <= U32_MAX:
            raise InvalidInput(f"session_id out of range: {session_id}")
        for stake in (player_points, house_points):
            if not I128_MIN <= stake <= I128_MAX:
                raise InvalidInput(f"stake out of range: {stake}")

        self.authorizer.require_auth(player, (session_id, player_points))

        existing = self.store.get_session(player)
        if existing is not None and existing.active:
            logger.warning(
                "Orphaned session %s for %s, closing in favour of the house",
                existing.session_id, player,
            )
            self.escrow.release_best_effort(existing.session_id)
            existing.active = False
            self.store.put_session(existing)

        self.escrow.lock(session_id, player, opponent, player_points, house_points)

        session = CalibrationSession(
            player=player,
            opponent=opponent,
            session_id=session_id,
            player1_points=player_points,
            player2_points=house_points,
        )
        self.store.put_session(session)
        logger.info("Started session %s for %s", session_id, player)
        return session

    def set_character(self, player: str, character: int) -> int:
        """
        Record the chosen character. Returns the session id.

        Must be called after start() and before any maze attempt.
        """
        self.authorizer.require_auth(player)

        if not Character.is_valid(character):
            raise InvalidCharacter(f"Unknown character: {character}")

        session = self._active_session(player)
        session.character = character
        self.store.put_session(session)

        counter = self.store.increment_counter()
        logger.info(
            "Session %s: %s chose %s (counter=%d)",
            session.session_id, player, Character(character).name, counter,
        )

        self.events.publish(
            player, SessionStarted(character=character, session_id=session.session_id)
        )
        return session.session_id

    def submit_sense(
        self,
        player: str,
        sense_id: int,
        maze_id: int,
        points: int,
        elapsed_time: int,
        score: int,
        proof: bytes,
    ) -> SenseResult:
        """
        Submit the result of one maze sense.

        Checks, in order: sense id range, active session, not already
        completed, then the consistency rules of validate_sense(). Any
        consistency violation raises VerificationFailed.
        """
        self.authorizer.require_auth(player)

        if not Sense.is_valid(sense_id):
            raise InvalidSense(f"Sense id out of range: {sense_id}")

        session = self._active_session(player)

        if session.is_completed(sense_id):
            raise AlreadyCompleted(f"Sense {sense_id} already completed")

        result = validate_sense(
            character=session.character,
            sense_id=sense_id,
            maze_id=maze_id,
            points=points,
            elapsed_time=elapsed_time,
            score=score,
            proof=proof,
        )
        if not result.valid:
            logger.warning(
                "Rejected sense %d for %s: %s (%s)",
                sense_id, player, result.violated.value, result.detail,
            )
            raise VerificationFailed(result.violated)

        sense_result = SenseResult(
            sense_id=sense_id,
            points=points,
            elapsed_time=elapsed_time,
            score=score,
        )
        self.store.put_sense_result(player, sense_result)

        session.mark_completed(sense_id)
        session.add_score(score)
        self.store.put_session(session)

        self.events.publish(
            player,
            SenseCompleted(
                sense_id=sense_id,
                score=score,
                points=points,
                elapsed_time=elapsed_time,
            ),
        )
        return sense_result

    def attempt_exit(self, player: str) -> ExitOutcome:
        """
        Attempt to exit calibration.

        The session is closed before the outcome is evaluated, so it is
        closed exactly once whatever happens next. A failed Hub release
        propagates as EscrowUnavailable; the payout discrepancy is then
        resolved out of band.
        """
        self.authorizer.require_auth(player)

        session = self._active_session(player)
        session.active = False
        self.store.put_session(session)

        if not session.all_completed:
            logger.info(
                "Session %s closed incomplete (%d/6 senses), house wins",
                session.session_id, session.completed_count,
            )
            self.escrow.release(session.session_id, player_won=False)
            return ExitOutcome(won=False, total_score=session.total_score)

        if session.total_score > SCORE_CAP:
            logger.info(
                "Session %s overloaded (%d > %d), house wins",
                session.session_id, session.total_score, SCORE_CAP,
            )
            self.escrow.release(session.session_id, player_won=False)
            self.events.publish(
                player,
                Overload(character=session.character, total_score=session.total_score),
            )
            return ExitOutcome(won=False, total_score=session.total_score, overloaded=True)

        self.escrow.release(session.session_id, player_won=True)
        self.leaderboard.record(
            LeaderboardEntry(
                player=player,
                character=session.character,
                total_score=session.total_score,
                timestamp=int(self.clock()),
            )
        )
        logger.info(
            "Session %s complete, %s wins with %d",
            session.session_id, player, session.total_score,
        )
        self.events.publish(
            player,
            CalibrationComplete(character=session.character, total_score=session.total_score),
        )
        return ExitOutcome(won=True, total_score=session.total_score)

    # =========================================================================
    # Read-only helpers
    # =========================================================================

    def get_session(self, player: str) -> CalibrationSession | None:
        """Current (or last) session for a player."""
        return self.store.get_session(player)

    def get_sense_result(self, player: str, sense_id: int) -> SenseResult | None:
        """Stored result for one sense; None for out-of-range ids."""
        return self.store.get_sense_result(player, sense_id)

    def get_leaderboard(self) -> list[LeaderboardEntry]:
        """All winning exits, ascending by total_score."""
        return self.leaderboard.read()

    def get_game(self, session_id: int) -> CalibrationSession | None:
        """
        Lookup by session id.

        Sessions are indexed by player only; use get_session().
        """
        return None

    def session_counter(self) -> int:
        return self.store.get_counter()

    def _active_session(self, player: str) -> CalibrationSession:
        session = self.store.get_session(player)
        if session is None:
            raise SessionNotFound(f"No session for {player}")
        if not session.active:
            raise SessionNotActive(f"Session {session.session_id} is not active")
        return session
