"""
Escrow Coordinator - Lock and release stake through the Hub.

Policy:
- lock() at session start: no retry, any failure aborts session creation
- release() on the normal close path: failure propagates
- release_best_effort() on orphan cleanup: failure is logged and dropped,
  the old session id may reference a Hub instance that no longer knows it
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..engine_core.errors import EscrowUnavailable
from .hub import EscrowHub, EscrowError

logger = logging.getLogger(__name__)


@dataclass
class EscrowCoordinator:
    """
    Issues one-shot lock / release requests.

    A coordinator without a hub is a deployment error; every call that
    needs the hub then fails with EscrowUnavailable.
    """
    hub: EscrowHub | None = None
    game_id: str = "sa-birth"

    def _require_hub(self) -> EscrowHub:
        if self.hub is None:
            raise EscrowUnavailable("Escrow hub is not configured")
        return self.hub

    def lock(
        self,
        session_id: int,
        player: str,
        house: str,
        player_stake: int,
        house_stake: int,
    ):
        hub = self._require_hub()
        try:
            hub.start_game(self.game_id, session_id, player, house, player_stake, house_stake)
        except EscrowError as e:
            logger.error("Lock failed for session %s: %s", session_id, e)
            raise EscrowUnavailable(str(e)) from e
        logger.info("Locked stake for session %s (%s vs %s)", session_id, player, house)

    def release(self, session_id: int, player_won: bool):
        hub = self._require_hub()
        try:
            hub.end_game(session_id, player_won)
        except EscrowError as e:
            logger.error("Release failed for session %s: %s", session_id, e)
            raise EscrowUnavailable(str(e)) from e
        logger.info("Released session %s (player_won=%s)", session_id, player_won)

    def release_best_effort(self, session_id: int):
        """Close an orphaned session in the house's favour, ignoring failures."""
        if self.hub is None:
            return
        try:
            self.hub.end_game(session_id, False)
        except Exception as e:
            logger.warning("Ignoring failed orphan release for session %s: %s", session_id, e)
