"""
Escrow Hub - Interface to the external stake arbitration service.

The Hub holds both parties' stake while a session runs:
- start_game locks the player's and the house's points
- end_game releases them to the winner

Implementations:
- InMemoryHub: records calls, can be armed to fail (tests, local play)
- HttpHub: JSON over HTTP via httpx
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
import logging

import httpx

logger = logging.getLogger(__name__)


class EscrowError(Exception):
    """Raised by a Hub when a call cannot be completed."""


class EscrowHub(ABC):
    """The two calls the Hub exposes."""

    @abstractmethod
    def start_game(
        self,
        game_id: str,
        session_id: int,
        player1: str,
        player2: str,
        player1_points: int,
        player2_points: int,
    ):
        """Lock both players' points for a session."""

    @abstractmethod
    def end_game(self, session_id: int, player1_won: bool):
        """Release the locked points to the winner."""


@dataclass
class LockCall:
    game_id: str
    session_id: int
    player1: str
    player2: str
    player1_points: int
    player2_points: int


@dataclass
class ReleaseCall:
    session_id: int
    player1_won: bool


@dataclass
class InMemoryHub(EscrowHub):
    """
    Hub that records every call.

    Set fail_lock / fail_release to make the next calls raise EscrowError.
    Failed calls are still recorded as attempts.
    """
    locks: list[LockCall] = field(default_factory=list)
    releases: list[ReleaseCall] = field(default_factory=list)
    fail_lock: bool = False
    fail_release: bool = False

    def start_game(self, game_id, session_id, player1, player2, player1_points, player2_points):
        self.locks.append(
            LockCall(game_id, session_id, player1, player2, player1_points, player2_points)
        )
        if self.fail_lock:
            raise EscrowError(f"Hub refused to lock session {session_id}")

    def end_game(self, session_id, player1_won):
        self.releases.append(ReleaseCall(session_id, player1_won))
        if self.fail_release:
            raise EscrowError(f"Hub does not recognise session {session_id}")

    def locked_sessions(self) -> set[int]:
        """Session ids locked and not yet released."""
        released = {r.session_id for r in self.releases}
        return {lock.session_id for lock in self.locks} - released


class HttpHub(EscrowHub):
    """
    Hub reached over HTTP.

    POST {base_url}/start_game and POST {base_url}/end_game with JSON bodies.
    Transport errors and non-2xx responses raise EscrowError.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.client = httpx.Client(base_url=self.base_url, timeout=timeout, transport=transport)

    def start_game(self, game_id, session_id, player1, player2, player1_points, player2_points):
        self._post("/start_game", {
            "game_id": game_id,
            "session_id": session_id,
            "player1": player1,
            "player2": player2,
            "player1_points": player1_points,
            "player2_points": player2_points,
        })

    def end_game(self, session_id, player1_won):
        self._post("/end_game", {
            "session_id": session_id,
            "player1_won": player1_won,
        })

    def close(self):
        self.client.close()

    def _post(self, path: str, payload: dict):
        try:
            response = self.client.post(path, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise EscrowError(f"Hub call {path} failed: {e}") from e
