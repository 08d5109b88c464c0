"""
Pytest fixtures for SA:BIRTH tests.
"""

import pytest

from ..engine_core.validation import expected_maze_id
from ..storage import InMemoryStore, SessionStore
from ..escrow import EscrowCoordinator, InMemoryHub
from ..session import CalibrationManager, RecordingEventSink

PLAYER = "GPLAYER"
HOUSE = "GHOUSE"
PROOF = b"\x01\x02\x03"


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def sense_args(character: int, sense_id: int, points: int, elapsed_time: int) -> dict:
    """Keyword arguments for a valid submit_sense call."""
    return {
        "sense_id": sense_id,
        "maze_id": expected_maze_id(character, sense_id),
        "points": points,
        "elapsed_time": elapsed_time,
        "score": points * elapsed_time,
        "proof": PROOF,
    }


def complete_senses(manager, player, character, pairs):
    """Submit one sense per (points, elapsed_time) pair, sense ids in order."""
    for sense_id, (points, elapsed_time) in enumerate(pairs):
        manager.submit_sense(player, **sense_args(character, sense_id, points, elapsed_time))


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def kv_store(clock) -> InMemoryStore:
    return InMemoryStore(clock=clock)


@pytest.fixture
def session_store(kv_store) -> SessionStore:
    return SessionStore(kv_store)


@pytest.fixture
def hub() -> InMemoryHub:
    return InMemoryHub()


@pytest.fixture
def events() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def manager(session_store, hub, events, clock) -> CalibrationManager:
    """Manager wired to in-memory collaborators."""
    return CalibrationManager(
        store=session_store,
        escrow=EscrowCoordinator(hub=hub, game_id="sa-birth-test"),
        events=events,
        clock=clock,
    )


@pytest.fixture
def started(manager) -> CalibrationManager:
    """Manager with an active session for PLAYER (character ALICE)."""
    manager.start(PLAYER, HOUSE, 100, 100, session_id=42)
    return manager


@pytest.fixture
def carol(started) -> CalibrationManager:
    """Active session with character CAROL chosen."""
    started.set_character(PLAYER, 2)
    return started
