"""
Tests for API layer.

Tests:
- API service methods
- Caller binding through the X-Player header
- Error code / status mapping
- Full lifecycle over HTTP
"""

import threading

import pytest
from fastapi.testclient import TestClient

from ..api import APIService, create_app
from ..api.schemas import (
    StartSessionRequest,
    SetCharacterRequest,
    SubmitSenseRequest,
)
from ..config import Settings
from ..engine_core.errors import NotAuthorized, InvalidInput, SessionNotFound
from ..engine_core.validation import expected_maze_id
from ..escrow import EscrowCoordinator, InMemoryHub
from ..session import (
    CalibrationManager,
    CallerAuthorizer,
    CompositeEventSink,
    RecordingEventSink,
)
from ..storage import InMemoryStore, SessionStore
from .conftest import PLAYER, HOUSE, PROOF


def _sense_body(character: int, sense_id: int, points: int = 1000, elapsed_time: int = 1000) -> dict:
    return {
        "sense_id": sense_id,
        "maze_id": expected_maze_id(character, sense_id),
        "points": points,
        "elapsed_time": elapsed_time,
        "score": points * elapsed_time,
        "proof_hex": PROOF.hex(),
    }


@pytest.fixture
def api_hub() -> InMemoryHub:
    return InMemoryHub()


@pytest.fixture
def service(api_hub, clock) -> APIService:
    """Service wired to an in-memory store and hub."""
    authorizer = CallerAuthorizer()
    recorder = RecordingEventSink()
    manager = CalibrationManager(
        store=SessionStore(InMemoryStore(clock=clock)),
        escrow=EscrowCoordinator(hub=api_hub),
        authorizer=authorizer,
        events=CompositeEventSink(recorder),
        clock=clock,
    )
    return APIService(manager=manager, authorizer=authorizer, recorder=recorder)


@pytest.fixture
def client(service) -> TestClient:
    return TestClient(create_app(service=service, settings=Settings()))


def _start(client, session_id=42, caller=PLAYER):
    return client.post(
        "/api/v1/sessions",
        json={
            "player": PLAYER,
            "opponent": HOUSE,
            "player_points": 100,
            "house_points": 100,
            "session_id": session_id,
        },
        headers={"X-Player": caller},
    )


class TestAPIService:
    """Tests for APIService."""

    def test_start_session(self, service, api_hub):
        request = StartSessionRequest(
            player=PLAYER, opponent=HOUSE, player_points=10, house_points=20, session_id=5
        )

        info = service.start_session(PLAYER, request)

        assert info.session_id == 5
        assert info.active
        assert info.character_name == "ALICE"
        assert info.completed_sense_ids == []
        assert api_hub.locks[0].session_id == 5

    def test_caller_must_match_player(self, service):
        request = StartSessionRequest(
            player=PLAYER, opponent=HOUSE, player_points=10, house_points=20, session_id=5
        )

        with pytest.raises(NotAuthorized):
            service.start_session("SOMEONE_ELSE", request)
        with pytest.raises(NotAuthorized):
            service.start_session(None, request)

    def test_caller_unbound_after_call(self, service):
        request = StartSessionRequest(
            player=PLAYER, opponent=HOUSE, player_points=10, house_points=20, session_id=5
        )
        service.start_session(PLAYER, request)

        assert service.authorizer.caller is None
        with pytest.raises(NotAuthorized):
            service.manager.attempt_exit(PLAYER)

    def test_submit_sense_decodes_proof(self, service):
        service.start_session(
            PLAYER,
            StartSessionRequest(player=PLAYER, opponent=HOUSE, player_points=1, house_points=1),
        )
        service.set_character(PLAYER, PLAYER, SetCharacterRequest(character=1))

        info = service.submit_sense(PLAYER, PLAYER, SubmitSenseRequest(**_sense_body(1, 4, 7, 6)))

        assert info.sense_name == "sight"
        assert info.score == 42
        assert service.get_session(PLAYER).completed_sense_ids == [4]

    def test_bad_proof_hex(self, service):
        body = _sense_body(0, 0)
        body["proof_hex"] = "zz"

        with pytest.raises(InvalidInput):
            service.submit_sense(PLAYER, PLAYER, SubmitSenseRequest(**body))

    def test_exit_without_session(self, service):
        with pytest.raises(SessionNotFound):
            service.attempt_exit(PLAYER, PLAYER)

    def test_reads_return_none(self, service):
        assert service.get_session(PLAYER) is None
        assert service.get_sense_result(PLAYER, 0) is None
        assert service.get_game(42) is None

    def test_health(self, service):
        health = service.health()
        assert health.status == "healthy"
        assert health.hub_configured

    def test_from_settings_development(self):
        service = APIService.from_settings(Settings(env="development"))
        assert isinstance(service.manager.escrow.hub, InMemoryHub)
        assert service.manager.escrow.game_id == "sa-birth"

    def test_from_settings_production_without_hub(self):
        service = APIService.from_settings(Settings(env="production"))
        assert service.manager.escrow.hub is None
        assert not service.health().hub_configured

    def test_from_settings_file_store(self, tmp_path):
        path = tmp_path / "store.json"
        service = APIService.from_settings(Settings(store_path=str(path)))
        service.start_session(
            PLAYER,
            StartSessionRequest(player=PLAYER, opponent=HOUSE, player_points=1, house_points=1),
        )

        reopened = APIService.from_settings(Settings(store_path=str(path)))
        assert reopened.get_session(PLAYER).player == PLAYER


class TestHTTPLifecycle:
    """A full calibration over HTTP."""

    def test_win(self, client, api_hub):
        assert _start(client).status_code == 200

        response = client.post(
            f"/api/v1/sessions/{PLAYER}/character",
            json={"character": 2},
            headers={"X-Player": PLAYER},
        )
        assert response.status_code == 200
        assert response.json() == {"session_id": 42, "character": 2, "character_name": "CAROL"}

        for sense_id in range(6):
            response = client.post(
                f"/api/v1/sessions/{PLAYER}/senses",
                json=_sense_body(2, sense_id),
                headers={"X-Player": PLAYER},
            )
            assert response.status_code == 200

        response = client.get(f"/api/v1/sessions/{PLAYER}/senses/3")
        assert response.json()["score"] == 1_000_000

        response = client.post(f"/api/v1/sessions/{PLAYER}/exit", headers={"X-Player": PLAYER})
        assert response.status_code == 200
        assert response.json()["won"] is True
        assert response.json()["total_score"] == 6_000_000
        assert api_hub.releases[-1].player1_won is True

        board = client.get("/api/v1/leaderboard").json()
        assert board["count"] == 1
        assert board["entries"][0]["rank"] == 1
        assert board["entries"][0]["character_name"] == "CAROL"

        session = client.get(f"/api/v1/sessions/{PLAYER}").json()
        assert session["active"] is False
        assert session["completed_senses"] == 0b111111

    def test_events_feed(self, client):
        _start(client)
        client.post(
            f"/api/v1/sessions/{PLAYER}/character",
            json={"character": 0},
            headers={"X-Player": PLAYER},
        )
        client.post(
            f"/api/v1/sessions/{PLAYER}/senses",
            json=_sense_body(0, 0),
            headers={"X-Player": PLAYER},
        )

        events = client.get("/api/v1/events").json()
        assert [e["topic"] for e in events["events"]] == ["start", "sense_completed"]
        assert "proof" not in events["events"][1]["payload"]

        limited = client.get("/api/v1/events", params={"limit": 1}).json()
        assert limited["count"] == 1
        assert limited["events"][0]["topic"] == "sense_completed"

    def test_health_and_root(self, client):
        assert client.get("/api/v1/health").json()["status"] == "healthy"
        assert client.get("/").json()["health"] == "/api/v1/health"


class TestHTTPErrors:
    """Error codes map to HTTP statuses."""

    def test_missing_header_is_401(self, client):
        response = client.post(
            "/api/v1/sessions",
            json={"player": PLAYER, "opponent": HOUSE, "player_points": 1, "house_points": 1},
        )
        assert response.status_code == 401
        assert response.json()["error_code"] == "NOT_AUTHORIZED"
        assert response.json()["code"] == 2

    def test_acting_for_other_player_is_401(self, client):
        assert _start(client, caller="MALLORY").status_code == 401

    def test_same_player_twice_is_400(self, client):
        response = client.post(
            "/api/v1/sessions",
            json={"player": PLAYER, "opponent": PLAYER, "player_points": 1, "house_points": 1},
            headers={"X-Player": PLAYER},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_INPUT"

    def test_malformed_body_is_400(self, client):
        response = client.post(
            "/api/v1/sessions",
            json={"player": PLAYER},
            headers={"X-Player": PLAYER},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_invalid_character_is_400(self, client):
        _start(client)
        response = client.post(
            f"/api/v1/sessions/{PLAYER}/character",
            json={"character": 3},
            headers={"X-Player": PLAYER},
        )
        assert response.status_code == 400
        assert response.json()["code"] == 7

    def test_no_session_is_404(self, client):
        response = client.post(f"/api/v1/sessions/{PLAYER}/exit", headers={"X-Player": PLAYER})
        assert response.status_code == 404
        assert response.json()["error_code"] == "SESSION_NOT_FOUND"

    def test_read_misses_are_404(self, client):
        assert client.get(f"/api/v1/sessions/{PLAYER}").status_code == 404
        assert client.get(f"/api/v1/sessions/{PLAYER}/senses/0").json()["error_code"] == (
            "SENSE_RESULT_NOT_FOUND"
        )
        _start(client)
        assert client.get("/api/v1/games/42").json()["error_code"] == "GAME_NOT_FOUND"

    def test_duplicate_sense_is_409(self, client):
        _start(client)
        for _ in range(2):
            response = client.post(
                f"/api/v1/sessions/{PLAYER}/senses",
                json=_sense_body(0, 1),
                headers={"X-Player": PLAYER},
            )
        assert response.status_code == 409
        assert response.json()["error_code"] == "ALREADY_COMPLETED"

    def test_second_exit_is_409(self, client):
        _start(client)
        client.post(f"/api/v1/sessions/{PLAYER}/exit", headers={"X-Player": PLAYER})
        response = client.post(f"/api/v1/sessions/{PLAYER}/exit", headers={"X-Player": PLAYER})
        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_NOT_ACTIVE"

    def test_bad_score_is_422(self, client):
        _start(client)
        body = _sense_body(0, 0, points=100, elapsed_time=50)
        body["score"] = 5001
        response = client.post(
            f"/api/v1/sessions/{PLAYER}/senses", json=body, headers={"X-Player": PLAYER}
        )
        assert response.status_code == 422
        assert response.json()["error_code"] == "VERIFICATION_FAILED"
        assert response.json()["code"] == 9

    def test_hub_failure_is_502(self, client, api_hub):
        api_hub.fail_lock = True
        response = _start(client)
        assert response.status_code == 502
        assert response.json()["error_code"] == "ESCROW_UNAVAILABLE"
        assert client.get(f"/api/v1/sessions/{PLAYER}").status_code == 404

    def test_exit_release_failure_is_502_and_closes(self, client, api_hub):
        _start(client)
        api_hub.fail_release = True
        response = client.post(f"/api/v1/sessions/{PLAYER}/exit", headers={"X-Player": PLAYER})
        assert response.status_code == 502
        assert client.get(f"/api/v1/sessions/{PLAYER}").json()["active"] is False


class TestServiceLocking:
    """Reads wait for an in-flight lifecycle call."""

    @pytest.mark.parametrize("read", [
        lambda service: service.get_session(PLAYER),
        lambda service: service.get_sense_result(PLAYER, 0),
        lambda service: service.get_game(42),
        lambda service: service.get_leaderboard(),
        lambda service: service.recent_events(),
    ])
    def test_read_waits_for_lock(self, service, read):
        done = threading.Event()

        def worker():
            read(service)
            done.set()

        with service._lock:
            thread = threading.Thread(target=worker)
            thread.start()
            assert not done.wait(timeout=0.1)

        thread.join(timeout=5)
        assert done.is_set()
