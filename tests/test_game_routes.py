import pytest

pytest.importorskip("httpx", reason="httpx requis pour les tests client FastAPI")

from collections import defaultdict

from fastapi.testclient import TestClient

from pairs_app.config.settings import settings
from pairs_app.main import app
from pairs_app.services.session_store import GAME_FILENAME, get_session, sessions_dir

ORIGIN = {"Origin": "https://playjogosgratis.com"}
client = TestClient(app)


def _start(player_count: int = 2, **extra) -> dict:
    response = client.post("/api/game/start", json={"player_count": player_count, **extra}, headers=ORIGIN)
    assert response.status_code == 200, response.text
    return response.json()


def _pairs(session_id: str) -> list[list[int]]:
    found = defaultdict(list)
    for tile in get_session(session_id).board:
        found[tile.symbol].append(tile.id)
    return list(found.values())


def _move(session_id: str, player_id: int, tile_id: int):
    return client.post(
        f"/api/game/sessions/{session_id}/move",
        json={"player_id": player_id, "tile_id": tile_id},
        headers=ORIGIN,
    )


def test_request_without_origin_is_rejected():
    response = client.post("/api/game/start", json={"player_count": 2})
    assert response.status_code == 403
    assert response.json()["detail"]["message"] == "Acesso negado. Origem não autorizada."


def test_foreign_origin_is_rejected():
    response = client.get("/api/game/symbols", headers={"Origin": "https://evil.example.com"})
    assert response.status_code == 403


def test_referer_is_accepted_when_origin_missing():
    response = client.get("/api/game/symbols", headers={"Referer": "https://my-preview.vercel.app/jogo"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["board_pairs"] == settings.BOARD_PAIRS
    assert len(payload["symbols"]) == 18


def test_preflight_is_answered_by_cors():
    response = client.options(
        "/api/game/start",
        headers={**ORIGIN, "Access-Control-Request-Method": "POST", "Access-Control-Request-Headers": "Content-Type"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == ORIGIN["Origin"]
    assert "POST" in response.headers["access-control-allow-methods"]


def test_health_is_not_guarded():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["ok"] is True


@pytest.mark.parametrize("count", [0, 5])
def test_start_out_of_range_is_invalid_argument(count):
    response = client.post("/api/game/start", json={"player_count": count}, headers=ORIGIN)
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_argument"


def test_malformed_payload_is_invalid_argument():
    snapshot = _start()
    response = client.post(
        f"/api/game/sessions/{snapshot['session_id']}/move",
        json={"player_id": 1, "tile_id": "abc"},
        headers=ORIGIN,
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_argument"


def test_start_returns_redacted_board():
    snapshot = _start(2, names=["Ana", "Bia"])
    assert snapshot["status"] == "IN_PROGRESS"
    assert len(snapshot["board"]) == 16
    assert all(tile["symbol"] is None for tile in snapshot["board"])
    assert [p["name"] for p in snapshot["players"]] == ["Ana", "Bia"]


def test_two_player_flow_and_finish():
    snapshot = _start(2)
    sid = snapshot["session_id"]
    pairs = _pairs(sid)

    assert _move(sid, 1, pairs[0][0]).json()["matched"] is None
    mismatch = _move(sid, 1, pairs[1][0]).json()
    assert mismatch["matched"] is False
    assert mismatch["snapshot"]["current_player_id"] == 2

    not_your_turn = _move(sid, 1, pairs[2][0])
    assert not_your_turn.status_code == 409
    assert not_your_turn.json()["detail"]["error"] == "not_your_turn"

    _move(sid, 2, pairs[0][0])
    match = _move(sid, 2, pairs[0][1]).json()
    assert match["matched"] is True
    assert match["snapshot"]["players"][1]["score"] == settings.POINTS_PER_PAIR
    assert match["snapshot"]["current_player_id"] == 2

    again = _move(sid, 2, pairs[0][0])
    assert again.status_code == 400
    assert again.json()["detail"]["error"] == "invalid_tile"

    for first, second in pairs[1:]:
        _move(sid, 2, first)
        last = _move(sid, 2, second).json()
    assert last["session_finished"] is True

    finished = client.post(f"/api/game/sessions/{sid}/finish", headers=ORIGIN).json()
    assert finished["end_reason"] == "completed"
    assert [r["player_id"] for r in finished["ranked_results"]] == [2, 1]
    assert finished["winners"] == [2]

    after = _move(sid, 2, pairs[0][0])
    assert after.status_code == 409
    assert after.json()["detail"]["error"] == "not_in_progress"


def test_idle_session_lifecycle():
    created = client.post("/api/game/sessions", json={"max_pairs": 6}, headers=ORIGIN).json()
    sid = created["session_id"]
    assert created["status"] == "IDLE"

    finish = client.post(f"/api/game/sessions/{sid}/finish", headers=ORIGIN)
    assert finish.status_code == 409
    assert finish.json()["detail"]["error"] == "not_in_progress"

    started = client.post(f"/api/game/sessions/{sid}/start", json={"player_count": 1}, headers=ORIGIN).json()
    assert len(started["board"]) == 12

    first = client.get(f"/api/game/sessions/{sid}/state", headers=ORIGIN).json()
    second = client.get(f"/api/game/sessions/{sid}/state", headers=ORIGIN).json()
    assert first == second

    assert client.delete(f"/api/game/sessions/{sid}", headers=ORIGIN).status_code == 200
    gone = client.get(f"/api/game/sessions/{sid}/state", headers=ORIGIN)
    assert gone.status_code == 404
    assert gone.json()["detail"]["error"] == "session_not_found"


def test_too_many_pairs_for_symbol_set_is_rejected():
    response = client.post(
        "/api/game/start", json={"player_count": 1, "max_pairs": 40}, headers=ORIGIN
    )
    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_argument"


def test_client_bundle_headers():
    response = client.get("/api/client.js", headers=ORIGIN)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/javascript; charset=utf-8"
    assert response.headers["cache-control"] == settings.CLIENT_CACHE_CONTROL
    assert "gameLogic" in response.text


def test_session_id_cannot_escape_data_dir(monkeypatch):
    monkeypatch.setattr(settings, "PERSIST_SESSIONS", True)
    response = client.post("/api/game/sessions", json={"session_id": "../../escaped"}, headers=ORIGIN)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_argument"
    escaped = sessions_dir().parent.parent / "escaped" / GAME_FILENAME
    assert not escaped.exists()


def test_delete_with_malformed_id_keeps_other_sessions(monkeypatch):
    monkeypatch.setattr(settings, "PERSIST_SESSIONS", True)
    created = client.post("/api/game/sessions", json={"session_id": "keepme"}, headers=ORIGIN)
    assert created.status_code == 200

    response = client.delete("/api/game/sessions/bad.id", headers=ORIGIN)

    assert response.status_code == 400
    assert response.json()["detail"]["error"] == "invalid_argument"
    assert (sessions_dir() / "keepme" / GAME_FILENAME).exists()


def test_existing_session_id_cannot_be_reset():
    sid = _start(2)["session_id"]
    response = client.post("/api/game/sessions", json={"session_id": sid}, headers=ORIGIN)

    assert response.status_code == 409
    assert response.json()["detail"]["error"] == "session_exists"
    state = client.get(f"/api/game/sessions/{sid}/state", headers=ORIGIN).json()
    assert state["status"] == "IN_PROGRESS"


def test_startup_logs_game_config(caplog):
    with caplog.at_level("INFO", logger="pairs_app.main"):
        with TestClient(app) as started:
            assert started.get("/health").status_code == 200
    assert any("game config" in record.getMessage() for record in caplog.records)


def test_preflight_echoes_preview_origin():
    preview = {"Origin": "https://my-preview.vercel.app"}
    response = client.options(
        "/api/game/start",
        headers={**preview, "Access-Control-Request-Method": "POST"},
    )
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == preview["Origin"]
    assert not hasattr(settings, "ALLOWED_ORIGIN")
