import pytest
from fastapi.testclient import TestClient

from web import routes
from conftest import FixedRng


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(routes.game, "rng", FixedRng(0.0))
    routes.init_game(str(tmp_path))
    return TestClient(routes.app)


def test_state_snapshot(client):
    resp = client.get("/api/state")
    assert resp.status_code == 200
    data = resp.json()
    assert data["phase"] == "idle"
    assert data["game_state"]["band_name"] == "The Static Hearts"
    assert set(data["narrative_state"]["faction_standings"]) >= {"underground_scene", "law_enforcement"}
    assert data["enhanced_features"]["enabled"] is False


def test_event_then_choice(client):
    resp = client.post("/api/event", json={"event_type": "first_hit", "post_gig": True})
    assert resp.status_code == 200
    event = resp.json()["event"]
    assert [c["id"] for c in event["choices"]][:3] == ["try_it", "pass", "take_for_later"]

    resp = client.post("/api/choice", json={"event_id": event["id"], "choice_id": "pass"})
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert client.get("/api/state").json()["pending_events"] == []


def test_choice_errors(client):
    resp = client.post("/api/choice", json={"event_id": "ghost", "choice_id": "x"})
    assert resp.status_code == 404
    resp = client.post("/api/choice", json={"event_id": "ghost"})
    assert resp.status_code == 422


def test_preferences(client):
    resp = client.post("/api/preferences", json={"enabled": True, "maturity_level": "mature",
                                                  "content_preferences": {"violence": True}})
    assert resp.status_code == 200
    assert resp.json()["enhanced_features"]["content_preferences"]["violence"] is True

    resp = client.post("/api/preferences", json={"maturity_level": "adult"})
    assert resp.status_code == 400
    resp = client.post("/api/preferences", json={"content_preferences": {"gore": True}})
    assert resp.status_code == 400


def test_new_game_and_week(client):
    assert client.post("/api/new_game", json={"scenario": "atlantis"}).status_code == 400
    resp = client.post("/api/new_game", json={"scenario": "gritty", "band_name": "Gutter Kings"})
    assert resp.json()["band_name"] == "Gutter Kings"

    resp = client.post("/api/week/advance")
    assert resp.status_code == 200
    assert resp.json()["week"] == 1
    assert resp.json()["event_chance"] == pytest.approx(0.62)


def test_save_load_and_listing(client):
    assert client.get("/api/saves").json() == {"saves": []}
    resp = client.post("/api/save", json={"filename": "save_route_test"})
    assert resp.json()["filename"] == "save_route_test.json"
    assert client.get("/api/saves").json()["saves"][0]["filename"] == "save_route_test.json"

    assert client.post("/api/load", json={"filename": "save_route_test.json"}).status_code == 200
    assert client.post("/api/load", json={"filename": "save_missing"}).status_code == 404


def test_websocket_sends_snapshot_on_connect(client):
    with client.websocket_connect("/ws") as ws:
        message = ws.receive_json()
    assert message["event"] == "state_update"
    assert message["data"]["game_state"]["band_name"] == "The Static Hearts"
