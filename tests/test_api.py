"""Tests for the FastAPI API endpoints."""

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from eightball.api.app import create_app
from eightball.history.store import GameHistoryStore
from eightball.models.rules import RulesConfig
from eightball.tables.store import TableStore

BASE = datetime(2024, 1, 1, 12, 0, 0)


def _ts(seconds: float) -> str:
    return (BASE + timedelta(seconds=seconds)).isoformat()


def _event(kind: str, seconds: float, ball=None) -> dict:
    event = {"kind": kind, "timestamp": _ts(seconds)}
    if ball is not None:
        event["ball"] = ball
    return event


def _legal_break(start: float) -> list:
    return [_event("cue_hit_ball", start, 1)] + [
        _event("ball_to_wall", start + i + 1, b) for i, b in enumerate((2, 3, 4, 5))
    ]


@pytest.fixture
def client():
    """Create a test client with fresh components."""
    app = create_app(
        table_store=TableStore(),
        history_store=GameHistoryStore(db_path=":memory:"),
        rules_config=RulesConfig(),
    )
    return TestClient(app)


def _open_and_break(client) -> str:
    table_id = client.post("/tables").json()["id"]
    client.post(f"/tables/{table_id}/rack", json={"timestamp": _ts(0)})
    client.post(f"/tables/{table_id}/place-behind-headstring", json={"timestamp": _ts(1)})
    response = client.post(f"/tables/{table_id}/shot", json={"events": _legal_break(2)})
    assert response.json()["outcome"] == "next_shot"
    return table_id


class TestTableEndpoints:
    def test_open_table(self, client):
        response = client.post("/tables")
        assert response.status_code == 200
        data = response.json()
        assert data["id"].startswith("table_")
        assert data["session"]["phase"] == "awaiting_rack"
        assert data["current_player"] == "player1"
        assert data["current_target"] == "open_table"
        assert data["score"] == {"player1": 0, "player2": 0}

    def test_list_tables(self, client):
        client.post("/tables")
        client.post("/tables")
        response = client.get("/tables")
        assert response.status_code == 200
        assert len(response.json()) == 2

    def test_get_unknown_table(self, client):
        assert client.get("/tables/table_missing").status_code == 404

    def test_close_table(self, client):
        table_id = client.post("/tables").json()["id"]
        assert client.delete(f"/tables/{table_id}").status_code == 200
        assert client.get(f"/tables/{table_id}").status_code == 404
        assert client.delete(f"/tables/{table_id}").status_code == 404


class TestTransitionEndpoints:
    def test_rack_and_place(self, client):
        table_id = client.post("/tables").json()["id"]
        response = client.post(f"/tables/{table_id}/rack", json={"timestamp": _ts(0)})
        assert response.status_code == 200
        assert response.json()["session"]["phase"] == "awaiting_place_ball_behind_headstring"

        response = client.post(
            f"/tables/{table_id}/place-behind-headstring", json={"timestamp": _ts(1)}
        )
        assert response.json()["session"]["phase"] == "awaiting_player_shot"

    def test_wrong_phase_conflict(self, client):
        table_id = client.post("/tables").json()["id"]
        response = client.post(f"/tables/{table_id}/place-in-hand", json={"timestamp": _ts(0)})
        assert response.status_code == 409
        # Session unchanged
        assert client.get(f"/tables/{table_id}").json()["session"]["log"] == []

    def test_out_of_order_timestamp(self, client):
        table_id = client.post("/tables").json()["id"]
        client.post(f"/tables/{table_id}/rack", json={"timestamp": _ts(10)})
        response = client.post(
            f"/tables/{table_id}/place-behind-headstring", json={"timestamp": _ts(5)}
        )
        assert response.status_code == 422

    def test_mixed_timezones_rejected(self, client):
        table_id = client.post("/tables").json()["id"]
        client.post(f"/tables/{table_id}/rack", json={"timestamp": "2024-01-01T12:00:00"})
        response = client.post(
            f"/tables/{table_id}/place-behind-headstring",
            json={"timestamp": "2024-01-01T12:00:01Z"},
        )
        assert response.status_code == 422
        assert len(client.get(f"/tables/{table_id}").json()["session"]["log"]) == 1

    def test_unknown_table(self, client):
        response = client.post("/tables/table_missing/rack", json={"timestamp": _ts(0)})
        assert response.status_code == 404


class TestShotEndpoint:
    def test_illegal_break(self, client):
        table_id = client.post("/tables").json()["id"]
        client.post(f"/tables/{table_id}/rack", json={"timestamp": _ts(0)})
        client.post(f"/tables/{table_id}/place-behind-headstring", json={"timestamp": _ts(1)})
        response = client.post(
            f"/tables/{table_id}/shot",
            json={"events": [_event("cue_hit_ball", 2, 1)]},
        )
        data = response.json()
        assert data["outcome"] == "illegal_break"
        assert data["table"]["current_player"] == "player2"
        assert data["table"]["session"]["phase"] == "awaiting_rack"

    def test_foul_reports_reason(self, client):
        table_id = _open_and_break(client)
        response = client.post(f"/tables/{table_id}/shot", json={"events": []})
        data = response.json()
        assert data["outcome"] == "players_fault"
        assert data["fault"] == "place_ball_in_hand"
        assert data["table"]["current_player"] == "player1"

    def test_shot_in_wrong_phase(self, client):
        table_id = client.post("/tables").json()["id"]
        response = client.post(f"/tables/{table_id}/shot", json={"events": []})
        assert response.status_code == 409

    def test_invalid_event_rejected(self, client):
        table_id = _open_and_break(client)
        response = client.post(
            f"/tables/{table_id}/shot",
            json={"events": [{"kind": "scratch", "timestamp": _ts(20), "ball": 3}]},
        )
        assert response.status_code == 422

    def test_mixed_timezone_shot_rejected(self, client):
        table_id = _open_and_break(client)
        events = [
            {"kind": "cue_hit_ball", "timestamp": "2024-01-01T12:00:20Z", "ball": 1},
            _event("ball_to_wall", 21, 1),
        ]
        response = client.post(f"/tables/{table_id}/shot", json={"events": events})
        assert response.status_code == 422

    def test_game_over_is_recorded(self, client):
        table_id = _open_and_break(client)
        events = [_event("cue_hit_ball", 10, 1)] + [
            _event("ball_to_pocket", 11 + b, b) for b in range(1, 8)
        ]
        data = client.post(f"/tables/{table_id}/shot", json={"events": events}).json()
        assert data["outcome"] == "next_shot"
        assert data["table"]["current_target"] == "eight_ball"
        assert data["table"]["score"] == {"player1": 0, "player2": 7}

        events = [_event("cue_hit_ball", 30, 8), _event("ball_to_pocket", 31, 8)]
        data = client.post(f"/tables/{table_id}/shot", json={"events": events}).json()
        assert data["outcome"] == "game_over"
        assert data["winner"] == "player2"

        record = client.get(f"/history/{data['record_id']}").json()
        assert record["winner"] == "player2"
        assert record["table_id"] == table_id

        verify = client.get("/history/verify").json()
        assert verify == {"integrity_valid": True, "total_records": 1}
        assert len(client.get("/history").json()) == 1


class TestHistoryAndRules:
    def test_missing_record(self, client):
        assert client.get("/history/game_missing").status_code == 404

    def test_rules_config(self, client):
        response = client.get("/rules/config")
        assert response.json() == {"min_break_rail_contacts": 4, "balls_per_group": 7}
