"""End-to-end schedule endpoints: generate, read views, manual edits."""
import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def tournament_id(client: TestClient) -> int:
    tid = client.post("/api/tournaments", json={"name": "Cup", "num_fields": 2}).json()["id"]
    for name in ["T1", "T2", "T3", "T4"]:
        client.post(f"/api/tournaments/{tid}/teams", json={"name": name})
    return tid


def _matches(client, tid):
    return client.get(f"/api/tournaments/{tid}/schedule/matches").json()


def test_generate_and_list_matches(client: TestClient, tournament_id: int):
    response = client.post(f"/api/tournaments/{tournament_id}/schedule/generate")
    assert response.status_code == 200
    assert response.json()["summary"]["assigned_count"] == 6

    matches = _matches(client, tournament_id)
    assert len(matches) == 6
    assert [(m["start_time"], m["field_index"]) for m in matches[:2]] == [("09:00:00", 1), ("09:00:00", 2)]
    assert matches[0]["home_team_name"] == "T1"
    assert matches[0]["away_team_name"] == "T4"
    assert matches[1]["field_name"] == "Field 2"


def test_generate_capacity_error_is_409(client: TestClient, tournament_id: int):
    client.put(f"/api/tournaments/{tournament_id}", json={"max_teams": 3})
    response = client.post(f"/api/tournaments/{tournament_id}/schedule/generate")
    assert response.status_code == 409
    assert response.json()["detail"] == "too many teams: 4/3"


def test_generate_not_enough_teams_is_409(client: TestClient):
    tid = client.post("/api/tournaments", json={"name": "Empty"}).json()["id"]
    response = client.post(f"/api/tournaments/{tid}/schedule/generate")
    assert response.status_code == 409
    assert response.json()["detail"] == "not enough teams: 0/2"


def test_generate_unknown_tournament(client: TestClient):
    assert client.post("/api/tournaments/99/schedule/generate").status_code == 404


def test_estimate(client: TestClient, tournament_id: int):
    response = client.get(f"/api/tournaments/{tournament_id}/schedule/estimate")
    assert response.status_code == 200
    data = response.json()
    assert data["required_matches"] == 6
    assert data["playable_slots"] == 72
    assert data["theoretical_end"] == "09:45"


def test_grid(client: TestClient, tournament_id: int):
    client.put(
        f"/api/tournaments/{tournament_id}",
        json={"pauses": [{"type": "except", "from": "12:00", "to": "12:30", "except_fields": [2]}]},
    )
    client.post(f"/api/tournaments/{tournament_id}/schedule/generate")

    grid = client.get(f"/api/tournaments/{tournament_id}/schedule/grid").json()
    noon = next(r for r in grid["rows"] if r["start_time"] == "12:00")
    assert [c["status"] for c in noon["cells"]] == ["paused", "empty"]
    assert grid["rows"][0]["cells"][1]["status"] == "match"


def test_edit_move_and_swap(client: TestClient, tournament_id: int):
    client.post(f"/api/tournaments/{tournament_id}/schedule/generate")
    last = _matches(client, tournament_id)[-1]

    response = client.post(
        f"/api/tournaments/{tournament_id}/schedule/edits",
        json={
            "gestures": [
                {"source": {"start_time": "09:30", "field_index": 2}, "target": {"start_time": "10:00", "field_index": 1}},
                {"source": {"start_time": "09:00", "field_index": 1}, "target": {"start_time": "09:00", "field_index": 2}},
            ]
        },
    )
    assert response.status_code == 200
    data = response.json()
    assert data["saved"] == 3
    assert {"match_id": last["id"], "start_time": "10:00", "field_index": 1} in data["updates"]

    moved = next(m for m in _matches(client, tournament_id) if m["id"] == last["id"])
    assert (moved["start_time"], moved["field_index"]) == ("10:00:00", 1)


def test_edit_double_booking_is_409_and_nothing_saved(client: TestClient, tournament_id: int):
    client.post(f"/api/tournaments/{tournament_id}/schedule/generate")
    before = _matches(client, tournament_id)

    response = client.post(
        f"/api/tournaments/{tournament_id}/schedule/edits",
        json={
            "gestures": [
                {"source": {"start_time": "09:30", "field_index": 2}, "target": {"start_time": "10:00", "field_index": 1}},
                {"source": {"start_time": "09:00", "field_index": 1}, "target": {"start_time": "09:15", "field_index": 1}},
            ]
        },
    )
    assert response.status_code == 409
    assert "would play twice" in response.json()["detail"]
    assert _matches(client, tournament_id) == before


def test_edit_paused_cell_is_409(client: TestClient, tournament_id: int):
    client.put(f"/api/tournaments/{tournament_id}", json={"pauses": [{"from": "12:00", "to": "12:30"}]})
    client.post(f"/api/tournaments/{tournament_id}/schedule/generate")

    response = client.post(
        f"/api/tournaments/{tournament_id}/schedule/edits",
        json={"gestures": [{"source": {"start_time": "09:00", "field_index": 1}, "target": {"start_time": "12:15", "field_index": 2}}]},
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Cell 12:15 on field 2 is paused"


def test_edit_rejects_malformed_time(client: TestClient, tournament_id: int):
    response = client.post(
        f"/api/tournaments/{tournament_id}/schedule/edits",
        json={"gestures": [{"source": {"start_time": "nine", "field_index": 1}, "target": {"start_time": "09:15", "field_index": 1}}]},
    )
    assert response.status_code == 422
