from fastapi.testclient import TestClient


def _tournament(client: TestClient, **settings) -> int:
    return client.post("/api/tournaments", json={"name": "Cup", **settings}).json()["id"]


def test_create_and_list_teams_in_registration_order(client: TestClient):
    tid = _tournament(client)
    for name in ["Lions", "Tigers", "Bears"]:
        assert client.post(f"/api/tournaments/{tid}/teams", json={"name": name}).status_code == 201

    teams = client.get(f"/api/tournaments/{tid}/teams").json()
    assert [t["name"] for t in teams] == ["Lions", "Tigers", "Bears"]
    assert all(t["pool_manual"] is False for t in teams)


def test_duplicate_team_name_conflicts(client: TestClient):
    tid = _tournament(client)
    client.post(f"/api/tournaments/{tid}/teams", json={"name": "Lions"})
    response = client.post(f"/api/tournaments/{tid}/teams", json={"name": "Lions"})
    assert response.status_code == 409


def test_team_with_explicit_pool_is_manual(client: TestClient):
    tid = _tournament(client, format="pooled", pool_count=2)
    team = client.post(f"/api/tournaments/{tid}/teams", json={"name": "Lions", "pool_index": 2}).json()
    assert team["pool_index"] == 2
    assert team["pool_manual"] is True


def test_patch_team_pool(client: TestClient):
    tid = _tournament(client)
    team = client.post(f"/api/tournaments/{tid}/teams", json={"name": "Lions"}).json()

    response = client.patch(f"/api/teams/{team['id']}", json={"pool_index": 3})
    assert response.status_code == 200
    assert response.json()["pool_index"] == 3
    assert response.json()["pool_manual"] is True

    response = client.patch(f"/api/teams/{team['id']}", json={"pool_manual": False})
    assert response.json()["pool_manual"] is False
    assert client.patch("/api/teams/999", json={"name": "X"}).status_code == 404


def test_auto_assign_pools_keeps_manual_teams(client: TestClient):
    tid = _tournament(client, format="pooled", pool_count=2)
    client.post(f"/api/tournaments/{tid}/teams", json={"name": "Fixed", "pool_index": 1})
    for i in range(5):
        client.post(f"/api/tournaments/{tid}/teams", json={"name": f"Team {i}"})

    response = client.post(f"/api/tournaments/{tid}/teams/auto-assign-pools?seed=11")
    assert response.status_code == 200
    data = response.json()
    assert data["assigned"] == 5

    pools = {t["name"]: t["pool_index"] for t in data["teams"]}
    assert pools["Fixed"] == 1
    assert sorted(pools.values()) == [1, 1, 1, 2, 2, 2]


def test_unknown_tournament(client: TestClient):
    assert client.get("/api/tournaments/42/teams").status_code == 404
    assert client.post("/api/tournaments/42/teams", json={"name": "X"}).status_code == 404
