"""Activity bank tests."""


def _add(client, **extra):
    activity = {"title": "Bingo de sílabas", "discipline": "Língua Portuguesa", **extra}
    resp = client.post("/v1/activities", json={"activities": [activity]})
    assert resp.status_code == 201
    return resp.json()[0]


def test_add_and_list(client):
    created = _add(client, skills="leitura, escrita")
    assert created["skills"] == ["leitura", "escrita"]
    assert [a["id"] for a in client.get("/v1/activities").json()] == [created["id"]]


def test_empty_payload_rejected(client):
    assert client.post("/v1/activities", json={"activities": []}).status_code == 422


def test_toggle_flags(client):
    created = _add(client)
    resp = client.patch(f"/v1/activities/{created['id']}", json={"is_favorited": True})
    assert resp.status_code == 200
    assert resp.json()["is_favorited"] is True
    assert resp.json()["is_dua"] is False


def test_filters(client):
    fav = _add(client)
    client.patch(f"/v1/activities/{fav['id']}", json={"is_favorited": True})
    _add(client, isDUA=True, goalTags=["DUA"])

    assert len(client.get("/v1/activities?favorites=true").json()) == 1
    assert len(client.get("/v1/activities?dua=true").json()) == 1
    assert len(client.get("/v1/activities?tag=DUA").json()) == 1


def test_missing_activity(client):
    assert client.patch("/v1/activities/x", json={"is_dua": True}).status_code == 404
    assert client.get("/v1/activities/x").status_code == 404
    assert client.delete("/v1/activities/x").status_code == 404
