"""Support file tests."""


def test_create_json_file(client):
    resp = client.post("/v1/files", json={"name": "laudo.txt", "content": "texto"})
    assert resp.status_code == 201
    data = resp.json()
    assert data["selected"] is False
    assert data["size"] == 5
    assert "content" not in data


def test_upload_text(client):
    resp = client.post(
        "/v1/files/upload",
        files={"file": ("relatorio.txt", "Relatório escolar".encode("utf-8"), "text/plain")},
    )
    assert resp.status_code == 201
    assert resp.json()["type"] == "text"


def test_upload_image(client):
    resp = client.post(
        "/v1/files/upload",
        files={"file": ("foto.png", b"\x89PNG", "image/png")},
    )
    assert resp.status_code == 201
    assert resp.json()["type"] == "image"


def test_upload_unsupported(client):
    resp = client.post(
        "/v1/files/upload",
        files={"file": ("planilha.xlsx", b"x", "application/octet-stream")},
    )
    assert resp.status_code == 422
    assert resp.json()["detail"]["code"] == "UNSUPPORTED_FILE"


def test_select_and_delete(client):
    file_id = client.post("/v1/files", json={"name": "a.txt", "content": "x"}).json()["id"]
    resp = client.patch(f"/v1/files/{file_id}", json={"selected": True})
    assert resp.json()["selected"] is True
    assert client.get("/v1/files").json()[0]["selected"] is True
    assert client.delete(f"/v1/files/{file_id}").status_code == 200
    assert client.patch(f"/v1/files/{file_id}", json={"selected": True}).status_code == 404
