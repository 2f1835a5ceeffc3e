def test_healthz_200(client):
    resp = client.get("/healthz")

    assert resp.status_code == 200
    assert resp.json() == {"ok": "true"}


def test_unknown_path_is_404(client):
    resp = client.get("/nope")

    assert resp.status_code == 404


def test_wrong_method_on_known_path_is_405(client):
    resp = client.request("DELETE", "/files/notes.txt")

    assert resp.status_code == 405
