def test_health(client):
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.get_json() == {"status": "healthy", "database": "connected"}


def test_server_time_is_local(client):
    body = client.get("/api/server-time").get_json()
    assert body["success"] is True
    assert body["timezone"] == "Asia/Kolkata"
    assert body["local"].endswith("+05:30")
    assert body["utc"].endswith("Z")
    assert isinstance(body["timestamp"], int)

    alias = client.get("/api/current-time").get_json()
    assert set(alias) == set(body)
