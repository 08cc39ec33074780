def test_health_reports_connected(client, store):
    resp = client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["service"] == "tikky-api"
    assert body["redis"] == "connected"
    assert body["vibe"] == "immaculate"
    assert store.calls == [("ping",)]


def test_health_unavailable_when_ping_fails(client, store, caplog):
    store.fail_on.add("ping")
    resp = client.get("/health")
    assert resp.status_code == 503
    assert resp.json() == {"error": "Redis unavailable"}
    assert any(
        r.getMessage() == "Health check failed - Redis connectivity" for r in caplog.records
    )
