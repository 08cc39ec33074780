import asyncio
import importlib

import pytest
from fastapi.testclient import TestClient

import tikky.__main__ as entrypoint
import tikky.core.logging
from tikky import main as app_module
from tikky.main import create_app
from tikky.services.counter_store import StoreError
from doubles import RecordingStore


class ExplodingStore(RecordingStore):
    def increment(self, key: str) -> int:
        raise RuntimeError("boom")


def test_lifespan_connects_and_closes_owned_store(monkeypatch):
    owned = RecordingStore()
    monkeypatch.setattr(app_module, "connect_store", lambda settings: owned)
    app = create_app()
    with TestClient(app) as client:
        assert client.get("/health").status_code == 200
        assert app.state.store is owned
    assert owned.closed
    assert app.state.store is None


def test_lifespan_refuses_to_start_without_store(monkeypatch):
    def unreachable(settings):
        raise StoreError("PING failed")

    monkeypatch.setattr(app_module, "connect_store", unreachable)
    with pytest.raises(StoreError):
        with TestClient(create_app()):
            pass


def test_injected_store_is_left_open():
    store = RecordingStore()
    with TestClient(create_app(store)) as client:
        client.get("/read")
    assert not store.closed


def test_unhandled_error_uses_error_shape():
    client = TestClient(create_app(ExplodingStore()), raise_server_exceptions=False)
    resp = client.post("/write")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error"}


def test_unhandled_error_is_tagged_and_counted(caplog):
    client = TestClient(create_app(ExplodingStore()), raise_server_exceptions=False)
    resp = client.post("/write", headers={"X-Request-ID": "abc"})
    assert resp.status_code == 500
    assert resp.headers["X-Request-ID"] == "abc"
    assert any(r.getMessage() == "Unhandled exception" for r in caplog.records)

    body = client.get("/metrics").text
    assert 'tikky_http_requests_total{status="500"} 1.0' in body
    assert "tikky_http_errors_total 1.0" in body


def test_lifespan_closes_owned_store_when_serving_fails(monkeypatch):
    owned = RecordingStore()
    monkeypatch.setattr(app_module, "connect_store", lambda settings: owned)
    app = create_app()

    async def serve_and_crash():
        async with app.router.lifespan_context(app):
            raise RuntimeError("server crashed")

    with pytest.raises(RuntimeError):
        asyncio.run(serve_and_crash())
    assert owned.closed


def test_import_configures_json_logging(monkeypatch):
    levels = []
    monkeypatch.setattr(tikky.core.logging, "configure_logging", lambda level: levels.append(level))
    importlib.reload(app_module)
    assert levels == [app_module.settings.log_level]


def test_main_exits_when_redis_unreachable(monkeypatch):
    def unreachable(settings):
        raise StoreError("PING failed")

    monkeypatch.setattr(entrypoint, "configure_logging", lambda level: None)
    monkeypatch.setattr(entrypoint, "connect_store", unreachable)
    ran = []
    monkeypatch.setattr(entrypoint.uvicorn, "run", lambda *a, **kw: ran.append(kw))
    with pytest.raises(SystemExit) as excinfo:
        entrypoint.main([])
    assert excinfo.value.code == 1
    assert ran == []


def test_main_serves_then_closes_store(monkeypatch):
    store = RecordingStore()
    ran = []
    monkeypatch.setattr(entrypoint, "configure_logging", lambda level: None)
    monkeypatch.setattr(entrypoint, "connect_store", lambda settings: store)
    monkeypatch.setattr(entrypoint.uvicorn, "run", lambda app, **kw: ran.append((app, kw)))

    entrypoint.main(["--host", "127.0.0.1", "--port", "9090"])

    app, kwargs = ran[0]
    assert app.state.store is store
    assert kwargs["host"] == "127.0.0.1"
    assert kwargs["port"] == 9090
    assert store.closed
