from fastapi.testclient import TestClient

from vibes_served.config import Settings
from vibes_served.main import create_app


def test_healthz_ok():
    client = TestClient(create_app(Settings()))
    r = client.get("/healthz")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_readyz_ready():
    client = TestClient(create_app(Settings()))
    r = client.get("/readyz")
    assert r.status_code == 200
    assert r.json() == {"status": "ready"}


def test_version_defaults():
    client = TestClient(create_app(Settings()))
    r = client.get("/version")
    assert r.status_code == 200
    assert r.json() == {"version": "v0.1.0", "commit": "local"}


def test_version_from_settings():
    client = TestClient(create_app(Settings(app_version="v9.9.9", git_commit="abc123")))
    assert client.get("/version").json() == {"version": "v9.9.9", "commit": "abc123"}
