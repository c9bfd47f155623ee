from __future__ import annotations

from fastapi.testclient import TestClient

from ownedledger.api.app import create_app


def test_request_size_limit_returns_413(monkeypatch):
    # Make limit very small for test determinism.
    monkeypatch.setenv("OWNEDLEDGER_MAX_REQUEST_BYTES", "64")
    monkeypatch.delenv("OWNEDLEDGER_SIZE_LIMIT_DISABLE", raising=False)
    monkeypatch.setenv("OWNEDLEDGER_DEPLOYER", "carol")
    monkeypatch.delenv("OWNEDLEDGER_CONFIG_PATH", raising=False)
    monkeypatch.delenv("OWNEDLEDGER_MODE", raising=False)
    monkeypatch.delenv("OWNEDLEDGER_SIGVERIFY", raising=False)

    app = create_app()
    c = TestClient(app)

    payload = {"value": 1, "pad": "x" * 500}

    r = c.post("/v1/store/set", json=payload, headers={"X-Caller-Id": "alice"})
    assert r.status_code == 413

    j = r.json()
    assert j.get("ok") is False
    assert j["error"].get("code") == "request_too_large"

    # Nothing was stored.
    r = c.get("/v1/store/me", headers={"X-Caller-Id": "alice"})
    assert r.json()["value"] == 0


def test_size_limit_can_be_disabled(monkeypatch):
    monkeypatch.setenv("OWNEDLEDGER_MAX_REQUEST_BYTES", "8")
    monkeypatch.setenv("OWNEDLEDGER_SIZE_LIMIT_DISABLE", "1")
    monkeypatch.setenv("OWNEDLEDGER_DEPLOYER", "carol")
    monkeypatch.delenv("OWNEDLEDGER_CONFIG_PATH", raising=False)
    monkeypatch.delenv("OWNEDLEDGER_MODE", raising=False)
    monkeypatch.delenv("OWNEDLEDGER_SIGVERIFY", raising=False)

    c = TestClient(create_app())
    r = c.post("/v1/store/set", json={"value": 12345}, headers={"X-Caller-Id": "alice"})
    assert r.status_code == 200
