from __future__ import annotations

import json
import logging
import threading

import pytest

from ownedledger.runtime import metrics
from ownedledger.runtime.config import StoreConfig
from ownedledger.runtime.executor import ExecutorError, StoreExecutor
from ownedledger.testing.sigtools import account_for_label, sign_call_dict


@pytest.fixture(autouse=True)
def _reset_metrics():
    metrics.reset()
    yield
    metrics.reset()


def test_end_to_end_scenario_through_executor() -> None:
    ex = StoreExecutor(creator="C", instance_id="e2e")

    assert ex.set("A", 1).ok is True
    assert ex.set("B", 2).ok is True

    assert ex.get("A").value == 1
    assert ex.get("B").value == 2

    assert ex.get_count("C", "A").value == 1
    assert ex.get_count("C", "B").value == 2

    r = ex.get_count("A", "B")
    assert r.ok is False
    assert r.code == "permission_denied"
    assert r.value is None

    st = ex.read_state()
    assert st == {"instance_id": "e2e", "owner": "C", "values": {"A": 1, "B": 2}}


def test_receipt_json_shapes() -> None:
    ex = StoreExecutor(creator="C")
    ok = ex.get("A").to_json()
    assert ok == {"ok": True, "call": "GET", "caller": "A", "value": 0}

    bad = ex.get_count("A", "A").to_json()
    assert bad["ok"] is False
    assert bad["error"]["code"] == "permission_denied"
    assert bad["error"]["details"] == {"caller": "A"}


def test_invalid_set_leaves_state_unchanged() -> None:
    ex = StoreExecutor(creator="C")
    ex.set("A", 5)
    r = ex.submit({"call": "SET", "caller": "A", "args": {"value": -3}})
    assert r.ok is False
    assert r.code == "invalid_call"
    assert ex.read_state()["values"] == {"A": 5}


def test_owner_never_changes() -> None:
    ex = StoreExecutor(creator="C")
    for who in ("A", "B", "C"):
        ex.set(who, 1)
        ex.get_count(who, "A")
    assert ex.owner == "C"
    assert ex.read_state()["owner"] == "C"


def test_invalid_creator_rejected() -> None:
    with pytest.raises(ExecutorError):
        StoreExecutor(creator="   ")


def test_from_config_uses_deployer_as_owner() -> None:
    cfg = StoreConfig(
        instance_id="cfg-test",
        mode="dev",
        deployer="deployer-1",
        api_host="127.0.0.1",
        api_port=8080,
        sigverify=False,
        log_level="INFO",
    )
    ex = StoreExecutor.from_config(cfg)
    assert ex.owner == "deployer-1"
    assert ex.instance_id == "cfg-test"


def test_metrics_counted() -> None:
    ex = StoreExecutor(creator="C")
    ex.set("A", 1)
    ex.get_count("A", "A")
    ex.submit({"call": "NOPE", "caller": "A"})

    snap = metrics.snapshot()
    assert snap["totals"] == {"calls": 3, "failed": 2, "permission_denied": 1}
    assert snap["calls"] == {
        "SET": {"ok": 1},
        "GET_COUNT": {"permission_denied": 1},
        "NOPE": {"unknown_call": 1},
    }
    assert snap["accounts"] == 1


def test_structured_log_events(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.INFO, logger="ownedledger.executor")
    ex = StoreExecutor(creator="C", instance_id="logs")
    ex.set("A", 1)
    ex.get_count("A", "A")

    events = [json.loads(r.getMessage()) for r in caplog.records if r.name == "ownedledger.executor"]
    names = [e["event"] for e in events]
    assert names == ["store_created", "call_applied", "call_rejected"]
    assert events[2]["code"] == "permission_denied"
    assert events[2]["caller"] == "A"


def test_concurrent_sets_are_serialized() -> None:
    ex = StoreExecutor(creator="C")
    n_threads = 8
    per_thread = 50

    def _worker(i: int) -> None:
        for j in range(per_thread):
            assert ex.set(f"acct-{i}", j).ok

    threads = [threading.Thread(target=_worker, args=(i,)) for i in range(n_threads)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    values = ex.read_state()["values"]
    assert values == {f"acct-{i}": per_thread - 1 for i in range(n_threads)}


# --- signed calls ---


def test_sigverify_requires_pubkey_creator() -> None:
    with pytest.raises(ExecutorError):
        StoreExecutor(creator="carol", sigverify=True)


def test_sigverify_accepts_signed_calls_and_rejects_unsigned() -> None:
    owner = account_for_label("carol")
    alice = account_for_label("alice")
    ex = StoreExecutor(creator=owner, sigverify=True)

    signed = sign_call_dict({"call": "SET", "caller": alice, "args": {"value": 7}}, label="alice")
    assert ex.submit(signed).ok is True

    unsigned = ex.submit({"call": "SET", "caller": alice, "args": {"value": 8}})
    assert unsigned.ok is False
    assert unsigned.code == "bad_signature"

    read = sign_call_dict({"call": "GET_COUNT", "caller": owner, "args": {"target": alice}}, label="carol")
    r = ex.submit(read)
    assert r.ok is True
    assert r.value == 7


def test_sigverify_rejects_impersonation() -> None:
    owner = account_for_label("carol")
    ex = StoreExecutor(creator=owner, sigverify=True)

    # Mallory claims the owner's id but signs with her own key.
    forged = sign_call_dict({"call": "GET_COUNT", "caller": owner, "args": {"target": owner}}, label="mallory")
    r = ex.submit(forged)
    assert r.ok is False
    assert r.code == "bad_signature"


def test_sigverify_rejects_tampered_args() -> None:
    owner = account_for_label("carol")
    alice = account_for_label("alice")
    ex = StoreExecutor(creator=owner, sigverify=True)

    signed = sign_call_dict({"call": "SET", "caller": alice, "args": {"value": 1}}, label="alice")
    signed["args"] = {"value": 1000}
    r = ex.submit(signed)
    assert r.ok is False
    assert r.code == "bad_signature"
    assert ex.read_state()["values"] == {}


def test_denied_privileged_read_leaves_large_store_unchanged() -> None:
    ex = StoreExecutor(creator="C")
    for i in range(2_000):
        ex.set(f"acct-{i}", i)
    before = ex.read_state()["values"]

    r = ex.submit({"call": "GET_COUNT", "caller": "acct-7", "args": {"target": "acct-1999"}})
    assert r.ok is False
    assert r.code == "permission_denied"

    r = ex.submit({"call": "GET_COUNT", "caller": "acct-7", "args": {"target": "never-written"}})
    assert r.code == "permission_denied"

    after = ex.read_state()["values"]
    assert after == before
    assert len(after) == 2_000
    assert "never-written" not in after
    assert ex.owner == "C"
