# src/ownedledger/runtime/executor.py
from __future__ import annotations

import logging
import threading
from typing import Any, Dict

from ownedledger.crypto.sig import verify_call_sig
from ownedledger.runtime.account_id import is_hex_pubkey, normalize_account_id
from ownedledger.runtime.account_store import AccountStore
from ownedledger.runtime.calls import CALL_GET, CALL_GET_COUNT, CALL_SET, CallEnvelope, CallReceipt
from ownedledger.runtime.config import StoreConfig
from ownedledger.runtime.dispatch import apply_call
from ownedledger.runtime.errors import ApplyError
from ownedledger.runtime.event_log import log_event
from ownedledger.runtime.metrics import record_call, set_accounts

Json = Dict[str, Any]

log = logging.getLogger("ownedledger.executor")


class ExecutorError(RuntimeError):
    pass


class StoreExecutor:
    """Hosts one AccountStore and applies calls to it one at a time.

    This is the invocation layer: it supplies the caller identity explicitly,
    serializes concurrent callers and turns failures into receipts. The store
    itself has no locks.
    """

    def __init__(self, *, creator: str, instance_id: str = "ownedledger-dev", sigverify: bool = False) -> None:
        self.instance_id = str(instance_id)
        self.sigverify = bool(sigverify)

        try:
            owner = normalize_account_id(creator, field="creator")
        except ApplyError as e:
            raise ExecutorError(f"invalid creator identity: {creator!r}") from e

        if self.sigverify and not is_hex_pubkey(owner):
            raise ExecutorError("sigverify requires the creator to be a hex ed25519 public key")

        self._lock = threading.Lock()
        self._store = AccountStore(owner)

        log_event(log, "store_created", instance_id=self.instance_id, owner=owner, sigverify=self.sigverify)

    @classmethod
    def from_config(cls, cfg: StoreConfig) -> "StoreExecutor":
        return cls(creator=cfg.deployer, instance_id=cfg.instance_id, sigverify=cfg.sigverify)

    @property
    def owner(self) -> str:
        return self._store.owner

    def _check_sig(self, env: CallEnvelope) -> None:
        if not self.sigverify:
            return
        if not verify_call_sig(call=env.call, caller=env.caller, args=env.args, sig=env.sig):
            raise ApplyError("bad_signature", "invalid_signature", {"caller": env.caller})

    def submit(self, env: Any) -> CallReceipt:
        """Apply one call envelope. Never raises ApplyError; failures come back as receipts."""
        try:
            env_norm = CallEnvelope.from_json(env)
        except (TypeError, ValueError) as e:
            raise ExecutorError(f"malformed call envelope: {e}") from e

        with self._lock:
            try:
                self._check_sig(env_norm)
                value = apply_call(self._store, env_norm)
            except ApplyError as e:
                record_call(env_norm.call, e.code)
                log_event(
                    log,
                    "call_rejected",
                    instance_id=self.instance_id,
                    call=env_norm.call,
                    caller=env_norm.caller,
                    code=e.code,
                    reason=e.reason,
                )
                return CallReceipt.failure(env_norm, e.code, e.reason, e.details)

            record_call(env_norm.call)
            set_accounts(len(self._store))

        log_event(log, "call_applied", instance_id=self.instance_id, call=env_norm.call, caller=env_norm.caller)
        return CallReceipt.success(env_norm, value)

    # Convenience wrappers mirroring the public call surface.

    def set(self, caller: str, value: int, *, sig: str = "") -> CallReceipt:
        return self.submit(CallEnvelope(CALL_SET, caller, {"value": value}, sig))

    def get(self, caller: str, *, sig: str = "") -> CallReceipt:
        return self.submit(CallEnvelope(CALL_GET, caller, {}, sig))

    def get_count(self, caller: str, target: str, *, sig: str = "") -> CallReceipt:
        return self.submit(CallEnvelope(CALL_GET_COUNT, caller, {"target": target}, sig))

    def read_state(self) -> Json:
        with self._lock:
            return {
                "instance_id": self.instance_id,
                "owner": self._store.owner,
                "values": self._store.snapshot(),
            }
