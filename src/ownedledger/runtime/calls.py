from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

Json = Dict[str, Any]

CALL_SET = "SET"
CALL_GET = "GET"
CALL_GET_COUNT = "GET_COUNT"

SUPPORTED_CALLS = (CALL_SET, CALL_GET, CALL_GET_COUNT)

# Accepted spellings -> canonical name.
_ALIASES = {
    "SET": CALL_SET,
    "GET": CALL_GET,
    "GET_COUNT": CALL_GET_COUNT,
    "GETCOUNT": CALL_GET_COUNT,
    "GET_PRIVILEGED": CALL_GET_COUNT,
    "GETPRIVILEGED": CALL_GET_COUNT,
}


def normalize_call_name(raw: Any) -> str:
    s = str(raw or "").strip().upper().replace("-", "_")
    return _ALIASES.get(s, s)


@dataclass(frozen=True)
class CallEnvelope:
    call: str
    caller: str
    args: Dict[str, Any] = field(default_factory=dict)
    sig: str = ""

    @staticmethod
    def from_json(j: Any) -> "CallEnvelope":
        if isinstance(j, CallEnvelope):
            return j
        if not isinstance(j, dict):
            j = dict(j)  # type: ignore[arg-type]
        args = j.get("args")
        return CallEnvelope(
            call=normalize_call_name(j.get("call")),
            caller=str(j.get("caller") or ""),
            args=dict(args) if isinstance(args, dict) else {},
            sig=str(j.get("sig", "") or ""),
        )

    def to_json(self) -> Json:
        return {
            "call": self.call,
            "caller": self.caller,
            "args": self.args,
            "sig": self.sig,
        }


@dataclass(frozen=True)
class CallReceipt:
    ok: bool
    call: str
    caller: str
    value: Optional[int] = None
    code: str = "ok"
    reason: str = ""
    details: Optional[Dict[str, Any]] = None

    @staticmethod
    def success(env: CallEnvelope, value: Optional[int]) -> "CallReceipt":
        return CallReceipt(True, env.call, env.caller, value)

    @staticmethod
    def failure(env: CallEnvelope, code: str, reason: str, details: Any = None) -> "CallReceipt":
        d = details if isinstance(details, dict) else ({} if details is None else {"details": details})
        return CallReceipt(False, env.call, env.caller, None, code, reason, d)

    def to_json(self) -> Json:
        out: Json = {"ok": self.ok, "call": self.call, "caller": self.caller}
        if self.ok:
            if self.value is not None:
                out["value"] = int(self.value)
            return out
        out["error"] = {"code": self.code, "reason": self.reason, "details": self.details or {}}
        return out
