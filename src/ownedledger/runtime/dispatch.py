# src/ownedledger/runtime/dispatch.py

from __future__ import annotations

from typing import Any, Callable, Dict, Optional

from ownedledger.runtime.account_id import normalize_account_id
from ownedledger.runtime.account_store import UINT256_MAX, AccountStore
from ownedledger.runtime.calls import CALL_GET, CALL_GET_COUNT, CALL_SET, CallEnvelope
from ownedledger.runtime.errors import ApplyError

ApplyFn = Callable[[AccountStore, CallEnvelope], Optional[int]]


def as_uint(raw: Any) -> int:
    """Coerce a call argument to an in-range unsigned integer.

    Accepts ints and base-10 strings (clients that cannot represent 256-bit
    numbers send them as strings). Bools are rejected.
    """
    if isinstance(raw, bool):
        raise ApplyError("invalid_call", "value_not_integer", {"value": raw})
    if isinstance(raw, int):
        v = raw
    elif isinstance(raw, str) and raw.strip().isdecimal():
        try:
            v = int(raw.strip())
        except ValueError as e:
            raise ApplyError("invalid_call", "value_not_integer", {"value": raw}) from e
    else:
        raise ApplyError("invalid_call", "value_not_integer", {"value": raw})
    if v < 0 or v > UINT256_MAX:
        raise ApplyError("invalid_call", "value_out_of_range", {"value": str(v)})
    return v


def _apply_set(store: AccountStore, env: CallEnvelope) -> Optional[int]:
    caller = normalize_account_id(env.caller)
    if "value" not in env.args:
        raise ApplyError("invalid_call", "missing_value", {"call": env.call})
    store.set(caller, as_uint(env.args.get("value")))
    return None


def _apply_get(store: AccountStore, env: CallEnvelope) -> Optional[int]:
    return store.get(normalize_account_id(env.caller))


def _apply_get_count(store: AccountStore, env: CallEnvelope) -> Optional[int]:
    requester = normalize_account_id(env.caller)
    target = normalize_account_id(env.args.get("target"), field="target")
    return store.get_count(requester, target)


_HANDLERS: Dict[str, ApplyFn] = {
    CALL_SET: _apply_set,
    CALL_GET: _apply_get,
    CALL_GET_COUNT: _apply_get_count,
}


def apply_call(store: AccountStore, env: Any) -> Optional[int]:
    """Dispatch a CallEnvelope to its handler.

    Returns the read value for GET / GET_COUNT and None for SET.
    """
    env_norm = CallEnvelope.from_json(env)

    c = env_norm.call
    if not c:
        raise ApplyError("invalid_call", "missing_call", {"call": c})

    fn = _HANDLERS.get(c)
    if fn is None:
        raise ApplyError("unknown_call", "call_not_implemented", {"call": c})

    try:
        return fn(store, env_norm)
    except ApplyError:
        raise
    except Exception as e:
        raise ApplyError(
            "domain_error",
            type(e).__name__,
            {"call": c, "error": str(e)},
        ) from e
