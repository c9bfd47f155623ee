from __future__ import annotations

"""In-process call counters.

Calls are counted per (call name, outcome code); outcome "ok" for applied
calls, otherwise the ApplyError code. Exposed as a JSON snapshot or as
Prometheus text by the ops routes.
"""

import os
import threading
import time
from typing import Dict, Tuple

_lock = threading.Lock()
_calls: Dict[Tuple[str, str], int] = {}
_accounts = 0
_started_ms = int(time.time() * 1000)


def metrics_enabled() -> bool:
    v = (os.environ.get("OWNEDLEDGER_METRICS_ENABLED") or "").strip().lower()
    return v in {"1", "true", "yes", "y", "on"}


def record_call(call: str, code: str = "ok") -> None:
    key = (str(call or "UNKNOWN"), str(code or "ok"))
    with _lock:
        _calls[key] = _calls.get(key, 0) + 1


def set_accounts(n: int) -> None:
    global _accounts
    with _lock:
        _accounts = int(n)


def reset() -> None:
    """Clear all counters. Used by tests."""
    global _accounts
    with _lock:
        _calls.clear()
        _accounts = 0


def snapshot() -> dict:
    with _lock:
        by_call: Dict[str, Dict[str, int]] = {}
        for (call, code), n in _calls.items():
            by_call.setdefault(call, {})[code] = n
        total = sum(_calls.values())
        failed = sum(n for (_, code), n in _calls.items() if code != "ok")
        denied = sum(n for (_, code), n in _calls.items() if code == "permission_denied")
        accounts = _accounts

    now = int(time.time() * 1000)
    return {
        "uptime_ms": now - _started_ms,
        "accounts": accounts,
        "calls": by_call,
        "totals": {"calls": total, "failed": failed, "permission_denied": denied},
    }


def format_prometheus(prefix: str = "ownedledger_") -> str:
    snap = snapshot()
    lines = [
        f"# TYPE {prefix}uptime_ms gauge",
        f"{prefix}uptime_ms {snap['uptime_ms']}",
        f"# TYPE {prefix}accounts gauge",
        f"{prefix}accounts {snap['accounts']}",
        f"# TYPE {prefix}calls_total counter",
    ]
    for call in sorted(snap["calls"]):
        for code, n in sorted(snap["calls"][call].items()):
            lines.append(f'{prefix}calls_total{{call="{call}",outcome="{code}"}} {n}')
    return "\n".join(lines) + "\n"
