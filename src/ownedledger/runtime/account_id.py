from __future__ import annotations

from typing import Any

from ownedledger.runtime.errors import ApplyError


def normalize_account_id(raw: Any, *, field: str = "caller") -> str:
    """Return a stripped account identifier or raise ApplyError.

    Identifiers are opaque; the only rule is that they are non-empty strings.
    """
    if not isinstance(raw, str):
        raise ApplyError("invalid_call", f"missing_{field}", {field: raw})
    s = raw.strip()
    if not s:
        raise ApplyError("invalid_call", f"missing_{field}", {field: raw})
    return s


def is_hex_pubkey(account_id: str) -> bool:
    """True if account_id looks like a raw Ed25519 public key in hex (32 bytes)."""
    s = (account_id or "").strip()
    if len(s) != 64:
        return False
    try:
        bytes.fromhex(s)
    except ValueError:
        return False
    return True
