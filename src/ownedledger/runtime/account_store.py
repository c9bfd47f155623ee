# src/ownedledger/runtime/account_store.py
from __future__ import annotations

"""ownedledger.runtime.account_store

Per-account value storage with an owner-gated privileged read.

Key invariants:
  - every account id reads as a well-defined value; unset reads as 0
  - stored values are unsigned 256-bit integers
  - the owner is fixed at construction (see OwnershipGuard)
  - the mapping only grows or overwrites; nothing is ever deleted
  - every operation validates before it writes, so a rejected call leaves
    the mapping unchanged
"""

from typing import Dict

from ownedledger.runtime.errors import ApplyError
from ownedledger.runtime.ownership import OwnershipGuard

UINT256_MAX = 2**256 - 1


class AccountStore:
    """Account id -> unsigned integer mapping, owned by its creator."""

    def __init__(self, creator: str) -> None:
        self._guard = OwnershipGuard(creator)
        self._values: Dict[str, int] = {}

    @property
    def owner(self) -> str:
        return self._guard.owner

    @property
    def guard(self) -> OwnershipGuard:
        return self._guard

    def set(self, caller: str, value: int) -> None:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ApplyError("invalid_call", "value_not_integer", {"value": value})
        if value < 0 or value > UINT256_MAX:
            raise ApplyError("invalid_call", "value_out_of_range", {"value": str(value)})
        self._values[caller] = value

    def get(self, caller: str) -> int:
        return self._values.get(caller, 0)

    def get_privileged(self, requester: str, target: str) -> int:
        """Read target's value on behalf of the owner.

        authorize() runs before the mapping is touched; on failure
        PermissionDenied propagates and nothing has changed.
        """
        self._guard.authorize(requester)
        return self._values.get(target, 0)

    # Name used by the public call surface.
    get_count = get_privileged

    def snapshot(self) -> Dict[str, int]:
        return dict(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._values


__all__ = ["AccountStore", "UINT256_MAX"]
