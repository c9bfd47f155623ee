# src/ownedledger/runtime/ownership.py
from __future__ import annotations

"""Single-owner access control.

The owner is captured once, from the identity of the party constructing the
guard, and is immutable afterwards. authorize() has no side effects: it either
returns or raises PermissionDenied, so callers that authorize before touching
state cannot leave partial writes behind.
"""

from typing import Optional

from ownedledger.runtime.errors import ApplyError, PermissionDenied


class OwnershipGuard:
    __slots__ = ("_owner",)

    def __init__(self, creator: str) -> None:
        self._owner: Optional[str] = None
        self._assign_owner(creator)

    def _assign_owner(self, caller: str) -> None:
        # Construction-only. Fail closed on any later attempt.
        if self._owner is not None:
            raise ApplyError("forbidden", "owner_already_assigned", {"caller": caller})
        if not isinstance(caller, str) or not caller.strip():
            raise ApplyError("invalid_call", "missing_creator", {"creator": caller})
        self._owner = caller

    @property
    def owner(self) -> str:
        return str(self._owner)

    def is_owner(self, caller: str) -> bool:
        return isinstance(caller, str) and caller == self._owner

    def authorize(self, caller: str) -> None:
        if not self.is_owner(caller):
            raise PermissionDenied(str(caller))

    def __repr__(self) -> str:
        return f"OwnershipGuard(owner={self._owner!r})"


__all__ = ["OwnershipGuard"]
