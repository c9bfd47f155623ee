from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass
class ApplyError(Exception):
    """Canonical error type for call apply and dispatch failures."""

    code: str
    reason: str
    details: Any | None = None

    def __str__(self) -> str:  # pragma: no cover
        if self.details is None:
            return f"{self.code}:{self.reason}"
        return f"{self.code}:{self.reason}:{self.details}"


class PermissionDenied(ApplyError):
    """Raised when a privileged operation is invoked by someone other than the owner."""

    def __init__(self, caller: str, details: Any | None = None) -> None:
        d = {"caller": caller}
        if isinstance(details, dict):
            d.update(details)
        super().__init__("permission_denied", "caller_not_owner", d)
