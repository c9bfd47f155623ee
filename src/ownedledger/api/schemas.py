from __future__ import annotations

"""Pydantic request/response schemas for the public API.

These exist only for HTTP input validation; the call envelope in
ownedledger.runtime.calls is the canonical shape.
"""

from pydantic import BaseModel, Field, field_validator

from ownedledger.runtime.account_store import UINT256_MAX


class SetRequest(BaseModel):
    value: int = Field(..., description="Unsigned 256-bit value to store")

    model_config = {"extra": "forbid"}

    @field_validator("value")
    @classmethod
    def _uint256(cls, v: int) -> int:
        if v < 0 or v > UINT256_MAX:
            raise ValueError("value must be an unsigned 256-bit integer")
        return v


class ValueResponse(BaseModel):
    ok: bool = True
    value: int


class OwnerResponse(BaseModel):
    ok: bool = True
    instance_id: str
    owner: str


class OkResponse(BaseModel):
    ok: bool = True
