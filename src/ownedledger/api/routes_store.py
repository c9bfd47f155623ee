from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request

from ownedledger.api.errors import ApiError, api_error_from_receipt
from ownedledger.api.schemas import OkResponse, OwnerResponse, SetRequest, ValueResponse
from ownedledger.api.security import caller_identity
from ownedledger.runtime.calls import CallReceipt

router = APIRouter()

Json = Dict[str, Any]


def _executor(request: Request):
    ex = getattr(request.app.state, "executor", None)
    if ex is None:
        raise ApiError.internal("not_ready", "executor not attached to app.state", {})
    return ex


def _unwrap(receipt: CallReceipt) -> CallReceipt:
    if not receipt.ok:
        raise api_error_from_receipt(receipt.code, receipt.reason, receipt.details)
    return receipt


@router.post("/store/set", response_model=OkResponse)
def store_set(body: SetRequest, request: Request) -> Json:
    """Store a value under the caller's own account id."""
    caller, sig = caller_identity(request)
    _unwrap(_executor(request).set(caller, body.value, sig=sig))
    return {"ok": True}


@router.get("/store/me", response_model=ValueResponse)
def store_get(request: Request) -> Json:
    """Read the caller's own value (0 if never written)."""
    caller, sig = caller_identity(request)
    r = _unwrap(_executor(request).get(caller, sig=sig))
    return {"ok": True, "value": int(r.value or 0)}


@router.get("/store/count/{target}", response_model=ValueResponse)
def store_get_count(target: str, request: Request) -> Json:
    """Owner-only read of any account's value.

    Non-owners get 403 permission_denied and nothing in the store changes.
    """
    caller, sig = caller_identity(request)
    r = _unwrap(_executor(request).get_count(caller, target, sig=sig))
    return {"ok": True, "value": int(r.value or 0)}


@router.get("/store/owner", response_model=OwnerResponse)
def store_owner(request: Request) -> Json:
    ex = _executor(request)
    return {"ok": True, "instance_id": ex.instance_id, "owner": ex.owner}
