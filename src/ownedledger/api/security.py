from __future__ import annotations

import os
from typing import Optional, Tuple

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ownedledger.api.errors import ApiError

CALLER_HEADER = "x-caller-id"
SIG_HEADER = "x-caller-sig"


def _truthy(v: str | None) -> bool:
    return (v or "").strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return int(default)
    try:
        return int(str(raw).strip())
    except ValueError:
        return int(default)


def caller_identity(request: Request) -> Tuple[str, str]:
    """Explicit caller identity for a request.

    Client provides:
      - X-Caller-Id: account id (hex ed25519 pubkey when signatures are required)
      - X-Caller-Sig: signature over the canonical call message (optional)

    Whether the signature is checked is the executor's decision, not ours.
    """
    caller = (request.headers.get(CALLER_HEADER) or "").strip()
    sig = (request.headers.get(SIG_HEADER) or "").strip()
    if not caller:
        raise ApiError.bad_request("missing_caller", "X-Caller-Id header is required", {})
    return caller, sig


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Fail-fast request size limiter.

    Configure:
      OWNEDLEDGER_MAX_REQUEST_BYTES (default: 16_384)
      OWNEDLEDGER_SIZE_LIMIT_DISABLE=1 to disable
    """

    def __init__(
        self,
        app,
        *,
        max_bytes: Optional[int] = None,
        exempt_prefixes: Tuple[str, ...] = ("/docs", "/openapi.json", "/v1/health"),
    ):
        super().__init__(app)
        self._enabled = not _truthy(os.environ.get("OWNEDLEDGER_SIZE_LIMIT_DISABLE"))
        self._max_bytes = int(max_bytes) if max_bytes is not None else _env_int("OWNEDLEDGER_MAX_REQUEST_BYTES", 16_384)
        self._exempt_prefixes = exempt_prefixes

    def _too_large(self) -> JSONResponse:
        return JSONResponse(
            status_code=413,
            content={
                "ok": False,
                "error": {"code": "request_too_large", "message": "Request body too large", "details": {}},
            },
        )

    async def dispatch(self, request: Request, call_next):
        if not self._enabled:
            return await call_next(request)

        path = request.url.path or ""
        for ex in self._exempt_prefixes:
            if path.startswith(ex):
                return await call_next(request)

        cl = request.headers.get("content-length")
        if cl:
            try:
                if int(cl) > self._max_bytes:
                    return self._too_large()
            except ValueError:
                # Malformed header; fall back to the buffered body cap.
                pass

        # Also cap actual body bytes (chunked uploads carry no content-length).
        if (request.method or "").upper() in {"POST", "PUT", "PATCH"}:
            body = await request.body()
            if body and len(body) > self._max_bytes:
                return self._too_large()

        return await call_next(request)
