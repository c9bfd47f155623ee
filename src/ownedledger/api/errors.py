from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse


@dataclass
class ApiError(Exception):
    status_code: int
    code: str
    message: str
    details: Dict[str, Any]

    @staticmethod
    def bad_request(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(400, code, message, details or {})

    @staticmethod
    def forbidden(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(403, code, message, details or {})

    @staticmethod
    def internal(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> "ApiError":
        return ApiError(500, code, message, details or {})


_STATUS_BY_CODE = {
    "permission_denied": 403,
    "bad_signature": 403,
    "forbidden": 403,
    "invalid_call": 400,
    "unknown_call": 400,
}


def api_error_from_receipt(code: str, reason: str, details: Optional[Dict[str, Any]] = None) -> ApiError:
    return ApiError(_STATUS_BY_CODE.get(code, 500), code, reason, details or {})


async def api_error_handler(_request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "ok": False,
            "error": {"code": exc.code, "message": exc.message, "details": exc.details},
        },
    )


async def validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are invalid calls: 400 in the common error envelope."""
    errors = [
        {"loc": [str(p) for p in e.get("loc", ())], "msg": str(e.get("msg", "")), "type": str(e.get("type", ""))}
        for e in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={
            "ok": False,
            "error": {"code": "invalid_call", "message": "request_validation_failed", "details": {"errors": errors}},
        },
    )
