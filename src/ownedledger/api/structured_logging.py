# src/ownedledger/api/structured_logging.py
from __future__ import annotations

import logging
import os
import time
import uuid
from typing import Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from ownedledger.api.security import CALLER_HEADER
from ownedledger.runtime.event_log import log_event

_HANDLER_NAME = "ownedledger-jsonl"


def configure_structured_logging(level_name: Optional[str] = None) -> None:
    """Send ownedledger.* loggers to stdout, one JSON event per line.

    Level from the argument, else OWNEDLEDGER_LOG_LEVEL (default INFO).
    Idempotent: the handler is attached once and only its level is updated
    on later calls. The root logger is left alone.
    """
    name = (level_name or os.environ.get("OWNEDLEDGER_LOG_LEVEL") or "INFO").strip().upper()
    level = getattr(logging, name, logging.INFO)

    pkg = logging.getLogger("ownedledger")
    pkg.setLevel(level)

    for h in pkg.handlers:
        if h.get_name() == _HANDLER_NAME:
            h.setLevel(level)
            return

    handler = logging.StreamHandler()
    handler.set_name(_HANDLER_NAME)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    pkg.addHandler(handler)


class RequestLogMiddleware(BaseHTTPMiddleware):
    """One http_request event per request, tagged with caller and request id.

    The request id comes from x-request-id when the client sends one and is
    echoed on the response. OWNEDLEDGER_LOG_REQUESTS=0 turns logging off but
    keeps the echo.
    """

    def __init__(self, app) -> None:
        super().__init__(app)
        raw = (os.environ.get("OWNEDLEDGER_LOG_REQUESTS") or "1").strip().lower()
        self._enabled = raw not in {"0", "false", "no", "n", "off"}
        self._logger = logging.getLogger("ownedledger.http")

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("x-request-id") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.monotonic()

        response = await call_next(request)
        response.headers.setdefault("x-request-id", request_id)

        if self._enabled:
            log_event(
                self._logger,
                "http_request",
                request_id=request_id,
                method=request.method,
                path=request.url.path,
                status=response.status_code,
                duration_ms=int((time.monotonic() - started) * 1000),
                caller=request.headers.get(CALLER_HEADER, ""),
            )
        return response
