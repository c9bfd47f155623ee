from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from ownedledger.runtime.metrics import format_prometheus, metrics_enabled, snapshot

router = APIRouter()


@router.get("/health")
def health(request: Request) -> Dict[str, Any]:
    ex = getattr(request.app.state, "executor", None)
    return {"ok": True, "ready": ex is not None}


@router.get("/metrics")
def metrics(format: str = "prometheus") -> Response:
    """Call counters as Prometheus text (default) or JSON (?format=json).

    Disabled by default. Enable with:
      OWNEDLEDGER_METRICS_ENABLED=1
    """
    if not metrics_enabled():
        return Response(status_code=404, content="not_found\n", media_type="text/plain")
    if format.strip().lower() == "json":
        return JSONResponse({"ok": True, "metrics": snapshot()})
    return Response(content=format_prometheus(), media_type="text/plain")
