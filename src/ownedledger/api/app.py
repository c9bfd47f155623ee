from __future__ import annotations

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError

from ownedledger.api.errors import ApiError, api_error_handler, validation_error_handler
from ownedledger.api.routes_ops import router as ops_router
from ownedledger.api.routes_store import router as store_router
from ownedledger.api.security import RequestSizeLimitMiddleware
from ownedledger.api.structured_logging import RequestLogMiddleware, configure_structured_logging
from ownedledger.runtime.config import StoreConfig, load_store_config
from ownedledger.runtime.executor import StoreExecutor


def build_executor(cfg: StoreConfig) -> StoreExecutor:
    """Build the StoreExecutor for API runtime.

    This wrapper exists so tests can monkeypatch `ownedledger.api.app.build_executor`
    without reaching into runtime modules.
    """
    return StoreExecutor.from_config(cfg)


def create_app(*, boot_runtime: bool = True) -> FastAPI:
    """Create the FastAPI application.

    boot_runtime:
      - True (default): load config + attach executor (the deployer becomes owner)
      - False: keep lightweight for unit tests / import-time validation
    """
    cfg = load_store_config() if boot_runtime else None
    configure_structured_logging(cfg.log_level if cfg is not None else None)

    # Disable docs in production.
    if cfg is not None and cfg.mode == "prod":
        app = FastAPI(title="ownedledger API", docs_url=None, redoc_url=None, openapi_url=None)
    else:
        app = FastAPI(title="ownedledger API")

    app.state.cfg = cfg
    app.state.executor = build_executor(cfg) if cfg is not None else None

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)

    # --- Middleware ---
    # Added last runs first: request logging wraps the size limiter.
    app.add_middleware(RequestSizeLimitMiddleware)
    app.add_middleware(RequestLogMiddleware)

    # --- Routers ---
    app.include_router(ops_router, prefix="/v1", tags=["ops"])
    app.include_router(store_router, prefix="/v1", tags=["store"])

    return app
