# src/ownedledger/runtime/config.py
from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

Json = Dict[str, Any]


def _as_int(v: Any, default: int) -> int:
    try:
        return int(v)
    except (TypeError, ValueError):
        return int(default)


def _as_str(v: Any, default: str) -> str:
    if v is None:
        return str(default)
    s = str(v)
    return s if s.strip() else str(default)


def _as_bool(v: Any, default: bool) -> bool:
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    return bool(default)


@dataclass(frozen=True)
class StoreConfig:
    instance_id: str
    mode: str  # "dev" | "testnet" | "prod"

    # Identity that "deploys" the hosted store; becomes its owner.
    deployer: str

    api_host: str
    api_port: int

    # Require Ed25519 signatures on calls (caller ids are hex pubkeys).
    sigverify: bool

    log_level: str


_ALLOWED_MODES = {"dev", "testnet", "prod"}


def validate_store_config(cfg: StoreConfig) -> None:
    """Fail-fast validation for operator config."""

    if not isinstance(cfg.instance_id, str) or not cfg.instance_id.strip():
        raise ValueError("instance_id must be a non-empty string")

    mode = str(cfg.mode or "").strip().lower()
    if mode not in _ALLOWED_MODES:
        raise ValueError(f"mode must be one of {_ALLOWED_MODES}; got: {cfg.mode!r}")

    if not isinstance(cfg.deployer, str) or not cfg.deployer.strip():
        raise ValueError("deployer must be a non-empty account id")

    if int(cfg.api_port) <= 0 or int(cfg.api_port) > 65535:
        raise ValueError(f"api_port must be 1..65535; got: {cfg.api_port}")

    if mode == "prod" and not cfg.sigverify:
        # Unsigned calls let anyone claim the owner's identity.
        raise ValueError("sigverify must be enabled in prod mode")


def default_store_config() -> StoreConfig:
    return StoreConfig(
        instance_id="ownedledger-dev",
        mode="dev",
        deployer="",
        api_host="127.0.0.1",
        api_port=8080,
        sigverify=False,
        log_level="INFO",
    )


def _from_mapping(raw: Json, base: StoreConfig) -> StoreConfig:
    return StoreConfig(
        instance_id=_as_str(raw.get("instance_id"), base.instance_id),
        mode=_as_str(raw.get("mode"), base.mode).strip().lower(),
        deployer=_as_str(raw.get("deployer"), base.deployer).strip(),
        api_host=_as_str(raw.get("api_host"), base.api_host),
        api_port=_as_int(raw.get("api_port"), base.api_port),
        sigverify=_as_bool(raw.get("sigverify"), base.sigverify),
        log_level=_as_str(raw.get("log_level"), base.log_level).strip().upper(),
    )


def read_store_config_file(path: str) -> StoreConfig:
    p = Path(path)
    raw = json.loads(p.read_text(encoding="utf-8"))
    if not isinstance(raw, dict):
        raise ValueError("store config must be a JSON object")
    return _from_mapping(raw, default_store_config())


def _env_overrides() -> Json:
    keys = {
        "instance_id": "OWNEDLEDGER_INSTANCE_ID",
        "mode": "OWNEDLEDGER_MODE",
        "deployer": "OWNEDLEDGER_DEPLOYER",
        "api_host": "OWNEDLEDGER_API_HOST",
        "api_port": "OWNEDLEDGER_API_PORT",
        "sigverify": "OWNEDLEDGER_SIGVERIFY",
        "log_level": "OWNEDLEDGER_LOG_LEVEL",
    }
    out: Json = {}
    for field_name, env_name in keys.items():
        v = os.environ.get(env_name)
        if v is not None and v.strip():
            out[field_name] = v
    return out


def load_store_config(*, config_path: Optional[str] = None) -> StoreConfig:
    """File (if any) first, then OWNEDLEDGER_* environment overrides, then validate."""
    p = config_path or os.environ.get("OWNEDLEDGER_CONFIG_PATH")
    cfg = read_store_config_file(p) if p else default_store_config()

    overrides = _env_overrides()
    if overrides:
        cfg = _from_mapping(overrides, cfg)

    validate_store_config(cfg)
    return cfg
