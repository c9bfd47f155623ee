# src/ownedledger/api/__main__.py
from __future__ import annotations

import uvicorn

from ownedledger.env import load_dotenv_if_present


def main() -> None:
    # Load .env early so OWNEDLEDGER_* vars exist before anything reads them.
    load_dotenv_if_present()

    # Import after dotenv load (prevents "config read before env" surprises)
    from ownedledger.api.app import create_app
    from ownedledger.runtime.config import load_store_config

    cfg = load_store_config()
    uvicorn.run(create_app(), host=cfg.api_host, port=cfg.api_port, log_level=cfg.log_level.lower())


if __name__ == "__main__":
    main()
