# src/ownedledger/env.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

_attempted = False


def load_dotenv_if_present(dotenv_path: Optional[str] = None) -> Optional[Path]:
    """Load OWNEDLEDGER_* settings from a .env file, at most once per process.

    The file is dotenv_path, else OWNEDLEDGER_DOTENV_PATH, else ./.env.
    Variables already in the environment win over the file.

    Returns the path that was loaded, or None if nothing was (missing file,
    or a load already happened earlier in this process).
    """
    global _attempted
    if _attempted:
        return None
    _attempted = True

    path = Path(dotenv_path or os.getenv("OWNEDLEDGER_DOTENV_PATH", ".env")).expanduser()
    if not path.is_file():
        return None

    load_dotenv(dotenv_path=path, override=False)
    return path
