"""Shared configuration constants used by the backend and the CLI."""
from __future__ import annotations

import os
from pathlib import Path


def _env_flag(name: str, default: bool = False) -> bool:
    """Read boolean env flag."""
    val = os.environ.get(name, "").strip().lower()
    if not val:
        return default
    return val in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    """Read integer env value; fall back to default when missing or malformed."""
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# Project root: resolve relative to this file's location
_PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Data directories (shared) - use absolute paths to avoid CWD dependency
DATA_DIR = os.environ.get("CASTDESK_DATA_DIR", str(_PROJECT_ROOT / "data"))

# Log level for backend and CLI (DEBUG shows aborted drag gestures)
LOG_LEVEL = os.environ.get("CASTDESK_LOG_LEVEL", "INFO").strip().upper() or "INFO"
