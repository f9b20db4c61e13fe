"""App config: state file location, drag gesture timing, API settings, env overrides.

Every value can be overridden with a CASTDESK_* environment variable. Values are
read once at import time; tests patch the module attributes directly.
"""
from __future__ import annotations

import logging
import os
from pathlib import Path

from shared.config import DATA_DIR, LOG_LEVEL, _env_flag, _env_int

logger = logging.getLogger(__name__)


# Persisted state tree (JSON). The engine never touches it directly; the store does.
STATE_PATH = Path(os.environ.get("CASTDESK_STATE_PATH", str(Path(DATA_DIR) / "casting_state.json")))

# YAML seed used by `castdesk demo` when no path is given
SEED_PATH = Path(os.environ.get("CASTDESK_SEED_PATH", str(Path(DATA_DIR) / "demo_casting.yaml")))

# Drag gesture cleanup: delay after drag end, and upper bound for any scheduled cleanup
DRAG_END_CLEANUP_MS = _env_int("CASTDESK_DRAG_END_CLEANUP_MS", 50)
DRAG_CLEANUP_MAX_MS = _env_int("CASTDESK_DRAG_CLEANUP_MS", 100)

# Persist after every committed dispatch (disable for read-only demos)
AUTOSAVE_ENABLED = _env_flag("CASTDESK_AUTOSAVE", default=True)

DEV_MODE = _env_flag("CASTDESK_DEV_MODE", default=True)


def _parse_cors_allowlist(raw: str) -> list[str]:
    origins = [o.strip() for o in raw.split(",") if o and o.strip()]
    if origins:
        return origins
    return [
        "http://localhost",
        "http://127.0.0.1",
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]


CORS_ALLOW_ORIGINS = _parse_cors_allowlist(os.environ.get("CASTDESK_CORS_ALLOW_ORIGINS", ""))


def effective_config() -> dict[str, str]:
    """Resolved configuration as display strings (no secrets)."""
    return {
        "state_path": str(STATE_PATH),
        "seed_path": str(SEED_PATH),
        "drag_end_cleanup_ms": str(DRAG_END_CLEANUP_MS),
        "drag_cleanup_max_ms": str(DRAG_CLEANUP_MAX_MS),
        "autosave": str(AUTOSAVE_ENABLED).lower(),
        "dev_mode": str(DEV_MODE).lower(),
        "log_level": LOG_LEVEL,
        "cors_allow_origins": ",".join(CORS_ALLOW_ORIGINS),
    }
