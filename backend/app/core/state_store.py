"""Best-effort JSON persistence for the casting state tree.

Failures are logged and swallowed: a broken disk never breaks the engine.
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path

from pydantic import ValidationError

from backend.app.core.state_reducer import complete_state, initial_state
from backend.app.models.casting import CastingState

logger = logging.getLogger(__name__)


class StateStore:
    """Reads and writes the whole state as one JSON document."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, state: CastingState) -> bool:
        """Write state atomically (temp file + rename). Returns False on failure."""
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(state.model_dump_json(indent=2), encoding="utf-8")
            os.replace(tmp, self.path)
        except OSError as e:
            logger.warning("Failed to save casting state to %s: %s", self.path, e)
            return False
        logger.debug("Saved casting state to %s", self.path)
        return True

    def load(self) -> CastingState:
        """Stored state completed with defaults, or a fresh state when missing or unreadable."""
        if not self.exists():
            logger.info("No stored casting state at %s; starting fresh", self.path)
            return initial_state()
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read casting state from %s: %s", self.path, e)
            return initial_state()
        if not isinstance(data, dict):
            logger.warning("Stored casting state at %s is not an object; starting fresh", self.path)
            return initial_state()
        try:
            return complete_state(data)
        except ValidationError as e:
            logger.warning("Stored casting state at %s is invalid (%d errors); starting fresh", self.path, e.error_count())
            return initial_state()

    def clear(self) -> None:
        try:
            self.path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning("Failed to remove %s: %s", self.path, e)
