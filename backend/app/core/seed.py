"""YAML seed files: a partial casting state tree completed with defaults."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from backend.app.core.error_handling import CastingError
from backend.app.core.state_reducer import complete_state
from backend.app.models.casting import CastingState

logger = logging.getLogger(__name__)


class SeedError(CastingError):
    error_code = "SEED_INVALID"


def _load_yaml(path: Path) -> Any:
    return yaml.safe_load(path.read_text(encoding="utf-8"))


def load_seed(path: str | Path) -> CastingState:
    """Read a seed file. Keys follow the state tree (projects, users, tab_definitions, ...)."""
    path = Path(path)
    if not path.is_file():
        raise SeedError(f"Seed file not found: {path}")
    try:
        data = _load_yaml(path)
    except yaml.YAMLError as e:
        raise SeedError(f"Seed file is not valid YAML: {e}") from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise SeedError("Seed file must contain a mapping at the top level")
    try:
        state = complete_state(data)
    except ValidationError as e:
        raise SeedError(f"Seed file does not match the state schema ({e.error_count()} errors)") from e
    actor_count = sum(len(list(c.actors.all_actors())) for c in state.all_characters())
    logger.info("Loaded seed %s: %d project(s), %d actor(s)", path, len(state.projects), actor_count)
    return state
