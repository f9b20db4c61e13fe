"""Single-writer casting store: confirmation gate, reducer, persistence, listeners."""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional

from pydantic import ValidationError

from backend.app.core.error_handling import CastingError
from backend.app.core.list_locator import list_key, locate
from backend.app.core.move_engine import BatchMoveResult
from backend.app.core.roster import require_character
from backend.app.core.state_reducer import initial_state, reduce_intent
from backend.app.core.state_store import StateStore
from backend.app.core.warnings import move_warnings
from backend.app.models.casting import CastingState, Notification
from backend.app.models.intents import INTENT_PAYLOADS, Intent

logger = logging.getLogger(__name__)

# Receives the warnings; returns True to go ahead
ConfirmCallback = Callable[[list[str]], bool]
Listener = Callable[[CastingState], None]

_GATED_INTENTS = ("MOVE_ACTOR", "MOVE_MULTIPLE_ACTORS")


@dataclass
class DispatchOutcome:
    intent_type: str
    committed: bool
    warnings: list[str] = field(default_factory=list)
    declined: bool = False
    error: Optional[CastingError] = None
    batch: Optional[BatchMoveResult] = None
    notifications: list[Notification] = field(default_factory=list)


def preview_warnings(state: CastingState, intent: Intent) -> list[str]:
    """Confirmation-gate warnings for a move intent. Anything else (or a bad payload) has none."""
    if intent.intent_type not in _GATED_INTENTS:
        return []
    try:
        payload = INTENT_PAYLOADS[intent.intent_type].model_validate(intent.payload)
        character = require_character(state, payload.character_id)
        source = locate(character, payload.source)
    except (ValidationError, CastingError) as e:
        logger.debug("No move preview for %s: %s", intent.intent_type, e)
        return []
    ids = [payload.actor_id] if intent.intent_type == "MOVE_ACTOR" else list(payload.actor_ids)
    actors = [a for a in source.collection if a.id in ids]
    return move_warnings(actors, list_key(payload.destination))


class CastingStore:
    """Owns the current state. dispatch() is serialized; readers get the latest committed tree."""

    def __init__(
        self,
        state: CastingState | None = None,
        persistence: StateStore | None = None,
        autosave: bool = True,
    ):
        self._state = state if state is not None else initial_state()
        self._persistence = persistence
        self._autosave = autosave and persistence is not None
        self._listeners: list[Listener] = []
        self._lock = threading.RLock()

    @classmethod
    def from_path(cls, path, autosave: bool = True) -> "CastingStore":
        persistence = StateStore(path)
        return cls(state=persistence.load(), persistence=persistence, autosave=autosave)

    @property
    def state(self) -> CastingState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def preview(self, intent: Intent) -> list[str]:
        return preview_warnings(self._state, intent)

    def dispatch(self, intent: Intent | dict, confirm: ConfirmCallback | None = None) -> DispatchOutcome:
        """Apply an intent. Moves with warnings ask `confirm` first; declining commits nothing."""
        if isinstance(intent, dict):
            intent = Intent.model_validate(intent)
        with self._lock:
            warnings = preview_warnings(self._state, intent)
            if warnings and confirm is not None and not confirm(warnings):
                logger.info("%s declined at confirmation gate (%d warning(s))", intent.intent_type, len(warnings))
                return DispatchOutcome(intent.intent_type, committed=False, warnings=warnings, declined=True)

            result = reduce_intent(self._state, intent)
            outcome = DispatchOutcome(
                intent.intent_type,
                committed=result.committed,
                warnings=warnings,
                error=result.error,
                batch=result.batch,
                notifications=list(result.notifications),
            )
            if not result.committed:
                return outcome
            self._state = result.state
            if self._autosave:
                self._persistence.save(self._state)
            listeners = list(self._listeners)

        for listener in listeners:
            listener(self._state)
        return outcome

    def replace_state(self, state: CastingState) -> None:
        """Swap the whole tree (seed loading). Persisted when autosave is on."""
        with self._lock:
            self._state = state
            if self._autosave:
                self._persistence.save(state)

    def save(self) -> bool:
        if self._persistence is None:
            return False
        return self._persistence.save(self._state)
