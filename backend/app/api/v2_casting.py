"""V2 casting endpoints: state snapshot, intent dispatch, move preview, tab views."""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from backend.app import config
from backend.app.constants import SHORTLISTS_KEY
from backend.app.core.error_handling import CharacterNotFound, create_error_response
from backend.app.core.filter_sort import actors_for_tab, criteria_from_focus, visible_actors
from backend.app.core.notifications import unread_count
from backend.app.core.roster import require_character
from backend.app.core.store import CastingStore
from backend.app.core.tab_registry import find_tab
from backend.app.models.casting import Actor, CastingState, Notification
from backend.app.models.intents import INTENT_PAYLOADS, Intent

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v2", tags=["v2-casting"])

_store: CastingStore | None = None


def get_store() -> CastingStore:
    """Process-wide store backed by STATE_PATH. Tests override this dependency."""
    global _store
    if _store is None:
        _store = CastingStore.from_path(config.STATE_PATH, autosave=config.AUTOSAVE_ENABLED)
        logger.info("Casting store loaded from %s (autosave=%s)", config.STATE_PATH, config.AUTOSAVE_ENABLED)
    return _store


class IntentRequest(BaseModel):
    intent_type: str
    payload: dict[str, Any] = Field(default_factory=dict)
    # False = caller declined the move warnings; nothing is committed when warnings exist
    confirm: bool = True


class MovePreviewResponse(BaseModel):
    warnings: list[str] = Field(default_factory=list)
    requires_confirmation: bool = False


class DispatchResponse(BaseModel):
    intent_type: str
    committed: bool
    declined: bool = False
    warnings: list[str] = Field(default_factory=list)
    moved: list[str] = Field(default_factory=list)
    failures: dict[str, str] = Field(default_factory=dict)
    notifications: list[Notification] = Field(default_factory=list)
    error: dict[str, Any] | None = None


class TabActorsResponse(BaseModel):
    character_id: str
    tab_key: str
    total: int
    actors: list[Actor] = Field(default_factory=list)


def _require_known_intent(intent_type: str) -> None:
    if intent_type not in INTENT_PAYLOADS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown intent type: {intent_type}")


@router.get("/state", response_model=CastingState)
def get_state(store: CastingStore = Depends(get_store)):
    return store.state


@router.get("/notifications")
def get_notifications(store: CastingStore = Depends(get_store)):
    state = store.state
    return {"unread": unread_count(state), "notifications": [n.model_dump(mode="json") for n in state.notifications]}


@router.post("/moves/preview", response_model=MovePreviewResponse)
def preview_move(body: IntentRequest, store: CastingStore = Depends(get_store)):
    """Warnings a move would raise. Nothing is applied."""
    _require_known_intent(body.intent_type)
    warnings = store.preview(Intent(intent_type=body.intent_type, payload=body.payload))
    return MovePreviewResponse(warnings=warnings, requires_confirmation=bool(warnings))


@router.post("/intents", response_model=DispatchResponse)
def post_intent(body: IntentRequest, store: CastingStore = Depends(get_store)):
    _require_known_intent(body.intent_type)
    intent = Intent(intent_type=body.intent_type, payload=body.payload)
    outcome = store.dispatch(intent, confirm=lambda _warnings: body.confirm)

    response = DispatchResponse(
        intent_type=outcome.intent_type,
        committed=outcome.committed,
        declined=outcome.declined,
        warnings=outcome.warnings,
        notifications=outcome.notifications,
    )
    if outcome.batch is not None:
        response.moved = list(outcome.batch.moved)
        response.failures = dict(outcome.batch.failures)
    if outcome.error is not None:
        response.error = create_error_response(
            error_code=outcome.error.error_code,
            message=str(outcome.error),
            operation=outcome.intent_type,
        )
    return response


@router.get("/characters/{character_id}/tabs/{tab_key}/actors", response_model=TabActorsResponse)
def get_tab_actors(character_id: str, tab_key: str, store: CastingStore = Depends(get_store)):
    """Actors a tab would show, with the stored search, filters and sort applied."""
    state = store.state
    try:
        character = require_character(state, character_id)
    except CharacterNotFound:
        raise HTTPException(status_code=404, detail="Character not found")
    if tab_key != SHORTLISTS_KEY and find_tab(state, tab_key) is None:
        raise HTTPException(status_code=404, detail="Tab not found")

    raw = actors_for_tab(character, tab_key)
    actors = visible_actors(raw, criteria_from_focus(state, tab_key))
    return TabActorsResponse(character_id=character_id, tab_key=tab_key, total=len(raw), actors=actors)
