"""Drag-and-drop gesture: payload codec, drop routing, and the gesture state machine.

idle -> dragging -> (dropped | canceled) -> idle. Cleanup back to idle is
scheduled on a cancelable timer so a drop handler can finish before the drag-end
cleanup fires; any scheduled delay is capped by DRAG_CLEANUP_MAX_MS.
"""
from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Sequence, TypeVar

from pydantic import TypeAdapter, ValidationError

from backend.app import config
from backend.app.constants import DRAG_TYPE_ACTOR, SHORTLISTS_KEY
from backend.app.core.error_handling import InvalidDropData
from backend.app.core.list_locator import descriptor_for_key, list_key, same_location
from backend.app.core.move_engine import reason_for_destination
from backend.app.models.casting import Actor, Character
from backend.app.models.intents import Intent, LocationDescriptor, ShortlistLocation

logger = logging.getLogger(__name__)

T = TypeVar("T")

_LOCATION_ADAPTER: TypeAdapter = TypeAdapter(LocationDescriptor)

# (delay_seconds, callback) -> handle with .cancel()
Scheduler = Callable[[float, Callable[[], None]], Any]


class DragPhase(str, Enum):
    IDLE = "idle"
    DRAGGING = "dragging"
    DROPPED = "dropped"
    CANCELED = "canceled"


@dataclass
class DragPayload:
    """What travels with a dragged card."""

    actor_id: str
    source_tab_key: str
    source: LocationDescriptor
    actor_name: str = ""
    selected_actor_ids: list[str] = field(default_factory=list)
    drag_type: str = DRAG_TYPE_ACTOR

    @property
    def is_multi_drag(self) -> bool:
        return len(self.selected_actor_ids) > 1

    def to_json(self) -> str:
        return json.dumps({
            "dragType": self.drag_type,
            "actorId": self.actor_id,
            "actorName": self.actor_name,
            "sourceTabKey": self.source_tab_key,
            "sourceLocation": self.source.model_dump(),
            "selectedActorIds": list(self.selected_actor_ids),
            "isMultiDrag": self.is_multi_drag,
        })


def source_location_for(character: Character, tab_key: str, actor_id: str) -> LocationDescriptor:
    """Where a card dragged from tab_key lives; the shortlists tab resolves to the actor's shortlist."""
    if tab_key == SHORTLISTS_KEY:
        for sl in character.actors.short_lists:
            if any(a.id == actor_id for a in sl.actors):
                return ShortlistLocation(shortlist_id=sl.id)
        raise InvalidDropData(f"Actor {actor_id} is not in any shortlist of character {character.id}")
    return descriptor_for_key(tab_key)


def build_drag_payload(
    character: Character,
    tab_key: str,
    actor: Actor,
    selected_ids: Sequence[str] = (),
) -> DragPayload:
    """Dragging a selected card carries the whole selection; an unselected card drags alone."""
    ids = list(selected_ids) if actor.id in selected_ids else [actor.id]
    return DragPayload(
        actor_id=actor.id,
        actor_name=actor.name,
        source_tab_key=tab_key,
        source=source_location_for(character, tab_key, actor.id),
        selected_actor_ids=ids,
    )


def parse_drop_data(raw: str | dict | None) -> DragPayload:
    """Decode a drop payload. Raises InvalidDropData for anything that is not an actor drag."""
    if raw is None or raw == "":
        raise InvalidDropData("Empty drop data")
    if isinstance(raw, str):
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise InvalidDropData(f"Drop data is not JSON: {e}") from e
    else:
        data = raw
    if not isinstance(data, dict):
        raise InvalidDropData("Drop data must be an object")
    if data.get("dragType", DRAG_TYPE_ACTOR) != DRAG_TYPE_ACTOR:
        raise InvalidDropData(f"Unsupported drag type {data.get('dragType')!r}")

    actor_id = data.get("actorId")
    if not actor_id or not isinstance(actor_id, str):
        raise InvalidDropData("Drop data has no actorId")
    try:
        source = _LOCATION_ADAPTER.validate_python(data.get("sourceLocation"))
    except ValidationError as e:
        raise InvalidDropData(f"Invalid sourceLocation: {e}") from e

    selected = data.get("selectedActorIds") or [actor_id]
    if not isinstance(selected, list) or not all(isinstance(s, str) for s in selected):
        raise InvalidDropData("selectedActorIds must be a list of ids")
    return DragPayload(
        actor_id=actor_id,
        actor_name=str(data.get("actorName") or ""),
        source_tab_key=str(data.get("sourceTabKey") or list_key(source)),
        source=source,
        selected_actor_ids=list(dict.fromkeys(selected)),
    )


def drop_location_for(character: Character, tab_key: str, target_actor_id: str | None = None) -> LocationDescriptor:
    """Location of a drop on tab_key; on the shortlists tab the target card picks the shortlist."""
    if tab_key == SHORTLISTS_KEY:
        if not target_actor_id:
            raise InvalidDropData("Drops on the shortlists tab need a target card")
        return source_location_for(character, tab_key, target_actor_id)
    return descriptor_for_key(tab_key)


def route_drop(
    payload: DragPayload,
    character_id: str,
    target: LocationDescriptor,
    target_actor_id: str | None = None,
    insert_position: str = "after",
    reason: str | None = None,
) -> list[Intent]:
    """Turn a drop into intents: same list is a reorder, another list is a move.

    Without an explicit reason the move reason follows the destination.
    """
    ids = payload.selected_actor_ids or [payload.actor_id]
    if same_location(payload.source, target):
        if not target_actor_id or target_actor_id in ids:
            logger.debug("Drop on own list without a distinct target; nothing to do")
            return []
        location = target.model_dump()
        if payload.is_multi_drag:
            return [Intent(intent_type="REORDER_MULTIPLE_ACTORS", payload={
                "character_id": character_id,
                "location": location,
                "dragged_actor_ids": ids,
                "target_actor_id": target_actor_id,
                "insert_position": insert_position,
            })]
        return [Intent(intent_type="REORDER_ACTORS", payload={
            "character_id": character_id,
            "location": location,
            "dragged_actor_id": payload.actor_id,
            "target_actor_id": target_actor_id,
            "insert_position": insert_position,
        })]

    reason = reason or reason_for_destination(target)
    if payload.is_multi_drag:
        return [Intent(intent_type="MOVE_MULTIPLE_ACTORS", payload={
            "character_id": character_id,
            "actor_ids": ids,
            "source": payload.source.model_dump(),
            "destination": target.model_dump(),
            "reason": reason,
        })]
    return [Intent(intent_type="MOVE_ACTOR", payload={
        "character_id": character_id,
        "actor_id": payload.actor_id,
        "source": payload.source.model_dump(),
        "destination": target.model_dump(),
        "reason": reason,
    })]


def _timer_scheduler(delay_seconds: float, callback: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(delay_seconds, callback)
    timer.daemon = True
    timer.start()
    return timer


class DragGesture:
    """Explicit drag state machine with a bounded, cancelable cleanup timer."""

    def __init__(
        self,
        scheduler: Optional[Scheduler] = None,
        end_delay_ms: Optional[int] = None,
        max_delay_ms: Optional[int] = None,
    ) -> None:
        self._scheduler = scheduler or _timer_scheduler
        self.end_delay_ms = config.DRAG_END_CLEANUP_MS if end_delay_ms is None else end_delay_ms
        self.max_delay_ms = config.DRAG_CLEANUP_MAX_MS if max_delay_ms is None else max_delay_ms
        self.phase = DragPhase.IDLE
        self.payload: DragPayload | None = None
        self._pending: Any = None
        self._generation = 0
        self._lock = threading.RLock()

    @property
    def is_dragging(self) -> bool:
        return self.phase == DragPhase.DRAGGING

    @property
    def cleanup_pending(self) -> bool:
        return self._pending is not None

    def start(self, payload: DragPayload) -> None:
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            self.phase = DragPhase.DRAGGING
            self.payload = payload
        logger.debug("Drag started: %s (%d selected)", payload.actor_id, len(payload.selected_actor_ids))

    def drop(self, raw: str | dict | None, handler: Callable[[DragPayload], T]) -> T | None:
        """Parse the drop and run handler. Cleanup is scheduled even when handler raises.

        Only a drop that ends the active drag reaches handler. Bad data, a drop
        with no drag in progress, or a payload that does not match the started
        drag cancels the gesture and returns None.
        """
        try:
            payload = parse_drop_data(raw)
        except InvalidDropData as e:
            return self._abort(f"Drop aborted: {e}")
        if self.phase != DragPhase.DRAGGING or self.payload is None:
            return self._abort(f"Drop of {payload.actor_id} with no active drag (phase={self.phase.value})")
        if payload.actor_id != self.payload.actor_id or not same_location(payload.source, self.payload.source):
            return self._abort(f"Drop of {payload.actor_id} does not match the drag of {self.payload.actor_id}")
        self.phase = DragPhase.DROPPED
        try:
            return handler(payload)
        finally:
            self.schedule_cleanup(0)

    def _abort(self, message: str) -> None:
        logger.debug(message)
        self.phase = DragPhase.CANCELED
        self.schedule_cleanup(0)
        return None

    def end(self) -> None:
        """Browser drag-end: give drop handlers a moment before cleaning up."""
        self.schedule_cleanup(self.end_delay_ms)

    def cancel(self) -> None:
        """Escape or a tab/character change: clean up right away."""
        with self._lock:
            self._cancel_pending()
        self.phase = DragPhase.CANCELED
        self._cleanup()

    def schedule_cleanup(self, delay_ms: int) -> None:
        delay_ms = max(0, min(delay_ms, self.max_delay_ms))
        with self._lock:
            self._cancel_pending()
            self._generation += 1
            generation = self._generation
            handle = self._scheduler(delay_ms / 1000.0, lambda: self._cleanup(generation))
            # A scheduler may run the callback synchronously
            if self._generation == generation:
                self._pending = handle

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _cleanup(self, generation: int | None = None) -> None:
        with self._lock:
            if generation is not None and generation != self._generation:
                return
            self._generation += 1
            self._pending = None
            self.phase = DragPhase.IDLE
            self.payload = None
