"""Move actors between lists of a character.

Every move is remove-then-insert: an actor lives in exactly one list per
character. The destination is resolved before anything is removed, so a bad
destination leaves the character untouched. Callers (the reducer) hand in a deep
copy of the state; these functions mutate the character they are given.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from backend.app.constants import (
    APPROVAL_KEY,
    CONSENSUS_YES,
    LONG_LIST_KEY,
    MOVE_REASON_DEFAULT,
    MOVE_REASON_FINAL_REVIEW,
    MOVE_REASON_RESET,
)
from backend.app.core.error_handling import ActorNotFound, CastingError
from backend.app.core.list_locator import (
    find_actor,
    list_key,
    locate,
    resolve_collection,
    same_location,
    shortlist_id,
)
from backend.app.models.casting import Actor, Character, ConsensusAction, TabDefinition, now_ms
from backend.app.models.intents import CustomLocation, LocationDescriptor, StandardLocation

logger = logging.getLogger(__name__)


@dataclass
class BatchMoveResult:
    """Outcome of a best-effort batch move."""

    moved: list[str] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)  # actor_id -> reason

    @property
    def moved_count(self) -> int:
        return len(self.moved)


def apply_move_reason(actor: Actor, reason: str) -> None:
    """Transform an actor for its new list. Mutates actor."""
    # Consensus and custom position were relative to the old list
    actor.consensus_action = None
    actor.sort_order = None

    if reason == MOVE_REASON_RESET:
        actor.is_greenlit = False
        actor.is_cast = False
        actor.is_soft_rejected = False
        actor.statuses = []
        actor.last_contact_date = None
        actor.last_contact_type = None
        actor.ready_for_approval = False
        actor.approval_move_date = None
    elif reason == MOVE_REASON_FINAL_REVIEW:
        actor.ready_for_approval = True
        actor.approval_move_date = now_ms()
    elif reason != MOVE_REASON_DEFAULT:
        logger.warning("Unknown move reason %r treated as default", reason)


def reason_for_destination(destination: LocationDescriptor) -> str:
    """Move reason a drop on destination implies: back to the long list resets, approval is final review."""
    key = list_key(destination)
    if key == LONG_LIST_KEY:
        return MOVE_REASON_RESET
    if key == APPROVAL_KEY:
        return MOVE_REASON_FINAL_REVIEW
    return MOVE_REASON_DEFAULT


def _ensure_destination(
    character: Character,
    destination: LocationDescriptor,
    tab_definitions: Sequence[TabDefinition] | None,
) -> list[Actor]:
    """Resolve destination; a defined custom tab missing on this character gets an empty list."""
    if (
        isinstance(destination, CustomLocation)
        and tab_definitions
        and destination.key not in character.actors.custom
        and any(t.key == destination.key and t.is_custom for t in tab_definitions)
    ):
        character.actors.custom[destination.key] = []
    return resolve_collection(character, destination)


def is_custom_ordered(actors: Iterable[Actor]) -> bool:
    return any(a.sort_order is not None for a in actors)


def _append(collection: list[Actor], actor: Actor) -> None:
    if is_custom_ordered(collection):
        actor.sort_order = max(a.sort_order for a in collection if a.sort_order is not None) + 1
    collection.append(actor)


def move_actor(
    character: Character,
    actor_id: str,
    source: LocationDescriptor,
    destination: LocationDescriptor,
    reason: str = MOVE_REASON_DEFAULT,
    *,
    tab_definitions: Sequence[TabDefinition] | None = None,
) -> Character:
    """Move one actor from source to destination. Raises CastingError with no mutation."""
    src = locate(character, source, actor_id)
    if src.index is None:
        raise ActorNotFound(f"Actor {actor_id} not found in {list_key(source)} of character {character.id}")
    if same_location(source, destination):
        logger.debug("Actor %s already in %s; move skipped", actor_id, list_key(destination))
        return character
    dest = _ensure_destination(character, destination, tab_definitions)

    actor = src.collection.pop(src.index)
    apply_move_reason(actor, reason)
    if list_key(destination) != APPROVAL_KEY:
        # Greenlit and cast only hold inside approval
        actor.is_greenlit = False
        actor.is_cast = False
    actor.current_list_key = list_key(destination)
    actor.current_shortlist_id = shortlist_id(destination)
    _append(dest, actor)
    logger.info(
        "Moved actor %s on character %s: %s -> %s (%s)",
        actor_id, character.id, list_key(source), list_key(destination), reason,
    )
    return character


def move_multiple_actors(
    character: Character,
    actor_ids: Sequence[str],
    source: LocationDescriptor,
    destination: LocationDescriptor,
    reason: str = MOVE_REASON_DEFAULT,
    *,
    tab_definitions: Sequence[TabDefinition] | None = None,
) -> BatchMoveResult:
    """Best-effort batch move in actor_ids order. Each single move is atomic; failures are collected."""
    result = BatchMoveResult()
    for actor_id in dict.fromkeys(actor_ids):
        if same_location(source, destination):
            result.failures[actor_id] = "already in destination"
            continue
        try:
            move_actor(character, actor_id, source, destination, reason, tab_definitions=tab_definitions)
        except CastingError as e:
            result.failures[actor_id] = str(e)
            continue
        result.moved.append(actor_id)
    if result.failures:
        logger.warning(
            "Batch move on character %s: %d moved, %d failed",
            character.id, result.moved_count, len(result.failures),
        )
    return result


def confirm_cast(character: Character, actor_id: str) -> bool:
    """Mark an actor cast and greenlit. Returns False when it already was (no state change)."""
    loc = find_actor(character, actor_id)
    if loc is None:
        raise ActorNotFound(f"Actor {actor_id} not found on character {character.id}")
    actor = loc.actor
    if actor.is_cast and actor.is_greenlit:
        return False
    actor.is_cast = True
    actor.is_greenlit = True
    actor.is_soft_rejected = False
    actor.consensus_action = ConsensusAction(type=CONSENSUS_YES, is_greenlit=True)
    logger.info("Actor %s cast as character %s", actor_id, character.id)
    return True


def reset_for_new_list(actor: Actor) -> None:
    """Fresh evaluation: votes, flags and consensus cleared; notes and statuses kept."""
    actor.user_votes = {}
    actor.consensus_action = None
    actor.is_soft_rejected = False
    actor.is_greenlit = False
    actor.is_cast = False
    actor.sort_order = None
    actor.current_list_key = LONG_LIST_KEY
    actor.current_shortlist_id = None


def move_actor_to_character(source_character: Character, destination_character: Character, actor_id: str) -> Actor:
    """Remove actor from any list of one character and append it to another character's entry list."""
    if source_character.id == destination_character.id:
        raise CastingError(f"Actor {actor_id} already belongs to character {source_character.id}")
    loc = find_actor(source_character, actor_id)
    if loc is None:
        raise ActorNotFound(f"Actor {actor_id} not found on character {source_character.id}")
    if find_actor(destination_character, actor_id) is not None:
        raise CastingError(f"Actor {actor_id} already exists on character {destination_character.id}")
    actor = loc.collection.pop(loc.index)
    reset_for_new_list(actor)
    _append(destination_character.actors.long_list, actor)
    logger.info("Moved actor %s from character %s to %s", actor_id, source_character.id, destination_character.id)
    return actor


def relocate_to_entry(character: Character, actors: Iterable[Actor]) -> int:
    """Append actors to the entry list with the reset transform (tab and shortlist deletion)."""
    count = 0
    entry = resolve_collection(character, StandardLocation(key=LONG_LIST_KEY))
    for actor in actors:
        apply_move_reason(actor, MOVE_REASON_RESET)
        actor.current_list_key = LONG_LIST_KEY
        actor.current_shortlist_id = None
        _append(entry, actor)
        count += 1
    return count
