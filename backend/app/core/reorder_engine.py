"""Reorder actors inside a single list (custom order).

After any reorder every actor in the list carries a dense zero-based
sort_order, and the stored list order matches it. A reorder never changes list
membership; cross-list drops are moves.
"""
from __future__ import annotations

import logging
from typing import Sequence

from backend.app.constants import SORT_ORDER_MISSING
from backend.app.core.error_handling import InvalidReorder
from backend.app.core.list_locator import resolve_collection
from backend.app.models.casting import Actor, Character
from backend.app.models.intents import LocationDescriptor

logger = logging.getLogger(__name__)


def custom_order(actors: Sequence[Actor]) -> list[Actor]:
    """Actors by sort_order ascending, missing last, stable for ties."""
    return sorted(actors, key=lambda a: a.sort_order if a.sort_order is not None else SORT_ORDER_MISSING)


def renumber(actors: list[Actor]) -> None:
    for i, actor in enumerate(actors):
        actor.sort_order = i


def _reorder_block(
    collection: list[Actor],
    dragged_ids: Sequence[str],
    target_id: str,
    insert_position: str,
) -> list[Actor]:
    dragged = set(dragged_ids)
    if not dragged:
        raise InvalidReorder("Nothing to reorder")
    if target_id in dragged:
        raise InvalidReorder(f"Reorder target {target_id} is one of the dragged actors")
    ordered = custom_order(collection)
    present = {a.id for a in ordered}
    missing = [aid for aid in dragged_ids if aid not in present]
    if missing:
        raise InvalidReorder(f"Actor(s) not in list: {', '.join(missing)}")
    if target_id not in present:
        raise InvalidReorder(f"Reorder target {target_id} not in list")

    block = [a for a in ordered if a.id in dragged]
    remaining = [a for a in ordered if a.id not in dragged]
    target_idx = next(i for i, a in enumerate(remaining) if a.id == target_id)
    insert_at = target_idx if insert_position == "before" else target_idx + 1
    return remaining[:insert_at] + block + remaining[insert_at:]


def reorder_actors(
    character: Character,
    location: LocationDescriptor,
    dragged_id: str,
    target_id: str,
    insert_position: str = "after",
) -> Character:
    """Place dragged_id before/after target_id and renumber the list. Raises with no mutation."""
    return reorder_multiple_actors(character, location, [dragged_id], target_id, insert_position)


def reorder_multiple_actors(
    character: Character,
    location: LocationDescriptor,
    dragged_ids: Sequence[str],
    target_id: str,
    insert_position: str = "after",
) -> Character:
    """Move dragged_ids as one contiguous block (keeping their relative order) next to target_id."""
    collection = resolve_collection(character, location)
    new_order = _reorder_block(collection, list(dict.fromkeys(dragged_ids)), target_id, insert_position)
    renumber(new_order)
    collection[:] = new_order
    logger.debug(
        "Reordered %d actor(s) %s %s on character %s",
        len(dragged_ids), insert_position, target_id, character.id,
    )
    return character
