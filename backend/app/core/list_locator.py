"""Resolve location descriptors to the concrete actor list inside a character.

Characters store actors in three shapes: the fixed stage lists, shortlists
(addressed by id), and custom tab lists (addressed by key). Everything else in
the engine goes through these helpers instead of touching the shapes directly.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, Optional

from backend.app.constants import SHORTLISTS_KEY, STANDARD_LIST_KEYS
from backend.app.core.error_handling import LocationNotFound
from backend.app.models.casting import Actor, Character
from backend.app.models.intents import (
    CustomLocation,
    LocationDescriptor,
    ShortlistLocation,
    StandardLocation,
)

logger = logging.getLogger(__name__)


@dataclass
class Location:
    """A resolved list plus the actor's index in it (None when no actor was asked for or found)."""

    collection: list[Actor]
    index: Optional[int]
    descriptor: LocationDescriptor

    @property
    def actor(self) -> Actor | None:
        if self.index is None:
            return None
        return self.collection[self.index]


def resolve_collection(character: Character, descriptor: LocationDescriptor) -> list[Actor]:
    """Return the live list the descriptor points at. Raises LocationNotFound."""
    actors = character.actors
    if isinstance(descriptor, StandardLocation):
        collection = actors.standard(descriptor.key)
        if collection is None:
            raise LocationNotFound(f"Unknown standard list '{descriptor.key}' on character {character.id}")
        return collection
    if isinstance(descriptor, ShortlistLocation):
        for sl in actors.short_lists:
            if sl.id == descriptor.shortlist_id:
                return sl.actors
        raise LocationNotFound(f"Unknown shortlist '{descriptor.shortlist_id}' on character {character.id}")
    if isinstance(descriptor, CustomLocation):
        collection = actors.custom.get(descriptor.key)
        if collection is None:
            raise LocationNotFound(f"Unknown custom list '{descriptor.key}' on character {character.id}")
        return collection
    raise LocationNotFound(f"Unsupported location descriptor: {descriptor!r}")


def locate(character: Character, descriptor: LocationDescriptor, actor_id: str | None = None) -> Location:
    collection = resolve_collection(character, descriptor)
    index = None
    if actor_id is not None:
        index = next((i for i, a in enumerate(collection) if a.id == actor_id), None)
    return Location(collection=collection, index=index, descriptor=descriptor)


def iter_locations(character: Character) -> Iterator[tuple[LocationDescriptor, list[Actor]]]:
    """Every list of the character, stage lists first, then shortlists, then custom lists."""
    actors = character.actors
    for key in STANDARD_LIST_KEYS:
        yield StandardLocation(key=key), actors.standard(key)
    for sl in actors.short_lists:
        yield ShortlistLocation(shortlist_id=sl.id), sl.actors
    for key, collection in actors.custom.items():
        yield CustomLocation(key=key), collection


def find_actor(character: Character, actor_id: str) -> Location | None:
    """Scan every list for actor_id."""
    for descriptor, collection in iter_locations(character):
        for i, actor in enumerate(collection):
            if actor.id == actor_id:
                return Location(collection=collection, index=i, descriptor=descriptor)
    return None


def descriptor_for_key(key: str, shortlist_id: str | None = None) -> LocationDescriptor:
    """Build a descriptor from a list key as stored on actors (current_list_key)."""
    if key == SHORTLISTS_KEY:
        if not shortlist_id:
            raise LocationNotFound("Shortlist location requires a shortlist id")
        return ShortlistLocation(shortlist_id=shortlist_id)
    if key in STANDARD_LIST_KEYS:
        return StandardLocation(key=key)
    return CustomLocation(key=key)


def descriptor_for_actor(actor: Actor) -> LocationDescriptor:
    return descriptor_for_key(actor.current_list_key, actor.current_shortlist_id)


def list_key(descriptor: LocationDescriptor) -> str:
    """The list key an actor stores while living at descriptor."""
    if isinstance(descriptor, ShortlistLocation):
        return SHORTLISTS_KEY
    return descriptor.key


def shortlist_id(descriptor: LocationDescriptor) -> str | None:
    if isinstance(descriptor, ShortlistLocation):
        return descriptor.shortlist_id
    return None


def same_location(a: LocationDescriptor, b: LocationDescriptor) -> bool:
    return list_key(a) == list_key(b) and shortlist_id(a) == shortlist_id(b)
