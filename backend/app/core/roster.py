"""Roster operations: actors, notes, contact statuses, shortlists, characters and projects.

All functions mutate the CastingState they are handed (the reducer's copy) and
raise CastingError subclasses before changing anything when a target is missing.
Functions that produce a notification return it; the reducer pushes it.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Sequence

from backend.app.constants import (
    CONTACT_STATUS_CATEGORY,
    CONTACT_STATUS_LABELS,
    LONG_LIST_KEY,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
    NOTIFICATION_USER,
)
from backend.app.core.error_handling import (
    ActorNotFound,
    CastingError,
    CharacterNotFound,
    LocationNotFound,
    NoteNotFound,
    NotePermissionError,
)
from backend.app.core.list_locator import descriptor_for_key, find_actor, iter_locations, resolve_collection
from backend.app.core.move_engine import is_custom_ordered, relocate_to_entry
from backend.app.core.notifications import make_notification
from backend.app.core.reorder_engine import custom_order, renumber
from backend.app.models.casting import (
    Actor,
    ActorStatus,
    CastingState,
    Character,
    Note,
    Notification,
    Project,
    ProjectAssignment,
    ShortList,
    now_ms,
)

logger = logging.getLogger(__name__)

# Location fields are owned by the move engine
_PROTECTED_ACTOR_FIELDS = frozenset({"id", "current_list_key", "current_shortlist_id"})


def require_character(state: CastingState, character_id: str) -> Character:
    character = state.find_character(character_id)
    if character is None:
        raise CharacterNotFound(f"Character {character_id} not found")
    return character


def require_actor(character: Character, actor_id: str) -> Actor:
    loc = find_actor(character, actor_id)
    if loc is None:
        raise ActorNotFound(f"Actor {actor_id} not found on character {character.id}")
    return loc.actor


# --- Actors ---


def add_actor(state: CastingState, character_id: str, actor: Actor, list_key: str = LONG_LIST_KEY) -> Notification:
    """Add a new actor at the top of a list (the entry list by default)."""
    character = require_character(state, character_id)
    if find_actor(character, actor.id) is not None:
        raise CastingError(f"Actor {actor.id} already exists on character {character_id}")
    collection = resolve_collection(character, descriptor_for_key(list_key))

    actor.current_list_key = list_key
    actor.current_shortlist_id = None
    actor.sort_order = None
    custom = is_custom_ordered(collection)
    if custom:
        ordered = custom_order(collection)
        collection[:] = [actor] + ordered
        renumber(collection)
    else:
        collection.insert(0, actor)

    from_form = actor.submission_source == "form"
    logger.info("Added actor %s to character %s (%s)", actor.id, character_id, list_key)
    if from_form:
        return make_notification(
            "New Form Submission Processed",
            f"{actor.name} submitted their information via form and was added to {character.name}",
            priority=PRIORITY_MEDIUM,
            actor_id=actor.id,
            character_id=character_id,
            metadata={
                "submission_id": actor.submission_id,
                "source": "form_submission",
                "has_photos": bool(actor.headshots),
            },
        )
    return make_notification(
        "New Actor Added",
        f"{actor.name} was added to {character.name}",
        type=NOTIFICATION_USER,
        priority=PRIORITY_LOW,
        actor_id=actor.id,
        character_id=character_id,
    )


def delete_actor(state: CastingState, character_id: str, actor_id: str) -> Notification:
    character = require_character(state, character_id)
    loc = find_actor(character, actor_id)
    if loc is None:
        raise ActorNotFound(f"Actor {actor_id} not found on character {character_id}")
    actor = loc.collection.pop(loc.index)
    logger.info("Deleted actor %s from character %s", actor_id, character_id)
    return make_notification(
        "Actor Deleted",
        f"{actor.name} was removed from {character.name}",
        type=NOTIFICATION_USER,
        character_id=character_id,
    )


def update_actor(state: CastingState, character_id: str, actor_id: str, updates: dict[str, Any]) -> Actor:
    """Merge field updates into an actor; the result is re-validated as a whole."""
    character = require_character(state, character_id)
    loc = find_actor(character, actor_id)
    if loc is None:
        raise ActorNotFound(f"Actor {actor_id} not found on character {character_id}")
    blocked = _PROTECTED_ACTOR_FIELDS.intersection(updates)
    if blocked:
        raise CastingError(f"Fields can not be updated directly: {', '.join(sorted(blocked))}")
    merged = loc.actor.model_dump()
    merged.update(updates)
    updated = Actor.model_validate(merged)
    loc.collection[loc.index] = updated
    return updated


def _each_actor_instance(state: CastingState, actor_id: str):
    for character in state.all_characters():
        for _, collection in iter_locations(character):
            for actor in collection:
                if actor.id == actor_id:
                    yield actor


def assign_actor_to_project_character(
    state: CastingState,
    actor_id: str,
    project_id: str,
    character_id: str,
    project_name: str = "",
    character_name: str = "",
) -> int:
    """Record an assignment on every copy of the actor across projects. Deduped per project/character."""
    instances = list(_each_actor_instance(state, actor_id))
    if not instances:
        raise ActorNotFound(f"Actor {actor_id} not found in any project")
    updated = 0
    for actor in instances:
        if any(a.project_id == project_id and a.character_id == character_id for a in actor.project_assignments):
            continue
        actor.project_assignments.append(ProjectAssignment(
            project_id=project_id,
            project_name=project_name,
            character_id=character_id,
            character_name=character_name,
        ))
        updated += 1
    return updated


def remove_actor_assignment(state: CastingState, actor_id: str, project_id: str, character_id: str) -> int:
    instances = list(_each_actor_instance(state, actor_id))
    if not instances:
        raise ActorNotFound(f"Actor {actor_id} not found in any project")
    removed = 0
    for actor in instances:
        before = len(actor.project_assignments)
        actor.project_assignments = [
            a for a in actor.project_assignments
            if not (a.project_id == project_id and a.character_id == character_id)
        ]
        removed += before - len(actor.project_assignments)
    return removed


# --- Notes ---


def add_note(state: CastingState, character_id: str, actor_id: str, note: Note) -> None:
    actor = require_actor(require_character(state, character_id), actor_id)
    if not note.user_name:
        user = state.find_user(note.user_id)
        if user is not None:
            note.user_name = user.name
    actor.notes.append(note)


def _require_own_note(actor: Actor, note_id: str, user_id: str) -> Note:
    note = next((n for n in actor.notes if n.id == note_id), None)
    if note is None:
        raise NoteNotFound(f"Note {note_id} not found on actor {actor.id}")
    if note.user_id != user_id:
        raise NotePermissionError(f"User {user_id} can not modify note {note_id} owned by {note.user_id}")
    return note


def update_note(state: CastingState, character_id: str, actor_id: str, note_id: str, user_id: str, text: str) -> None:
    actor = require_actor(require_character(state, character_id), actor_id)
    note = _require_own_note(actor, note_id, user_id)
    note.text = text
    note.timestamp = now_ms()


def delete_note(state: CastingState, character_id: str, actor_id: str, note_id: str, user_id: str) -> None:
    actor = require_actor(require_character(state, character_id), actor_id)
    _require_own_note(actor, note_id, user_id)
    actor.notes = [n for n in actor.notes if n.id != note_id]


# --- Contact statuses ---


def contact_status(contact_type: str, template_name: str | None, timestamp: int) -> ActorStatus:
    """Status tag recorded when an actor is contacted; unknown types count as general contact."""
    kind = contact_type if contact_type in CONTACT_STATUS_LABELS else "general"
    return ActorStatus(
        id=f"contact-{kind}-{uuid.uuid4().hex[:8]}",
        label=CONTACT_STATUS_LABELS[kind],
        category=CONTACT_STATUS_CATEGORY,
        is_custom=False,
        timestamp=timestamp,
        template_used=template_name,
    )


def add_contact_status(
    state: CastingState,
    character_id: str,
    actor_ids: Sequence[str],
    contact_type: str,
    template_name: str | None = None,
    timestamp: int | None = None,
) -> int:
    """Tag contacted actors, replacing an earlier contact status with the same label."""
    character = require_character(state, character_id)
    ts = timestamp if timestamp is not None else now_ms()
    wanted = set(actor_ids)
    touched = 0
    for _, collection in iter_locations(character):
        for actor in collection:
            if actor.id not in wanted:
                continue
            status = contact_status(contact_type, template_name, ts)
            actor.statuses = [
                s for s in actor.statuses
                if not (s.category == CONTACT_STATUS_CATEGORY and s.label == status.label)
            ]
            actor.statuses.append(status)
            actor.last_contact_date = ts
            actor.last_contact_type = contact_type
            touched += 1
    if not touched:
        raise ActorNotFound(f"None of the actors {sorted(wanted)} found on character {character_id}")
    return touched


# --- Shortlists ---


def add_shortlist(state: CastingState, character_id: str, shortlist: ShortList) -> None:
    character = require_character(state, character_id)
    if any(sl.id == shortlist.id for sl in character.actors.short_lists):
        raise CastingError(f"Shortlist {shortlist.id} already exists on character {character_id}")
    character.actors.short_lists.append(shortlist)


def _require_shortlist(character: Character, shortlist_id: str) -> ShortList:
    shortlist = next((sl for sl in character.actors.short_lists if sl.id == shortlist_id), None)
    if shortlist is None:
        raise LocationNotFound(f"Unknown shortlist '{shortlist_id}' on character {character.id}")
    return shortlist


def rename_shortlist(
    state: CastingState,
    character_id: str,
    shortlist_id: str,
    name: str,
    description: str | None = None,
    color: str | None = None,
) -> None:
    shortlist = _require_shortlist(require_character(state, character_id), shortlist_id)
    shortlist.name = name or shortlist.name
    if description is not None:
        shortlist.description = description
    if color is not None:
        shortlist.color = color


def delete_shortlist(state: CastingState, character_id: str, shortlist_id: str) -> int:
    """Remove a shortlist; its actors go back to the entry list with the reset transform."""
    character = require_character(state, character_id)
    shortlist = _require_shortlist(character, shortlist_id)
    character.actors.short_lists = [sl for sl in character.actors.short_lists if sl.id != shortlist_id]
    return relocate_to_entry(character, shortlist.actors)


# --- Characters / projects ---


def add_character(state: CastingState, project_id: str, character: Character) -> Notification:
    project = state.find_project(project_id)
    if project is None:
        raise CastingError(f"Project {project_id} not found")
    if state.find_character(character.id) is not None:
        raise CastingError(f"Character {character.id} already exists")
    for tab in state.tab_definitions:
        if tab.is_custom:
            character.actors.custom.setdefault(tab.key, [])
    project.characters.append(character)
    project.modified_date = now_ms()
    if not state.current_focus.character_id:
        state.current_focus.character_id = character.id
    return make_notification(
        "New Character Added",
        f'Character "{character.name}" was added to the project',
        type=NOTIFICATION_USER,
        priority=PRIORITY_MEDIUM,
        character_id=character.id,
    )


def delete_character(state: CastingState, character_id: str) -> int:
    """Remove a character together with every actor it holds. Returns the discarded actor count."""
    project = state.project_of(character_id)
    if project is None:
        raise CharacterNotFound(f"Character {character_id} not found")
    character = next(c for c in project.characters if c.id == character_id)
    discarded = sum(1 for _ in character.actors.all_actors())
    project.characters = [c for c in project.characters if c.id != character_id]
    project.modified_date = now_ms()
    focus = state.current_focus
    if focus.character_id == character_id:
        focus.character_id = project.characters[0].id if project.characters else None
        focus.active_tab_key = LONG_LIST_KEY
    if discarded:
        logger.warning("Deleted character %s with %d actor(s)", character_id, discarded)
    return discarded


def create_project(state: CastingState, project: Project) -> None:
    if state.find_project(project.id) is not None:
        raise CastingError(f"Project {project.id} already exists")
    for character in project.characters:
        for tab in state.tab_definitions:
            if tab.is_custom:
                character.actors.custom.setdefault(tab.key, [])
    state.projects.insert(0, project)


def delete_project(state: CastingState, project_id: str) -> None:
    if state.find_project(project_id) is None:
        raise CastingError(f"Project {project_id} not found")
    state.projects = [p for p in state.projects if p.id != project_id]
    focus = state.current_focus
    if focus.current_project_id == project_id:
        nxt = state.projects[0] if state.projects else None
        focus.current_project_id = nxt.id if nxt else None
        focus.character_id = nxt.characters[0].id if nxt and nxt.characters else None
        focus.active_tab_key = LONG_LIST_KEY
