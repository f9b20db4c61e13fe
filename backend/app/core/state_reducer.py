"""Deterministic intent reducer for the casting state tree.

apply_intent never mutates its input: it deep-copies the state, applies the
intent to the copy and returns it. On any CastingError (or an invalid payload)
the original state object comes back unchanged and the error is logged.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from backend.app.constants import (
    APPROVAL_KEY,
    DEFAULT_SORT_OPTIONS,
    LONG_LIST_KEY,
    NOTIFICATION_VOTE,
    PRIORITY_HIGH,
    PRIORITY_MEDIUM,
    SHORTLISTS_KEY,
    SORT_CUSTOM,
)
from backend.app.core import roster, tab_registry
from backend.app.core.consensus import evaluate_consensus, is_cast_confirmation, is_soft_rejection, toggle_vote
from backend.app.core.error_handling import CastingError, InvalidIntent, LocationNotFound, log_error_with_context
from backend.app.core.list_locator import iter_locations, list_key, locate, same_location, shortlist_id
from backend.app.core.move_engine import (
    BatchMoveResult,
    confirm_cast,
    move_actor,
    move_actor_to_character,
    move_multiple_actors,
    reason_for_destination,
)
from backend.app.core.notifications import (
    delete_notification,
    make_notification,
    mark_all_read,
    mark_read,
    move_notification,
    push_notification,
)
from backend.app.core.reorder_engine import reorder_actors, reorder_multiple_actors
from backend.app.models.casting import (
    ActorStatus,
    AgeRange,
    CastingState,
    Character,
    FilterState,
    Notification,
    SavedSearch,
    SortOption,
    User,
    now_ms,
)
from backend.app.models.intents import INTENT_PAYLOADS, Intent, LocationDescriptor, ShortlistLocation

logger = logging.getLogger(__name__)


_DEFAULT_USERS = (
    ("1", "John Doe", "JD", "john@example.com", "Casting Director"),
    ("2", "Jane Smith", "JS", "jane@example.com", "Producer"),
    ("3", "Mike Johnson", "MJ", "mike@example.com", "Director"),
)

_DEFAULT_STATUSES = (
    ("available", "Available", "availability"),
    ("busy", "Busy", "availability"),
    ("unavailable", "Unavailable", "availability"),
    ("interested", "Interested", "interest"),
    ("not-interested", "Not Interested", "interest"),
)


def initial_state() -> CastingState:
    """Empty casting state: default voters, tabs, statuses and sort options, no projects."""
    return CastingState(
        users=[User(id=uid, name=name, initials=ini, email=email, role=role) for uid, name, ini, email, role in _DEFAULT_USERS],
        current_user_id=_DEFAULT_USERS[0][0],
        tab_definitions=tab_registry.default_tab_definitions(),
        predefined_statuses=[ActorStatus(id=sid, label=label, category=cat) for sid, label, cat in _DEFAULT_STATUSES],
        sort_option_definitions=[SortOption(key=k, label=label) for k, label in DEFAULT_SORT_OPTIONS],
    )


def complete_state(data: dict[str, Any] | None) -> CastingState:
    """Build a valid state from possibly partial stored data.

    Missing top-level pieces fall back to initial_state(); system tabs are restored;
    every character gets a list for every custom tab; actor location fields are
    re-derived from where each actor actually sits; focus ids that point nowhere
    are replaced.
    """
    base = initial_state().model_dump()
    for key, value in (data or {}).items():
        if key in base and value is not None:
            base[key] = value
    if not base.get("users"):
        base["users"] = initial_state().model_dump()["users"]
    state = CastingState.model_validate(base)

    defaults = {t.key: t for t in tab_registry.default_tab_definitions()}
    keys = [t.key for t in state.tab_definitions]
    if LONG_LIST_KEY not in keys:
        state.tab_definitions.insert(0, defaults[LONG_LIST_KEY])
    if APPROVAL_KEY not in keys:
        state.tab_definitions.append(defaults[APPROVAL_KEY])
    if not state.sort_option_definitions:
        state.sort_option_definitions = [SortOption(key=k, label=label) for k, label in DEFAULT_SORT_OPTIONS]

    custom_keys = [t.key for t in state.tab_definitions if t.is_custom]
    for character in state.all_characters():
        for key in custom_keys:
            character.actors.custom.setdefault(key, [])
        for descriptor, collection in iter_locations(character):
            for actor in collection:
                actor.current_list_key = list_key(descriptor)
                actor.current_shortlist_id = shortlist_id(descriptor)

    focus = state.current_focus
    if state.find_project(focus.current_project_id) is None:
        focus.current_project_id = state.projects[0].id if state.projects else None
    project = state.find_project(focus.current_project_id)
    if focus.character_id and state.find_character(focus.character_id) is None:
        focus.character_id = None
    if focus.character_id is None and project is not None and project.characters:
        focus.character_id = project.characters[0].id
    if focus.active_tab_key != SHORTLISTS_KEY and tab_registry.find_tab(state, focus.active_tab_key) is None:
        focus.active_tab_key = LONG_LIST_KEY
    return state


@dataclass
class IntentResult:
    """Outcome of one intent. `state` is the new state, or the original one when nothing committed."""

    state: CastingState
    committed: bool = True
    error: Optional[CastingError] = None
    notifications: list[Notification] = field(default_factory=list)
    batch: Optional[BatchMoveResult] = None


Handler = Callable[[CastingState, Any, IntentResult], Optional[CastingState]]
_HANDLERS: dict[str, Handler] = {}


def _handles(*intent_types: str) -> Callable[[Handler], Handler]:
    def register(fn: Handler) -> Handler:
        for intent_type in intent_types:
            _HANDLERS[intent_type] = fn
        return fn
    return register


def _location_name(state: CastingState, character: Character, descriptor: LocationDescriptor) -> str:
    if isinstance(descriptor, ShortlistLocation):
        sl = next((s for s in character.actors.short_lists if s.id == descriptor.shortlist_id), None)
        return f'shortlist "{sl.name}"' if sl else "shortlist"
    return tab_registry.tab_display_name(state, descriptor.key)


# --- Moves / reorders ---


@_handles("MOVE_ACTOR")
def _move_actor(state: CastingState, p, result: IntentResult) -> None:
    character = roster.require_character(state, p.character_id)
    if same_location(p.source, p.destination):
        result.committed = False
        return
    src = locate(character, p.source, p.actor_id)
    name = src.actor.name if src.actor else p.actor_id
    reason = p.reason or reason_for_destination(p.destination)
    move_actor(character, p.actor_id, p.source, p.destination, reason, tab_definitions=state.tab_definitions)
    result.notifications.append(move_notification(
        [name],
        list_key(p.destination),
        _location_name(state, character, p.destination),
        character.id,
        character.name,
        user_id=state.current_user_id,
    ))


@_handles("MOVE_MULTIPLE_ACTORS")
def _move_multiple(state: CastingState, p, result: IntentResult) -> None:
    character = roster.require_character(state, p.character_id)
    src = locate(character, p.source)
    names = {a.id: a.name for a in src.collection}
    batch = move_multiple_actors(
        character, p.actor_ids, p.source, p.destination, p.reason or reason_for_destination(p.destination),
        tab_definitions=state.tab_definitions,
    )
    result.batch = batch
    if not batch.moved:
        result.committed = False
        return
    result.notifications.append(move_notification(
        [names.get(aid, aid) for aid in batch.moved],
        list_key(p.destination),
        _location_name(state, character, p.destination),
        character.id,
        character.name,
        user_id=state.current_user_id,
    ))


@_handles("REORDER_ACTORS")
def _reorder(state: CastingState, p, result: IntentResult) -> None:
    character = roster.require_character(state, p.character_id)
    reorder_actors(character, p.location, p.dragged_actor_id, p.target_actor_id, p.insert_position)
    state.current_focus.current_sort_option = SORT_CUSTOM


@_handles("REORDER_MULTIPLE_ACTORS")
def _reorder_multiple(state: CastingState, p, result: IntentResult) -> None:
    character = roster.require_character(state, p.character_id)
    reorder_multiple_actors(character, p.location, p.dragged_actor_ids, p.target_actor_id, p.insert_position)
    state.current_focus.current_sort_option = SORT_CUSTOM


@_handles("MOVE_ACTOR_TO_CHARACTER")
def _move_to_character(state: CastingState, p, result: IntentResult) -> None:
    source = roster.require_character(state, p.source_character_id)
    destination = roster.require_character(state, p.destination_character_id)
    actor = move_actor_to_character(source, destination, p.actor_id)
    result.notifications.append(make_notification(
        "Actor Moved to Character",
        f"{actor.name} was moved from {source.name} to {destination.name}",
        actor_id=actor.id,
        character_id=destination.id,
    ))


# --- Votes ---


@_handles("CAST_VOTE")
def _cast_vote(state: CastingState, p, result: IntentResult) -> None:
    character = roster.require_character(state, p.character_id)
    actor = roster.require_actor(character, p.actor_id)
    voter = state.find_user(p.user_id)
    if voter is None:
        logger.warning("Vote from unknown user %s on actor %s is stored but not counted", p.user_id, p.actor_id)

    actor.user_votes = toggle_vote(actor.user_votes, p.user_id, p.vote)
    action = evaluate_consensus(
        actor.user_votes, state.eligible_user_ids(), actor.current_list_key, state.tab_definitions,
    )
    result.notifications.append(make_notification(
        "New Vote Cast",
        f"{voter.name if voter else 'Someone'} voted '{p.vote.capitalize()}' on {actor.name} for {character.name}",
        type=NOTIFICATION_VOTE,
        priority=PRIORITY_MEDIUM,
        actor_id=actor.id,
        character_id=character.id,
        user_id=p.user_id,
    ))

    if is_cast_confirmation(action):
        if confirm_cast(character, actor.id):
            result.notifications.append(make_notification(
                "Actor Greenlit!",
                f"{actor.name} has been officially cast as {character.name}! All team members voted Yes.",
                priority=PRIORITY_HIGH,
                actor_id=actor.id,
                character_id=character.id,
            ))
        return

    # Cast status only holds while the approval vote stays unanimous
    actor.consensus_action = action
    actor.is_soft_rejected = is_soft_rejection(action)
    actor.is_greenlit = False
    actor.is_cast = False


# --- Tabs ---


@_handles("ADD_TAB")
def _add_tab(state: CastingState, p, result: IntentResult) -> None:
    tab_registry.add_tab(state, p.tab_key, p.tab_name)


@_handles("RENAME_TAB")
def _rename_tab(state: CastingState, p, result: IntentResult) -> None:
    tab_registry.rename_tab(state, p.old_key, p.new_key, p.new_name)


@_handles("DELETE_TAB")
def _delete_tab(state: CastingState, p, result: IntentResult) -> None:
    result.notifications.append(tab_registry.delete_tab(state, p.tab_key))


@_handles("REORDER_TABS")
def _reorder_tabs(state: CastingState, p, result: IntentResult) -> None:
    result.notifications.append(
        tab_registry.reorder_tabs(state, p.dragged_tab_key, p.target_tab_key, p.insert_position)
    )


@_handles("UPDATE_TAB_DISPLAY_NAME")
def _set_display_name(state: CastingState, p, result: IntentResult) -> None:
    tab_registry.set_display_name(state, p.tab_key, p.display_name)


@_handles("RESET_TAB_DISPLAY_NAME")
def _reset_display_name(state: CastingState, p, result: IntentResult) -> None:
    tab_registry.reset_display_name(state, p.tab_key)


# --- Roster ---


@_handles("ADD_ACTOR")
def _add_actor(state: CastingState, p, result: IntentResult) -> None:
    result.notifications.append(roster.add_actor(state, p.character_id, p.actor, p.list_key))


@_handles("DELETE_ACTOR")
def _delete_actor(state: CastingState, p, result: IntentResult) -> None:
    result.notifications.append(roster.delete_actor(state, p.character_id, p.actor_id))


@_handles("UPDATE_ACTOR")
def _update_actor(state: CastingState, p, result: IntentResult) -> None:
    try:
        roster.update_actor(state, p.character_id, p.actor_id, p.updates)
    except ValidationError as e:
        raise InvalidIntent(f"Invalid actor update: {e}") from e


@_handles("ASSIGN_ACTOR_TO_PROJECT_CHARACTER")
def _assign(state: CastingState, p, result: IntentResult) -> None:
    roster.assign_actor_to_project_character(
        state, p.actor_id, p.project_id, p.character_id, p.project_name, p.character_name,
    )


@_handles("REMOVE_ACTOR_ASSIGNMENT")
def _unassign(state: CastingState, p, result: IntentResult) -> None:
    roster.remove_actor_assignment(state, p.actor_id, p.project_id, p.character_id)


@_handles("ADD_NOTE")
def _add_note(state: CastingState, p, result: IntentResult) -> None:
    roster.add_note(state, p.character_id, p.actor_id, p.note)


@_handles("UPDATE_NOTE")
def _update_note(state: CastingState, p, result: IntentResult) -> None:
    roster.update_note(state, p.character_id, p.actor_id, p.note_id, p.user_id, p.text)


@_handles("DELETE_NOTE")
def _delete_note(state: CastingState, p, result: IntentResult) -> None:
    roster.delete_note(state, p.character_id, p.actor_id, p.note_id, p.user_id)


@_handles("ADD_CONTACT_STATUS")
def _contact(state: CastingState, p, result: IntentResult) -> None:
    roster.add_contact_status(state, p.character_id, p.actor_ids, p.contact_type, p.template_name, p.timestamp)


@_handles("ADD_SHORTLIST")
def _add_shortlist(state: CastingState, p, result: IntentResult) -> None:
    roster.add_shortlist(state, p.character_id, p.shortlist)


@_handles("RENAME_SHORTLIST")
def _rename_shortlist(state: CastingState, p, result: IntentResult) -> None:
    roster.rename_shortlist(state, p.character_id, p.shortlist_id, p.name, p.description, p.color)


@_handles("DELETE_SHORTLIST")
def _delete_shortlist(state: CastingState, p, result: IntentResult) -> None:
    roster.delete_shortlist(state, p.character_id, p.shortlist_id)


@_handles("ADD_CHARACTER")
def _add_character(state: CastingState, p, result: IntentResult) -> None:
    result.notifications.append(roster.add_character(state, p.project_id, p.character))


@_handles("DELETE_CHARACTER")
def _delete_character(state: CastingState, p, result: IntentResult) -> None:
    roster.delete_character(state, p.character_id)


@_handles("CREATE_PROJECT")
def _create_project(state: CastingState, p, result: IntentResult) -> None:
    roster.create_project(state, p.project)


@_handles("DELETE_PROJECT")
def _delete_project(state: CastingState, p, result: IntentResult) -> None:
    roster.delete_project(state, p.project_id)


# --- Focus / search / filters ---


@_handles("SELECT_PROJECT")
def _select_project(state: CastingState, p, result: IntentResult) -> None:
    project = state.find_project(p.project_id)
    if project is None:
        raise CastingError(f"Project {p.project_id} not found")
    focus = state.current_focus
    focus.current_project_id = project.id
    focus.character_id = project.characters[0].id if project.characters else None
    focus.active_tab_key = LONG_LIST_KEY
    focus.search_term = ""


@_handles("SELECT_CHARACTER")
def _select_character(state: CastingState, p, result: IntentResult) -> None:
    if p.character_id is not None:
        roster.require_character(state, p.character_id)
    focus = state.current_focus
    focus.character_id = p.character_id
    focus.active_tab_key = LONG_LIST_KEY
    focus.search_term = ""


@_handles("SELECT_TAB")
def _select_tab(state: CastingState, p, result: IntentResult) -> None:
    if p.tab_key != SHORTLISTS_KEY and tab_registry.find_tab(state, p.tab_key) is None:
        raise LocationNotFound(f"Unknown tab '{p.tab_key}'")
    state.current_focus.active_tab_key = p.tab_key


@_handles("SET_SORT_OPTION")
def _set_sort(state: CastingState, p, result: IntentResult) -> None:
    known = {o.key for o in state.sort_option_definitions} | {k for k, _ in DEFAULT_SORT_OPTIONS}
    if p.sort_option not in known:
        raise InvalidIntent(f"Unknown sort option '{p.sort_option}'")
    state.current_focus.current_sort_option = p.sort_option


@_handles("SET_SEARCH_TERM")
def _set_search_term(state: CastingState, p, result: IntentResult) -> None:
    state.current_focus.search_term = p.search_term


@_handles("ADD_SEARCH_TAG")
def _add_search_tag(state: CastingState, p, result: IntentResult) -> None:
    tags = state.current_focus.search_tags
    if not any(t.id == p.tag.id for t in tags):
        tags.append(p.tag)


@_handles("REMOVE_SEARCH_TAG")
def _remove_search_tag(state: CastingState, p, result: IntentResult) -> None:
    focus = state.current_focus
    focus.search_tags = [t for t in focus.search_tags if t.id != p.tag_id]


@_handles("CLEAR_SEARCH_TAGS")
def _clear_search_tags(state: CastingState, p, result: IntentResult) -> None:
    state.current_focus.search_tags = []


@_handles("SAVE_CURRENT_SEARCH")
def _save_search(state: CastingState, p, result: IntentResult) -> None:
    focus = state.current_focus
    focus.saved_searches.append(SavedSearch(
        id=f"search-{uuid.uuid4().hex[:12]}",
        name=p.name,
        tags=[t.model_copy() for t in focus.search_tags],
        search_term=focus.search_term,
        is_global=p.is_global,
    ))


@_handles("LOAD_SAVED_SEARCH")
def _load_search(state: CastingState, p, result: IntentResult) -> None:
    focus = state.current_focus
    saved = next((s for s in focus.saved_searches if s.id == p.search_id), None)
    if saved is None:
        raise CastingError(f"Saved search {p.search_id} not found")
    saved.last_used = now_ms()
    focus.search_term = saved.search_term
    focus.search_tags = [t.model_copy() for t in saved.tags]


@_handles("DELETE_SAVED_SEARCH")
def _delete_search(state: CastingState, p, result: IntentResult) -> None:
    focus = state.current_focus
    focus.saved_searches = [s for s in focus.saved_searches if s.id != p.search_id]


@_handles("SET_STATUS_FILTER")
def _status_filter(state: CastingState, p, result: IntentResult) -> None:
    state.current_focus.filters.status = list(p.status_ids)


@_handles("SET_AGE_RANGE_FILTER")
def _age_filter(state: CastingState, p, result: IntentResult) -> None:
    if p.min > p.max:
        raise InvalidIntent(f"Age range min {p.min} is above max {p.max}")
    state.current_focus.filters.age_range = AgeRange(min=p.min, max=p.max)


@_handles("SET_LOCATION_FILTER")
def _location_filter(state: CastingState, p, result: IntentResult) -> None:
    state.current_focus.filters.location = [loc.strip() for loc in p.locations if loc.strip()]


@_handles("SET_VOTE_FILTER")
def _vote_filter(state: CastingState, p, result: IntentResult) -> None:
    state.current_focus.filters.vote = p.vote_filter or None


@_handles("CLEAR_ALL_FILTERS")
def _clear_filters(state: CastingState, p, result: IntentResult) -> None:
    show = state.current_focus.filters.show_filters
    state.current_focus.filters = FilterState(show_filters=show)


# --- Notifications / storage ---


@_handles("MARK_NOTIFICATION_READ")
def _mark_read(state: CastingState, p, result: IntentResult) -> None:
    mark_read(state, p.notification_id)


@_handles("MARK_ALL_NOTIFICATIONS_READ")
def _mark_all_read(state: CastingState, p, result: IntentResult) -> None:
    mark_all_read(state)


@_handles("DELETE_NOTIFICATION")
def _delete_notification(state: CastingState, p, result: IntentResult) -> None:
    delete_notification(state, p.notification_id)


@_handles("LOAD_FROM_STORAGE")
def _load_from_storage(state: CastingState, p, result: IntentResult) -> CastingState:
    try:
        return complete_state(p.state)
    except ValidationError as e:
        raise InvalidIntent(f"Stored state is invalid: {e}") from e


def _validate_payload(intent: Intent) -> BaseModel:
    model = INTENT_PAYLOADS[intent.intent_type]
    try:
        return model.model_validate(intent.payload)
    except ValidationError as e:
        raise InvalidIntent(f"Invalid payload for {intent.intent_type}: {e.error_count()} error(s)") from e


def reduce_intent(state: CastingState, intent: Intent) -> IntentResult:
    """Apply one intent to a copy of state and report what happened."""
    intent_type = intent.intent_type
    handler = _HANDLERS.get(intent_type)
    if handler is None or intent_type not in INTENT_PAYLOADS:
        logger.warning("Unhandled intent type %r; state unchanged", intent_type)
        return IntentResult(state=state, committed=False)

    payload: Any = None
    try:
        payload = _validate_payload(intent)
        new_state = state.model_copy(deep=True)
        result = IntentResult(state=new_state)
        replaced = handler(new_state, payload, result)
    except CastingError as e:
        log_error_with_context(
            e,
            intent_type,
            character_id=getattr(payload, "character_id", None),
            actor_id=getattr(payload, "actor_id", None),
            extra_context={"error_code": e.error_code},
        )
        return IntentResult(state=state, committed=False, error=e)

    if not result.committed:
        return IntentResult(state=state, committed=False, batch=result.batch)
    if replaced is not None:
        result.state = replaced
    for notification in result.notifications:
        push_notification(result.state, notification)
    return result


def apply_intent(state: CastingState, intent: Intent | dict) -> CastingState:
    """Apply a single intent. Returns a NEW state; does not mutate input."""
    if isinstance(intent, dict):
        intent = Intent.model_validate(intent)
    return reduce_intent(state, intent).state


def reduce_intents(state: CastingState, intents: list[Intent | dict]) -> CastingState:
    """Fold a list of intents into state. Returns a new state; does not mutate input."""
    for intent in intents:
        state = apply_intent(state, intent)
    return state
