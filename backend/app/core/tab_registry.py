"""Tab definitions, display-name overrides, and the per-character lists behind custom tabs.

Tab operations are global: adding, renaming or deleting a tab touches every
character in every project. System tabs (entry and approval lists) can never be
deleted, reordered, or re-keyed.
"""
from __future__ import annotations

import logging

from backend.app.constants import (
    APPROVAL_KEY,
    DEFAULT_TAB_DEFINITIONS,
    LONG_LIST_KEY,
    RESERVED_ACTOR_KEYS,
    STANDARD_LIST_KEYS,
    SYSTEM_TAB_KEYS,
)
from backend.app.core.error_handling import TabPolicyError
from backend.app.core.move_engine import relocate_to_entry
from backend.app.core.notifications import make_notification
from backend.app.models.casting import CastingState, Notification, TabDefinition

logger = logging.getLogger(__name__)


def default_tab_definitions() -> list[TabDefinition]:
    return [TabDefinition(key=key, name=name, is_custom=False) for key, name in DEFAULT_TAB_DEFINITIONS]


def find_tab(state: CastingState, tab_key: str) -> TabDefinition | None:
    return next((t for t in state.tab_definitions if t.key == tab_key), None)


def tab_display_name(state: CastingState, tab_key: str) -> str:
    """Override, else definition name, else the key itself."""
    override = state.tab_display_names.get(tab_key)
    if override:
        return override
    tab = find_tab(state, tab_key)
    return tab.name if tab else tab_key


def is_system_tab(tab_key: str) -> bool:
    return tab_key in SYSTEM_TAB_KEYS


def add_tab(state: CastingState, tab_key: str, tab_name: str) -> TabDefinition:
    """Insert a custom tab before approval; every character gains an empty list for it."""
    tab_key = tab_key.strip()
    if not tab_key:
        raise TabPolicyError("Tab key must not be empty")
    if tab_key in RESERVED_ACTOR_KEYS or find_tab(state, tab_key) is not None:
        raise TabPolicyError(f"Tab key '{tab_key}' already exists")

    tab = TabDefinition(key=tab_key, name=tab_name or tab_key, is_custom=True)
    keys = [t.key for t in state.tab_definitions]
    if APPROVAL_KEY in keys:
        state.tab_definitions.insert(keys.index(APPROVAL_KEY), tab)
    else:
        state.tab_definitions.append(tab)

    for character in state.all_characters():
        character.actors.custom.setdefault(tab_key, [])
    logger.info("Added tab %s (%s)", tab_key, tab.name)
    return tab


def rename_tab(state: CastingState, old_key: str, new_key: str, new_name: str) -> None:
    """Rename a tab. Custom tabs may also change key; their lists and the active focus follow."""
    tab = find_tab(state, old_key)
    if tab is None:
        raise TabPolicyError(f"Unknown tab '{old_key}'")
    new_key = (new_key or old_key).strip()
    if new_key != old_key:
        if old_key in STANDARD_LIST_KEYS:
            raise TabPolicyError(f"The key of built-in tab '{old_key}' can not change")
        if new_key in RESERVED_ACTOR_KEYS or find_tab(state, new_key) is not None:
            raise TabPolicyError(f"Tab key '{new_key}' already exists")

    tab.key = new_key
    tab.name = new_name or tab.name

    if new_key != old_key:
        for character in state.all_characters():
            custom = character.actors.custom
            actors = custom.pop(old_key, [])
            for actor in actors:
                actor.current_list_key = new_key
            custom[new_key] = actors
        if old_key in state.tab_display_names:
            state.tab_display_names[new_key] = state.tab_display_names.pop(old_key)
        if state.current_focus.active_tab_key == old_key:
            state.current_focus.active_tab_key = new_key
    logger.info("Renamed tab %s -> %s (%s)", old_key, new_key, tab.name)


def delete_tab(state: CastingState, tab_key: str) -> Notification:
    """Remove a tab; its actors go back to the entry list with the reset transform."""
    if is_system_tab(tab_key):
        raise TabPolicyError(f"System tab '{tab_key}' can not be deleted")
    tab = find_tab(state, tab_key)
    if tab is None:
        raise TabPolicyError(f"Unknown tab '{tab_key}'")
    name = tab_display_name(state, tab_key)

    relocated = 0
    for character in state.all_characters():
        standard = character.actors.standard(tab_key)
        if standard is not None:
            actors = list(standard)
            standard.clear()
        else:
            actors = character.actors.custom.pop(tab_key, [])
        relocated += relocate_to_entry(character, actors)

    state.tab_definitions = [t for t in state.tab_definitions if t.key != tab_key]
    state.tab_display_names.pop(tab_key, None)
    if state.current_focus.active_tab_key == tab_key:
        state.current_focus.active_tab_key = LONG_LIST_KEY
    logger.info("Deleted tab %s; %d actor(s) relocated to %s", tab_key, relocated, LONG_LIST_KEY)
    return make_notification(
        "Tab Deleted",
        f'Tab "{name}" was deleted. {relocated} actor(s) moved to {tab_display_name(state, LONG_LIST_KEY)}.',
        metadata={"tab_key": tab_key, "relocated": relocated},
    )


def reorder_tabs(state: CastingState, dragged_key: str, target_key: str, insert_position: str = "after") -> Notification:
    if is_system_tab(dragged_key) or is_system_tab(target_key):
        raise TabPolicyError("System tabs can not be reordered")
    if dragged_key == target_key:
        raise TabPolicyError("A tab can not be reordered relative to itself")
    tabs = list(state.tab_definitions)
    dragged = find_tab(state, dragged_key)
    if dragged is None or find_tab(state, target_key) is None:
        raise TabPolicyError(f"Unknown tab in reorder: {dragged_key} / {target_key}")

    tabs.remove(dragged)
    target_idx = next(i for i, t in enumerate(tabs) if t.key == target_key)
    insert_at = target_idx if insert_position == "before" else target_idx + 1
    tabs.insert(insert_at, dragged)
    state.tab_definitions = tabs
    return make_notification(
        "Tab Reordered",
        f'Tab "{tab_display_name(state, dragged_key)}" was moved {insert_position} '
        f'"{tab_display_name(state, target_key)}"',
    )


def set_display_name(state: CastingState, tab_key: str, display_name: str) -> None:
    """Display-only override; stored keys never change."""
    if find_tab(state, tab_key) is None:
        raise TabPolicyError(f"Unknown tab '{tab_key}'")
    display_name = display_name.strip()
    if display_name:
        state.tab_display_names[tab_key] = display_name
    else:
        state.tab_display_names.pop(tab_key, None)


def reset_display_name(state: CastingState, tab_key: str) -> None:
    state.tab_display_names.pop(tab_key, None)
