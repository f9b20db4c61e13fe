"""Ephemeral multi-selection over the visible actor list (click, ctrl/cmd toggle, shift range).

A selection attached to a CastingStore follows every commit: switching the
character or tab clears it, and ids the active tab no longer shows (after a
move, search or filter change) are pruned. A detached selection only changes
when its caller invokes reset_for_context or prune.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Sequence

from backend.app.core.filter_sort import actors_for_tab, criteria_from_focus, visible_actors
from backend.app.models.casting import CastingState

if TYPE_CHECKING:
    from backend.app.core.store import CastingStore

logger = logging.getLogger(__name__)


class SelectionModel:
    """Selected actor ids plus the anchor used for shift ranges.

    Ranges are computed over the visible (filtered and sorted) order the caller
    passes in, never over stored list order.
    """

    def __init__(self) -> None:
        self._selected: dict[str, None] = {}
        self.last_selected_id: str | None = None
        self._context: tuple[str | None, str | None] = (None, None)

    @property
    def selected_ids(self) -> list[str]:
        return list(self._selected)

    def __contains__(self, actor_id: str) -> bool:
        return actor_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def click(self, actor_id: str) -> None:
        """Plain click: select only this actor."""
        self._selected = {actor_id: None}
        self.last_selected_id = actor_id

    def toggle(self, actor_id: str) -> None:
        """Ctrl/cmd click."""
        if actor_id in self._selected:
            del self._selected[actor_id]
        else:
            self._selected[actor_id] = None
        self.last_selected_id = actor_id

    def extend(self, actor_id: str, visible_ids: Sequence[str]) -> None:
        """Shift click: add the visible range between the anchor and actor_id."""
        anchor = self.last_selected_id
        if anchor is None or anchor not in visible_ids or actor_id not in visible_ids:
            self.click(actor_id)
            return
        a = visible_ids.index(anchor)
        b = visible_ids.index(actor_id)
        lo, hi = min(a, b), max(a, b)
        for aid in visible_ids[lo:hi + 1]:
            self._selected[aid] = None
        self.last_selected_id = actor_id

    def select_all(self, visible_ids: Sequence[str]) -> None:
        self._selected = dict.fromkeys(visible_ids)
        self.last_selected_id = visible_ids[-1] if visible_ids else None

    def clear(self) -> None:
        self._selected = {}
        self.last_selected_id = None

    def reset_for_context(self, character_id: str | None, tab_key: str | None) -> None:
        """Clear when the active character or tab changes."""
        context = (character_id, tab_key)
        if context != self._context:
            if self._selected:
                logger.debug("Selection cleared for context change %s -> %s", self._context, context)
            self.clear()
            self._context = context

    def prune(self, visible_ids: Iterable[str]) -> None:
        """Drop ids (and the anchor) that are no longer visible."""
        visible = set(visible_ids)
        self._selected = {aid: None for aid in self._selected if aid in visible}
        if self.last_selected_id not in visible:
            self.last_selected_id = None

    def sync(self, state: CastingState) -> None:
        """Follow the stored focus: reset on a context switch, then prune to what the tab shows."""
        focus = state.current_focus
        self.reset_for_context(focus.character_id, focus.active_tab_key)
        character = state.current_character()
        if character is None:
            self.clear()
            return
        shown = visible_actors(actors_for_tab(character, focus.active_tab_key), criteria_from_focus(state))
        self.prune(a.id for a in shown)

    def attach(self, store: "CastingStore") -> Callable[[], None]:
        """Sync now and after every commit to store. Returns the unsubscribe callable."""
        self.sync(store.state)
        return store.subscribe(self.sync)
