"""Vote aggregation. Pure: evaluates votes into a ConsensusAction and never mutates state."""
from __future__ import annotations

import logging
from typing import Iterable, Mapping, Sequence

from backend.app.constants import (
    APPROVAL_KEY,
    CONSENSUS_NO,
    CONSENSUS_STAY,
    CONSENSUS_YES,
    LONG_LIST_KEY,
    SHORTLISTS_KEY,
    VOTE_MAYBE,
    VOTE_NO,
    VOTE_YES,
)
from backend.app.models.casting import ConsensusAction, TabDefinition

logger = logging.getLogger(__name__)


def toggle_vote(user_votes: Mapping[str, str], user_id: str, vote: str) -> dict[str, str]:
    """Return new votes with user_id's vote set, or withdrawn when it repeats the current vote."""
    new_votes = dict(user_votes)
    if new_votes.get(user_id) == vote:
        del new_votes[user_id]
    else:
        new_votes[user_id] = vote
    return new_votes


def _tab_name(tab_definitions: Sequence[TabDefinition], key: str, fallback: str) -> str:
    for tab in tab_definitions:
        if tab.key == key:
            return tab.name
    return fallback


def next_tab(tab_definitions: Sequence[TabDefinition], current_list_key: str) -> TabDefinition | None:
    """Tab after current_list_key in tab order; None for shortlists, unknown keys or the last tab."""
    if current_list_key == SHORTLISTS_KEY:
        return None
    keys = [t.key for t in tab_definitions]
    if current_list_key not in keys:
        return None
    idx = keys.index(current_list_key)
    if idx + 1 >= len(tab_definitions):
        return None
    candidate = tab_definitions[idx + 1]
    if candidate.key == SHORTLISTS_KEY:
        return None
    return candidate


def evaluate_consensus(
    user_votes: Mapping[str, str],
    eligible_user_ids: Iterable[str],
    current_list_key: str,
    tab_definitions: Sequence[TabDefinition],
) -> ConsensusAction | None:
    """Aggregate votes across all eligible users.

    Returns None until every eligible user has voted (or when nobody is eligible).
    In the approval list a unanimous yes is a cast confirmation (is_greenlit=True);
    elsewhere it recommends the next tab. A unanimous no recommends the entry list
    outside approval. Any other complete set means stay.
    """
    eligible = list(dict.fromkeys(eligible_user_ids))
    if not eligible:
        return None
    counted = [user_votes[uid] for uid in eligible if uid in user_votes]
    if len(counted) < len(eligible):
        return None

    total = len(eligible)
    yes = sum(1 for v in counted if v == VOTE_YES)
    no = sum(1 for v in counted if v == VOTE_NO)

    if yes == total:
        if current_list_key == APPROVAL_KEY:
            return ConsensusAction(type=CONSENSUS_YES, is_greenlit=True)
        target = next_tab(tab_definitions, current_list_key)
        if target is None:
            return ConsensusAction(
                type=CONSENSUS_YES,
                target_key=APPROVAL_KEY,
                target_name=_tab_name(tab_definitions, APPROVAL_KEY, "Approval"),
            )
        return ConsensusAction(type=CONSENSUS_YES, target_key=target.key, target_name=target.name)

    if no == total:
        if current_list_key == APPROVAL_KEY:
            return ConsensusAction(type=CONSENSUS_NO)
        return ConsensusAction(
            type=CONSENSUS_NO,
            target_key=LONG_LIST_KEY,
            target_name=_tab_name(tab_definitions, LONG_LIST_KEY, "Long List"),
        )

    return ConsensusAction(type=CONSENSUS_STAY)


def is_soft_rejection(action: ConsensusAction | None) -> bool:
    """Unanimous no outside approval marks the actor soft-rejected."""
    return action is not None and action.type == CONSENSUS_NO and action.target_key == LONG_LIST_KEY


def is_cast_confirmation(action: ConsensusAction | None) -> bool:
    return action is not None and action.type == CONSENSUS_YES and bool(action.is_greenlit)


def vote_requires_note(vote: str, note_text: str | None) -> bool:
    """A maybe vote should come with an explanatory note. Checked at the UI boundary only."""
    return vote == VOTE_MAYBE and not (note_text or "").strip()
