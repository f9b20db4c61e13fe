"""Derive the visible, ordered actor list for a tab. Pure: inputs are never mutated."""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Sequence

from backend.app.constants import (
    AGE_FILTER_MAX,
    AGE_FILTER_MIN,
    AGE_UNKNOWN_SORT_VALUE,
    APPROVAL_KEY,
    LONG_LIST_KEY,
    SHORTLISTS_KEY,
    SORT_AGE,
    SORT_ALPHABETICAL,
    SORT_CONSENSUS,
    SORT_CUSTOM,
    SORT_DATE_ADDED,
    SORT_NOTES,
    SORT_ORDER_MISSING,
    SORT_STATUS,
    VOTE_FILTER_MIXED,
    VOTE_FILTER_NO_VOTES,
    VOTE_FILTER_UNANIMOUS_NO,
    VOTE_FILTER_UNANIMOUS_YES,
    VOTE_NO,
    VOTE_YES,
)
from backend.app.models.casting import Actor, CastingState, Character

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_AGE_RANGE = re.compile(r"(\d+)-(\d+)")


@dataclass
class FilterCriteria:
    tab_key: str = LONG_LIST_KEY
    search_term: str = ""
    search_tags: list[str] = field(default_factory=list)
    status_ids: list[str] = field(default_factory=list)
    age_min: int = AGE_FILTER_MIN
    age_max: int = AGE_FILTER_MAX
    locations: list[str] = field(default_factory=list)
    vote_filter: Optional[str] = None
    sort_option: str = SORT_ALPHABETICAL
    total_users: int = 0

    @property
    def age_filter_active(self) -> bool:
        return self.age_min > AGE_FILTER_MIN or self.age_max < AGE_FILTER_MAX


def parse_leading_int(raw: str | None) -> int | None:
    """Integer prefix of raw ("32 years" -> 32); None when there is none."""
    if not raw:
        return None
    m = _LEADING_INT.match(raw)
    return int(m.group(1)) if m else None


def effective_age(actor: Actor) -> int | None:
    """Age from `age`, else the floored midpoint of a playing-age range, else a single number."""
    if actor.age:
        return parse_leading_int(actor.age)
    if actor.playing_age:
        m = _AGE_RANGE.search(actor.playing_age)
        if m:
            return (int(m.group(1)) + int(m.group(2))) // 2
        return parse_leading_int(actor.playing_age)
    return None


def _searchable_values(actor: Actor) -> list[str]:
    values = [
        actor.name,
        actor.gender,
        actor.ethnicity,
        actor.location,
        actor.agent,
        actor.language,
        actor.height,
        actor.body_type,
        actor.shoe_size,
        actor.hair_color,
        actor.eye_color,
        actor.nakedness_level,
        actor.imdb_url,
    ]
    out = [v.lower() for v in values if v]
    out.extend(s.lower() for s in actor.skills)
    out.extend(p.lower() for p in actor.past_productions)
    return out


def matches_text(actor: Actor, text: str) -> bool:
    needle = text.lower()
    return any(needle in value for value in _searchable_values(actor))


def matches_search(actor: Actor, search_term: str, search_tags: Sequence[str]) -> bool:
    """Free text AND every tag, each matched against the same searchable fields."""
    if search_term and not matches_text(actor, search_term):
        return False
    return all(matches_text(actor, tag) for tag in search_tags)


def matches_vote_filter(actor: Actor, vote_filter: str | None, total_users: int) -> bool:
    if not vote_filter:
        return True
    votes = list(actor.user_votes.values())
    if vote_filter == VOTE_FILTER_UNANIMOUS_YES:
        return len(votes) == total_users and all(v == VOTE_YES for v in votes)
    if vote_filter == VOTE_FILTER_UNANIMOUS_NO:
        return len(votes) == total_users and all(v == VOTE_NO for v in votes)
    if vote_filter == VOTE_FILTER_MIXED:
        return len(votes) > 0 and len(set(votes)) > 1
    if vote_filter == VOTE_FILTER_NO_VOTES:
        return not votes
    return True


def _filter(actors: Iterable[Actor], c: FilterCriteria) -> list[Actor]:
    out = list(actors)
    if c.tab_key != APPROVAL_KEY:
        out = [a for a in out if not a.is_greenlit]
    if c.search_term or c.search_tags:
        out = [a for a in out if matches_search(a, c.search_term, c.search_tags)]
    if c.status_ids:
        wanted = set(c.status_ids)
        out = [a for a in out if any(s.id in wanted for s in a.statuses)]
    if c.age_filter_active:
        kept = []
        for a in out:
            age = effective_age(a)
            if age is not None and c.age_min <= age <= c.age_max:
                kept.append(a)
        out = kept
    if c.locations:
        wanted_locations = set(c.locations)
        out = [a for a in out if a.location and a.location.strip() in wanted_locations]
    if c.vote_filter:
        out = [a for a in out if matches_vote_filter(a, c.vote_filter, c.total_users)]
    return out


def _consensus_key(actor: Actor) -> tuple[float, int]:
    votes = list(actor.user_votes.values())
    count = len(votes)
    ratio = sum(1 for v in votes if v == VOTE_YES) / count if count else 0.0
    return (-ratio, -count)


def _status_key(actor: Actor) -> str:
    if actor.statuses:
        first = actor.statuses[0]
        return (first.name or first.label or "zzz").lower()
    return "zzz"


def _age_key(actor: Actor) -> int:
    age = parse_leading_int(actor.age)
    return AGE_UNKNOWN_SORT_VALUE if age is None else age


_SORT_KEYS: dict[str, Callable[[Actor], object]] = {
    SORT_ALPHABETICAL: lambda a: a.name.casefold(),
    SORT_CONSENSUS: _consensus_key,
    SORT_STATUS: _status_key,
    SORT_DATE_ADDED: lambda a: -(a.date_added or 0),
    SORT_AGE: _age_key,
    SORT_NOTES: lambda a: -len(a.notes),
}


def sort_actors(actors: list[Actor], sort_option: str, tab_key: str) -> list[Actor]:
    if sort_option == SORT_CUSTOM or any(a.sort_order is not None for a in actors):
        out = sorted(actors, key=lambda a: a.sort_order if a.sort_order is not None else SORT_ORDER_MISSING)
    else:
        key = _SORT_KEYS.get(sort_option)
        if key is None:
            logger.debug("Unknown sort option %r; keeping stored order", sort_option)
            out = list(actors)
        else:
            out = sorted(actors, key=key)

    # Stable pinning passes
    if tab_key == APPROVAL_KEY:
        out.sort(key=lambda a: (not a.is_cast, not a.is_greenlit))
    elif tab_key == LONG_LIST_KEY:
        out.sort(key=lambda a: a.is_soft_rejected)
    return out


def visible_actors(actors: Iterable[Actor], criteria: FilterCriteria) -> list[Actor]:
    """Filter then sort. The returned list is new; actor objects are shared with the input."""
    return sort_actors(_filter(actors, criteria), criteria.sort_option, criteria.tab_key)


def actors_for_tab(character: Character, tab_key: str) -> list[Actor]:
    """Raw actors behind a tab; the shortlists tab flattens every shortlist."""
    if tab_key == SHORTLISTS_KEY:
        return [a for sl in character.actors.short_lists for a in sl.actors]
    standard = character.actors.standard(tab_key)
    if standard is not None:
        return list(standard)
    return list(character.actors.custom.get(tab_key, []))


def criteria_from_focus(state: CastingState, tab_key: str | None = None) -> FilterCriteria:
    """Criteria built from the stored focus (search, filters, sort)."""
    focus = state.current_focus
    filters = focus.filters
    return FilterCriteria(
        tab_key=tab_key or focus.active_tab_key,
        search_term=focus.search_term,
        search_tags=[t.text for t in focus.search_tags],
        status_ids=list(filters.status),
        age_min=filters.age_range.min,
        age_max=filters.age_range.max,
        locations=list(filters.location),
        vote_filter=filters.vote,
        sort_option=focus.current_sort_option,
        total_users=len(state.users),
    )
