"""`castdesk show`: print the actors a tab would display."""
from __future__ import annotations

from backend.app import config
from backend.app.constants import SHORTLISTS_KEY
from backend.app.core.error_handling import CharacterNotFound
from backend.app.core.filter_sort import actors_for_tab, criteria_from_focus, visible_actors
from backend.app.core.roster import require_character
from backend.app.core.state_store import StateStore
from backend.app.core.tab_registry import find_tab, tab_display_name


def register(subparsers) -> None:
    p = subparsers.add_parser("show", help="Print the visible actors of a character's tab")
    p.add_argument("--state", default=None, help=f"State file (default: {config.STATE_PATH})")
    p.add_argument("--character", default=None, help="Character id (default: focused character)")
    p.add_argument("--tab", default=None, help="Tab key (default: focused tab)")
    p.add_argument("--search", default=None, help="Override the stored search term")
    p.add_argument("--sort", default=None, help="Override the stored sort option")
    p.set_defaults(func=run)


def _vote_summary(actor) -> str:
    if not actor.user_votes:
        return "no votes"
    return " ".join(f"{uid}:{vote}" for uid, vote in sorted(actor.user_votes.items()))


def run(args) -> int:
    state = StateStore(args.state or config.STATE_PATH).load()
    character_id = args.character or state.current_focus.character_id
    if not character_id:
        print("ERROR: no character selected (pass --character)")
        return 1
    try:
        character = require_character(state, character_id)
    except CharacterNotFound as e:
        print(f"ERROR: {e}")
        return 1

    tab_key = args.tab or state.current_focus.active_tab_key
    if tab_key != SHORTLISTS_KEY and find_tab(state, tab_key) is None:
        print(f"ERROR: unknown tab {tab_key!r}")
        return 1

    criteria = criteria_from_focus(state, tab_key)
    if args.search is not None:
        criteria.search_term = args.search
    if args.sort:
        criteria.sort_option = args.sort
    raw = actors_for_tab(character, tab_key)
    actors = visible_actors(raw, criteria)

    print(f"{character.name} / {tab_display_name(state, tab_key)}: {len(actors)} of {len(raw)} actor(s)")
    for actor in actors:
        flags = []
        if actor.is_cast:
            flags.append("CAST")
        elif actor.is_greenlit:
            flags.append("GREENLIT")
        if actor.is_soft_rejected:
            flags.append("soft-rejected")
        suffix = f" [{', '.join(flags)}]" if flags else ""
        print(f"  {actor.id:<12} {actor.name:<24} age={actor.age or '-':<4} {_vote_summary(actor)}{suffix}")
    return 0
