"""Pytest setup: a small casting state shared by the engine tests."""
from __future__ import annotations

import pytest

from backend.app.core.state_reducer import initial_state
from backend.app.models.casting import Actor, CastingState, Character, CharacterActors, Project, ShortList


def make_actor(actor_id: str, name: str | None = None, list_key: str = "longList", **fields) -> Actor:
    return Actor(id=actor_id, name=name or actor_id.upper(), current_list_key=list_key, **fields)


def build_state() -> CastingState:
    """Project proj-1 with two characters; char-1 has actors in every kind of list."""
    state = initial_state()
    rosa = Character(
        id="char-1",
        name="Rosa",
        actors=CharacterActors(
            long_list=[
                make_actor("a1", "Ann", age="20", location="London"),
                make_actor("a2", "Ben", age="30", location="Leeds"),
                make_actor("a3", "Cara", age="40", location="London"),
            ],
            audition=[make_actor("a4", "Dev", "audition", age="31")],
            approval=[make_actor("a5", "Eve", "approval", age="28")],
            short_lists=[
                ShortList(
                    id="sl-1",
                    name="Favourites",
                    actors=[make_actor("a6", "Finn", "shortLists", current_shortlist_id="sl-1")],
                )
            ],
        ),
    )
    eli = Character(id="char-2", name="Eli", actors=CharacterActors(long_list=[make_actor("b1", "Gus")]))
    state.projects = [Project(id="proj-1", name="Harbor", characters=[rosa, eli])]
    state.current_focus.current_project_id = "proj-1"
    state.current_focus.character_id = "char-1"
    return state


@pytest.fixture
def state() -> CastingState:
    return build_state()


@pytest.fixture
def rosa(state) -> Character:
    return state.find_character("char-1")
