"""Custom ordering within a single list."""
import pytest

from backend.app.core.error_handling import InvalidReorder
from backend.app.core.reorder_engine import custom_order, reorder_actors, reorder_multiple_actors
from backend.app.models.intents import StandardLocation

LONG = StandardLocation(key="longList")


def _ids(collection):
    return [a.id for a in collection]


def test_reorder_places_actor_and_renumbers(rosa) -> None:
    reorder_actors(rosa, LONG, "a3", "a1", "before")
    assert _ids(rosa.actors.long_list) == ["a3", "a1", "a2"]
    assert [a.sort_order for a in rosa.actors.long_list] == [0, 1, 2]


def test_after_then_before_restores_relative_order_of_others(rosa) -> None:
    others_before = [aid for aid in _ids(rosa.actors.long_list) if aid != "a1"]
    reorder_actors(rosa, LONG, "a1", "a3", "after")
    assert _ids(rosa.actors.long_list) == ["a2", "a3", "a1"]
    reorder_actors(rosa, LONG, "a1", "a3", "before")
    assert [aid for aid in _ids(rosa.actors.long_list) if aid != "a1"] == others_before


def test_multi_reorder_moves_block_in_list_order(rosa) -> None:
    reorder_multiple_actors(rosa, LONG, ["a3", "a1"], "a2", "after")
    assert _ids(rosa.actors.long_list) == ["a2", "a1", "a3"]
    assert [a.sort_order for a in rosa.actors.long_list] == [0, 1, 2]


def test_reorder_respects_existing_custom_order(rosa) -> None:
    for actor, order in zip(rosa.actors.long_list, (2, 0, 1)):
        actor.sort_order = order
    assert _ids(custom_order(rosa.actors.long_list)) == ["a2", "a3", "a1"]
    reorder_actors(rosa, LONG, "a1", "a2", "before")
    assert _ids(rosa.actors.long_list) == ["a1", "a2", "a3"]


@pytest.mark.parametrize(
    "dragged, target",
    [
        (["a1"], "a1"),
        (["a1", "a2"], "a2"),
        (["a1"], "a5"),
        (["a5"], "a1"),
        ([], "a1"),
    ],
)
def test_invalid_reorders_raise_without_mutation(rosa, dragged, target) -> None:
    before = rosa.model_dump()
    with pytest.raises(InvalidReorder):
        reorder_multiple_actors(rosa, LONG, dragged, target)
    assert rosa.model_dump() == before
