"""Location descriptors resolve to the live lists inside a character."""
import pytest

from backend.app.core.error_handling import LocationNotFound
from backend.app.core.list_locator import (
    descriptor_for_actor,
    descriptor_for_key,
    find_actor,
    iter_locations,
    list_key,
    locate,
    resolve_collection,
    same_location,
)
from backend.app.models.intents import CustomLocation, ShortlistLocation, StandardLocation


def test_resolves_each_storage_shape(rosa) -> None:
    rosa.actors.custom["callbacks"] = []
    assert resolve_collection(rosa, StandardLocation(key="longList")) is rosa.actors.long_list
    assert resolve_collection(rosa, ShortlistLocation(shortlist_id="sl-1")) is rosa.actors.short_lists[0].actors
    assert resolve_collection(rosa, CustomLocation(key="callbacks")) is rosa.actors.custom["callbacks"]


@pytest.mark.parametrize(
    "descriptor",
    [
        StandardLocation(key="nope"),
        ShortlistLocation(shortlist_id="sl-missing"),
        CustomLocation(key="callbacks"),
    ],
)
def test_unknown_locations_raise(rosa, descriptor) -> None:
    with pytest.raises(LocationNotFound):
        resolve_collection(rosa, descriptor)


def test_locate_reports_index_or_none(rosa) -> None:
    loc = locate(rosa, StandardLocation(key="longList"), "a2")
    assert loc.index == 1
    assert loc.actor.name == "Ben"
    assert locate(rosa, StandardLocation(key="longList"), "a5").actor is None


def test_find_actor_scans_shortlists(rosa) -> None:
    loc = find_actor(rosa, "a6")
    assert isinstance(loc.descriptor, ShortlistLocation)
    assert loc.descriptor.shortlist_id == "sl-1"
    assert find_actor(rosa, "zzz") is None


def test_iter_locations_covers_every_list(rosa) -> None:
    rosa.actors.custom["callbacks"] = []
    keys = [list_key(d) for d, _ in iter_locations(rosa)]
    assert keys == ["longList", "audition", "approval", "shortLists", "callbacks"]


def test_descriptors_from_stored_keys(rosa) -> None:
    assert descriptor_for_key("audition") == StandardLocation(key="audition")
    assert descriptor_for_key("callbacks") == CustomLocation(key="callbacks")
    assert descriptor_for_key("shortLists", "sl-1") == ShortlistLocation(shortlist_id="sl-1")
    with pytest.raises(LocationNotFound):
        descriptor_for_key("shortLists")
    shortlisted = rosa.actors.short_lists[0].actors[0]
    assert descriptor_for_actor(shortlisted) == ShortlistLocation(shortlist_id="sl-1")


def test_same_location_compares_key_and_shortlist() -> None:
    assert same_location(StandardLocation(key="audition"), StandardLocation(key="audition"))
    assert not same_location(StandardLocation(key="audition"), StandardLocation(key="approval"))
    assert not same_location(ShortlistLocation(shortlist_id="a"), ShortlistLocation(shortlist_id="b"))
