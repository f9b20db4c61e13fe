"""Casting store: confirmation gate, listeners, autosave."""
import threading

from backend.app.core.drag_gesture import build_drag_payload, route_drop
from backend.app.core.filter_sort import actors_for_tab, criteria_from_focus, visible_actors
from backend.app.core.state_store import StateStore
from backend.app.core.store import CastingStore
from backend.app.models.intents import Intent, StandardLocation

JANE_TO_APPROVAL = Intent(
    intent_type="MOVE_ACTOR",
    payload={
        "character_id": "char-1",
        "actor_id": "jane",
        "source": {"type": "standard", "key": "longList"},
        "destination": {"type": "standard", "key": "approval"},
        "reason": "final_review",
    },
)


def _add_jane(store: CastingStore) -> None:
    outcome = store.dispatch(Intent(
        intent_type="ADD_ACTOR",
        payload={"character_id": "char-1", "actor": {"id": "jane", "name": "Jane Doe", "age": "29"}},
    ))
    assert outcome.committed


def test_jane_doe_skipping_audition_needs_confirmation(state) -> None:
    store = CastingStore(state)
    _add_jane(store)

    warnings = store.preview(JANE_TO_APPROVAL)
    assert any("skips the audition stage" in w for w in warnings)
    assert any("have no votes yet" in w for w in warnings)

    seen = []
    declined = store.dispatch(JANE_TO_APPROVAL, confirm=lambda w: seen.append(w) or False)
    assert declined.declined and not declined.committed
    assert seen == [warnings]
    rosa = store.state.find_character("char-1")
    assert rosa.actors.long_list[0].id == "jane"

    accepted = store.dispatch(JANE_TO_APPROVAL, confirm=lambda w: True)
    assert accepted.committed
    rosa = store.state.find_character("char-1")
    jane = rosa.actors.approval[-1]
    assert jane.id == "jane"
    assert jane.user_votes == {}
    assert jane.ready_for_approval
    assert all(a.id != "jane" for a in rosa.actors.long_list)


def test_moves_without_warnings_skip_the_gate(state) -> None:
    store = CastingStore(state)
    asked = []
    intent = Intent(intent_type="MOVE_ACTOR", payload={
        "character_id": "char-1",
        "actor_id": "a1",
        "source": {"type": "standard", "key": "longList"},
        "destination": {"type": "standard", "key": "audition"},
    })
    outcome = store.dispatch(intent, confirm=lambda w: asked.append(w) or False)
    assert outcome.committed
    assert asked == []


def test_moving_cast_actor_back_warns(state) -> None:
    state.find_character("char-1").actors.approval[0].is_cast = True
    store = CastingStore(state)
    warnings = store.preview(Intent(intent_type="MOVE_ACTOR", payload={
        "character_id": "char-1",
        "actor_id": "a5",
        "source": {"type": "standard", "key": "approval"},
        "destination": {"type": "standard", "key": "longList"},
        "reason": "reset",
    }))
    assert len(warnings) == 2
    assert "moving back from Approval" in warnings[0]
    assert "reset their cast status" in warnings[1]


def test_preview_ignores_other_intents_and_bad_payloads(state) -> None:
    store = CastingStore(state)
    assert store.preview(Intent(intent_type="SELECT_TAB", payload={"tab_key": "approval"})) == []
    assert store.preview(Intent(intent_type="MOVE_ACTOR", payload={"character_id": "char-1"})) == []


def test_listeners_hear_commits_only(state) -> None:
    store = CastingStore(state)
    heard = []
    unsubscribe = store.subscribe(heard.append)

    store.dispatch({"intent_type": "SELECT_TAB", "payload": {"tab_key": "audition"}})
    store.dispatch({"intent_type": "SELECT_TAB", "payload": {"tab_key": "nowhere"}})
    assert len(heard) == 1
    assert heard[0].current_focus.active_tab_key == "audition"

    unsubscribe()
    store.dispatch({"intent_type": "SELECT_TAB", "payload": {"tab_key": "approval"}})
    assert len(heard) == 1


def test_failed_dispatch_reports_error(state) -> None:
    store = CastingStore(state)
    outcome = store.dispatch({"intent_type": "DELETE_ACTOR", "payload": {"character_id": "char-1", "actor_id": "x"}})
    assert not outcome.committed
    assert outcome.error.error_code == "ACTOR_NOT_FOUND"
    assert store.state is state


def test_autosave_persists_each_commit(state, tmp_path) -> None:
    path = tmp_path / "casting.json"
    store = CastingStore(state, persistence=StateStore(path))
    store.dispatch({"intent_type": "SELECT_TAB", "payload": {"tab_key": "audition"}})
    assert path.is_file()

    reloaded = CastingStore.from_path(path)
    assert reloaded.state.current_focus.active_tab_key == "audition"
    assert [p.id for p in reloaded.state.projects] == ["proj-1"]


def test_autosave_off_writes_nothing(state, tmp_path) -> None:
    path = tmp_path / "casting.json"
    store = CastingStore(state, persistence=StateStore(path), autosave=False)
    store.dispatch({"intent_type": "SELECT_TAB", "payload": {"tab_key": "audition"}})
    assert not path.exists()
    assert store.save() is True
    assert path.is_file()


def test_concurrent_dispatches_are_serialized(state) -> None:
    store = CastingStore(state)
    start = threading.Barrier(8)
    committed: list[bool] = []
    lock = threading.Lock()

    def worker(n: int) -> None:
        start.wait()
        outcome = store.dispatch(Intent(
            intent_type="ADD_ACTOR",
            payload={"character_id": "char-1", "actor": {"id": f"new-{n}", "name": f"New {n}"}},
        ))
        with lock:
            committed.append(outcome.committed)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert committed == [True] * 8
    ids = [a.id for a in store.state.find_character("char-1").actors.long_list]
    assert sorted(i for i in ids if i.startswith("new-")) == [f"new-{n}" for n in range(8)]
    assert {"a1", "a2", "a3"} <= set(ids)


def test_dropping_cast_actor_on_long_list_resets_and_shows_it(state) -> None:
    rosa = state.find_character("char-1")
    eve = rosa.actors.approval[0]
    eve.is_cast = True
    eve.is_greenlit = True
    eve.user_votes = {"1": "yes"}
    store = CastingStore(state)

    payload = build_drag_payload(rosa, "approval", eve)
    [intent] = route_drop(payload, "char-1", StandardLocation(key="longList"))
    assert intent.payload["reason"] == "reset"
    assert any("reset their cast status" in w for w in store.preview(intent))

    outcome = store.dispatch(intent, confirm=lambda _w: True)
    assert outcome.committed

    moved = store.state.find_character("char-1").actors.long_list[-1]
    assert moved.id == "a5"
    assert not moved.is_cast and not moved.is_greenlit
    assert moved.user_votes == {"1": "yes"}
    shown = visible_actors(
        actors_for_tab(store.state.find_character("char-1"), "longList"),
        criteria_from_focus(store.state, "longList"),
    )
    assert "a5" in [a.id for a in shown]


def test_move_without_reason_takes_it_from_destination(state) -> None:
    state.find_character("char-1").actors.approval[0].is_greenlit = True
    store = CastingStore(state)
    outcome = store.dispatch(Intent(intent_type="MOVE_ACTOR", payload={
        "character_id": "char-1",
        "actor_id": "a5",
        "source": {"type": "standard", "key": "approval"},
        "destination": {"type": "standard", "key": "audition"},
    }))
    assert outcome.committed
    moved = store.state.find_character("char-1").actors.audition[-1]
    assert moved.id == "a5"
    assert not moved.is_greenlit
    assert "a5" in [a.id for a in visible_actors(
        actors_for_tab(store.state.find_character("char-1"), "audition"),
        criteria_from_focus(store.state, "audition"),
    )]
