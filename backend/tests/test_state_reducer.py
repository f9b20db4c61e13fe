"""Intent reducer: copy-on-write, error recovery, and per-intent behaviour."""
import pytest

from backend.app.core.error_handling import ActorNotFound, InvalidIntent, NotePermissionError
from backend.app.core.notifications import make_notification, push_notification
from backend.app.core.state_reducer import apply_intent, reduce_intent, reduce_intents
from backend.app.models.intents import Intent


def _intent(intent_type: str, **payload) -> Intent:
    return Intent(intent_type=intent_type, payload=payload)


def _move(actor_id, source, destination, reason="default", character_id="char-1") -> Intent:
    return _intent(
        "MOVE_ACTOR",
        character_id=character_id,
        actor_id=actor_id,
        source={"type": "standard", "key": source},
        destination={"type": "standard", "key": destination},
        reason=reason,
    )


def _vote(actor_id, user_id, vote) -> Intent:
    return _intent("CAST_VOTE", character_id="char-1", actor_id=actor_id, user_id=user_id, vote=vote)


def _ids(collection):
    return [a.id for a in collection]


def test_apply_intent_returns_new_state_and_keeps_input(state) -> None:
    before = state.model_dump()
    new_state = apply_intent(state, _move("a1", "longList", "audition"))
    assert new_state is not state
    assert state.model_dump() == before
    assert _ids(new_state.find_character("char-1").actors.audition) == ["a4", "a1"]


def test_apply_intent_accepts_plain_dicts(state) -> None:
    new_state = apply_intent(state, {"intent_type": "SELECT_TAB", "payload": {"tab_key": "audition"}})
    assert new_state.current_focus.active_tab_key == "audition"


def test_unknown_intent_leaves_state_untouched(state) -> None:
    result = reduce_intent(state, _intent("LAUNCH_ROCKETS"))
    assert result.state is state
    assert result.committed is False


def test_invalid_payload_is_an_error_not_an_exception(state) -> None:
    result = reduce_intent(state, _intent("MOVE_ACTOR", character_id="char-1"))
    assert result.state is state
    assert isinstance(result.error, InvalidIntent)


def test_engine_error_returns_prior_state(state) -> None:
    result = reduce_intent(state, _move("a5", "longList", "audition"))
    assert result.state is state
    assert result.committed is False
    assert isinstance(result.error, ActorNotFound)


def test_move_into_approval_notifies_at_medium_priority(state) -> None:
    result = reduce_intent(state, _move("a4", "audition", "approval", "final_review"))
    assert result.committed
    [notification] = result.notifications
    assert notification.title == "Moved to Approval"
    assert notification.priority == "medium"
    assert result.state.notifications[0].id == notification.id


def test_same_location_move_commits_nothing(state) -> None:
    result = reduce_intent(state, _move("a1", "longList", "longList"))
    assert result.committed is False
    assert result.state is state


def test_batch_move_reports_partial_failures(state) -> None:
    result = reduce_intent(state, _intent(
        "MOVE_MULTIPLE_ACTORS",
        character_id="char-1",
        actor_ids=["a1", "ghost", "a2"],
        source={"type": "standard", "key": "longList"},
        destination={"type": "shortlist", "shortlist_id": "sl-1"},
    ))
    assert result.committed
    assert result.batch.moved == ["a1", "a2"]
    assert "ghost" in result.batch.failures
    assert result.notifications[0].title == "Actors Moved"
    shortlist = result.state.find_character("char-1").actors.short_lists[0]
    assert _ids(shortlist.actors) == ["a6", "a1", "a2"]


def test_unanimous_yes_in_approval_casts_actor(state) -> None:
    state = reduce_intents(state, [_vote("a5", "1", "yes"), _vote("a5", "2", "yes")])
    result = reduce_intent(state, _vote("a5", "3", "yes"))
    eve = result.state.find_character("char-1").actors.approval[0]
    assert eve.is_cast and eve.is_greenlit
    titles = [n.title for n in result.notifications]
    assert titles == ["New Vote Cast", "Actor Greenlit!"]
    assert result.notifications[1].priority == "high"


def test_withdrawn_vote_breaks_cast_status(state) -> None:
    votes = [_vote("a5", uid, "yes") for uid in ("1", "2", "3")]
    state = reduce_intents(state, votes + [_vote("a5", "2", "yes")])
    eve = state.find_character("char-1").actors.approval[0]
    assert eve.user_votes == {"1": "yes", "3": "yes"}
    assert not eve.is_cast and not eve.is_greenlit
    assert eve.consensus_action is None


def test_unanimous_no_soft_rejects(state) -> None:
    state = reduce_intents(state, [_vote("a2", uid, "no") for uid in ("1", "2", "3")])
    ben = state.find_character("char-1").actors.long_list[1]
    assert ben.is_soft_rejected
    assert ben.consensus_action.target_key == "longList"
    assert _ids(state.find_character("char-1").actors.long_list) == ["a1", "a2", "a3"]


def test_all_yes_recommends_without_moving(state) -> None:
    state = reduce_intents(state, [_vote("a1", uid, "yes") for uid in ("1", "2", "3")])
    ann = state.find_character("char-1").actors.long_list[0]
    assert ann.consensus_action.type == "yes"
    assert ann.consensus_action.target_key == "audition"
    assert ann.current_list_key == "longList"


def test_vote_notification_names_the_voter(state) -> None:
    result = reduce_intent(state, _vote("a1", "2", "maybe"))
    [notification] = result.notifications
    assert notification.type == "vote"
    assert "Jane Smith voted 'Maybe' on Ann" in notification.message


def test_reorder_switches_to_custom_sort(state) -> None:
    new_state = apply_intent(state, _intent(
        "REORDER_ACTORS",
        character_id="char-1",
        location={"type": "standard", "key": "longList"},
        dragged_actor_id="a3",
        target_actor_id="a1",
        insert_position="before",
    ))
    assert new_state.current_focus.current_sort_option == "custom"
    assert _ids(new_state.find_character("char-1").actors.long_list) == ["a3", "a1", "a2"]


def test_add_actor_prepends_and_flags_form_submissions(state) -> None:
    result = reduce_intent(state, _intent(
        "ADD_ACTOR",
        character_id="char-1",
        actor={"id": "n1", "name": "Nia", "submission_source": "form", "submission_id": "sub-9"},
    ))
    rosa = result.state.find_character("char-1")
    assert _ids(rosa.actors.long_list)[0] == "n1"
    assert result.notifications[0].title == "New Form Submission Processed"
    assert result.notifications[0].metadata["submission_id"] == "sub-9"


def test_add_actor_renumbers_custom_ordered_list(state) -> None:
    state = apply_intent(state, _intent(
        "REORDER_ACTORS",
        character_id="char-1",
        location={"type": "standard", "key": "longList"},
        dragged_actor_id="a1",
        target_actor_id="a3",
    ))
    state = apply_intent(state, _intent("ADD_ACTOR", character_id="char-1", actor={"id": "n1", "name": "Nia"}))
    long_list = state.find_character("char-1").actors.long_list
    assert _ids(long_list) == ["n1", "a2", "a3", "a1"]
    assert [a.sort_order for a in long_list] == [0, 1, 2, 3]


def test_delete_tab_intent_relocates_and_notifies(state) -> None:
    state = reduce_intents(state, [
        _intent("ADD_TAB", tab_key="callbacks", tab_name="Callbacks"),
        _intent(
            "MOVE_MULTIPLE_ACTORS",
            character_id="char-1",
            actor_ids=["a1", "a2"],
            source={"type": "standard", "key": "longList"},
            destination={"type": "custom", "key": "callbacks"},
        ),
    ])
    result = reduce_intent(state, _intent("DELETE_TAB", tab_key="callbacks"))
    rosa = result.state.find_character("char-1")
    assert _ids(rosa.actors.long_list) == ["a3", "a1", "a2"]
    assert all(t.key != "callbacks" for t in result.state.tab_definitions)
    assert result.notifications[0].title == "Tab Deleted"


def test_system_tab_delete_is_refused(state) -> None:
    result = reduce_intent(state, _intent("DELETE_TAB", tab_key="approval"))
    assert result.committed is False
    assert result.error.error_code == "TAB_POLICY"


def test_only_note_author_can_edit(state) -> None:
    state = apply_intent(state, _intent(
        "ADD_NOTE", character_id="char-1", actor_id="a1", note={"id": "n1", "user_id": "1", "text": "Strong"},
    ))
    note = state.find_character("char-1").actors.long_list[0].notes[0]
    assert note.user_name == "John Doe"

    result = reduce_intent(state, _intent(
        "UPDATE_NOTE", character_id="char-1", actor_id="a1", note_id="n1", user_id="2", text="Mine now",
    ))
    assert isinstance(result.error, NotePermissionError)

    state = apply_intent(state, _intent(
        "UPDATE_NOTE", character_id="char-1", actor_id="a1", note_id="n1", user_id="1", text="Very strong",
    ))
    assert state.find_character("char-1").actors.long_list[0].notes[0].text == "Very strong"


def test_update_actor_validates_whole_record(state) -> None:
    state = apply_intent(state, _intent("UPDATE_ACTOR", character_id="char-1", actor_id="a1", updates={"age": "22"}))
    assert state.find_character("char-1").actors.long_list[0].age == "22"
    result = reduce_intent(state, _intent(
        "UPDATE_ACTOR", character_id="char-1", actor_id="a1", updates={"skills": "not-a-list"},
    ))
    assert isinstance(result.error, InvalidIntent)
    result = reduce_intent(state, _intent(
        "UPDATE_ACTOR", character_id="char-1", actor_id="a1", updates={"current_list_key": "approval"},
    ))
    assert result.committed is False


def test_select_project_and_character_reset_tab_and_search(state) -> None:
    state = reduce_intents(state, [
        _intent("SELECT_TAB", tab_key="audition"),
        _intent("SET_SEARCH_TERM", search_term="lon"),
        _intent("SELECT_CHARACTER", character_id="char-2"),
    ])
    assert state.current_focus.character_id == "char-2"
    assert state.current_focus.active_tab_key == "longList"
    assert state.current_focus.search_term == ""

    state = reduce_intents(state, [
        _intent("SET_SEARCH_TERM", search_term="x"),
        _intent("SELECT_PROJECT", project_id="proj-1"),
    ])
    assert state.current_focus.character_id == "char-1"
    assert state.current_focus.search_term == ""


def test_filters_and_saved_searches(state) -> None:
    state = reduce_intents(state, [
        _intent("SET_SEARCH_TERM", search_term="london"),
        _intent("ADD_SEARCH_TAG", tag={"id": "t1", "text": "fencing"}),
        _intent("ADD_SEARCH_TAG", tag={"id": "t1", "text": "fencing"}),
        _intent("SAVE_CURRENT_SEARCH", name="Fencers"),
        _intent("CLEAR_SEARCH_TAGS"),
        _intent("SET_SEARCH_TERM", search_term=""),
        _intent("SET_AGE_RANGE_FILTER", min=20, max=35),
        _intent("SET_LOCATION_FILTER", locations=[" London ", ""]),
    ])
    focus = state.current_focus
    [saved] = focus.saved_searches
    assert [t.id for t in saved.tags] == ["t1"]
    assert focus.search_tags == []
    assert focus.filters.location == ["London"]

    state = apply_intent(state, _intent("LOAD_SAVED_SEARCH", search_id=saved.id))
    assert state.current_focus.search_term == "london"
    assert [t.text for t in state.current_focus.search_tags] == ["fencing"]

    state = apply_intent(state, _intent("CLEAR_ALL_FILTERS"))
    assert state.current_focus.filters.age_range.min == 0
    assert state.current_focus.filters.location == []

    result = reduce_intent(state, _intent("SET_AGE_RANGE_FILTER", min=40, max=30))
    assert isinstance(result.error, InvalidIntent)


def test_unknown_sort_option_is_rejected(state) -> None:
    assert apply_intent(state, _intent("SET_SORT_OPTION", sort_option="age")).current_focus.current_sort_option == "age"
    assert reduce_intent(state, _intent("SET_SORT_OPTION", sort_option="shoe")).committed is False


def test_notification_feed_is_capped_and_markable(state) -> None:
    for i in range(205):
        push_notification(state, make_notification(f"n{i}", "msg"))
    assert len(state.notifications) == 200
    assert state.notifications[0].title == "n204"

    target = state.notifications[5].id
    state = apply_intent(state, _intent("MARK_NOTIFICATION_READ", notification_id=target))
    assert state.notifications[5].read
    state = apply_intent(state, _intent("DELETE_NOTIFICATION", notification_id=target))
    assert all(n.id != target for n in state.notifications)
    state = apply_intent(state, _intent("MARK_ALL_NOTIFICATIONS_READ"))
    assert all(n.read for n in state.notifications)


def test_load_from_storage_completes_partial_state(state) -> None:
    stored = {"projects": [{"id": "p9", "name": "Other", "characters": [{"id": "c9", "name": "Lead"}]}]}
    new_state = apply_intent(state, _intent("LOAD_FROM_STORAGE", state=stored))
    assert [p.id for p in new_state.projects] == ["p9"]
    assert new_state.current_focus.current_project_id == "p9"
    assert new_state.current_focus.character_id == "c9"
    assert [u.id for u in new_state.users] == ["1", "2", "3"]


@pytest.mark.parametrize("intent_type", ["DELETE_CHARACTER", "SELECT_CHARACTER"])
def test_missing_character_is_recoverable(state, intent_type) -> None:
    result = reduce_intent(state, _intent(intent_type, character_id="ghost"))
    assert result.state is state
    assert result.error is not None
