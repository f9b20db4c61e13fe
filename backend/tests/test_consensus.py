"""Vote aggregation: completeness, unanimity, per-stage recommendations."""
from backend.app.core.consensus import (
    evaluate_consensus,
    is_cast_confirmation,
    is_soft_rejection,
    next_tab,
    toggle_vote,
    vote_requires_note,
)
from backend.app.core.tab_registry import default_tab_definitions
from backend.app.models.casting import TabDefinition

USERS = ["1", "2", "3"]
TABS = default_tab_definitions()


def test_all_yes_on_entry_list_recommends_next_tab() -> None:
    action = evaluate_consensus({"1": "yes", "2": "yes", "3": "yes"}, USERS, "longList", TABS)
    assert action.type == "yes"
    assert action.target_key == "audition"
    assert action.target_name == "Audition"
    assert not is_cast_confirmation(action)


def test_incomplete_votes_give_no_result() -> None:
    assert evaluate_consensus({"1": "yes", "2": "yes"}, USERS, "longList", TABS) is None
    assert evaluate_consensus({}, USERS, "audition", TABS) is None


def test_no_eligible_users_gives_no_result() -> None:
    assert evaluate_consensus({"1": "yes"}, [], "longList", TABS) is None


def test_all_yes_in_audition_targets_approval() -> None:
    action = evaluate_consensus({"1": "yes", "2": "yes", "3": "yes"}, USERS, "audition", TABS)
    assert action.target_key == "approval"


def test_all_yes_in_approval_is_cast_confirmation() -> None:
    action = evaluate_consensus({"1": "yes", "2": "yes", "3": "yes"}, USERS, "approval", TABS)
    assert action.type == "yes"
    assert action.is_greenlit is True
    assert action.target_key is None
    assert is_cast_confirmation(action)


def test_all_no_outside_approval_is_soft_rejection() -> None:
    action = evaluate_consensus({"1": "no", "2": "no", "3": "no"}, USERS, "audition", TABS)
    assert action.type == "no"
    assert action.target_key == "longList"
    assert is_soft_rejection(action)


def test_all_no_in_approval_has_no_target() -> None:
    action = evaluate_consensus({"1": "no", "2": "no", "3": "no"}, USERS, "approval", TABS)
    assert action.type == "no"
    assert action.target_key is None
    assert not is_soft_rejection(action)


def test_mixed_complete_votes_stay() -> None:
    action = evaluate_consensus({"1": "yes", "2": "maybe", "3": "no"}, USERS, "longList", TABS)
    assert action.type == "stay"
    assert action.target_key is None


def test_votes_from_unknown_users_are_ignored() -> None:
    votes = {"1": "yes", "2": "yes", "3": "yes", "ghost": "no"}
    assert evaluate_consensus(votes, USERS, "longList", TABS).type == "yes"
    assert evaluate_consensus({"1": "yes", "ghost": "yes"}, USERS, "longList", TABS) is None


def test_unknown_list_falls_back_to_approval() -> None:
    action = evaluate_consensus({"1": "yes", "2": "yes", "3": "yes"}, USERS, "orphaned", TABS)
    assert action.target_key == "approval"


def test_next_tab_follows_custom_tab_order() -> None:
    tabs = [
        TabDefinition(key="longList", name="Long List"),
        TabDefinition(key="audition", name="Audition"),
        TabDefinition(key="callbacks", name="Callbacks", is_custom=True),
        TabDefinition(key="approval", name="Approval"),
    ]
    assert next_tab(tabs, "audition").key == "callbacks"
    assert next_tab(tabs, "callbacks").key == "approval"
    assert next_tab(tabs, "approval") is None
    assert next_tab(tabs, "shortLists") is None
    action = evaluate_consensus({"1": "yes", "2": "yes", "3": "yes"}, USERS, "audition", tabs)
    assert action.target_key == "callbacks"
    assert action.target_name == "Callbacks"


def test_toggle_vote_sets_changes_and_withdraws() -> None:
    original = {"1": "yes"}
    changed = toggle_vote(original, "1", "no")
    assert changed == {"1": "no"}
    assert original == {"1": "yes"}
    assert toggle_vote(changed, "2", "maybe") == {"1": "no", "2": "maybe"}
    assert toggle_vote(changed, "1", "no") == {}


def test_maybe_vote_wants_a_note() -> None:
    assert vote_requires_note("maybe", None)
    assert vote_requires_note("maybe", "   ")
    assert not vote_requires_note("maybe", "Strong read, unsure on height")
    assert not vote_requires_note("yes", None)
