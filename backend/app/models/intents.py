"""Pydantic intent and payload models for dispatching changes to the casting state.

All payloads are JSON-serializable. Intent.payload is carried as a plain dict and
validated against INTENT_PAYLOADS when the reducer applies it.
"""
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from backend.app.models.casting import Actor, Character, Note, Project, SearchTag, ShortList, VoteValue


class Intent(BaseModel):
    """Generic intent envelope."""
    intent_type: str
    payload: dict = Field(default_factory=dict)


# --- Location descriptors ---


class StandardLocation(BaseModel):
    """One of the fixed stage lists (longList, audition, approval)."""
    type: Literal["standard"] = "standard"
    key: str


class ShortlistLocation(BaseModel):
    type: Literal["shortlist"] = "shortlist"
    shortlist_id: str


class CustomLocation(BaseModel):
    """A user-defined tab list, addressed by tab key."""
    type: Literal["custom"] = "custom"
    key: str


LocationDescriptor = Annotated[
    Union[StandardLocation, ShortlistLocation, CustomLocation],
    Field(discriminator="type"),
]

MoveReason = Literal["default", "reset", "final_review"]
InsertPosition = Literal["before", "after"]


# --- Move / reorder ---


class MoveActorPayload(BaseModel):
    character_id: str
    actor_id: str
    source: LocationDescriptor
    destination: LocationDescriptor
    # None picks the reason from the destination
    reason: Optional[MoveReason] = None


class MoveMultipleActorsPayload(BaseModel):
    character_id: str
    actor_ids: list[str]
    source: LocationDescriptor
    destination: LocationDescriptor
    reason: Optional[MoveReason] = None


class ReorderActorsPayload(BaseModel):
    character_id: str
    location: LocationDescriptor
    dragged_actor_id: str
    target_actor_id: str
    insert_position: InsertPosition = "after"


class ReorderMultipleActorsPayload(BaseModel):
    character_id: str
    location: LocationDescriptor
    dragged_actor_ids: list[str]
    target_actor_id: str
    insert_position: InsertPosition = "after"


class MoveActorToCharacterPayload(BaseModel):
    actor_id: str
    source_character_id: str
    destination_character_id: str


# --- Votes ---


class CastVotePayload(BaseModel):
    character_id: str
    actor_id: str
    user_id: str
    vote: VoteValue


# --- Tabs ---


class AddTabPayload(BaseModel):
    tab_key: str
    tab_name: str


class RenameTabPayload(BaseModel):
    old_key: str
    new_key: str
    new_name: str


class TabKeyPayload(BaseModel):
    tab_key: str


class ReorderTabsPayload(BaseModel):
    dragged_tab_key: str
    target_tab_key: str
    insert_position: InsertPosition = "after"


class TabDisplayNamePayload(BaseModel):
    tab_key: str
    display_name: str


# --- Roster ---


class AddActorPayload(BaseModel):
    character_id: str
    actor: Actor
    list_key: str = "longList"


class ActorRefPayload(BaseModel):
    character_id: str
    actor_id: str


class UpdateActorPayload(BaseModel):
    character_id: str
    actor_id: str
    updates: dict[str, Any] = Field(default_factory=dict)


class AssignActorPayload(BaseModel):
    actor_id: str
    project_id: str
    project_name: str = ""
    character_id: str
    character_name: str = ""


class RemoveAssignmentPayload(BaseModel):
    actor_id: str
    project_id: str
    character_id: str


class AddNotePayload(BaseModel):
    character_id: str
    actor_id: str
    note: Note


class UpdateNotePayload(BaseModel):
    character_id: str
    actor_id: str
    note_id: str
    user_id: str
    text: str


class DeleteNotePayload(BaseModel):
    character_id: str
    actor_id: str
    note_id: str
    user_id: str


class AddContactStatusPayload(BaseModel):
    character_id: str
    actor_ids: list[str]
    contact_type: str
    template_name: Optional[str] = None
    timestamp: Optional[int] = None


class AddShortlistPayload(BaseModel):
    character_id: str
    shortlist: ShortList


class RenameShortlistPayload(BaseModel):
    character_id: str
    shortlist_id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None


class ShortlistRefPayload(BaseModel):
    character_id: str
    shortlist_id: str


class AddCharacterPayload(BaseModel):
    project_id: str
    character: Character


class CharacterRefPayload(BaseModel):
    character_id: str


class CreateProjectPayload(BaseModel):
    project: Project


class ProjectRefPayload(BaseModel):
    project_id: str


# --- Focus / search / filters ---


class SelectCharacterPayload(BaseModel):
    character_id: Optional[str] = None


class SelectProjectPayload(BaseModel):
    project_id: Optional[str] = None


class SortOptionPayload(BaseModel):
    sort_option: str


class SearchTermPayload(BaseModel):
    search_term: str = ""


class SearchTagPayload(BaseModel):
    tag: SearchTag


class SearchTagRefPayload(BaseModel):
    tag_id: str


class SaveSearchPayload(BaseModel):
    name: str
    is_global: bool = False


class SavedSearchRefPayload(BaseModel):
    search_id: str


class StatusFilterPayload(BaseModel):
    status_ids: list[str] = Field(default_factory=list)


class AgeRangeFilterPayload(BaseModel):
    min: int = 0
    max: int = 100


class LocationFilterPayload(BaseModel):
    locations: list[str] = Field(default_factory=list)


class VoteFilterPayload(BaseModel):
    vote_filter: Optional[str] = None


class NotificationRefPayload(BaseModel):
    notification_id: str


class EmptyPayload(BaseModel):
    pass


class LoadFromStoragePayload(BaseModel):
    state: dict = Field(default_factory=dict)


# Intent type -> payload model used to validate Intent.payload
INTENT_PAYLOADS: dict[str, type[BaseModel]] = {
    "MOVE_ACTOR": MoveActorPayload,
    "MOVE_MULTIPLE_ACTORS": MoveMultipleActorsPayload,
    "REORDER_ACTORS": ReorderActorsPayload,
    "REORDER_MULTIPLE_ACTORS": ReorderMultipleActorsPayload,
    "MOVE_ACTOR_TO_CHARACTER": MoveActorToCharacterPayload,
    "CAST_VOTE": CastVotePayload,
    "ADD_TAB": AddTabPayload,
    "RENAME_TAB": RenameTabPayload,
    "DELETE_TAB": TabKeyPayload,
    "REORDER_TABS": ReorderTabsPayload,
    "UPDATE_TAB_DISPLAY_NAME": TabDisplayNamePayload,
    "RESET_TAB_DISPLAY_NAME": TabKeyPayload,
    "ADD_ACTOR": AddActorPayload,
    "DELETE_ACTOR": ActorRefPayload,
    "UPDATE_ACTOR": UpdateActorPayload,
    "ASSIGN_ACTOR_TO_PROJECT_CHARACTER": AssignActorPayload,
    "REMOVE_ACTOR_ASSIGNMENT": RemoveAssignmentPayload,
    "ADD_NOTE": AddNotePayload,
    "UPDATE_NOTE": UpdateNotePayload,
    "DELETE_NOTE": DeleteNotePayload,
    "ADD_CONTACT_STATUS": AddContactStatusPayload,
    "ADD_SHORTLIST": AddShortlistPayload,
    "RENAME_SHORTLIST": RenameShortlistPayload,
    "DELETE_SHORTLIST": ShortlistRefPayload,
    "ADD_CHARACTER": AddCharacterPayload,
    "DELETE_CHARACTER": CharacterRefPayload,
    "CREATE_PROJECT": CreateProjectPayload,
    "DELETE_PROJECT": ProjectRefPayload,
    "SELECT_PROJECT": SelectProjectPayload,
    "SELECT_CHARACTER": SelectCharacterPayload,
    "SELECT_TAB": TabKeyPayload,
    "SET_SORT_OPTION": SortOptionPayload,
    "SET_SEARCH_TERM": SearchTermPayload,
    "ADD_SEARCH_TAG": SearchTagPayload,
    "REMOVE_SEARCH_TAG": SearchTagRefPayload,
    "CLEAR_SEARCH_TAGS": EmptyPayload,
    "SAVE_CURRENT_SEARCH": SaveSearchPayload,
    "LOAD_SAVED_SEARCH": SavedSearchRefPayload,
    "DELETE_SAVED_SEARCH": SavedSearchRefPayload,
    "SET_STATUS_FILTER": StatusFilterPayload,
    "SET_AGE_RANGE_FILTER": AgeRangeFilterPayload,
    "SET_LOCATION_FILTER": LocationFilterPayload,
    "SET_VOTE_FILTER": VoteFilterPayload,
    "CLEAR_ALL_FILTERS": EmptyPayload,
    "MARK_NOTIFICATION_READ": NotificationRefPayload,
    "MARK_ALL_NOTIFICATIONS_READ": EmptyPayload,
    "DELETE_NOTIFICATION": NotificationRefPayload,
    "LOAD_FROM_STORAGE": LoadFromStoragePayload,
}
