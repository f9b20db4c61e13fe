"""Casting state tree: Pydantic models for projects, characters, lists and actors.

All models are JSON-serializable and constructible without any storage. The
whole tree (CastingState) is what the reducer receives and returns, and what
the state store writes to disk.
"""
from __future__ import annotations

import time
from typing import Any, Iterator, Literal

from pydantic import BaseModel, Field

from backend.app.constants import (
    AGE_FILTER_MAX,
    AGE_FILTER_MIN,
    APPROVAL_KEY,
    AUDITION_KEY,
    LONG_LIST_KEY,
    SORT_ALPHABETICAL,
)

VoteValue = Literal["yes", "no", "maybe"]

# Stored list key -> CharacterActors attribute
STANDARD_LIST_ATTRS: dict[str, str] = {
    LONG_LIST_KEY: "long_list",
    AUDITION_KEY: "audition",
    APPROVAL_KEY: "approval",
}


def now_ms() -> int:
    """Epoch milliseconds (the timestamp unit used throughout the state tree)."""
    return int(time.time() * 1000)


# --- Actor ---


class ActorStatus(BaseModel):
    """Labeled tag on an actor (availability, interest, contact history)."""
    id: str
    label: str
    name: str | None = None
    category: str | None = None
    color: str | None = None
    bg_color: str = ""
    text_color: str = ""
    is_custom: bool = False
    timestamp: int | None = None
    template_used: str | None = None  # contact template that produced this status


class Note(BaseModel):
    """A note owned by one user; only the author may edit or delete it."""
    id: str
    user_id: str
    user_name: str = ""
    timestamp: int = Field(default_factory=now_ms)
    text: str = ""


class ConsensusAction(BaseModel):
    """Outcome of vote aggregation: a recommendation, or a cast confirmation in approval."""
    type: Literal["yes", "no", "stay"]
    target_key: str | None = None
    target_name: str | None = None
    is_greenlit: bool | None = None


class ProjectAssignment(BaseModel):
    project_id: str
    project_name: str = ""
    character_id: str
    character_name: str = ""
    assigned_date: int = Field(default_factory=now_ms)


class Actor(BaseModel):
    """A candidate for a role. Lives in exactly one list of one character."""
    id: str
    name: str
    age: str | None = None
    playing_age: str | None = None  # e.g. "25-30"
    gender: str | None = None
    ethnicity: str | None = None
    location: str | None = None
    agent: str | None = None
    contact_phone: str | None = None
    contact_email: str | None = None
    skills: list[str] = Field(default_factory=list)
    availability: list[str] = Field(default_factory=list)
    # Extended biographical fields (searchable)
    language: str | None = None
    height: str | None = None
    body_type: str | None = None
    shoe_size: str | None = None
    hair_color: str | None = None
    eye_color: str | None = None
    nakedness_level: str | None = None
    past_productions: list[str] = Field(default_factory=list)
    imdb_url: str | None = None

    headshots: list[str] = Field(default_factory=list)
    current_card_headshot_index: int = 0

    user_votes: dict[str, VoteValue] = Field(default_factory=dict)
    consensus_action: ConsensusAction | None = None
    is_soft_rejected: bool = False
    is_greenlit: bool = False
    is_cast: bool = False

    current_list_key: str = LONG_LIST_KEY
    current_shortlist_id: str | None = None
    statuses: list[ActorStatus] = Field(default_factory=list)
    notes: list[Note] = Field(default_factory=list)
    date_added: int = Field(default_factory=now_ms)
    sort_order: int | None = None  # presence on any actor puts the list in custom order

    submission_id: str | None = None
    submission_source: Literal["form", "manual", "import"] | None = None
    ready_for_approval: bool = False
    approval_move_date: int | None = None
    last_contact_date: int | None = None
    last_contact_type: str | None = None
    project_assignments: list[ProjectAssignment] = Field(default_factory=list)


# --- Character / lists ---


class ShortList(BaseModel):
    """Named sub-grouping of actors within a character."""
    id: str
    name: str
    description: str | None = None
    color: str | None = None
    created_at: int = Field(default_factory=now_ms)
    actors: list[Actor] = Field(default_factory=list)


class CharacterActors(BaseModel):
    """Three storage shapes: fixed stage lists, shortlists, and custom-tab lists."""
    long_list: list[Actor] = Field(default_factory=list)
    audition: list[Actor] = Field(default_factory=list)
    approval: list[Actor] = Field(default_factory=list)
    short_lists: list[ShortList] = Field(default_factory=list)
    custom: dict[str, list[Actor]] = Field(default_factory=dict)  # custom tab key -> actors

    def standard(self, key: str) -> list[Actor] | None:
        attr = STANDARD_LIST_ATTRS.get(key)
        return getattr(self, attr) if attr else None

    def all_actors(self) -> Iterator[Actor]:
        yield from self.long_list
        yield from self.audition
        yield from self.approval
        for sl in self.short_lists:
            yield from sl.actors
        for actors in self.custom.values():
            yield from actors


class Character(BaseModel):
    """A role being cast."""
    id: str
    name: str
    description: str | None = None
    actors: CharacterActors = Field(default_factory=CharacterActors)


class Project(BaseModel):
    id: str
    name: str
    description: str | None = None
    characters: list[Character] = Field(default_factory=list)
    created_date: int = Field(default_factory=now_ms)
    modified_date: int = Field(default_factory=now_ms)


# --- Registry / users ---


class TabDefinition(BaseModel):
    key: str
    name: str
    is_custom: bool = False


class SortOption(BaseModel):
    key: str
    label: str


class User(BaseModel):
    """An eligible voter."""
    id: str
    name: str
    initials: str = ""
    email: str = ""
    role: str = ""


# --- Search / filters / focus ---


class SearchTag(BaseModel):
    id: str
    text: str


class SavedSearch(BaseModel):
    id: str
    name: str
    tags: list[SearchTag] = Field(default_factory=list)
    search_term: str = ""
    created_at: int = Field(default_factory=now_ms)
    last_used: int = Field(default_factory=now_ms)
    is_global: bool = False


class AgeRange(BaseModel):
    min: int = AGE_FILTER_MIN
    max: int = AGE_FILTER_MAX


class FilterState(BaseModel):
    status: list[str] = Field(default_factory=list)  # status ids
    age_range: AgeRange = Field(default_factory=AgeRange)
    location: list[str] = Field(default_factory=list)
    vote: str | None = None  # unanimous_yes | unanimous_no | mixed | no_votes
    show_filters: bool = False


class CurrentFocus(BaseModel):
    current_project_id: str | None = None
    character_id: str | None = None
    active_tab_key: str = LONG_LIST_KEY
    current_sort_option: str = SORT_ALPHABETICAL
    search_term: str = ""
    search_tags: list[SearchTag] = Field(default_factory=list)
    saved_searches: list[SavedSearch] = Field(default_factory=list)
    filters: FilterState = Field(default_factory=FilterState)


class Notification(BaseModel):
    id: str
    type: Literal["system", "user", "vote"] = "system"
    title: str
    message: str
    timestamp: int = Field(default_factory=now_ms)
    read: bool = False
    priority: Literal["low", "medium", "high"] = "low"
    actor_id: str | None = None
    character_id: str | None = None
    user_id: str | None = None
    metadata: dict[str, Any] | None = None


# --- Whole tree ---


class CastingState(BaseModel):
    """The single mutable state tree. Fully JSON-serializable."""
    users: list[User] = Field(default_factory=list)
    current_user_id: str | None = None
    projects: list[Project] = Field(default_factory=list)
    notifications: list[Notification] = Field(default_factory=list)  # newest first
    tab_definitions: list[TabDefinition] = Field(default_factory=list)
    tab_display_names: dict[str, str] = Field(default_factory=dict)  # display-only overrides
    predefined_statuses: list[ActorStatus] = Field(default_factory=list)
    sort_option_definitions: list[SortOption] = Field(default_factory=list)
    current_focus: CurrentFocus = Field(default_factory=CurrentFocus)

    def eligible_user_ids(self) -> list[str]:
        return [u.id for u in self.users]

    def find_user(self, user_id: str | None) -> User | None:
        if not user_id:
            return None
        return next((u for u in self.users if u.id == user_id), None)

    def find_project(self, project_id: str | None) -> Project | None:
        if not project_id:
            return None
        return next((p for p in self.projects if p.id == project_id), None)

    def find_character(self, character_id: str | None) -> Character | None:
        """Character by id across all projects."""
        if not character_id:
            return None
        for project in self.projects:
            for character in project.characters:
                if character.id == character_id:
                    return character
        return None

    def project_of(self, character_id: str) -> Project | None:
        for project in self.projects:
            if any(c.id == character_id for c in project.characters):
                return project
        return None

    def all_characters(self) -> Iterator[Character]:
        for project in self.projects:
            yield from project.characters

    def current_character(self) -> Character | None:
        return self.find_character(self.current_focus.character_id)
