"""Application models (casting state tree, intents, payloads)."""
from .casting import (
    Actor,
    ActorStatus,
    CastingState,
    Character,
    CharacterActors,
    ConsensusAction,
    CurrentFocus,
    FilterState,
    Note,
    Notification,
    Project,
    ProjectAssignment,
    SavedSearch,
    SearchTag,
    ShortList,
    TabDefinition,
    User,
)
from .intents import (
    INTENT_PAYLOADS,
    CustomLocation,
    Intent,
    LocationDescriptor,
    ShortlistLocation,
    StandardLocation,
)

__all__ = [
    "Actor",
    "ActorStatus",
    "CastingState",
    "Character",
    "CharacterActors",
    "ConsensusAction",
    "CurrentFocus",
    "FilterState",
    "Note",
    "Notification",
    "Project",
    "ProjectAssignment",
    "SavedSearch",
    "SearchTag",
    "ShortList",
    "TabDefinition",
    "User",
    "INTENT_PAYLOADS",
    "CustomLocation",
    "Intent",
    "LocationDescriptor",
    "ShortlistLocation",
    "StandardLocation",
]
