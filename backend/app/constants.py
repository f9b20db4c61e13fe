"""Centralized casting constants shared across the app."""
from __future__ import annotations

# List keys (stored values; persisted state depends on them)
LONG_LIST_KEY = "longList"
AUDITION_KEY = "audition"
APPROVAL_KEY = "approval"
SHORTLISTS_KEY = "shortLists"

STANDARD_LIST_KEYS: tuple[str, ...] = (LONG_LIST_KEY, AUDITION_KEY, APPROVAL_KEY)
SYSTEM_TAB_KEYS: frozenset[str] = frozenset({LONG_LIST_KEY, APPROVAL_KEY})
RESERVED_ACTOR_KEYS: frozenset[str] = frozenset({*STANDARD_LIST_KEYS, SHORTLISTS_KEY})

DEFAULT_TAB_DEFINITIONS: tuple[tuple[str, str], ...] = (
    (LONG_LIST_KEY, "Long List"),
    (AUDITION_KEY, "Audition"),
    (APPROVAL_KEY, "Approval"),
)

# Votes
VOTE_YES = "yes"
VOTE_NO = "no"
VOTE_MAYBE = "maybe"
VOTE_VALUES: frozenset[str] = frozenset({VOTE_YES, VOTE_NO, VOTE_MAYBE})

CONSENSUS_YES = "yes"
CONSENSUS_NO = "no"
CONSENSUS_STAY = "stay"

# Move reasons
MOVE_REASON_DEFAULT = "default"
MOVE_REASON_RESET = "reset"
MOVE_REASON_FINAL_REVIEW = "final_review"

# Sort options
SORT_ALPHABETICAL = "alphabetical"
SORT_CONSENSUS = "consensus"
SORT_STATUS = "status"
SORT_DATE_ADDED = "dateAdded"
SORT_AGE = "age"
SORT_NOTES = "notes"
SORT_CUSTOM = "custom"

DEFAULT_SORT_OPTIONS: tuple[tuple[str, str], ...] = (
    (SORT_ALPHABETICAL, "Alphabetical (A-Z)"),
    (SORT_CONSENSUS, "Consensus (Most Voted)"),
    (SORT_STATUS, "Status"),
    (SORT_DATE_ADDED, "Date Added (Newest)"),
    (SORT_AGE, "Age (Youngest)"),
    (SORT_NOTES, "Most Notes"),
    (SORT_CUSTOM, "Custom Order"),
)

# Vote-pattern filters
VOTE_FILTER_UNANIMOUS_YES = "unanimous_yes"
VOTE_FILTER_UNANIMOUS_NO = "unanimous_no"
VOTE_FILTER_MIXED = "mixed"
VOTE_FILTER_NO_VOTES = "no_votes"

# Age filter bounds; a range equal to the defaults is inactive
AGE_FILTER_MIN = 0
AGE_FILTER_MAX = 100
# Sort key for unparsable ages
AGE_UNKNOWN_SORT_VALUE = 10**9
# Sort key for missing sort_order
SORT_ORDER_MISSING = 10**9

# Notification priorities
PRIORITY_LOW = "low"
PRIORITY_MEDIUM = "medium"
PRIORITY_HIGH = "high"

NOTIFICATION_SYSTEM = "system"
NOTIFICATION_USER = "user"
NOTIFICATION_VOTE = "vote"

# Notifications kept in state (newest first)
NOTIFICATIONS_MAX = 200

# Contact templates -> status label
CONTACT_STATUS_LABELS: dict[str, str] = {
    "audition": "Audition Invite Sent",
    "callback": "Callback Invite Sent",
    "rejection": "Rejection Sent",
    "offer": "Offer Sent",
    "general": "General Contact",
}
CONTACT_STATUS_CATEGORY = "contact"

# Drag payload marker
DRAG_TYPE_ACTOR = "actor"
