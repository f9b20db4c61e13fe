"""Notification feed: build, append (newest first, capped) and mark read."""
from __future__ import annotations

import logging
import uuid
from typing import Any

from backend.app.constants import (
    APPROVAL_KEY,
    LONG_LIST_KEY,
    NOTIFICATION_SYSTEM,
    NOTIFICATIONS_MAX,
    PRIORITY_LOW,
    PRIORITY_MEDIUM,
)
from backend.app.models.casting import CastingState, Notification, now_ms

logger = logging.getLogger(__name__)


def make_notification(
    title: str,
    message: str,
    *,
    type: str = NOTIFICATION_SYSTEM,
    priority: str = PRIORITY_LOW,
    actor_id: str | None = None,
    character_id: str | None = None,
    user_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> Notification:
    return Notification(
        id=str(uuid.uuid4()),
        type=type,
        title=title,
        message=message,
        timestamp=now_ms(),
        priority=priority,
        actor_id=actor_id,
        character_id=character_id,
        user_id=user_id,
        metadata=metadata,
    )


def push_notification(state: CastingState, notification: Notification) -> None:
    """Prepend to state.notifications and trim to NOTIFICATIONS_MAX. Mutates state."""
    state.notifications.insert(0, notification)
    if len(state.notifications) > NOTIFICATIONS_MAX:
        del state.notifications[NOTIFICATIONS_MAX:]
    logger.debug("Notification: %s (%s)", notification.title, notification.priority)


def move_notification(
    actor_names: list[str],
    destination_key: str,
    destination_name: str,
    character_id: str,
    character_name: str = "",
    user_id: str | None = None,
) -> Notification:
    """One notification per committed move call. Moves into approval are medium priority."""
    count = len(actor_names)
    who = actor_names[0] if count == 1 else f"{count} actors"
    suffix = f" for {character_name}" if character_name else ""
    if destination_key == APPROVAL_KEY:
        title = "Moved to Approval"
        message = f"{who} moved to {destination_name} for final review{suffix}"
    elif destination_key == LONG_LIST_KEY:
        title = "Moved to Long List"
        message = f"{who} moved to {destination_name} for fresh evaluation{suffix}"
    else:
        title = "Actor Moved" if count == 1 else "Actors Moved"
        message = f"{who} moved to {destination_name}{suffix}"
    return make_notification(
        title,
        message,
        priority=PRIORITY_MEDIUM if destination_key == APPROVAL_KEY else PRIORITY_LOW,
        character_id=character_id,
        user_id=user_id,
        metadata={"count": count, "destination": destination_key},
    )


def mark_read(state: CastingState, notification_id: str) -> None:
    for n in state.notifications:
        if n.id == notification_id:
            n.read = True
            return


def mark_all_read(state: CastingState) -> None:
    for n in state.notifications:
        n.read = True


def delete_notification(state: CastingState, notification_id: str) -> None:
    state.notifications = [n for n in state.notifications if n.id != notification_id]


def unread_count(state: CastingState) -> int:
    return sum(1 for n in state.notifications if not n.read)
