"""Soft move warnings: confirmation-gate messages, not errors."""
from __future__ import annotations

import logging
from typing import Iterable

from backend.app.constants import APPROVAL_KEY, LONG_LIST_KEY
from backend.app.models.casting import Actor

logger = logging.getLogger(__name__)


def add_warning(warnings: list[str], message: str) -> None:
    """Append a warning unless it is empty or already present."""
    if message and message not in warnings:
        warnings.append(message)


def move_warnings(actors: Iterable[Actor], destination_key: str) -> list[str]:
    """Warnings to show before moving actors into destination_key. Empty list means no gate."""
    actors = list(actors)
    warnings: list[str] = []

    if destination_key == APPROVAL_KEY:
        unvoted = [a for a in actors if not a.user_votes]
        if unvoted:
            add_warning(
                warnings,
                f"{len(unvoted)} actor(s) have no votes yet. "
                "Consider getting team input before moving to approval.",
            )
        skipping = [a for a in actors if a.current_list_key == LONG_LIST_KEY]
        if skipping:
            add_warning(
                warnings,
                f"{len(skipping)} actor(s) are moving directly from Long List to Approval. "
                "This skips the audition stage.",
            )
    elif destination_key == LONG_LIST_KEY:
        from_approval = [a for a in actors if a.current_list_key == APPROVAL_KEY]
        if from_approval:
            add_warning(
                warnings,
                f"{len(from_approval)} actor(s) are moving back from Approval. "
                "Their voting history will be preserved.",
            )
        cast = [a for a in actors if a.is_greenlit or a.is_cast]
        if cast:
            add_warning(
                warnings,
                f"{len(cast)} greenlit/cast actor(s) are being moved back to Long List. "
                "This will reset their cast status.",
            )

    if warnings:
        logger.debug("Move into %s raised %d warning(s)", destination_key, len(warnings))
    return warnings
