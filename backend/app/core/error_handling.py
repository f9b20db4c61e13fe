"""Error handling utilities: casting exceptions, structured logging and error responses."""
from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)


class CastingError(Exception):
    """Base for recoverable engine errors. The reducer logs these and keeps the prior state."""

    error_code = "CASTING_ERROR"


class InvalidIntent(CastingError):
    """Intent payload failed validation."""

    error_code = "INVALID_INTENT"


class LocationNotFound(CastingError):
    """A list key or shortlist id does not exist on the character."""

    error_code = "LOCATION_NOT_FOUND"


class ActorNotFound(CastingError):
    error_code = "ACTOR_NOT_FOUND"


class CharacterNotFound(CastingError):
    error_code = "CHARACTER_NOT_FOUND"


class InvalidDropData(CastingError):
    """Drag payload could not be parsed. Aborts the gesture; logged at debug level only."""

    error_code = "INVALID_DROP_DATA"


class InvalidReorder(CastingError):
    """Reorder target is missing or is itself one of the dragged actors."""

    error_code = "INVALID_REORDER"


class TabPolicyError(CastingError):
    """Attempt to delete, reorder or re-key a system tab, or a duplicate tab key."""

    error_code = "TAB_POLICY"


class NoteNotFound(CastingError):
    error_code = "NOTE_NOT_FOUND"


class NotePermissionError(CastingError):
    """Only a note's author may edit or delete it."""

    error_code = "NOTE_PERMISSION"


def log_error_with_context(
    error: Exception,
    operation: str,
    character_id: str | None = None,
    actor_id: str | None = None,
    extra_context: dict[str, Any] | None = None,
) -> None:
    """
    Log an error with full context: operation, character_id, actor_id, and stack trace.

    Args:
        error: The exception that occurred
        operation: Intent type or engine operation (e.g., 'MOVE_ACTOR', 'delete_tab')
        character_id: Character the operation targeted
        actor_id: Actor the operation targeted
        extra_context: Additional context dict to include in log
    """
    context_parts = []
    if character_id:
        context_parts.append(f"character_id={character_id}")
    if actor_id:
        context_parts.append(f"actor_id={actor_id}")
    context_str = ", ".join(context_parts) if context_parts else "no context"

    extra = {}
    if extra_context:
        extra.update(extra_context)
    if character_id:
        extra["character_id"] = character_id
    if actor_id:
        extra["actor_id"] = actor_id
    extra["operation"] = operation

    logger.error(
        f"[{operation}] Error: {type(error).__name__}: {str(error)} ({context_str})",
        exc_info=True,
        extra=extra,
    )


def create_error_response(
    error_code: str,
    message: str,
    operation: str | None = None,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Create a structured error response for API endpoints.

    Args:
        error_code: Error code (e.g., 'ACTOR_NOT_FOUND', 'TAB_POLICY')
        message: Human-readable error message
        operation: Intent type where the error occurred
        details: Additional error details

    Returns:
        Structured error dict
    """
    response: dict[str, Any] = {
        "error_code": error_code,
        "message": message,
    }
    if operation:
        response["operation"] = operation
    if details:
        response["details"] = details
    return response
