"""
Domain errors raised by the conversation flow.

Each error carries the HTTP status it maps to and a human-readable cause.
A single exception handler in app.main renders them as
{"message": "ERROR", "cause": ...}.
"""

from __future__ import annotations


class ConversationError(Exception):
    """Base class for every error surfaced to API callers."""

    status_code: int = 500
    default_cause: str = "Internal error"

    def __init__(self, cause: str | None = None) -> None:
        self.cause = cause or self.default_cause
        super().__init__(self.cause)


class UnauthorizedError(ConversationError):
    """The request carries no caller identity."""

    status_code = 401
    default_cause = "Missing caller identity"


class NotFoundError(ConversationError):
    """No user record exists for the given id."""

    status_code = 401
    default_cause = "User doesn't exist or token malfunctioned"


class ForbiddenError(ConversationError):
    """The requested user id does not match the authenticated caller."""

    status_code = 403
    default_cause = "Permissions didn't match"


class ConflictError(ConversationError):
    """Another mutation for the same user is in progress."""

    status_code = 409
    default_cause = "Another request for this user is in progress"


class UpstreamError(ConversationError):
    """The AI chat service failed to produce a reply."""

    status_code = 502
    default_cause = "AI service failed to respond"


class PersistenceError(ConversationError):
    """The user store failed to read or write."""

    status_code = 500
    default_cause = "Failed to persist conversation"
