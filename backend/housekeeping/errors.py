"""
Housekeeping error taxonomy

Every error is raised before any state is touched, so a failed operation
always leaves the store unchanged. Routers map each class to an HTTP status.
"""
from typing import Dict, Optional


class HousekeepingError(Exception):
    """Base class for all workflow errors."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(HousekeepingError):
    """Input rejected field by field (cleaner profile, catalog feed)."""

    status_code = 422

    def __init__(self, errors: Dict[str, str], message: str = "Validation failed"):
        super().__init__(message)
        self.errors = dict(errors)


class PreconditionFailed(HousekeepingError, ValueError):
    """Operation not allowed in the current state (out-of-order task, unfinished room, inactive cleaner)."""

    status_code = 400


class NotFound(HousekeepingError, LookupError):
    """Unknown room, cleaner, proposal or message id."""

    status_code = 404

    def __init__(self, kind: str, key: str, message: Optional[str] = None):
        super().__init__(message or f"{kind} '{key}' not found")
        self.kind = kind
        self.key = key


class StateConflict(HousekeepingError):
    """The target changed between read and write; caller should re-fetch and retry."""

    status_code = 409


class Forbidden(HousekeepingError):
    """The acting role may not perform this operation."""

    status_code = 403


__all__ = [
    "HousekeepingError",
    "ValidationFailed",
    "PreconditionFailed",
    "NotFound",
    "StateConflict",
    "Forbidden",
]
