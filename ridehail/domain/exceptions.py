"""
Domain exception hierarchy.

Every error the trip core raises is local and recoverable by the caller:
the API layer maps each class to one HTTP status (see
``ridehail.api.errors``).  Nothing here is retried.

    TripCoreError
    ├── ValidationError          bad input, failed geo checks      -> 400
    ├── AuthorizationError       wrong role for the transition     -> 403
    ├── NotFoundError            absent or not owned by the actor  -> 404
    │   └── NotAvailableError    already claimed / not SEARCHING   -> 404
    ├── AlreadyRatedError        one-time rating attempted twice   -> 409
    └── StateError               wrong status for the operation    -> 409
        ├── NotCompletedError
        └── InvalidStateTransition
"""

from __future__ import annotations

from typing import Any


class TripCoreError(Exception):
    """Base exception for all trip-core errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(TripCoreError):
    """Malformed or out-of-range input."""


class AuthorizationError(TripCoreError):
    """Correct shape, wrong actor for the requested change."""


class NotFoundError(TripCoreError):
    """Entity absent, or not visible to the acting user."""


class NotAvailableError(NotFoundError):
    """Trip was claimed by another driver or is no longer searching."""


class AlreadyRatedError(TripCoreError):
    """A trip can be rated only once."""


class StateError(TripCoreError):
    """Operation is invalid for the trip's current status."""


class NotCompletedError(StateError):
    pass


class InvalidStateTransition(StateError):
    """Raised when a trip status change violates the state machine."""
