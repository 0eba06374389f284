"""
Domain exceptions raised by the service layer.

Routes never build error responses for these by hand; ``main.py`` registers a
single handler that turns any ``ClubError`` into ``{"detail": message}`` with
the class's status code.
"""
from fastapi import status


class ClubError(Exception):
    """Base class for all rule-engine errors."""
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DomainValidationError(ClubError):
    """Malformed input: bad amount, missing field, incomplete batch."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class PolicyViolationError(ClubError):
    """Operation is well-formed but not allowed in the current state."""
    status_code = status.HTTP_409_CONFLICT


class IllegalTransitionError(PolicyViolationError):
    """A state machine was asked for a transition its table does not allow."""


class PermissionDeniedError(PolicyViolationError):
    """Caller is not the owner of the resource (e.g. another leader's batch)."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ClubError):
    status_code = status.HTTP_404_NOT_FOUND


class InvariantViolationError(ClubError):
    """A caller bug: zero/negative ledger amount, duplicate account creation."""
    status_code = status.HTTP_400_BAD_REQUEST
