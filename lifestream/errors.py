"""
Error Taxonomy.

Every failure a screen can surface belongs to exactly one ``ErrorKind``.
Services raise these exceptions internally and convert them to a failed
``ServiceResult`` at their public boundary; the HTTP client wrapper maps
transport and status-code failures onto the same hierarchy.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional


class ErrorKind(StrEnum):
    """Closed set of error categories shown to the user."""

    VALIDATION = "validation_error"
    AUTHENTICATION = "authentication_error"
    AUTHORIZATION = "authorization_error"
    NETWORK = "network_error"
    SERVER = "server_error"
    NOT_FOUND = "not_found_error"


class LifeStreamError(Exception):
    """Base class for all application errors.

    Attributes
    ----------
    message:
        Human-readable description, safe to display in a toast.
    status_code:
        HTTP-style code used by the ``ServiceResult`` envelope.
    """

    kind: ErrorKind = ErrorKind.SERVER
    default_status: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message: str = message
        self.status_code: int = status_code if status_code is not None else self.default_status


class ValidationError(LifeStreamError):
    """Missing or invalid input, detected before any network call."""

    kind = ErrorKind.VALIDATION
    default_status = 400


class InvalidTransitionError(ValidationError):
    """A donation-request status change outside the allowed transitions."""

    default_status = 409


class AuthenticationError(LifeStreamError):
    """No session, or the session/token is no longer accepted."""

    kind = ErrorKind.AUTHENTICATION
    default_status = 401


class AuthorizationError(LifeStreamError):
    """The caller's role or ownership does not permit the action."""

    kind = ErrorKind.AUTHORIZATION
    default_status = 403


class NetworkError(LifeStreamError):
    """The remote service could not be reached or timed out."""

    kind = ErrorKind.NETWORK
    default_status = 503


class ServerError(LifeStreamError):
    """The remote service answered with an unexpected failure."""

    kind = ErrorKind.SERVER
    default_status = 500


class NotFoundError(LifeStreamError):
    """The requested record does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_status = 404
