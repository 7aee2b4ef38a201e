"""
Result types for sign-in, registration and session handling.

``AuthService`` never raises into the UI: every call returns an
``AuthResult`` whose ``error_code`` tells the login screen what went
wrong and whose ``error_message`` is safe to show as-is.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional

from pydantic import BaseModel

from lifestream.models.enums import Role


class AuthErrorCode(StrEnum):
    """Why an auth call failed."""

    INVALID_CREDENTIALS = "invalid_credentials"
    USER_BANNED = "user_banned"
    EMAIL_ALREADY_EXISTS = "email_already_exists"
    EMAIL_NOT_CONFIRMED = "email_not_confirmed"
    WEAK_PASSWORD = "weak_password"
    NETWORK_ERROR = "network_error"
    RATE_LIMITED = "rate_limited"
    VALIDATION_ERROR = "validation_error"
    SESSION_EXPIRED = "session_expired"
    # Signed in with the provider, but the platform API returned no usable role.
    ROLE_UNAVAILABLE = "role_unavailable"
    PROVIDER_UNAVAILABLE = "provider_unavailable"
    UNKNOWN_ERROR = "unknown_error"


_BAD_LOGIN = "Incorrect email or password."
_TAKEN = "An account with this email already exists. Try signing in."

# (substrings of the Supabase error code or message, category, user-facing text)
PROVIDER_ERROR_RULES: tuple[tuple[tuple[str, ...], AuthErrorCode, str], ...] = (
    (
        ("invalid_credentials", "invalid login credentials", "invalid_grant"),
        AuthErrorCode.INVALID_CREDENTIALS,
        _BAD_LOGIN,
    ),
    (
        ("user_banned",),
        AuthErrorCode.USER_BANNED,
        "This account has been blocked. Contact a LifeStream administrator.",
    ),
    (("user_already_exists", "already registered"), AuthErrorCode.EMAIL_ALREADY_EXISTS, _TAKEN),
    (
        ("email_not_confirmed",),
        AuthErrorCode.EMAIL_NOT_CONFIRMED,
        "Confirm your email address first; the link is in your inbox.",
    ),
    (
        ("weak_password",),
        AuthErrorCode.WEAK_PASSWORD,
        "That password was rejected as too weak. Try a longer one.",
    ),
    (
        ("over_request_rate_limit", "over_email_send_rate_limit"),
        AuthErrorCode.RATE_LIMITED,
        "Too many attempts. Wait a minute before trying again.",
    ),
)


def match_provider_error(code: str, message: str) -> Optional[tuple[str, AuthErrorCode, str]]:
    """Find the rule for a provider error.

    *code* is compared exactly and *message* by substring, both
    case-insensitively.  Returns ``(matched_key, category, text)``.
    """
    code, message = code.lower(), message.lower()
    for keys, category, text in PROVIDER_ERROR_RULES:
        for key in keys:
            if key == code or key in message:
                return key, category, text
    return None


class ValidationResult(BaseModel):
    """Outcome of one client-side form check."""

    is_valid: bool
    error_message: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, message: str) -> "ValidationResult":
        return cls(is_valid=False, error_message=message)


class AuthResult(BaseModel):
    """What the login screen and the shell get back from ``AuthService``.

    On success ``user_id``, ``email``, ``display_name`` and ``role``
    describe the signed-in user.  A successful registration that still
    awaits e-mail confirmation has ``role=None`` and carries the
    instructions in ``error_message``.  ``redirect_url`` is only set when
    starting the Google flow.
    """

    success: bool
    error_code: Optional[AuthErrorCode] = None
    error_message: Optional[str] = None
    user_id: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    role: Optional[Role] = None
    redirect_url: Optional[str] = None

    model_config = {"from_attributes": True}

    @classmethod
    def fail(cls, code: AuthErrorCode, message: Optional[str] = None) -> "AuthResult":
        return cls(success=False, error_code=code, error_message=message)
