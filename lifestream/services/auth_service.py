"""
Authentication Service.

Centralises every identity operation behind one injectable service:

- Client-side validation of sign-in, registration and profile forms.
- Email/password and OAuth (PKCE) sign-in through Supabase Auth.
- Role resolution on every identity change, attached to the identity
  before it is published.  A failed resolution signs the user out.
- Registration: provider account, optional avatar upload, platform
  profile record.
- Bearer-token access with transparent refresh for the API client.
- Forced sign-out when the API rejects the session (HTTP 401).
"""

from __future__ import annotations

import re
import threading
from pathlib import Path
from typing import Any, Callable, Optional

from lifestream.api_client import ApiClient, new_idempotency_key
from lifestream.auth import SessionManager
from lifestream.config import AppConfig
from lifestream.errors import LifeStreamError, NotFoundError
from lifestream.identity_provider import IdentityProvider
from lifestream.logger import StructuredLogger
from lifestream.models.auth_models import (
    AuthErrorCode,
    AuthResult,
    ValidationResult,
    match_provider_error,
)
from lifestream.models.enums import BloodGroup, Role, UserStatus
from lifestream.models.user import Identity, ProfileUpdate, RegistrationInput, UserProfile
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.image_service import ImageHostService
from lifestream.services.location_service import LocationService
from lifestream.services.role_resolver import resolve_role

_EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}$")
_CONTROL_CHAR_RE = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_MIN_PASSWORD_LENGTH: int = 6


class AuthService:
    """Identity operations for the desktop client.

    Parameters
    ----------
    provider:
        Supabase auth connection.
    session:
        Shared session holder; the only writer of identity state.
    api:
        Platform API client, used for role lookup.
    users:
        Profile repository.
    locations:
        Reference data for district/upazila validation.
    images:
        Avatar upload service.
    config:
        Application configuration (OAuth provider and redirect URL).
    logger:
        Structured JSON logger for audit-grade logging.
    """

    def __init__(
        self,
        provider: IdentityProvider,
        session: SessionManager,
        api: ApiClient,
        users: UserRepository,
        locations: LocationService,
        images: ImageHostService,
        config: AppConfig,
        logger: StructuredLogger,
    ) -> None:
        self._provider: IdentityProvider = provider
        self._session: SessionManager = session
        self._api: ApiClient = api
        self._users: UserRepository = users
        self._locations: LocationService = locations
        self._images: ImageHostService = images
        self._config: AppConfig = config
        self._logger: StructuredLogger = logger
        self._refresh_lock: threading.Lock = threading.Lock()

    # ==================================================================
    # Validation helpers
    # ==================================================================

    @staticmethod
    def validate_email(email: str) -> ValidationResult:
        email = (email or "").strip()
        if not email:
            return ValidationResult.fail("Email address is required.")
        if not _EMAIL_RE.match(email):
            return ValidationResult.fail("Please enter a valid email address.")
        return ValidationResult.ok()

    @staticmethod
    def validate_password(password: str) -> ValidationResult:
        """At least six characters with one upper-case and one lower-case letter."""
        if len(password) < _MIN_PASSWORD_LENGTH:
            return ValidationResult.fail(
                f"Password must be at least {_MIN_PASSWORD_LENGTH} characters long.",
            )
        if password.lower() == password:
            return ValidationResult.fail("Password must contain at least one uppercase letter.")
        if password.upper() == password:
            return ValidationResult.fail("Password must contain at least one lowercase letter.")
        return ValidationResult.ok()

    @staticmethod
    def validate_name(name: str) -> ValidationResult:
        stripped = name.strip()
        if not stripped:
            return ValidationResult.fail("Name is required.")
        if len(stripped) < 2:
            return ValidationResult.fail("Name must be at least 2 characters.")
        if _CONTROL_CHAR_RE.search(stripped):
            return ValidationResult.fail("Name contains invalid characters.")
        return ValidationResult.ok()

    @staticmethod
    def validate_blood_group(blood_group: str) -> ValidationResult:
        if blood_group not in {group.value for group in BloodGroup}:
            return ValidationResult.fail("Please select your blood group.")
        return ValidationResult.ok()

    def validate_location(self, district: str, upazila: str) -> ValidationResult:
        if not district:
            return ValidationResult.fail("Please select your district.")
        if not upazila:
            return ValidationResult.fail("Please select your upazila.")
        if not self._locations.is_consistent(district, upazila):
            return ValidationResult.fail(f"{upazila} is not an upazila of {district}.")
        return ValidationResult.ok()

    def validate_registration(self, form: RegistrationInput) -> ValidationResult:
        """Check the form top to bottom and report the first problem."""
        checks: tuple[Callable[[], ValidationResult], ...] = (
            lambda: self.validate_name(form.name),
            lambda: self.validate_email(form.email),
            lambda: self.validate_password(form.password),
            lambda: (
                ValidationResult.ok()
                if form.password == form.confirm_password
                else ValidationResult.fail("Passwords do not match.")
            ),
            lambda: self.validate_blood_group(form.blood_group),
            lambda: self.validate_location(form.district, form.upazila),
            lambda: (
                ValidationResult.ok()
                if form.accepted_terms
                else ValidationResult.fail("You must accept the Terms & Conditions.")
            ),
        )
        for check in checks:
            outcome = check()
            if not outcome.is_valid:
                return outcome
        return ValidationResult.ok()

    @staticmethod
    def normalize_email(email: str) -> str:
        """Normalise an email address: strip whitespace and lowercase."""
        return email.strip().lower()

    # ==================================================================
    # Sign-in
    # ==================================================================

    def sign_in(self, email: str, password: str) -> AuthResult:
        """Authenticate with email and password.

        Returns
        -------
        AuthResult
            ``success=True`` once the identity, with its role, has been
            published to the session.
        """
        email_check = self.validate_email(email)
        if not email_check.is_valid:
            return self._invalid(email_check)
        if not password:
            return AuthResult.fail(
                AuthErrorCode.VALIDATION_ERROR,
                "Please enter your password.",
            )

        email = self.normalize_email(email)
        try:
            response = self._provider.auth.sign_in_with_password({
                "email": email,
                "password": password,
            })
        except RuntimeError as exc:
            return self._provider_unavailable(exc)
        except Exception as exc:
            return self._classify_provider_error(exc, event="LOGIN_FAILED")

        return self._establish(response.user, response.session, event="LOGIN")

    def sign_in_with_provider(self) -> AuthResult:
        """Start OAuth sign-in; ``redirect_url`` is opened in the browser."""
        try:
            response = self._provider.auth.sign_in_with_oauth({
                "provider": self._config.OAUTH_PROVIDER,
                "options": {"redirect_to": self._config.OAUTH_REDIRECT_URL},
            })
        except RuntimeError as exc:
            return self._provider_unavailable(exc)
        except Exception as exc:
            return self._classify_provider_error(exc, event="OAUTH_FAILED")

        self._logger.info(
            "OAuth sign-in started with %s", self._config.OAUTH_PROVIDER,
            extra={"event": "OAUTH_START"},
        )
        return AuthResult(success=True, redirect_url=response.url)

    def complete_provider_sign_in(self, auth_code: str) -> AuthResult:
        """Exchange the OAuth callback code for a session.

        First-time provider users get a donor profile record so the
        role lookup can succeed.
        """
        if not auth_code.strip():
            return AuthResult.fail(
                AuthErrorCode.VALIDATION_ERROR,
                "Paste the sign-in code from your browser.",
            )
        try:
            response = self._provider.auth.exchange_code_for_session({
                "auth_code": auth_code.strip(),
            })
        except RuntimeError as exc:
            return self._provider_unavailable(exc)
        except Exception as exc:
            return self._classify_provider_error(exc, event="OAUTH_FAILED")

        if response.session is not None and response.user is not None:
            self._ensure_profile(response.user, response.session.access_token)
        return self._establish(response.user, response.session, event="OAUTH_LOGIN")

    def restore_session(self) -> AuthResult:
        """Resolve any session the provider still holds at startup.

        While this runs the session reports ``is_loading`` so guarded
        screens wait instead of redirecting.
        """
        self._session.set_loading(True)
        try:
            stored = self._provider.auth.get_session()
        except RuntimeError:
            self._session.clear()
            return AuthResult.fail(AuthErrorCode.PROVIDER_UNAVAILABLE)
        except Exception as exc:
            self._logger.warning("Could not restore session: %s", exc)
            self._session.clear()
            return AuthResult.fail(AuthErrorCode.SESSION_EXPIRED)

        if stored is None or getattr(stored, "user", None) is None:
            self._session.clear()
            return AuthResult.fail(AuthErrorCode.SESSION_EXPIRED)
        return self._establish(stored.user, stored, event="SESSION_RESTORED")

    # ==================================================================
    # Registration
    # ==================================================================

    def sign_up(self, form: RegistrationInput) -> AuthResult:
        """Register a donor account.

        Steps: validate, upload avatar, create provider account with
        display metadata, save the platform profile record, then sign in
        when the provider issued a session straight away.
        """
        check = self.validate_registration(form)
        if not check.is_valid:
            return self._invalid(check)

        email = self.normalize_email(form.email)
        name = form.name.strip()

        photo_url: Optional[str] = None
        if form.avatar_path:
            upload = self._images.upload(Path(form.avatar_path))
            if not upload.success:
                return AuthResult.fail(
                    AuthErrorCode.VALIDATION_ERROR,
                    upload.error,
                )
            photo_url = upload.data

        try:
            response = self._provider.auth.sign_up({
                "email": email,
                "password": form.password,
                "options": {"data": {"full_name": name, "avatar_url": photo_url}},
            })
        except RuntimeError as exc:
            return self._provider_unavailable(exc)
        except Exception as exc:
            return self._classify_provider_error(exc, event="REGISTER_FAILED")

        user_data = response.user
        session_data = response.session
        token = session_data.access_token if session_data is not None else None
        profile = UserProfile(
            uid=user_data.id,
            name=name,
            email=email,
            photo_url=photo_url,
            blood_group=BloodGroup(form.blood_group),
            district=form.district,
            upazila=form.upazila,
            status=UserStatus.ACTIVE,
            role=Role.DONOR,
        )
        try:
            self._users.create_profile(
                profile,
                idempotency_key=new_idempotency_key(),
                token=token,
            )
        except LifeStreamError as exc:
            self._logger.error(
                "Profile record for %s could not be saved: %s", email, exc.message,
                extra={"event": "REGISTER_PROFILE_FAILED"},
            )
            return AuthResult.fail(
                AuthErrorCode.NETWORK_ERROR,
                f"Your account was created but your profile could not be saved: {exc.message}",
            )

        self._logger.info(
            "User registered: %s", email,
            extra={"event": "REGISTER", "email": email, "user_id": user_data.id},
        )

        if session_data is None:
            return AuthResult(
                success=True,
                user_id=user_data.id,
                email=email,
                display_name=name,
                error_message="Check your inbox to confirm your email, then sign in.",
            )
        return self._establish(user_data, session_data, event="REGISTER_LOGIN")

    # ==================================================================
    # Profile
    # ==================================================================

    def update_profile(self, update: ProfileUpdate) -> AuthResult:
        """Update display metadata and the platform profile record."""
        if not self._session.is_authenticated:
            return AuthResult.fail(
                AuthErrorCode.SESSION_EXPIRED,
                "Please sign in again.",
            )
        identity = self._session.get_identity()

        for check in (
            self.validate_name(update.name),
            self.validate_blood_group(update.blood_group),
            self.validate_location(update.district, update.upazila),
        ):
            if not check.is_valid:
                return self._invalid(check)

        photo_url = update.photo_url
        if update.avatar_path:
            upload = self._images.upload(Path(update.avatar_path))
            if not upload.success:
                return AuthResult.fail(
                    AuthErrorCode.VALIDATION_ERROR,
                    upload.error,
                )
            photo_url = upload.data

        name = update.name.strip()
        try:
            self._provider.auth.update_user({
                "data": {"full_name": name, "avatar_url": photo_url},
            })
        except RuntimeError as exc:
            return self._provider_unavailable(exc)
        except Exception as exc:
            return self._classify_provider_error(exc, event="PROFILE_UPDATE_FAILED")

        try:
            self._users.update_profile(identity.id, {
                "name": name,
                "photoURL": photo_url,
                "bloodGroup": update.blood_group,
                "district": update.district,
                "upazila": update.upazila,
            })
        except LifeStreamError as exc:
            return AuthResult.fail(
                AuthErrorCode.NETWORK_ERROR,
                exc.message,
            )

        role_result = resolve_role(self._api, self.get_bearer_token() or "")
        if not role_result.success or role_result.data is None:
            return self._role_unavailable(identity.email, identity.id, role_result.error)
        updated = identity.model_copy(
            update={"display_name": name, "photo_url": photo_url, "role": role_result.data},
        )
        self._session.publish(updated)
        self._logger.info(
            "Profile updated for %s", identity.email,
            extra={"event": "PROFILE_UPDATE", "user_id": identity.id},
        )
        return AuthResult(
            success=True,
            user_id=updated.id,
            email=updated.email,
            display_name=updated.display_name,
            role=updated.role,
        )

    # ==================================================================
    # Sign-out
    # ==================================================================

    def sign_out(self) -> None:
        """Revoke the provider session (best effort) and clear local state."""
        identity = self._session.identity
        try:
            self._provider.auth.sign_out()
        except RuntimeError:
            self._logger.debug("Identity provider unavailable; local sign-out only.")
        except Exception as exc:
            self._logger.warning("Server-side sign_out failed: %s", exc)

        self._session.clear()
        self._logger.info(
            "User signed out: %s",
            identity.email if identity else "unknown",
            extra={
                "event": "LOGOUT",
                "user_id": identity.id if identity else "unknown",
            },
        )

    def handle_unauthorized(self) -> None:
        """Called by the API client on HTTP 401: end the session."""
        if not self._session.is_authenticated:
            return
        self._logger.warning(
            "API rejected the session token. Forcing sign-out.",
            extra={"event": "SESSION_REJECTED"},
        )
        self.sign_out()

    # ==================================================================
    # Tokens
    # ==================================================================

    def get_bearer_token(self) -> Optional[str]:
        """Return a fresh access token, or ``None`` when signed out.

        Refreshes through the provider when the token is within 30 s of
        expiry.  Concurrent callers share one refresh.
        """
        if not self._session.is_authenticated:
            return None
        if self._session.is_token_expired:
            with self._refresh_lock:
                if self._session.is_token_expired:
                    result = self.refresh_session_token()
                    if not result.success:
                        return None
        return self._session.access_token

    def refresh_session_token(self) -> AuthResult:
        """Attempt to refresh the access token.

        Distinguishes auth errors (expired/revoked refresh token ->
        ``SESSION_EXPIRED``) from transient network errors (skip, the
        next call retries).
        """
        if not self._session.is_authenticated or not self._session.is_token_expired:
            return AuthResult(success=True)

        refresh_token: Optional[str] = self._session.refresh_token
        if not refresh_token or not self._provider.is_available:
            return AuthResult(success=True)

        try:
            response = self._provider.auth.refresh_session(refresh_token)
            new_session = response.session
            if new_session is not None:
                self._session.set_tokens(
                    access_token=new_session.access_token,
                    refresh_token=new_session.refresh_token,
                    expires_at=new_session.expires_at,
                )
                self._logger.info("Session token refreshed.")
            return AuthResult(success=True)

        except (ConnectionError, TimeoutError):
            self._logger.debug("Network error during token refresh; will retry.")
            return AuthResult(success=True)

        except Exception as exc:
            self._logger.warning(
                "Token refresh failed (auth error): %s. Forcing logout.", exc,
                extra={"event": "SESSION_EXPIRED"},
            )
            return AuthResult.fail(
                AuthErrorCode.SESSION_EXPIRED,
                "Your session has expired. Please sign in again.",
            )

    # ==================================================================
    # Private helpers
    # ==================================================================

    def _role_unavailable(self, email: str, user_id: str, reason: Optional[str]) -> AuthResult:
        """Fail closed: sign out when the platform role cannot be confirmed."""
        self._logger.warning(
            "Role resolution failed for %s: %s. Signing out.",
            email,
            reason,
            extra={"event": "ROLE_UNAVAILABLE", "user_id": user_id},
        )
        self.sign_out()
        return AuthResult(
            success=False,
            error_code=AuthErrorCode.ROLE_UNAVAILABLE,
            error_message=(
                "We could not verify your account permissions. "
                f"Please try again later. ({reason})"
            ),
        )

    def _establish(self, user_data: Any, session_data: Any, *, event: str) -> AuthResult:
        """Store tokens, resolve the role, then publish the identity.

        The identity is only published with a resolved role.  When the
        role cannot be resolved the session is signed out.
        """
        if user_data is None or session_data is None:
            self._session.clear()
            return AuthResult.fail(
                AuthErrorCode.UNKNOWN_ERROR,
                "The identity provider returned no session.",
            )

        self._session.set_tokens(
            access_token=session_data.access_token,
            refresh_token=session_data.refresh_token,
            expires_at=session_data.expires_at,
        )

        role_result = resolve_role(self._api, session_data.access_token)
        if not role_result.success or role_result.data is None:
            return self._role_unavailable(user_data.email, user_data.id, role_result.error)

        metadata: dict[str, Any] = getattr(user_data, "user_metadata", None) or {}
        email: str = user_data.email or ""
        identity = Identity(
            id=user_data.id,
            email=email,
            display_name=str(metadata.get("full_name") or metadata.get("name") or ""),
            photo_url=metadata.get("avatar_url") or metadata.get("picture"),
        ).with_role(role_result.data)
        self._session.publish(identity)

        self._logger.info(
            "User authenticated: %s (role: %s)",
            identity.email,
            identity.role,
            extra={"event": event, "user_id": identity.id},
        )
        return AuthResult(
            success=True,
            user_id=identity.id,
            email=identity.email,
            display_name=identity.display_name,
            role=identity.role,
        )

    def _ensure_profile(self, user_data: Any, token: str) -> None:
        """Create a donor profile for a first-time OAuth user."""
        try:
            self._users.get_profile(user_data.id, token=token)
            return
        except NotFoundError:
            self._logger.debug("No profile record yet for %s.", user_data.email)
        except LifeStreamError as exc:
            self._logger.warning("Profile lookup failed for %s: %s", user_data.email, exc.message)
            return

        metadata: dict[str, Any] = getattr(user_data, "user_metadata", None) or {}
        profile = UserProfile(
            uid=user_data.id,
            name=str(metadata.get("full_name") or metadata.get("name") or ""),
            email=user_data.email or "",
            photo_url=metadata.get("avatar_url") or metadata.get("picture"),
            status=UserStatus.ACTIVE,
            role=Role.DONOR,
        )
        try:
            self._users.create_profile(profile, idempotency_key=new_idempotency_key(), token=token)
            self._logger.info(
                "Created profile for first-time provider user %s", profile.email,
                extra={"event": "PROFILE_CREATED", "user_id": user_data.id},
            )
        except LifeStreamError as exc:
            self._logger.warning("Could not create profile for %s: %s", profile.email, exc.message)

    @staticmethod
    def _invalid(check: ValidationResult) -> AuthResult:
        return AuthResult.fail(AuthErrorCode.VALIDATION_ERROR, check.error_message)

    def _provider_unavailable(self, exc: Exception) -> AuthResult:
        self._logger.warning("Identity provider unavailable: %s", exc)
        return AuthResult.fail(
            AuthErrorCode.PROVIDER_UNAVAILABLE,
            "Sign-in is not configured. Contact an administrator.",
        )

    def _classify_provider_error(self, exc: Exception, *, event: str) -> AuthResult:
        """Turn a Supabase or transport exception into an ``AuthResult``."""
        if isinstance(exc, (ConnectionError, TimeoutError)):
            self._logger.warning("Identity provider unreachable: %s", exc, extra={"event": event})
            return AuthResult.fail(
                AuthErrorCode.NETWORK_ERROR,
                "Cannot reach the server. Check your internet connection.",
            )

        matched = match_provider_error(str(getattr(exc, "code", "") or ""), str(exc))
        if matched is None:
            self._logger.warning(
                "Unrecognised auth error: %s", exc, extra={"event": event, "error_code": "unknown"},
            )
            return AuthResult.fail(
                AuthErrorCode.UNKNOWN_ERROR,
                "Something went wrong while signing in. Please try again later.",
            )

        key, category, text = matched
        self._logger.warning(
            "Auth error (%s): %s", key, exc, extra={"event": event, "error_code": key},
        )
        return AuthResult.fail(category, text)
