"""
User Management Service.

Handles administrative user operations (listing, blocking, role
changes), the signed-in user's profile read, and the public donor
search.

Architectural notes:
    - Role and status changes are admin-only and checked here before
      the request is sent; the API enforces the same rule server-side.
    - Changing a role always re-activates the account.
    - Promoting somebody to admin needs an explicit confirmation.
"""

from __future__ import annotations

from typing import Optional

from lifestream.auth import SessionManager
from lifestream.errors import LifeStreamError, NotFoundError, ValidationError
from lifestream.guards import require_role
from lifestream.logger import StructuredLogger
from lifestream.models.enums import BloodGroup, Role, UserStatus
from lifestream.models.service_models import ServiceResult
from lifestream.models.user import UserProfile
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.base_service import BaseService
from lifestream.services.location_service import LocationService
from lifestream.utils.audit import log_audit_event


class UserService(BaseService):
    """Service layer for user management, profiles and donor search."""

    def __init__(
        self,
        session: SessionManager,
        repo: UserRepository,
        locations: LocationService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._repo = repo
        self._locations = locations

    # ------------------------------------------------------------------
    # Admin
    # ------------------------------------------------------------------

    def get_all_users(self) -> ServiceResult[list[UserProfile]]:
        """Fetch every user for the admin table."""
        try:
            fetch = require_role(self._session, Role.ADMIN)(self._repo.list_all)
            return ServiceResult[list[UserProfile]].ok(fetch())
        except LifeStreamError as exc:
            return self._failure(exc, "list_users")

    def toggle_status(self, user: UserProfile) -> ServiceResult[UserProfile]:
        """Block an active user or unblock a blocked one."""
        new_status: UserStatus = user.status.toggled
        try:
            admin = self._session.get_identity()
            update = require_role(self._session, Role.ADMIN)(self._repo.set_status)
            if user.uid and user.uid == admin.id:
                raise ValidationError("You cannot block your own account.")
            update(user.record_id, new_status)
        except LifeStreamError as exc:
            return self._failure(exc, "toggle_user_status")

        log_audit_event(
            logger=self._logger,
            action="UPDATE_STATUS",
            entity_type="User",
            entity_id=user.record_id,
            user_id=admin.id,
            details={"old_status": str(user.status), "new_status": str(new_status)},
        )
        return ServiceResult[UserProfile].ok(
            user.model_copy(update={"status": new_status})
        )

    def update_user_role(
        self,
        user: UserProfile,
        new_role: str,
        *,
        confirmed: bool = False,
    ) -> ServiceResult[UserProfile]:
        """Change *user*'s role; the account becomes active again.

        Args:
            user: The profile being changed.
            new_role: One of 'donor', 'volunteer', 'admin'.
            confirmed: Must be ``True`` when promoting to admin.
        """
        try:
            admin = self._session.get_identity()
            update = require_role(self._session, Role.ADMIN)(self._repo.set_role)

            # --- 1. Validate the role string against the enum ---
            try:
                validated_role = Role(new_role)
            except ValueError:
                raise ValidationError(
                    f"Invalid role specified: '{new_role}'. "
                    f"Must be one of: {', '.join(r.value for r in Role)}."
                ) from None

            # --- 2. Promotion to admin is two-step ---
            if validated_role is Role.ADMIN and user.role is not Role.ADMIN and not confirmed:
                raise ValidationError(f"Confirm that {user.name or user.email} should become an admin.")

            update(user.record_id, validated_role)
        except LifeStreamError as exc:
            return self._failure(exc, "update_user_role")

        log_audit_event(
            logger=self._logger,
            action="UPDATE_ROLE",
            entity_type="User",
            entity_id=user.record_id,
            user_id=admin.id,
            details={"old_role": str(user.role), "new_role": str(validated_role)},
        )
        return ServiceResult[UserProfile].ok(
            user.model_copy(update={"role": validated_role, "status": UserStatus.ACTIVE})
        )

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def get_my_profile(self) -> ServiceResult[UserProfile]:
        """Profile of the signed-in user.

        A missing record (404) falls back to what the identity provider
        knows, so the profile screen can still be filled in and saved.
        """
        try:
            identity = self._session.get_identity()
            try:
                profile = self._repo.get_profile(identity.id)
            except NotFoundError:
                self._logger.info("No profile record for %s; using provider identity.", identity.email)
                profile = UserProfile(
                    uid=identity.id,
                    name=identity.display_name,
                    email=identity.email,
                    photo_url=identity.photo_url,
                    role=identity.role or Role.DONOR,
                )
        except LifeStreamError as exc:
            return self._failure(exc, "get_profile")
        return ServiceResult[UserProfile].ok(profile)

    # ------------------------------------------------------------------
    # Donor search (public)
    # ------------------------------------------------------------------

    def search_donors(
        self,
        blood_group: str,
        district: Optional[str] = None,
        upazila: Optional[str] = None,
    ) -> ServiceResult[list[UserProfile]]:
        """Find active donors by blood group, optionally narrowed by location."""
        try:
            try:
                group = BloodGroup(blood_group)
            except ValueError:
                raise ValidationError("Please select a blood group.") from None
            if upazila and not district:
                raise ValidationError("Select a district before choosing an upazila.")
            if district and upazila and not self._locations.is_consistent(district, upazila):
                raise ValidationError(f"{upazila} is not an upazila of {district}.")
            donors = self._repo.search_donors(str(group), district or None, upazila or None)
        except LifeStreamError as exc:
            return self._failure(exc, "search_donors")
        return ServiceResult[list[UserProfile]].ok([d for d in donors if not d.is_blocked])
