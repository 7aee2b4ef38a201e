"""
User Repository.

Endpoint wrappers for profile records, role lookup, admin user
management and public donor search.
"""

from __future__ import annotations

from typing import Any, Optional

from lifestream.models.enums import Role, UserStatus
from lifestream.models.user import UserProfile
from lifestream.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository):
    """Data access for ``/user``, ``/allusers`` and related routes."""

    def get_profile(self, uid: str, *, token: Optional[str] = None) -> UserProfile:
        payload = self._api.get(f"/user/{uid}", token=token)
        return self._parse(UserProfile, payload, operation_name="get_profile")

    def create_profile(
        self,
        profile: UserProfile,
        *,
        idempotency_key: str,
        token: Optional[str] = None,
    ) -> None:
        """Save the profile record created at registration.

        Sent with *token* when the provider issued a session immediately;
        accounts awaiting email confirmation are saved unauthenticated.
        """
        self._api.post(
            "/Users",
            json=profile.model_dump(mode="json", by_alias=True, exclude={"id"}),
            idempotency_key=idempotency_key,
            auth=token is not None,
            token=token,
        )

    def update_profile(self, uid: str, fields: dict[str, Any]) -> None:
        self._api.put(f"/updateuser/{uid}", json=fields)

    def list_all(self) -> list[UserProfile]:
        payload = self._api.get("/allusers")
        return self._parse_list(UserProfile, payload, operation_name="list_all")

    def count(self) -> int:
        payload = self._api.get("/allusers-count")
        return self._read_number(payload, "count", int, operation_name="count")

    def set_status(self, user_id: str, status: UserStatus) -> None:
        self._api.put(f"/toggle-user-status/{user_id}", json={"newStatus": str(status)})

    def set_role(self, user_id: str, role: Role) -> None:
        # Changing a role always re-activates the account.
        self._api.put(
            f"/set-user-role/{user_id}",
            json={"role": str(role), "status": str(UserStatus.ACTIVE)},
        )

    def search_donors(
        self,
        blood_group: str,
        district: Optional[str] = None,
        upazila: Optional[str] = None,
    ) -> list[UserProfile]:
        params: dict[str, str] = {"bloodGroup": blood_group}
        if district:
            params["district"] = district
        if upazila:
            params["upazila"] = upazila
        payload = self._api.get("/search-donors", params=params, auth=False)
        return self._parse_list(UserProfile, payload, operation_name="search_donors")
