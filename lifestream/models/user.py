"""
User Models.

``Identity`` is the signed-in principal held by the session; it comes
from the identity provider and carries the role resolved from the API.
``UserProfile`` is the server-side profile record.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from lifestream.models.enums import BloodGroup, Role, UserStatus


class Identity(BaseModel):
    """The authenticated user as seen by every screen.

    Immutable: attaching a role produces a new instance via
    :meth:`with_role`, so listeners never observe a half-built identity.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: str  # Supabase UUID
    email: str
    display_name: str = ""
    photo_url: Optional[str] = None
    role: Optional[Role] = None

    def with_role(self, role: Role) -> "Identity":
        return self.model_copy(update={"role": role})

    @property
    def name(self) -> str:
        """Display name, falling back to the email local part."""
        return self.display_name or self.email.split("@")[0]


class UserProfile(BaseModel):
    """Profile record stored by the remote API."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: Optional[str] = Field(default=None, alias="_id")
    uid: str = ""
    name: str = ""
    email: str
    photo_url: Optional[str] = Field(default=None, alias="photoURL")
    blood_group: Optional[BloodGroup] = Field(default=None, alias="bloodGroup")
    district: str = ""
    upazila: str = ""
    status: UserStatus = UserStatus.ACTIVE
    role: Role = Role.DONOR
    created_at: Optional[str] = Field(default=None, alias="createdAt")

    @property
    def is_blocked(self) -> bool:
        return self.status is UserStatus.BLOCKED

    @property
    def record_id(self) -> str:
        """Identifier used by the admin endpoints (``_id``, else ``uid``)."""
        return self.id or self.uid


class RegistrationInput(BaseModel):
    """Raw registration form values; validated by ``AuthService``."""

    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    blood_group: str = ""
    district: str = ""
    upazila: str = ""
    avatar_path: Optional[str] = None
    accepted_terms: bool = False


class ProfileUpdate(BaseModel):
    """Editable profile fields.  Email is fixed after registration."""

    name: str
    blood_group: str
    district: str
    upazila: str
    photo_url: Optional[str] = None
    avatar_path: Optional[str] = None
