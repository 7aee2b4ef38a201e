"""
Shared Enumerations for LifeStream Models.

All string enumerations for type-safe field constraints.
StrEnum values compare equal to their string equivalents, so payloads
can be written with the enum member directly.
"""

from __future__ import annotations

from enum import StrEnum


class Role(StrEnum):
    """Platform roles, as returned by the role-lookup endpoint."""

    DONOR = "donor"
    VOLUNTEER = "volunteer"
    ADMIN = "admin"


class UserStatus(StrEnum):
    """Account status.  A ``BLOCKED`` user may sign in but cannot create requests."""

    ACTIVE = "active"
    BLOCKED = "blocked"

    @property
    def toggled(self) -> "UserStatus":
        return UserStatus.BLOCKED if self is UserStatus.ACTIVE else UserStatus.ACTIVE


# Legacy spellings seen in stored records, mapped to the canonical value.
_LEGACY_REQUEST_STATUS: dict[str, str] = {
    "open": "pending",
    "in progress": "inProgress",
    "in-progress": "inProgress",
    "in_progress": "inProgress",
    "inprogress": "inProgress",
    "done": "completed",
    "complete": "completed",
    "cancel": "canceled",
    "cancelled": "canceled",
}


class RequestStatus(StrEnum):
    """Donation-request lifecycle states.

    ``COMPLETED`` and ``CANCELED`` are terminal.
    """

    PENDING = "pending"
    IN_PROGRESS = "inProgress"
    COMPLETED = "completed"
    CANCELED = "canceled"

    @classmethod
    def parse(cls, value: object) -> "RequestStatus":
        """Normalise a stored status string to its canonical member.

        Raises
        ------
        ValueError
            If *value* is not a known spelling.
        """
        if isinstance(value, cls):
            return value
        raw = str(value).strip()
        for member in cls:
            if member.value == raw:
                return member
        canonical = _LEGACY_REQUEST_STATUS.get(raw.lower())
        if canonical is None:
            for member in cls:
                if member.value.lower() == raw.lower():
                    return member
            raise ValueError(f"Unknown donation request status: '{value}'")
        return cls(canonical)

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.COMPLETED, RequestStatus.CANCELED)

    @property
    def label(self) -> str:
        return {
            RequestStatus.PENDING: "Pending",
            RequestStatus.IN_PROGRESS: "In Progress",
            RequestStatus.COMPLETED: "Completed",
            RequestStatus.CANCELED: "Canceled",
        }[self]


class BlogStatus(StrEnum):
    """Blog publication workflow: ``draft -> published <-> unpublished``."""

    DRAFT = "draft"
    PUBLISHED = "published"
    UNPUBLISHED = "unpublished"

    @property
    def toggled(self) -> "BlogStatus":
        """Status after a publish/unpublish toggle."""
        if self is BlogStatus.PUBLISHED:
            return BlogStatus.UNPUBLISHED
        return BlogStatus.PUBLISHED


class BloodGroup(StrEnum):
    """The eight ABO/Rh blood groups."""

    A_POS = "A+"
    A_NEG = "A-"
    B_POS = "B+"
    B_NEG = "B-"
    AB_POS = "AB+"
    AB_NEG = "AB-"
    O_POS = "O+"
    O_NEG = "O-"
