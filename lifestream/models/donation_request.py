"""
Donation Request Models.

Wire format is the camelCase JSON used by the remote API; Python code
uses snake_case attributes.  Status strings are normalised on read so
legacy spellings never leak past this module.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from lifestream.models.enums import BloodGroup, RequestStatus
from lifestream.models.user import Identity

# Fields a volunteer (who is not the requester) may touch when editing.
TRIAGE_FIELDS: frozenset[str] = frozenset({"status", "donor_name", "donor_email"})


class DonationRequest(BaseModel):
    """A blood donation request as stored by the remote API."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: Optional[str] = Field(default=None, alias="_id")
    uid: str = ""
    requester_name: str = ""
    requester_email: str = ""
    recipient_name: str
    recipient_district: str
    recipient_upazila: str
    recipient_street: str = ""
    hospital_name: str = ""
    request_message: str = ""
    donation_date: str = ""
    donation_time: str = ""
    blood_group: BloodGroup
    donor_name: str = ""
    donor_email: str = ""
    status: RequestStatus = Field(default=RequestStatus.PENDING, alias="donationStatus")
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: object) -> RequestStatus:
        return RequestStatus.parse(value)

    def is_owned_by(self, identity: Identity) -> bool:
        """``True`` when *identity* created this request."""
        if self.uid:
            return self.uid == identity.id
        return bool(self.requester_email) and (
            self.requester_email.lower() == identity.email.lower()
        )

    def has_donor(self, placeholder: str) -> bool:
        """``True`` once a real donor has been assigned."""
        return bool(self.donor_email) and self.donor_name != placeholder

    def to_payload(self) -> dict[str, object]:
        """Serialise to the API's camelCase JSON, omitting the record id."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"}, exclude_none=True)


class DonationRequestInput(BaseModel):
    """Raw values from the create/edit form."""

    recipient_name: str = ""
    recipient_district: str = ""
    recipient_upazila: str = ""
    recipient_street: str = ""
    hospital_name: str = ""
    donation_date: str = ""
    donation_time: str = ""
    blood_group: str = ""
    request_message: str = ""


class DonationRequestUpdate(BaseModel):
    """Changes submitted from the edit screen.

    ``None`` means "unchanged".  The lifecycle rules inspect which
    fields are set to decide whether the caller may submit them.
    """

    recipient_name: Optional[str] = None
    recipient_district: Optional[str] = None
    recipient_upazila: Optional[str] = None
    recipient_street: Optional[str] = None
    hospital_name: Optional[str] = None
    donation_date: Optional[str] = None
    donation_time: Optional[str] = None
    blood_group: Optional[str] = None
    request_message: Optional[str] = None
    status: Optional[RequestStatus] = None
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def _normalise_status(cls, value: object) -> Optional[RequestStatus]:
        if value is None:
            return None
        return RequestStatus.parse(value)

    def changed_fields(self, current: DonationRequest) -> set[str]:
        """Names of fields whose submitted value differs from *current*."""
        changed: set[str] = set()
        for name, value in self.model_dump(exclude_none=True).items():
            if str(getattr(current, name)) != str(value):
                changed.add(name)
        return changed
