"""
Donation Request Service.

Create, claim, edit, cancel and complete donation requests, plus the
list and detail reads behind the request screens.

Every rule (required fields, location consistency, blocked accounts,
role and ownership checks, status transitions) is enforced here before
any network call.  Each mutation carries a fresh idempotency key and
emits an audit event.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from lifestream.api_client import new_idempotency_key
from lifestream.auth import SessionManager
from lifestream.errors import AuthorizationError, LifeStreamError, ValidationError
from lifestream.guards import require_auth, require_role
from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import (
    DonationRequest,
    DonationRequestInput,
    DonationRequestUpdate,
)
from lifestream.models.enums import BloodGroup, RequestStatus, Role, UserStatus
from lifestream.models.service_models import RequestCreated, ServiceResult
from lifestream.models.user import Identity, UserProfile
from lifestream.repositories.donation_request_repository import DonationRequestRepository
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.base_service import BaseService
from lifestream.services.location_service import LocationService
from lifestream.services.request_lifecycle import (
    allowed_next_statuses,
    check_cancel,
    check_claim,
    check_complete,
    check_edit,
)
from lifestream.utils.audit import log_audit_event

# Form field -> label, in form order.
REQUIRED_FIELDS: dict[str, str] = {
    "recipient_name": "Recipient name",
    "recipient_district": "District",
    "recipient_upazila": "Upazila",
    "recipient_street": "Full address",
    "hospital_name": "Hospital name",
    "donation_date": "Donation date",
    "donation_time": "Donation time",
    "blood_group": "Blood group",
}

_DATE_FORMAT = "%Y-%m-%d"
_TIME_FORMAT = "%H:%M"

# Fields a volunteer edit sends; owners and admins send the full record.
_TRIAGE_PAYLOAD_KEYS: tuple[str, ...] = ("donationStatus", "donorName", "donorEmail")


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class DonationRequestService(BaseService):
    """Service layer for the donation-request screens.

    Parameters
    ----------
    session:
        Shared session holder (the acting identity).
    requests:
        Donation-request repository.
    users:
        User repository (requester status, donor candidates).
    locations:
        Reference data for the district/upazila invariant.
    donor_placeholder:
        Donor name/email stored until somebody claims the request.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        session: SessionManager,
        requests: DonationRequestRepository,
        users: UserRepository,
        locations: LocationService,
        donor_placeholder: str,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._requests = requests
        self._users = users
        self._locations = locations
        self._placeholder = donor_placeholder

    @property
    def donor_placeholder(self) -> str:
        return self._placeholder

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate_input(self, form: DonationRequestInput) -> DonationRequestInput:
        """Check the create/edit form and return it with values stripped.

        All problems are reported in a single ``ValidationError``.
        """
        cleaned = form.model_copy(
            update={name: value.strip() for name, value in form.model_dump().items()}
        )
        missing = [
            label for name, label in REQUIRED_FIELDS.items()
            if not getattr(cleaned, name)
        ]
        if missing:
            raise ValidationError(f"Please fill in: {', '.join(missing)}.")

        problems: list[str] = []
        try:
            BloodGroup(cleaned.blood_group)
        except ValueError:
            problems.append(f"'{cleaned.blood_group}' is not a blood group")
        if not self._locations.is_consistent(cleaned.recipient_district, cleaned.recipient_upazila):
            problems.append(
                f"{cleaned.recipient_upazila} is not an upazila of {cleaned.recipient_district}"
            )
        try:
            datetime.strptime(cleaned.donation_date, _DATE_FORMAT)
        except ValueError:
            problems.append("donation date must be YYYY-MM-DD")
        try:
            datetime.strptime(cleaned.donation_time, _TIME_FORMAT)
        except ValueError:
            problems.append("donation time must be HH:MM")
        if problems:
            raise ValidationError(f"Please correct: {'; '.join(problems)}.")
        return cleaned

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create(self, form: DonationRequestInput) -> ServiceResult[RequestCreated]:
        """Create a pending request for the signed-in donor.

        Validation runs first so an incomplete form never reaches the
        network.  A blocked requester is refused.
        """
        try:
            identity = self._session.get_identity()
            if identity.role is not Role.DONOR:
                raise AuthorizationError("Only donors can create donation requests.")
            cleaned = self.validate_input(form)

            profile = self._users.get_profile(identity.id)
            if profile.status is UserStatus.BLOCKED:
                raise AuthorizationError(
                    "Your account is blocked. You cannot create donation requests."
                )

            request = DonationRequest(
                uid=identity.id,
                requester_name=profile.name or identity.name,
                requester_email=identity.email,
                recipient_name=cleaned.recipient_name,
                recipient_district=cleaned.recipient_district,
                recipient_upazila=cleaned.recipient_upazila,
                recipient_street=cleaned.recipient_street,
                hospital_name=cleaned.hospital_name,
                request_message=cleaned.request_message,
                donation_date=cleaned.donation_date,
                donation_time=cleaned.donation_time,
                blood_group=BloodGroup(cleaned.blood_group),
                donor_name=self._placeholder,
                donor_email=self._placeholder,
                status=RequestStatus.PENDING,
                created_at=_utc_now(),
            )
            new_id = self._requests.create(request, idempotency_key=new_idempotency_key())
        except LifeStreamError as exc:
            return self._failure(exc, "create_request")

        if new_id:
            request = request.model_copy(update={"id": new_id})
        log_audit_event(
            logger=self._logger,
            action="CREATE",
            entity_type="DonationRequest",
            entity_id=new_id or "unknown",
            user_id=identity.id,
            details={
                "blood_group": str(request.blood_group),
                "district": request.recipient_district,
                "upazila": request.recipient_upazila,
            },
        )
        return ServiceResult[RequestCreated].ok(
            RequestCreated(request_id=new_id, request=request), status_code=201,
        )

    # ------------------------------------------------------------------
    # Claim / edit / complete / cancel
    # ------------------------------------------------------------------

    def claim(self, request: DonationRequest) -> ServiceResult[DonationRequest]:
        """The signed-in user volunteers to donate for *request*."""
        try:
            identity = self._session.get_identity()
            check_claim(identity, request)
            self._requests.claim(
                self._record_id(request),
                identity.name,
                identity.email,
                idempotency_key=new_idempotency_key(),
            )
        except LifeStreamError as exc:
            return self._failure(exc, "claim_request")

        claimed = request.model_copy(update={
            "donor_name": identity.name,
            "donor_email": identity.email,
            "status": RequestStatus.IN_PROGRESS,
        })
        self._audit_status(identity, request, claimed.status, action="CLAIM")
        return ServiceResult[DonationRequest].ok(claimed)

    def edit(
        self,
        request: DonationRequest,
        update: DonationRequestUpdate,
    ) -> ServiceResult[DonationRequest]:
        """Apply *update* to *request* from the edit screen."""
        try:
            identity = self._session.get_identity()
            check_edit(identity, request, update, self._placeholder)

            values = {**request.model_dump(), **update.model_dump(exclude_none=True)}
            full_record = request.is_owned_by(identity) or identity.role is Role.ADMIN
            if full_record:
                # Form values are checked raw, before the typed record exists.
                cleaned = self.validate_input(DonationRequestInput(**{
                    name: str(values.get(name) or "")
                    for name in DonationRequestInput.model_fields
                }))
                values.update(cleaned.model_dump(), updated_at=_utc_now())
            merged = DonationRequest.model_validate(values)
            payload = self._edit_payload(merged, full_record=full_record)
            self._requests.edit(
                self._record_id(request), payload, idempotency_key=new_idempotency_key(),
            )
        except LifeStreamError as exc:
            return self._failure(exc, "edit_request")

        log_audit_event(
            logger=self._logger,
            action="UPDATE",
            entity_type="DonationRequest",
            entity_id=request.id or "unknown",
            user_id=identity.id,
            details={
                "old_status": str(request.status),
                "new_status": str(merged.status),
                "fields": ",".join(sorted(update.changed_fields(request))),
            },
        )
        return ServiceResult[DonationRequest].ok(merged)

    def complete(self, request: DonationRequest, *, confirmed: bool) -> ServiceResult[DonationRequest]:
        """Mark an in-progress request completed (owner, after confirmation)."""
        try:
            identity = self._session.get_identity()
            check_complete(identity, request, self._placeholder)
            if not confirmed:
                raise ValidationError("Please confirm that the donation took place.")
            self._requests.edit(
                self._record_id(request),
                {"donationStatus": str(RequestStatus.COMPLETED)},
                idempotency_key=new_idempotency_key(),
            )
        except LifeStreamError as exc:
            return self._failure(exc, "complete_request")

        completed = request.model_copy(update={"status": RequestStatus.COMPLETED})
        self._audit_status(identity, request, completed.status, action="UPDATE_STATUS")
        return ServiceResult[DonationRequest].ok(completed)

    def cancel(self, request: DonationRequest, *, confirmed: bool) -> ServiceResult[str]:
        """Delete *request* (owner or admin, after confirmation).

        ``data`` is the id of the deleted request so the screen can drop
        the row from its list.
        """
        try:
            identity = self._session.get_identity()
            check_cancel(identity, request)
            if not confirmed:
                raise ValidationError("Please confirm the cancellation. This cannot be undone.")
            record_id = self._record_id(request)
            self._requests.delete(record_id)
        except LifeStreamError as exc:
            return self._failure(exc, "cancel_request")

        log_audit_event(
            logger=self._logger,
            action="DELETE",
            entity_type="DonationRequest",
            entity_id=record_id,
            user_id=identity.id,
            details={"status": str(request.status)},
        )
        return ServiceResult[str].ok(record_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_mine(self) -> ServiceResult[list[DonationRequest]]:
        try:
            identity = self._session.get_identity()
            return ServiceResult[list[DonationRequest]].ok(self._requests.list_mine(identity.id))
        except LifeStreamError as exc:
            return self._failure(exc, "list_my_requests")

    def list_recent(self, limit: int = 3) -> ServiceResult[list[DonationRequest]]:
        try:
            identity = self._session.get_identity()
            recent = self._requests.list_recent(identity.id)
        except LifeStreamError as exc:
            return self._failure(exc, "list_recent_requests")
        return ServiceResult[list[DonationRequest]].ok(recent[:limit])

    def list_all(self) -> ServiceResult[list[DonationRequest]]:
        """Every request on the platform (volunteer/admin)."""
        try:
            fetch = require_role(self._session, Role.VOLUNTEER, Role.ADMIN)(self._requests.list_all)
            return ServiceResult[list[DonationRequest]].ok(fetch())
        except LifeStreamError as exc:
            return self._failure(exc, "list_all_requests")

    def list_pending(self) -> ServiceResult[list[DonationRequest]]:
        """Public list of requests still waiting for a donor."""
        try:
            pending = self._requests.list_pending()
        except LifeStreamError as exc:
            return self._failure(exc, "list_pending_requests")
        return ServiceResult[list[DonationRequest]].ok(
            [r for r in pending if r.status is RequestStatus.PENDING]
        )

    def get_details(self, request_id: str) -> ServiceResult[DonationRequest]:
        try:
            fetch = require_auth(self._session)(self._requests.get)
            return ServiceResult[DonationRequest].ok(fetch(request_id))
        except LifeStreamError as exc:
            return self._failure(exc, "get_request")

    def donor_candidates(self) -> ServiceResult[list[UserProfile]]:
        """Active users who can be assigned as the donor on the edit screen."""
        try:
            fetch = require_role(self._session, Role.VOLUNTEER, Role.ADMIN)(self._users.list_all)
            users = fetch()
        except LifeStreamError as exc:
            return self._failure(exc, "list_donor_candidates")
        return ServiceResult[list[UserProfile]].ok([u for u in users if not u.is_blocked])

    def allowed_statuses(self, request: DonationRequest) -> tuple[RequestStatus, ...]:
        """Status options for the edit screen; empty when signed out."""
        identity: Optional[Identity] = self._session.identity
        if identity is None:
            return ()
        return allowed_next_statuses(request, identity)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _record_id(request: DonationRequest) -> str:
        if not request.id:
            raise ValidationError("This request has not been saved yet.")
        return request.id

    @staticmethod
    def _edit_payload(request: DonationRequest, *, full_record: bool) -> dict[str, Any]:
        payload = request.to_payload()
        if full_record:
            return payload
        return {key: payload[key] for key in _TRIAGE_PAYLOAD_KEYS if key in payload}

    def _audit_status(
        self,
        identity: Identity,
        request: DonationRequest,
        new_status: RequestStatus,
        *,
        action: str,
    ) -> None:
        log_audit_event(
            logger=self._logger,
            action=action,
            entity_type="DonationRequest",
            entity_id=request.id or "unknown",
            user_id=identity.id,
            details={"old_status": str(request.status), "new_status": str(new_status)},
        )
