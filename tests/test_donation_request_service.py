import pytest

from lifestream.errors import ErrorKind
from lifestream.models.donation_request import (
    DonationRequest,
    DonationRequestInput,
    DonationRequestUpdate,
)
from lifestream.models.enums import BloodGroup, RequestStatus
from lifestream.repositories.donation_request_repository import DonationRequestRepository
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.donation_request_service import DonationRequestService

PLACEHOLDER = "No donor yet"


@pytest.fixture
def service(api, session, locations, logger):
    return DonationRequestService(
        session=session,
        requests=DonationRequestRepository(api=api, logger=logger),
        users=UserRepository(api=api, logger=logger),
        locations=locations,
        donor_placeholder=PLACEHOLDER,
        logger=logger,
    )


def _form(**overrides):
    fields = dict(
        recipient_name="Rahim",
        recipient_district="Dhaka",
        recipient_upazila="Savar",
        recipient_street="Road 5, Bank Town",
        hospital_name="Enam Medical",
        donation_date="2025-09-01",
        donation_time="10:00",
        blood_group="O-",
        request_message="Surgery on Monday",
    )
    fields.update(overrides)
    return DonationRequestInput(**fields)


def _request(**overrides):
    fields = dict(
        id="r1",
        uid="u-donor",
        requester_name="Dana Rahman",
        requester_email="dana@example.com",
        recipient_name="Rahim",
        recipient_district="Dhaka",
        recipient_upazila="Savar",
        recipient_street="Road 5, Bank Town",
        hospital_name="Enam Medical",
        donation_date="2025-09-01",
        donation_time="10:00",
        blood_group=BloodGroup.O_NEG,
        donor_name=PLACEHOLDER,
        donor_email=PLACEHOLDER,
        status=RequestStatus.PENDING,
    )
    fields.update(overrides)
    return DonationRequest(**fields)


def _profile(status="active"):
    return {
        "_id": "p1", "uid": "u-donor", "name": "Dana Rahman", "email": "dana@example.com",
        "status": status, "role": "donor",
    }


def test_donor_creates_pending_request(service, session, http, donor, caplog):
    session.publish(donor)
    http.route("GET", "/user/u-donor", body=_profile())
    http.route("POST", "/create-donation-request", body={"insertedId": "r-new"})

    result = service.create(_form())

    assert result.success
    assert result.status_code == 201
    assert result.data.request_id == "r-new"
    assert result.data.navigate_to == "my-requests"
    assert result.data.request.status is RequestStatus.PENDING

    sent = http.calls[-1].json
    assert sent["donationStatus"] == "pending"
    assert sent["bloodGroup"] == "O-"
    assert sent["recipientDistrict"] == "Dhaka"
    assert sent["recipientUpazila"] == "Savar"
    assert sent["donorName"] == PLACEHOLDER
    assert sent["requesterEmail"] == "dana@example.com"
    assert "Idempotency-Key" in http.calls[-1].headers
    assert [c.method for c in http.calls].count("POST") == 1
    assert any("AUDIT" in r.getMessage() and "CREATE" in r.getMessage() for r in caplog.records)


def test_missing_fields_never_reach_the_network(service, session, http, donor):
    session.publish(donor)

    result = service.create(_form(recipient_name="  ", hospital_name=""))

    assert not result.success
    assert result.error_kind is ErrorKind.VALIDATION
    assert "Recipient name" in result.error and "Hospital name" in result.error
    assert http.calls == []


def test_upazila_must_belong_to_district(service, session, http, donor):
    session.publish(donor)

    result = service.create(_form(recipient_district="Feni"))

    assert result.error_kind is ErrorKind.VALIDATION
    assert "Savar is not an upazila of Feni" in result.error
    assert http.calls == []


def test_bad_date_and_time_are_reported_together(service, session, donor):
    session.publish(donor)

    result = service.create(_form(donation_date="01/09/2025", donation_time="10am"))

    assert "YYYY-MM-DD" in result.error
    assert "HH:MM" in result.error


def test_only_donors_create(service, session, http, volunteer):
    session.publish(volunteer)

    result = service.create(_form())

    assert result.error_kind is ErrorKind.AUTHORIZATION
    assert http.calls == []


def test_blocked_donor_is_refused(service, session, http, donor):
    session.publish(donor)
    http.route("GET", "/user/u-donor", body=_profile(status="blocked"))

    result = service.create(_form())

    assert result.error_kind is ErrorKind.AUTHORIZATION
    assert "blocked" in result.error
    assert http.paths("POST") == []


def test_signed_out_create_fails(service, http):
    result = service.create(_form())

    assert result.error_kind is ErrorKind.AUTHENTICATION
    assert http.calls == []


def test_claim_assigns_current_user(service, session, http, other_donor):
    session.publish(other_donor)
    http.route("PUT", "/donationRequests/pending/r1", body={"modifiedCount": 1})

    result = service.claim(_request())

    assert result.success
    assert result.data.status is RequestStatus.IN_PROGRESS
    assert result.data.donor_email == "karim@example.com"
    assert http.calls[0].json == {
        "donorName": "Karim Uddin",
        "donorEmail": "karim@example.com",
        "donationStatus": "inProgress",
    }


def test_claiming_own_request_is_refused(service, session, http, donor):
    session.publish(donor)

    result = service.claim(_request())

    assert result.error_kind is ErrorKind.AUTHORIZATION
    assert http.calls == []


def test_complete_needs_confirmation(service, session, http, donor):
    session.publish(donor)
    request = _request(
        status=RequestStatus.IN_PROGRESS, donor_name="Karim Uddin", donor_email="karim@example.com",
    )
    http.route("PUT", "/editDonationRequest/r1", body={"modifiedCount": 1})

    unconfirmed = service.complete(request, confirmed=False)
    assert unconfirmed.error_kind is ErrorKind.VALIDATION
    assert http.calls == []

    result = service.complete(request, confirmed=True)
    assert result.data.status is RequestStatus.COMPLETED
    assert http.calls[0].json == {"donationStatus": "completed"}


def test_cancel_deletes_after_confirmation(service, session, http, donor):
    session.publish(donor)
    http.route("DELETE", "/donationRequests/r1")

    assert not service.cancel(_request(), confirmed=False).success
    result = service.cancel(_request(), confirmed=True)

    assert result.data == "r1"
    assert http.paths("DELETE") == ["/donationRequests/r1"]


def test_unsaved_request_cannot_be_cancelled(service, session, http, donor):
    session.publish(donor)

    result = service.cancel(_request(id=None), confirmed=True)

    assert result.error_kind is ErrorKind.VALIDATION
    assert http.calls == []


def test_volunteer_edit_sends_only_triage_fields(service, session, http, volunteer):
    session.publish(volunteer)
    http.route("PUT", "/editDonationRequest/r1", body={"modifiedCount": 1})
    update = DonationRequestUpdate(
        status=RequestStatus.IN_PROGRESS, donor_name="Karim Uddin", donor_email="karim@example.com",
    )

    result = service.edit(_request(), update)

    assert result.success
    assert result.data.status is RequestStatus.IN_PROGRESS
    assert http.calls[0].json == {
        "donationStatus": "inProgress",
        "donorName": "Karim Uddin",
        "donorEmail": "karim@example.com",
    }


def test_owner_edit_sends_full_record(service, session, http, donor):
    session.publish(donor)
    http.route("PUT", "/editDonationRequest/r1", body={"modifiedCount": 1})

    result = service.edit(_request(), DonationRequestUpdate(hospital_name="Dhaka Medical"))

    assert result.data.hospital_name == "Dhaka Medical"
    sent = http.calls[0].json
    assert sent["hospitalName"] == "Dhaka Medical"
    assert sent["recipientName"] == "Rahim"
    assert "updatedAt" in sent


def test_owner_edit_keeps_location_consistent(service, session, http, donor):
    session.publish(donor)

    result = service.edit(_request(), DonationRequestUpdate(recipient_district="Feni"))

    assert result.error_kind is ErrorKind.VALIDATION
    assert http.calls == []


def test_owner_edit_with_blank_blood_group_is_a_validation_failure(service, session, http, donor):
    session.publish(donor)

    result = service.edit(_request(), DonationRequestUpdate(blood_group=""))

    assert not result.success
    assert result.error_kind is ErrorKind.VALIDATION
    assert "Blood group" in result.error
    assert http.calls == []


def test_admin_edit_with_unknown_blood_group_is_reported(service, session, http, admin):
    session.publish(admin)

    result = service.edit(_request(), DonationRequestUpdate(blood_group="Z+"))

    assert result.error_kind is ErrorKind.VALIDATION
    assert "'Z+' is not a blood group" in result.error
    assert http.calls == []


def test_owner_edit_strips_submitted_values(service, session, http, donor):
    session.publish(donor)
    http.route("PUT", "/editDonationRequest/r1", body={"modifiedCount": 1})

    result = service.edit(_request(), DonationRequestUpdate(hospital_name="  Dhaka Medical "))

    assert result.data.hospital_name == "Dhaka Medical"
    assert http.calls[0].json["hospitalName"] == "Dhaka Medical"


def test_list_all_is_staff_only(service, session, http, donor, admin):
    session.publish(donor)
    assert service.list_all().error_kind is ErrorKind.AUTHORIZATION

    session.publish(admin)
    http.route("GET", "/all-donation-requests", body=[_request().to_payload() | {"_id": "r1"}])
    result = service.list_all()
    assert [r.id for r in result.data] == ["r1"]


def test_pending_list_is_public_and_filtered(service, http):
    claimed = _request(id="r2", status=RequestStatus.IN_PROGRESS).to_payload() | {"_id": "r2"}
    http.route("GET", "/pendingRequests", body=[_request().to_payload() | {"_id": "r1"}, claimed])

    result = service.list_pending()

    assert [r.id for r in result.data] == ["r1"]
    assert "Authorization" not in http.calls[0].headers


def test_malformed_rows_are_skipped(service, session, http, donor):
    session.publish(donor)
    http.route("GET", "/my-donation-requests/u-donor", body=[
        _request().to_payload() | {"_id": "r1"},
        {"_id": "broken", "donationStatus": "pending"},
    ])

    result = service.list_mine()

    assert [r.id for r in result.data] == ["r1"]


def test_recent_requests_are_limited(service, session, http, donor):
    session.publish(donor)
    rows = [_request().to_payload() | {"_id": f"r{i}"} for i in range(5)]
    http.route("GET", "/donationRequests/recent/u-donor", body=rows)

    result = service.list_recent(limit=3)

    assert [r.id for r in result.data] == ["r0", "r1", "r2"]


def test_allowed_statuses_when_signed_out(service):
    assert service.allowed_statuses(_request()) == ()
