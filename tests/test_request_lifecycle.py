import pytest

from lifestream.errors import AuthorizationError, InvalidTransitionError, ValidationError
from lifestream.models.donation_request import DonationRequest, DonationRequestUpdate
from lifestream.models.enums import BloodGroup, RequestStatus
from lifestream.services.request_lifecycle import (
    allowed_next_statuses,
    can_transition,
    check_cancel,
    check_claim,
    check_complete,
    check_edit,
)

PLACEHOLDER = "No donor yet"


def _request(**overrides):
    fields = dict(
        id="r1",
        uid="u-donor",
        requester_name="Dana Rahman",
        requester_email="dana@example.com",
        recipient_name="Rahim",
        recipient_district="Dhaka",
        recipient_upazila="Savar",
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


def _in_progress(**overrides):
    return _request(
        status=RequestStatus.IN_PROGRESS,
        donor_name="Karim Uddin",
        donor_email="karim@example.com",
        **overrides,
    )


def test_transition_table():
    assert can_transition(RequestStatus.PENDING, RequestStatus.IN_PROGRESS)
    assert can_transition(RequestStatus.PENDING, RequestStatus.CANCELED)
    assert can_transition(RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED)
    assert not can_transition(RequestStatus.PENDING, RequestStatus.COMPLETED)
    assert not can_transition(RequestStatus.IN_PROGRESS, RequestStatus.PENDING)
    for terminal in (RequestStatus.COMPLETED, RequestStatus.CANCELED):
        assert not any(can_transition(terminal, s) for s in RequestStatus)


def test_ownership_falls_back_to_email(donor):
    legacy = _request(uid="", requester_email="DANA@example.com")
    assert legacy.is_owned_by(donor)


def test_owner_options_exclude_completed(donor):
    assert allowed_next_statuses(_request(), donor) == (
        RequestStatus.PENDING, RequestStatus.IN_PROGRESS, RequestStatus.CANCELED,
    )
    assert allowed_next_statuses(_in_progress(), donor) == (
        RequestStatus.IN_PROGRESS, RequestStatus.CANCELED,
    )


def test_admin_may_offer_completed(admin):
    assert RequestStatus.COMPLETED in allowed_next_statuses(_in_progress(), admin)


def test_volunteer_options_stay_between_pending_and_in_progress(volunteer):
    assert allowed_next_statuses(_request(), volunteer) == (
        RequestStatus.PENDING, RequestStatus.IN_PROGRESS,
    )


def test_stranger_gets_no_options(other_donor):
    assert allowed_next_statuses(_request(), other_donor) == ()


def test_terminal_request_offers_only_current(admin):
    assert allowed_next_statuses(_request(status=RequestStatus.COMPLETED), admin) == (
        RequestStatus.COMPLETED,
    )


def test_volunteer_cannot_change_recipient_fields(volunteer):
    update = DonationRequestUpdate(recipient_name="Someone else")

    with pytest.raises(AuthorizationError, match="only change the status"):
        check_edit(volunteer, _request(), update, PLACEHOLDER)


def test_volunteer_may_assign_donor_and_start(volunteer):
    update = DonationRequestUpdate(
        status="inProgress", donor_name="Karim Uddin", donor_email="karim@example.com",
    )
    check_edit(volunteer, _request(), update, PLACEHOLDER)


def test_in_progress_requires_a_donor(donor):
    update = DonationRequestUpdate(status=RequestStatus.IN_PROGRESS)

    with pytest.raises(ValidationError, match="Select a donor"):
        check_edit(donor, _request(), update, PLACEHOLDER)


def test_terminal_request_cannot_move(admin):
    update = DonationRequestUpdate(status=RequestStatus.PENDING)

    with pytest.raises(InvalidTransitionError):
        check_edit(admin, _request(status=RequestStatus.CANCELED), update, PLACEHOLDER)


def test_owner_cannot_complete_through_edit(donor):
    update = DonationRequestUpdate(status=RequestStatus.COMPLETED)

    with pytest.raises(AuthorizationError):
        check_edit(donor, _in_progress(), update, PLACEHOLDER)


def test_admin_completes_through_edit(admin):
    check_edit(admin, _in_progress(), DonationRequestUpdate(status="completed"), PLACEHOLDER)


def test_backwards_move_is_invalid(admin):
    update = DonationRequestUpdate(status=RequestStatus.PENDING)

    with pytest.raises(InvalidTransitionError) as info:
        check_edit(admin, _in_progress(), update, PLACEHOLDER)
    assert info.value.status_code == 409


def test_claim_rules(donor, other_donor):
    check_claim(other_donor, _request())

    with pytest.raises(AuthorizationError):
        check_claim(donor, _request())
    with pytest.raises(InvalidTransitionError):
        check_claim(other_donor, _in_progress())


def test_complete_rules(donor, other_donor, admin):
    check_complete(donor, _in_progress(), PLACEHOLDER)
    check_complete(admin, _in_progress(), PLACEHOLDER)

    with pytest.raises(AuthorizationError):
        check_complete(other_donor, _in_progress(), PLACEHOLDER)
    with pytest.raises(InvalidTransitionError):
        check_complete(donor, _request(), PLACEHOLDER)
    with pytest.raises(ValidationError, match="no donor"):
        check_complete(donor, _request(status=RequestStatus.IN_PROGRESS), PLACEHOLDER)


def test_cancel_is_owner_or_admin(donor, admin, volunteer):
    check_cancel(donor, _request())
    check_cancel(admin, _request())

    with pytest.raises(AuthorizationError):
        check_cancel(volunteer, _request())


def test_legacy_status_spellings_normalise():
    assert _request(status="cancelled").status is RequestStatus.CANCELED
    assert DonationRequest.model_validate({
        "recipientName": "R", "recipientDistrict": "Dhaka", "recipientUpazila": "Savar",
        "bloodGroup": "A+", "donationStatus": "in progress",
    }).status is RequestStatus.IN_PROGRESS
