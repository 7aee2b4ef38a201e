from decimal import Decimal

import pytest

from lifestream.errors import ErrorKind
from lifestream.models.enums import BloodGroup, RequestStatus
from lifestream.models.donation_request import DonationRequest
from lifestream.repositories.donation_request_repository import DonationRequestRepository
from lifestream.repositories.funding_repository import FundingRepository
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.dashboard_service import DashboardService


@pytest.fixture
def service(api, session, logger):
    return DashboardService(
        session=session,
        users=UserRepository(api=api, logger=logger),
        requests=DonationRequestRepository(api=api, logger=logger),
        funding=FundingRepository(api=api, logger=logger),
        max_workers=4,
        recent_limit=3,
        logger=logger,
    )


def _row(request_id):
    request = DonationRequest(
        recipient_name="Rahim",
        recipient_district="Dhaka",
        recipient_upazila="Savar",
        blood_group=BloodGroup.A_POS,
        status=RequestStatus.PENDING,
    )
    return request.to_payload() | {"_id": request_id}


def test_admin_dashboard_joins_three_reads(service, session, http, admin):
    session.publish(admin)
    http.route("GET", "/allusers-count", body={"count": 12})
    http.route("GET", "/total-donations", body={"totalAmount": 1500.5})
    http.route("GET", "/all-donation-requests-count", body={"count": 7})

    result = service.get_stats()

    assert result.success
    assert result.data.total_users == 12
    assert result.data.total_funding == Decimal("1500.5")
    assert result.data.total_requests == 7
    assert result.data.recent_requests == []


def test_volunteer_dashboard_uses_stats_route(service, session, http, volunteer):
    session.publish(volunteer)
    http.route("GET", "/allusers-count", body={"count": 3})
    http.route("GET", "/admin/stats/donations", body={"totalAmount": 0})
    http.route("GET", "/all-donation-requests-count", body={"count": 1})

    result = service.get_stats()

    assert result.data.total_funding == Decimal("0")
    assert "/total-donations" not in http.paths()


def test_missing_total_counts_as_zero(service, session, http, admin):
    session.publish(admin)
    http.route("GET", "/allusers-count", body={})
    http.route("GET", "/total-donations", body={"totalAmount": None})
    http.route("GET", "/all-donation-requests-count", body={"count": 2})

    result = service.get_stats()

    assert result.data.total_users == 0
    assert result.data.total_funding == Decimal("0")


def test_donor_dashboard_shows_three_recent(service, session, http, donor):
    session.publish(donor)
    http.route("GET", "/donationRequests/recent/u-donor", body=[_row(f"r{i}") for i in range(5)])

    result = service.get_stats()

    assert [r.id for r in result.data.recent_requests] == ["r0", "r1", "r2"]
    assert result.data.total_users is None


def test_one_failed_read_fails_the_whole_dashboard(service, session, http, admin):
    session.publish(admin)
    http.route("GET", "/allusers-count", status=500, body={"message": "database offline"})
    http.route("GET", "/total-donations", body={"totalAmount": 10})
    http.route("GET", "/all-donation-requests-count", body={"count": 7})

    result = service.get_stats()

    assert not result.success
    assert result.data is None
    assert result.error == "database offline"
    assert result.error_kind is ErrorKind.SERVER


def test_non_numeric_count_is_a_server_error(service, session, http, admin):
    session.publish(admin)
    http.route("GET", "/allusers-count", body={"count": "many"})
    http.route("GET", "/total-donations", body={"totalAmount": 10})
    http.route("GET", "/all-donation-requests-count", body={"count": 7})

    result = service.get_stats()

    assert result.error_kind is ErrorKind.SERVER


def test_signed_out_dashboard_fails(service, http):
    result = service.get_stats()

    assert result.error_kind is ErrorKind.AUTHENTICATION
    assert http.calls == []


def test_admin_dashboard_reads_are_repeatable(service, session, http, admin):
    session.publish(admin)
    http.route("GET", "/allusers-count", body={"count": 12})
    http.route("GET", "/total-donations", body={"totalAmount": 1500.5})
    http.route("GET", "/all-donation-requests-count", body={"count": 7})

    first = service.get_stats()
    second = service.get_stats()

    assert first.success and second.success
    assert first.data == second.data
    assert http.calls and all(c.method == "GET" for c in http.calls)


def test_donor_dashboard_reads_are_repeatable(service, session, http, donor):
    session.publish(donor)
    http.route("GET", "/donationRequests/recent/u-donor", body=[_row(f"r{i}") for i in range(5)])

    first = service.get_stats()
    second = service.get_stats()

    assert first.data == second.data
    assert [r.id for r in second.data.recent_requests] == ["r0", "r1", "r2"]
    assert http.paths() == ["/donationRequests/recent/u-donor"] * 2
