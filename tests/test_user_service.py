import pytest

from lifestream.errors import ErrorKind
from lifestream.models.enums import Role, UserStatus
from lifestream.models.user import UserProfile
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.user_service import UserService


@pytest.fixture
def service(api, session, locations, logger):
    return UserService(
        session=session,
        repo=UserRepository(api=api, logger=logger),
        locations=locations,
        logger=logger,
    )


def _user(**overrides):
    fields = dict(id="p7", uid="u-7", name="Karim Uddin", email="karim@example.com")
    fields.update(overrides)
    return UserProfile(**fields)


def test_admin_lists_users(service, session, http, admin):
    session.publish(admin)
    http.route("GET", "/allusers", body=[
        {"_id": "p1", "email": "a@example.com", "bloodGroup": "B+", "status": "blocked"},
        {"_id": "p2", "email": "b@example.com", "role": "volunteer"},
    ])

    result = service.get_all_users()

    assert [u.record_id for u in result.data] == ["p1", "p2"]
    assert result.data[0].is_blocked
    assert result.data[1].role is Role.VOLUNTEER


def test_volunteer_cannot_list_users(service, session, http, volunteer):
    session.publish(volunteer)

    assert service.get_all_users().error_kind is ErrorKind.AUTHORIZATION
    assert http.calls == []


def test_block_and_unblock(service, session, http, admin):
    session.publish(admin)
    http.route("PUT", "/toggle-user-status/p7", body={"modifiedCount": 1})

    blocked = service.toggle_status(_user())
    assert blocked.data.status is UserStatus.BLOCKED
    assert http.calls[-1].json == {"newStatus": "blocked"}

    unblocked = service.toggle_status(blocked.data)
    assert unblocked.data.status is UserStatus.ACTIVE
    assert http.calls[-1].json == {"newStatus": "active"}


def test_admin_cannot_block_self(service, session, http, admin):
    session.publish(admin)

    result = service.toggle_status(_user(uid="u-admin"))

    assert result.error_kind is ErrorKind.VALIDATION
    assert http.calls == []


def test_role_change_reactivates_account(service, session, http, admin):
    session.publish(admin)
    http.route("PUT", "/set-user-role/p7", body={"modifiedCount": 1})

    result = service.update_user_role(_user(status=UserStatus.BLOCKED), "volunteer")

    assert result.data.role is Role.VOLUNTEER
    assert result.data.status is UserStatus.ACTIVE
    assert http.calls[0].json == {"role": "volunteer", "status": "active"}


def test_promotion_to_admin_needs_confirmation(service, session, http, admin):
    session.publish(admin)
    http.route("PUT", "/set-user-role/p7", body={"modifiedCount": 1})

    assert service.update_user_role(_user(), "admin").error_kind is ErrorKind.VALIDATION
    assert http.calls == []
    assert service.update_user_role(_user(), "admin", confirmed=True).data.role is Role.ADMIN


def test_unknown_role_is_rejected(service, session, admin):
    session.publish(admin)

    result = service.update_user_role(_user(), "superuser")

    assert result.error_kind is ErrorKind.VALIDATION
    assert "superuser" in result.error


def test_missing_profile_falls_back_to_identity(service, session, http, donor):
    session.publish(donor)
    http.route("GET", "/user/u-donor", status=404, body={"message": "User not found"})

    result = service.get_my_profile()

    assert result.success
    assert result.data.email == "dana@example.com"
    assert result.data.name == "Dana Rahman"


def test_donor_search_is_public_and_hides_blocked(service, http):
    http.route("GET", "/search-donors", body=[
        {"_id": "p1", "email": "a@example.com", "bloodGroup": "O-", "status": "active"},
        {"_id": "p2", "email": "b@example.com", "bloodGroup": "O-", "status": "blocked"},
    ])

    result = service.search_donors("O-", "Dhaka", "Savar")

    assert [u.record_id for u in result.data] == ["p1"]
    call = http.calls[0]
    assert call.params == {"bloodGroup": "O-", "district": "Dhaka", "upazila": "Savar"}
    assert "Authorization" not in call.headers


def test_donor_search_validates_location(service, http):
    assert service.search_donors("", "Dhaka").error_kind is ErrorKind.VALIDATION
    assert service.search_donors("O-", None, "Savar").error_kind is ErrorKind.VALIDATION
    assert service.search_donors("O-", "Feni", "Savar").error_kind is ErrorKind.VALIDATION
    assert http.calls == []
