import pytest

from lifestream.errors import AuthenticationError, AuthorizationError
from lifestream.guards import GuardDecision, RouteGuard, require_auth, require_role
from lifestream.models.enums import Role
from lifestream.models.user import Identity


def test_guard_waits_while_session_is_resolving(session):
    guard = RouteGuard(session)

    assert session.is_loading
    assert guard.check({Role.ADMIN}) is GuardDecision.WAIT


def test_guard_redirects_signed_out_user_to_login(session):
    session.set_loading(False)

    assert RouteGuard(session).check() is GuardDecision.REDIRECT_LOGIN


def test_guard_redirects_wrong_role_home(session, donor):
    session.publish(donor)
    guard = RouteGuard(session)

    assert guard.check({Role.ADMIN, Role.VOLUNTEER}) is GuardDecision.REDIRECT_HOME
    assert guard.check({Role.DONOR}) is GuardDecision.ALLOW
    assert guard.check() is GuardDecision.ALLOW


def test_identity_without_role_is_never_allowed_a_role_route(session):
    session.publish(Identity(id="u1", email="x@example.com"))

    assert RouteGuard(session).check({Role.DONOR}) is GuardDecision.REDIRECT_HOME


def test_guard_follows_sign_out(session, admin):
    session.publish(admin)
    guard = RouteGuard(session)
    assert guard.check({Role.ADMIN}) is GuardDecision.ALLOW

    session.clear()

    assert guard.check({Role.ADMIN}) is GuardDecision.REDIRECT_LOGIN


def test_require_auth_decorator(session, donor):
    @require_auth(session)
    def secret():
        return "ok"

    with pytest.raises(AuthenticationError):
        secret()
    session.publish(donor)
    assert secret() == "ok"


def test_require_role_decorator(session, volunteer, admin):
    calls = []
    delete_user = require_role(session, Role.ADMIN)(lambda user_id: calls.append(user_id))

    with pytest.raises(AuthenticationError):
        delete_user("u1")
    session.publish(volunteer)
    with pytest.raises(AuthorizationError):
        delete_user("u1")
    session.publish(admin)
    delete_user("u1")

    assert calls == ["u1"]
