import time

import pytest

from lifestream.auth import SessionManager
from lifestream.errors import AuthenticationError
from lifestream.models.enums import Role


def test_new_session_is_loading_and_anonymous():
    session = SessionManager()

    assert session.is_loading
    assert not session.is_authenticated
    assert session.role is None
    with pytest.raises(AuthenticationError):
        session.get_identity()


def test_publish_notifies_subscribers(donor):
    session = SessionManager()
    seen = []
    session.subscribe(seen.append)

    session.publish(donor)

    assert seen == [donor]
    assert session.role is Role.DONOR
    assert not session.is_loading


def test_unsubscribe_stops_notifications(donor):
    session = SessionManager()
    seen = []
    unsubscribe = session.subscribe(seen.append)
    unsubscribe()

    session.publish(donor)

    assert seen == []


def test_clear_notifies_once_and_drops_tokens(donor):
    session = SessionManager()
    session.publish(donor)
    session.set_tokens("access", "refresh", int(time.time()) + 3600)
    seen = []
    session.subscribe(seen.append)

    session.clear()
    session.clear()

    assert seen == [None]
    assert session.access_token is None
    assert session.refresh_token is None


def test_token_expiry_uses_skew():
    session = SessionManager()
    assert session.is_token_expired

    session.set_tokens("a", "r", int(time.time()) + 10)
    assert session.is_token_expired

    session.set_tokens("a", "r", int(time.time()) + 600)
    assert not session.is_token_expired


def test_with_role_returns_new_identity(donor):
    promoted = donor.with_role(Role.ADMIN)

    assert promoted.role is Role.ADMIN
    assert donor.role is Role.DONOR
    assert promoted.name == "Dana Rahman"
