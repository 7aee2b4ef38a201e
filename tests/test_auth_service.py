import time
from types import SimpleNamespace

import pytest

from lifestream.config import AppConfig
from lifestream.identity_provider import IdentityProvider
from lifestream.models.auth_models import AuthErrorCode
from lifestream.models.enums import Role
from lifestream.models.user import ProfileUpdate, RegistrationInput
from lifestream.repositories.user_repository import UserRepository
from lifestream.services.auth_service import AuthService
from lifestream.services.image_service import ImageHostService


class FakeAuth:
    """Stands in for ``supabase.Client.auth``."""

    def __init__(self, user=None, session=None, error=None):
        self.user = user
        self.session = session
        self.error = error
        self.refreshed = None
        self.sign_outs = 0
        self.sign_ups = []
        self.updates = []

    def sign_in_with_password(self, credentials):
        self.credentials = credentials
        if self.error is not None:
            raise self.error
        return SimpleNamespace(user=self.user, session=self.session)

    def sign_up(self, payload):
        self.sign_ups.append(payload)
        return SimpleNamespace(user=self.user, session=self.session)

    def sign_out(self):
        self.sign_outs += 1

    def update_user(self, attributes):
        self.updates.append(attributes)
        return SimpleNamespace(user=self.user)

    def refresh_session(self, refresh_token):
        if self.error is not None:
            raise self.error
        return SimpleNamespace(session=self.refreshed)


def _provider_user(user_id="u-donor", email="dana@example.com"):
    return SimpleNamespace(id=user_id, email=email, user_metadata={"full_name": "Dana Rahman"})


def _provider_session(token="tok", lifetime=3600):
    return SimpleNamespace(
        access_token=token, refresh_token="ref", expires_at=int(time.time()) + lifetime,
    )


def _service(fake_auth, api, http, session, locations, logger, *, configured=True):
    provider = IdentityProvider(
        supabase_url="",
        supabase_key="",
        logger=logger,
        client=SimpleNamespace(auth=fake_auth) if configured else None,
    )
    images = ImageHostService("https://images.test/1/upload", "", 5, logger, http=http)
    return AuthService(
        provider=provider,
        session=session,
        api=api,
        users=UserRepository(api=api, logger=logger),
        locations=locations,
        images=images,
        config=AppConfig(),
        logger=logger,
    )


@pytest.fixture
def fake_auth():
    return FakeAuth(user=_provider_user(), session=_provider_session())


@pytest.fixture
def auth(fake_auth, api, http, session, locations, logger):
    return _service(fake_auth, api, http, session, locations, logger)


def _registration(**overrides):
    fields = dict(
        name="Dana Rahman",
        email="Dana@Example.com ",
        password="Secret1",
        confirm_password="Secret1",
        blood_group="O-",
        district="Dhaka",
        upazila="Savar",
        accepted_terms=True,
    )
    fields.update(overrides)
    return RegistrationInput(**fields)


@pytest.mark.parametrize(
    "password, valid",
    [("Ab1", False), ("abcdef", False), ("ABCDEF", False), ("Abcdef", True)],
)
def test_password_policy(password, valid):
    assert AuthService.validate_password(password).is_valid is valid


def test_sign_in_publishes_identity_with_role(auth, fake_auth, session, http):
    http.route("GET", "/get-user-role", body={"role": "donor"})

    result = auth.sign_in(" Dana@Example.com", "Secret1")

    assert result.success
    assert result.role is Role.DONOR
    assert fake_auth.credentials["email"] == "dana@example.com"
    assert session.identity.role is Role.DONOR
    assert session.identity.display_name == "Dana Rahman"
    assert http.calls[0].headers["Authorization"] == "Bearer tok"


def test_role_lookup_failure_signs_out(auth, fake_auth, session, http):
    http.route("GET", "/get-user-role", status=500, body={"message": "db down"})

    result = auth.sign_in("dana@example.com", "Secret1")

    assert not result.success
    assert result.error_code is AuthErrorCode.ROLE_UNAVAILABLE
    assert not session.is_authenticated
    assert session.access_token is None
    assert fake_auth.sign_outs == 1


def test_unknown_role_is_never_defaulted(auth, session, http):
    http.route("GET", "/get-user-role", body={"role": "superhero"})

    result = auth.sign_in("dana@example.com", "Secret1")

    assert result.error_code is AuthErrorCode.ROLE_UNAVAILABLE
    assert session.identity is None


def test_bad_credentials_are_classified(api, http, session, locations, logger):
    fake = FakeAuth(error=Exception("Invalid login credentials"))
    auth = _service(fake, api, http, session, locations, logger)

    result = auth.sign_in("dana@example.com", "wrong")

    assert result.error_code is AuthErrorCode.INVALID_CREDENTIALS
    assert http.calls == []


def test_unconfigured_provider_reports_unavailable(fake_auth, api, http, session, locations, logger):
    auth = _service(fake_auth, api, http, session, locations, logger, configured=False)

    result = auth.sign_in("dana@example.com", "Secret1")

    assert result.error_code is AuthErrorCode.PROVIDER_UNAVAILABLE


def test_registration_validation_runs_first(auth, fake_auth):
    mismatch = auth.sign_up(_registration(confirm_password="Secret2"))
    wrong_place = auth.sign_up(_registration(district="Feni"))
    no_terms = auth.sign_up(_registration(accepted_terms=False))

    assert mismatch.error_message == "Passwords do not match."
    assert "Savar is not an upazila of Feni" in wrong_place.error_message
    assert "Terms" in no_terms.error_message
    assert fake_auth.sign_ups == []


def test_registration_awaiting_confirmation_saves_profile(api, http, session, locations, logger):
    fake = FakeAuth(user=_provider_user(), session=None)
    auth = _service(fake, api, http, session, locations, logger)
    http.route("POST", "/Users", body={"insertedId": "p1"})

    result = auth.sign_up(_registration())

    assert result.success
    assert result.role is None
    assert "Check your inbox" in result.error_message
    assert not session.is_authenticated
    call = http.calls[0]
    assert "Authorization" not in call.headers
    assert call.json["email"] == "dana@example.com"
    assert call.json["bloodGroup"] == "O-"
    assert call.json["role"] == "donor"
    assert call.json["status"] == "active"


def test_registration_with_session_signs_in(auth, session, http):
    http.route("POST", "/Users", body={"insertedId": "p1"})
    http.route("GET", "/get-user-role", body={"role": "donor"})

    result = auth.sign_up(_registration())

    assert result.role is Role.DONOR
    assert session.is_authenticated
    assert http.calls[0].headers["Authorization"] == "Bearer tok"


def test_unauthorized_api_answer_forces_sign_out(auth, fake_auth, session, donor):
    session.publish(donor)

    auth.handle_unauthorized()

    assert not session.is_authenticated
    assert fake_auth.sign_outs == 1


def test_expired_token_is_refreshed(auth, fake_auth, session, donor):
    session.publish(donor)
    session.set_tokens("old", "ref", int(time.time()) - 10)
    fake_auth.refreshed = _provider_session(token="new")

    assert auth.get_bearer_token() == "new"


def test_rejected_refresh_yields_no_token(auth, fake_auth, session, donor):
    session.publish(donor)
    session.set_tokens("old", "ref", int(time.time()) - 10)
    fake_auth.error = Exception("refresh token revoked")

    assert auth.get_bearer_token() is None
    assert auth.refresh_session_token().error_code is AuthErrorCode.SESSION_EXPIRED


def test_profile_update_saves_record_and_republishes(auth, fake_auth, session, http, donor):
    session.publish(donor)
    session.set_tokens("tok", "ref", int(time.time()) + 3600)
    http.route("GET", "/get-user-role", body={"role": "donor"})
    http.route("PUT", "/updateuser/u-donor", body={"modifiedCount": 1})
    update = ProfileUpdate(name="  Dana R. Rahman ", blood_group="AB+", district="Dhaka", upazila="Savar")

    result = auth.update_profile(update)

    assert result.success
    assert fake_auth.updates == [{"data": {"full_name": "Dana R. Rahman", "avatar_url": None}}]
    assert http.calls[0].json["bloodGroup"] == "AB+"
    assert http.calls[0].json["name"] == "Dana R. Rahman"
    assert session.identity.display_name == "Dana R. Rahman"
    assert session.identity.role is Role.DONOR
    assert http.paths() == ["/updateuser/u-donor", "/get-user-role"]


def test_profile_update_signs_out_when_role_lookup_fails(auth, fake_auth, session, http, donor):
    session.publish(donor)
    session.set_tokens("tok", "ref", int(time.time()) + 3600)
    http.route("PUT", "/updateuser/u-donor", body={"modifiedCount": 1})
    http.route("GET", "/get-user-role", status=500, body={"message": "role store offline"})
    update = ProfileUpdate(name="Dana Rahman", blood_group="O-", district="Dhaka", upazila="Savar")

    result = auth.update_profile(update)

    assert result.error_code is AuthErrorCode.ROLE_UNAVAILABLE
    assert not session.is_authenticated
    assert fake_auth.sign_outs == 1


def test_profile_update_rejects_mismatched_location(auth, fake_auth, session, http, donor):
    session.publish(donor)
    update = ProfileUpdate(name="Dana Rahman", blood_group="O-", district="Dhaka", upazila="Nowhere")

    result = auth.update_profile(update)

    assert result.error_code is AuthErrorCode.VALIDATION_ERROR
    assert fake_auth.updates == []
    assert http.calls == []


def test_profile_update_requires_sign_in(auth):
    update = ProfileUpdate(name="Dana Rahman", blood_group="O-", district="Dhaka", upazila="Savar")

    assert auth.update_profile(update).error_code is AuthErrorCode.SESSION_EXPIRED
