import pytest
import requests

from lifestream.api_client import ApiClient, new_idempotency_key
from lifestream.errors import (
    AuthenticationError,
    AuthorizationError,
    ErrorKind,
    NetworkError,
    NotFoundError,
    ServerError,
)


def test_bearer_token_and_idempotency_key_are_attached(api, http):
    http.route("POST", "/create-donation-request", body={"insertedId": "r1"})

    payload = api.post("/create-donation-request", json={"a": 1}, idempotency_key="key-1")

    assert payload == {"insertedId": "r1"}
    call = http.calls[0]
    assert call.url == "http://api.test/create-donation-request"
    assert call.headers["Authorization"] == "Bearer token-123"
    assert call.headers["Idempotency-Key"] == "key-1"
    assert call.json == {"a": 1}
    assert call.timeout == 5


def test_public_request_sends_no_authorization(api, http):
    http.route("GET", "/pendingRequests", body=[])

    assert api.get("/pendingRequests", auth=False) == []
    assert "Authorization" not in http.calls[0].headers


def test_missing_token_raises_before_sending(http, logger):
    client = ApiClient("http://api.test", 5, logger, token_provider=lambda: None, http=http)

    with pytest.raises(AuthenticationError):
        client.get("/allusers")
    assert http.calls == []


def test_explicit_token_overrides_provider(api, http):
    http.route("GET", "/user/u1", body={"email": "a@b.co"})

    api.get("/user/u1", token="fresh")

    assert http.calls[0].headers["Authorization"] == "Bearer fresh"


@pytest.mark.parametrize(
    "status, error_type, kind",
    [
        (401, AuthenticationError, ErrorKind.AUTHENTICATION),
        (403, AuthorizationError, ErrorKind.AUTHORIZATION),
        (404, NotFoundError, ErrorKind.NOT_FOUND),
        (500, ServerError, ErrorKind.SERVER),
        (422, ServerError, ErrorKind.SERVER),
    ],
)
def test_status_codes_map_to_error_kinds(api, http, status, error_type, kind):
    http.route("GET", "/allusers", status=status, body={"message": "nope"})

    with pytest.raises(error_type) as info:
        api.get("/allusers")

    assert info.value.kind is kind
    assert info.value.status_code == status
    assert info.value.message == "nope"


def test_error_field_is_used_when_message_missing(api, http):
    http.route("GET", "/allusers", status=400, body={"error": "bad filter"})

    with pytest.raises(ServerError, match="bad filter"):
        api.get("/allusers")


def test_unauthorized_triggers_handler_once(http, logger):
    calls = []
    client = ApiClient(
        "http://api.test", 5, logger,
        token_provider=lambda: "stale",
        http=http,
        on_unauthorized=lambda: calls.append("signed-out"),
    )
    http.route("GET", "/allusers", status=401)

    with pytest.raises(AuthenticationError):
        client.get("/allusers")
    assert calls == ["signed-out"]


def test_unauthorized_on_public_route_does_not_sign_out(http, logger):
    calls = []
    client = ApiClient("http://api.test", 5, logger, http=http, on_unauthorized=lambda: calls.append(1))
    http.route("GET", "/blogs", status=401)

    with pytest.raises(AuthenticationError):
        client.get("/blogs", auth=False)
    assert calls == []


def test_timeout_becomes_network_error(api, http):
    http.route("GET", "/allusers", error=requests.Timeout("slow"))

    with pytest.raises(NetworkError) as info:
        api.get("/allusers")
    assert info.value.kind is ErrorKind.NETWORK


def test_connection_failure_becomes_network_error(api, http):
    http.route("GET", "/allusers", error=requests.ConnectionError("refused"))

    with pytest.raises(NetworkError, match="Cannot reach the server"):
        api.get("/allusers")


def test_empty_body_returns_none(api, http):
    http.route("DELETE", "/donationRequests/r1")

    assert api.delete("/donationRequests/r1") is None


def test_unreadable_body_is_server_error(api, http):
    http.route("GET", "/allusers", raw=b"<html>oops</html>")

    with pytest.raises(ServerError, match="unreadable"):
        api.get("/allusers")


def test_idempotency_keys_are_unique():
    keys = {new_idempotency_key() for _ in range(50)}
    assert len(keys) == 50
