import io
import json
import threading
from pathlib import Path
from types import SimpleNamespace
from urllib.parse import urlsplit

import pytest

import lifestream
from lifestream.api_client import ApiClient
from lifestream.auth import SessionManager
from lifestream.logger import StructuredLogger
from lifestream.models.enums import Role
from lifestream.models.user import Identity
from lifestream.services.location_service import LocationService

DATA_DIR = Path(lifestream.__file__).resolve().parent / "data"


class FakeResponse:
    """Just enough of ``requests.Response`` for the API client."""

    def __init__(self, status_code=200, body=None, raw=None):
        self.status_code = status_code
        if raw is not None:
            self.content = raw
        elif body is None:
            self.content = b""
        else:
            self.content = json.dumps(body).encode("utf-8")

    def json(self):
        return json.loads(self.content)


class FakeHttp:
    """Records every request and answers from a (method, path) route table.

    A route may map to a ``FakeResponse`` or to an exception instance,
    which is raised instead of answering.
    """

    def __init__(self):
        self.routes = {}
        self.calls = []
        self._lock = threading.Lock()

    def route(self, method, path, *, body=None, status=200, raw=None, error=None):
        self.routes[(method, path)] = error if error is not None else FakeResponse(status, body, raw)

    def request(self, method, url, **kwargs):
        path = urlsplit(url).path
        with self._lock:
            self.calls.append(SimpleNamespace(method=method, url=url, path=path, **kwargs))
        outcome = self.routes.get((method, path))
        if outcome is None:
            return FakeResponse(404, {"message": f"no route for {method} {path}"})
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome

    def paths(self, method=None):
        return [c.path for c in self.calls if method is None or c.method == method]


@pytest.fixture
def logger(request, tmp_path):
    return StructuredLogger(
        name=f"lifestream.tests.{request.node.name}",
        stream=io.StringIO(),
        log_file=str(tmp_path / "test.log"),
    )


@pytest.fixture
def http():
    return FakeHttp()


@pytest.fixture
def api(http, logger):
    return ApiClient(
        base_url="http://api.test",
        timeout_s=5,
        logger=logger,
        token_provider=lambda: "token-123",
        http=http,
    )


@pytest.fixture
def session():
    return SessionManager()


@pytest.fixture
def locations(logger):
    return LocationService(data_dir=DATA_DIR, logger=logger)


@pytest.fixture
def donor():
    return Identity(id="u-donor", email="dana@example.com", display_name="Dana Rahman", role=Role.DONOR)


@pytest.fixture
def other_donor():
    return Identity(id="u-other", email="karim@example.com", display_name="Karim Uddin", role=Role.DONOR)


@pytest.fixture
def volunteer():
    return Identity(id="u-vol", email="vera@example.com", display_name="Vera Volunteer", role=Role.VOLUNTEER)


@pytest.fixture
def admin():
    return Identity(id="u-admin", email="admin@example.com", display_name="Ada Admin", role=Role.ADMIN)
