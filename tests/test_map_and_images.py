from urllib.parse import parse_qs, urlsplit

import pytest
import requests

from lifestream.errors import ErrorKind
from lifestream.services.image_service import ImageHostService
from lifestream.services.map_service import MapService


@pytest.fixture
def maps(logger):
    return MapService(
        static_url="https://maps.test/staticmap",
        browser_url="https://maps.test/search/",
        api_key="mk",
        latitude=23.8776,
        longitude=90.3775,
        zoom=15,
        address="Sector 7, Uttara, Dhaka",
        logger=logger,
    )


def test_static_map_has_single_marker(maps):
    query = parse_qs(urlsplit(maps.static_map_url(400, 300)).query)

    assert query["center"] == ["23.8776,90.3775"]
    assert query["markers"] == ["color:red|23.8776,90.3775"]
    assert query["size"] == ["400x300"]
    assert query["key"] == ["mk"]


def test_browser_url_points_at_coordinates(maps):
    assert maps.browser_url() == "https://maps.test/search/?api=1&query=23.8776%2C90.3775"


def test_open_in_browser_reports_failure(maps, monkeypatch):
    monkeypatch.setattr("webbrowser.open", lambda url, new=0: False)

    result = maps.open_in_browser()

    assert not result.success
    assert "manually" in result.error


@pytest.mark.parametrize(
    "name, email, message",
    [("", "a@b.co", "hi"), ("Ana", "not-an-email", "hi"), ("Ana", "a@b.co", "   ")],
)
def test_contact_form_validation(maps, name, email, message):
    assert maps.acknowledge_contact(name, email, message).error_kind is ErrorKind.VALIDATION


def test_contact_form_is_acknowledged(maps):
    assert maps.acknowledge_contact("Ana", "ana@example.com", "Hello").data.startswith("Thanks, Ana")


@pytest.fixture
def images(http, logger):
    return ImageHostService("https://images.test/1/upload", "img-key", 5, logger, http=http)


def test_upload_returns_hosted_url(images, http, tmp_path):
    photo = tmp_path / "avatar.jpg"
    photo.write_bytes(b"\xff\xd8\xff")
    http.route("POST", "/1/upload", body={"data": {"url": "https://i.test/avatar.jpg"}})

    result = images.upload(photo)

    assert result.data == "https://i.test/avatar.jpg"
    assert http.calls[0].params == {"key": "img-key"}


def test_upload_rejects_non_images(images, http, tmp_path):
    notes = tmp_path / "notes.txt"
    notes.write_text("hello")

    assert images.upload(notes).error_kind is ErrorKind.VALIDATION
    assert http.calls == []


def test_upload_network_failure(images, http, tmp_path):
    photo = tmp_path / "avatar.png"
    photo.write_bytes(b"\x89PNG")
    http.route("POST", "/1/upload", error=requests.ConnectionError("offline"))

    assert images.upload(photo).error_kind is ErrorKind.NETWORK
