import pytest

from lifestream.errors import ErrorKind
from lifestream.models.blog import BlogDraftInput, BlogPost
from lifestream.models.enums import BlogStatus
from lifestream.repositories.blog_repository import BlogRepository
from lifestream.services.blog_service import BlogService, filter_posts, html_to_text
from lifestream.services.image_service import ImageHostService


@pytest.fixture
def service(api, http, session, logger):
    images = ImageHostService(
        upload_url="https://images.test/1/upload",
        api_key="",
        timeout_s=5,
        logger=logger,
        http=http,
    )
    return BlogService(session=session, repo=BlogRepository(api=api, logger=logger), images=images, logger=logger)


def _post(post_id="b1", status=BlogStatus.DRAFT):
    return BlogPost(id=post_id, title="Why give blood", content="<p>Because.</p>", status=status)


def test_status_toggle_cycle():
    assert BlogStatus.DRAFT.toggled is BlogStatus.PUBLISHED
    assert BlogStatus.PUBLISHED.toggled is BlogStatus.UNPUBLISHED
    assert BlogStatus.UNPUBLISHED.toggled is BlogStatus.PUBLISHED


def test_html_to_text_keeps_paragraphs():
    assert html_to_text("<h2>Title</h2><p>One &amp; two</p><br/>End") == "Title\nOne & two\nEnd"


def test_filter_posts():
    posts = [_post("a"), _post("b", BlogStatus.PUBLISHED)]

    assert [p.id for p in filter_posts(posts, BlogStatus.PUBLISHED)] == ["b"]
    assert len(filter_posts(posts, None)) == 2


def test_volunteer_publishes_draft(service, session, http, volunteer):
    session.publish(volunteer)
    http.route("PUT", "/toggle-blog-status/b1", body={"modifiedCount": 1})

    result = service.toggle_status(_post())

    assert result.data.status is BlogStatus.PUBLISHED
    assert http.calls[0].json == {"status": "published"}


def test_admin_unpublishes_then_republishes(service, session, http, admin):
    session.publish(admin)
    http.route("PUT", "/toggle-blog-status/b1", body={"modifiedCount": 1})

    hidden = service.toggle_status(_post(status=BlogStatus.PUBLISHED))
    shown = service.toggle_status(hidden.data)

    assert hidden.data.status is BlogStatus.UNPUBLISHED
    assert shown.data.status is BlogStatus.PUBLISHED
    assert http.paths("PUT") == ["/toggle-blog-status/b1"] * 2
    assert [c.json for c in http.calls] == [{"status": "unpublished"}, {"status": "published"}]


def test_donor_cannot_publish(service, session, http, donor):
    session.publish(donor)

    result = service.toggle_status(_post())

    assert result.error_kind is ErrorKind.AUTHORIZATION
    assert http.calls == []


def test_only_admin_deletes_after_confirmation(service, session, http, volunteer, admin):
    http.route("DELETE", "/admin/blogs/b1")
    session.publish(volunteer)
    assert service.delete(_post(), confirmed=True).error_kind is ErrorKind.AUTHORIZATION

    session.publish(admin)
    assert service.delete(_post(), confirmed=False).error_kind is ErrorKind.VALIDATION
    assert http.calls == []

    result = service.delete(_post(), confirmed=True)
    assert result.data == "b1"
    assert http.paths("DELETE") == ["/admin/blogs/b1"]


def test_new_post_is_a_draft_by_the_author(service, session, http, donor):
    session.publish(donor)
    http.route("POST", "/post-blog", body={"insertedId": "b9"})

    result = service.create_draft(BlogDraftInput(title=" Giving ", content="<p>Hello</p>"))

    assert result.status_code == 201
    assert result.data.id == "b9"
    assert result.data.status is BlogStatus.DRAFT
    sent = http.calls[0].json
    assert sent["status"] == "draft"
    assert sent["title"] == "Giving"
    assert sent["authorUid"] == "u-donor"


def test_empty_content_is_rejected(service, session, http, donor):
    session.publish(donor)

    result = service.create_draft(BlogDraftInput(title="Empty", content="<p> </p>"))

    assert result.error_kind is ErrorKind.VALIDATION
    assert http.calls == []


def test_thumbnail_upload_needs_configuration(service, session, http, donor, tmp_path):
    session.publish(donor)
    image = tmp_path / "thumb.png"
    image.write_bytes(b"\x89PNG")

    result = service.create_draft(
        BlogDraftInput(title="Pic", content="<p>x</p>", thumbnail_path=str(image)),
    )

    assert result.error_kind is ErrorKind.VALIDATION
    assert "not configured" in result.error
    assert http.calls == []


def test_public_list_shows_only_published(service, http):
    http.route("GET", "/blogs", body=[
        {"_id": "a", "title": "Draft", "status": "draft"},
        {"_id": "b", "title": "Live", "status": "published"},
        {"_id": "c", "title": "Pulled", "status": "unpublished"},
    ])

    result = service.list_published()

    assert [p.id for p in result.data] == ["b"]
