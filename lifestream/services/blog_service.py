"""
Blog Content Service.

Publication workflow::

    draft -> published <-> unpublished

Any signed-in user may write a draft.  Admins and volunteers publish
and unpublish; only admins delete, after confirmation.  Lists are
filtered client-side because the API has no status parameter.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from html import unescape
from pathlib import Path
from typing import Optional

from lifestream.api_client import new_idempotency_key
from lifestream.auth import SessionManager
from lifestream.errors import LifeStreamError, ValidationError
from lifestream.guards import require_auth, require_role
from lifestream.logger import StructuredLogger
from lifestream.models.blog import BlogDraftInput, BlogPost
from lifestream.models.enums import BlogStatus, Role
from lifestream.models.service_models import ServiceResult
from lifestream.repositories.blog_repository import BlogRepository
from lifestream.services.base_service import BaseService
from lifestream.services.image_service import ImageHostService
from lifestream.utils.audit import log_audit_event

_TAG_RE = re.compile(r"<[^>]+>")
_BLOCK_END_RE = re.compile(r"</(p|div|h[1-6]|li)>|<br\s*/?>", re.IGNORECASE)


def html_to_text(content: str) -> str:
    """Plain-text rendering of editor HTML for the desktop reader."""
    text = _BLOCK_END_RE.sub("\n", content)
    text = _TAG_RE.sub("", text)
    lines = [line.strip() for line in unescape(text).splitlines()]
    return "\n".join(line for line in lines if line)


def filter_posts(posts: list[BlogPost], status: Optional[BlogStatus]) -> list[BlogPost]:
    """Posts with *status*; ``None`` keeps everything."""
    if status is None:
        return list(posts)
    return [post for post in posts if post.status is status]


class BlogService(BaseService):
    """Service layer for the content-management and public blog screens."""

    def __init__(
        self,
        session: SessionManager,
        repo: BlogRepository,
        images: ImageHostService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._repo = repo
        self._images = images

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_draft(self, form: BlogDraftInput) -> ServiceResult[BlogPost]:
        """Save a new post as a draft authored by the signed-in user."""
        try:
            identity = self._session.get_identity()
            title = form.title.strip()
            if not title:
                raise ValidationError("Please enter a title.")
            if not html_to_text(form.content):
                raise ValidationError("Please write some content.")

            thumbnail = form.thumbnail
            if form.thumbnail_path:
                upload = self._images.upload(Path(form.thumbnail_path))
                if not upload.success:
                    raise ValidationError(upload.error or "Thumbnail upload failed.")
                thumbnail = upload.data

            now = datetime.now(timezone.utc).isoformat()
            post = BlogPost(
                title=title,
                thumbnail=thumbnail,
                content=form.content,
                author_uid=identity.id,
                author_name=identity.name,
                status=BlogStatus.DRAFT,
                created_at=now,
                updated_at=now,
            )
            new_id = self._repo.create(post, idempotency_key=new_idempotency_key())
        except LifeStreamError as exc:
            return self._failure(exc, "create_blog")

        if new_id:
            post = post.model_copy(update={"id": new_id})
        log_audit_event(
            logger=self._logger,
            action="CREATE",
            entity_type="BlogPost",
            entity_id=new_id or "unknown",
            user_id=identity.id,
            details={"title": title},
        )
        return ServiceResult[BlogPost].ok(post, status_code=201)

    def toggle_status(self, post: BlogPost) -> ServiceResult[BlogPost]:
        """Publish a draft/unpublished post, or unpublish a published one."""
        new_status = post.status.toggled
        try:
            identity = self._session.get_identity()
            update = require_role(self._session, Role.ADMIN, Role.VOLUNTEER)(self._repo.set_status)
            update(self._post_id(post), new_status)
        except LifeStreamError as exc:
            return self._failure(exc, "toggle_blog_status")

        log_audit_event(
            logger=self._logger,
            action="UPDATE_STATUS",
            entity_type="BlogPost",
            entity_id=post.id or "unknown",
            user_id=identity.id,
            details={"old_status": str(post.status), "new_status": str(new_status)},
        )
        return ServiceResult[BlogPost].ok(post.model_copy(update={"status": new_status}))

    def delete(self, post: BlogPost, *, confirmed: bool) -> ServiceResult[str]:
        """Delete *post* permanently (admin only)."""
        try:
            identity = self._session.get_identity()
            remove = require_role(self._session, Role.ADMIN)(self._repo.delete)
            post_id = self._post_id(post)
            if not confirmed:
                raise ValidationError("Please confirm the deletion. This cannot be undone.")
            remove(post_id)
        except LifeStreamError as exc:
            return self._failure(exc, "delete_blog")

        log_audit_event(
            logger=self._logger,
            action="DELETE",
            entity_type="BlogPost",
            entity_id=post_id,
            user_id=identity.id,
            details={"title": post.title},
        )
        return ServiceResult[str].ok(post_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_posts(self, status: Optional[BlogStatus] = None) -> ServiceResult[list[BlogPost]]:
        """All posts for the content-management table, optionally filtered."""
        try:
            fetch = require_auth(self._session)(self._repo.list_all)
            posts = fetch()
        except LifeStreamError as exc:
            return self._failure(exc, "list_blogs")
        return ServiceResult[list[BlogPost]].ok(filter_posts(posts, status))

    def list_published(self) -> ServiceResult[list[BlogPost]]:
        """Public blog page: published posts only."""
        try:
            posts = self._repo.list_all()
        except LifeStreamError as exc:
            return self._failure(exc, "list_published_blogs")
        return ServiceResult[list[BlogPost]].ok(filter_posts(posts, BlogStatus.PUBLISHED))

    def get_published(self, post_id: str) -> ServiceResult[BlogPost]:
        try:
            post = self._repo.get_public(post_id)
        except LifeStreamError as exc:
            return self._failure(exc, "get_blog")
        return ServiceResult[BlogPost].ok(post)

    @staticmethod
    def _post_id(post: BlogPost) -> str:
        if not post.id:
            raise ValidationError("This post has not been saved yet.")
        return post.id
