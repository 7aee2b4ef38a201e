"""
Blog Repository.
"""

from __future__ import annotations

from typing import Optional

from lifestream.models.blog import BlogPost
from lifestream.models.enums import BlogStatus
from lifestream.repositories.base_repository import BaseRepository


class BlogRepository(BaseRepository):
    """Data access for the blog routes."""

    def list_all(self) -> list[BlogPost]:
        payload = self._api.get("/blogs", auth=False)
        return self._parse_list(BlogPost, payload, operation_name="list_all")

    def get_public(self, blog_id: str) -> BlogPost:
        payload = self._api.get(f"/blogs-public/{blog_id}", auth=False)
        return self._parse(BlogPost, payload, operation_name="get_public")

    def create(self, post: BlogPost, *, idempotency_key: str) -> Optional[str]:
        payload = self._api.post(
            "/post-blog",
            json=post.model_dump(mode="json", by_alias=True, exclude={"id"}, exclude_none=True),
            idempotency_key=idempotency_key,
        )
        if isinstance(payload, dict):
            new_id = payload.get("insertedId") or payload.get("_id")
            return str(new_id) if new_id else None
        return None

    def set_status(self, blog_id: str, status: BlogStatus) -> None:
        self._api.put(f"/toggle-blog-status/{blog_id}", json={"status": str(status)})

    def delete(self, blog_id: str) -> None:
        self._api.delete(f"/admin/blogs/{blog_id}")
