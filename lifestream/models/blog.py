"""
Blog Post Models.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from lifestream.models.enums import BlogStatus


class BlogPost(BaseModel):
    """A blog post.  ``content`` holds the editor's HTML output."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    id: Optional[str] = Field(default=None, alias="_id")
    title: str
    thumbnail: Optional[str] = None
    content: str = ""
    author_uid: str = ""
    author_name: str = ""
    status: BlogStatus = BlogStatus.DRAFT
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class BlogDraftInput(BaseModel):
    """Raw values from the add-blog form."""

    title: str = ""
    content: str = ""
    thumbnail: Optional[str] = None
    thumbnail_path: Optional[str] = None
