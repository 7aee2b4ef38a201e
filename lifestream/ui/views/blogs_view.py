"""Public Blog Screen.

Lists published posts as cards; "Read" opens the full post, fetched from
the public detail endpoint and shown as plain text.
"""

from __future__ import annotations

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.blog import BlogPost
from lifestream.models.service_models import ServiceResult
from lifestream.services.blog_service import BlogService, html_to_text
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.theme import (
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_HEADING,
    FONT_SMALL,
    FONT_SUBHEADING,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TAB_HOVER,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from lifestream.utils.task_scope import TaskScope

_EXCERPT_CHARS: int = 220


class BlogsView(ModuleFrame):
    """Card list of published blog posts."""

    def __init__(self, parent: ctk.CTkFrame, service: BlogService, logger: StructuredLogger) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._build_header("Blog")
        self._list = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._list.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    def refresh(self) -> None:
        self._run(self._service.list_published, self._handle_loaded, name="list-published-blogs")

    def _handle_loaded(self, result: ServiceResult[list[BlogPost]]) -> None:
        for child in self._list.winfo_children():
            child.destroy()
        if not result.success:
            self._report_failure(result, "Could not load the blog.")
            return
        posts = result.data or []
        if not posts:
            ctk.CTkLabel(
                self._list, text="No posts have been published yet.", font=FONT_BODY, text_color=TEXT_SECONDARY,
            ).pack(pady=PADDING_LG)
        for post in posts:
            self._add_card(post)

    def _add_card(self, post: BlogPost) -> None:
        card = ctk.CTkFrame(self._list, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(fill="x", pady=(0, PADDING_SM))
        ctk.CTkLabel(
            card, text=post.title, font=FONT_SUBHEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 2))
        ctk.CTkLabel(
            card,
            text=f"By {post.author_name or 'LifeStream'} · {(post.created_at or '')[:10]}",
            font=FONT_SMALL,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", padx=PADDING_MD)
        text = html_to_text(post.content)
        excerpt = text if len(text) <= _EXCERPT_CHARS else text[:_EXCERPT_CHARS].rsplit(" ", 1)[0] + "…"
        ctk.CTkLabel(
            card, text=excerpt, font=FONT_BODY, text_color=TEXT_PRIMARY, anchor="w", justify="left", wraplength=760,
        ).pack(fill="x", padx=PADDING_MD, pady=PADDING_SM)
        ctk.CTkButton(
            card,
            text="Read more  →",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=ACCENT_PRIMARY,
            width=110,
            command=lambda: BlogReader(self, self._service, post, self._logger),
        ).pack(anchor="e", padx=PADDING_MD, pady=(0, PADDING_MD))


class BlogReader(ctk.CTkToplevel):
    """Full post in its own window; refreshed from the public endpoint."""

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        service: BlogService,
        post: BlogPost,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent)
        self._tasks = TaskScope(lambda callback: self.after(0, callback), logger)
        self.title(post.title)
        self.geometry("700x640")
        self.configure(fg_color=CONTENT_CARD_BG)
        self.transient(parent.winfo_toplevel())

        self._title = ctk.CTkLabel(
            self, text=post.title, font=FONT_HEADING, text_color=TEXT_PRIMARY, wraplength=640, justify="left",
        )
        self._title.pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        self._body = ctk.CTkTextbox(self, font=FONT_BODY, wrap="word", fg_color=CONTENT_CARD_BG)
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        self._show(post)

        if post.id:
            self._tasks.submit(lambda: service.get_published(post.id or ""), self._handle_loaded, name="get-blog")

    def _handle_loaded(self, result: ServiceResult[BlogPost]) -> None:
        if result.success and result.data is not None:
            self._show(result.data)

    def _show(self, post: BlogPost) -> None:
        self._title.configure(text=post.title)
        self._body.configure(state="normal")
        self._body.delete("1.0", "end")
        self._body.insert("1.0", html_to_text(post.content))
        self._body.configure(state="disabled")

    def destroy(self) -> None:
        self._tasks.close()
        super().destroy()
