"""Content Management Screen.

Admins and volunteers manage blog posts here: write a new draft, filter
the table by status, publish/unpublish, and (admins only) delete.

**Thin UI Rule**: the publication workflow and role checks live in
``BlogService``.
"""

from __future__ import annotations

from tkinter import filedialog
from typing import Optional

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.errors import ErrorKind
from lifestream.logger import StructuredLogger
from lifestream.models.blog import BlogDraftInput, BlogPost
from lifestream.models.enums import BlogStatus, Role
from lifestream.models.service_models import ServiceResult
from lifestream.services.blog_service import BlogService
from lifestream.services.list_state import blog_table
from lifestream.ui.components.data_table import PagedTable, RowAction, TableColumn
from lifestream.ui.components.dialogs import ask_confirmation
from lifestream.ui.components.form_fields import (
    error_label,
    hide_message,
    labeled_entry,
    labeled_textbox,
    set_entry,
    show_message,
)
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BUTTON,
    FONT_SMALL,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TAB_HOVER,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_FILTERS: dict[str, Optional[BlogStatus]] = {
    "All": None,
    "Draft": BlogStatus.DRAFT,
    "Published": BlogStatus.PUBLISHED,
    "Unpublished": BlogStatus.UNPUBLISHED,
}

_COLUMNS: list[TableColumn] = [
    ("Title", lambda b: b.title, 5),
    ("Author", lambda b: b.author_name or "—", 2),
    ("Status", lambda b: str(b.status).capitalize(), 2),
    ("Created", lambda b: (b.created_at or "")[:10], 2),
]


class ContentView(ModuleFrame):
    """Blog administration: draft form + status-filtered table."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: BlogService,
        session: SessionManager,
        page_size: int,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._session = session
        self._state = blog_table(page_size)
        self._thumbnail_path: Optional[str] = None

        header = self._build_header("Content Management")
        self._toggle_form_btn = ctk.CTkButton(
            header,
            text="+ Add Blog",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            width=120,
            command=self._toggle_form,
        )
        self._toggle_form_btn.pack(side="right")
        ctk.CTkOptionMenu(
            header, values=list(_FILTERS), command=self._handle_filter, width=140,
        ).pack(side="right", padx=PADDING_SM)
        ctk.CTkLabel(header, text="Status", font=FONT_SMALL, text_color=TEXT_SECONDARY).pack(side="right")

        self._form = self._build_form()

        self._table = PagedTable(
            self, self._state, _COLUMNS, actions=self._row_actions, empty_text="No blog posts yet.",
        )
        self._table.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    # ------------------------------------------------------------------
    # Draft form
    # ------------------------------------------------------------------

    def _build_form(self) -> ctk.CTkFrame:
        form = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        inner = ctk.CTkFrame(form, fg_color="transparent")
        inner.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)

        self._title_entry = labeled_entry(inner, "Title", "Blog title")

        thumb_row = ctk.CTkFrame(inner, fg_color="transparent")
        thumb_row.pack(fill="x", pady=(0, PADDING_MD))
        ctk.CTkButton(
            thumb_row,
            text="Choose thumbnail...",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_PRIMARY,
            border_width=1,
            width=150,
            command=self._choose_thumbnail,
        ).pack(side="left")
        self._thumb_label = ctk.CTkLabel(thumb_row, text="No image selected", font=FONT_SMALL, text_color=TEXT_SECONDARY)
        self._thumb_label.pack(side="left", padx=PADDING_SM)

        self._content_box = labeled_textbox(inner, "Content (HTML or plain text)", height=160)

        self._save_btn = ctk.CTkButton(
            inner,
            text="Save Draft",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=self._handle_create,
        )
        self._save_btn.pack(anchor="e")
        self._error_label = error_label(inner)
        return form

    def _toggle_form(self) -> None:
        if self._form.winfo_manager():
            self._form.pack_forget()
            self._toggle_form_btn.configure(text="+ Add Blog")
        else:
            self._form.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD), before=self._table)
            self._toggle_form_btn.configure(text="Close")

    def _choose_thumbnail(self) -> None:
        path = filedialog.askopenfilename(
            title="Choose a thumbnail",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.gif *.webp")],
        )
        if path:
            self._thumbnail_path = path
            self._thumb_label.configure(text=path.replace("\\", "/").rsplit("/", 1)[-1])

    def _handle_create(self) -> None:
        hide_message(self._error_label)
        form = BlogDraftInput(
            title=self._title_entry.get(),
            content=self._content_box.get("1.0", "end").strip(),
            thumbnail_path=self._thumbnail_path,
        )
        self._save_btn.configure(text="Saving...", state="disabled")
        self._run(lambda: self._service.create_draft(form), self._handle_created, name="create-blog")

    def _handle_created(self, result: ServiceResult[BlogPost]) -> None:
        self._save_btn.configure(text="Save Draft", state="normal")
        if not result.success or result.data is None:
            if result.error_kind is ErrorKind.VALIDATION:
                show_message(self._error_label, result.error or "Please check the form.")
            else:
                self._report_failure(result, "Could not save the blog.")
            return
        self._state.load([result.data, *self._state.rows])
        self._table.render()
        set_entry(self._title_entry, "")
        self._content_box.delete("1.0", "end")
        self._thumbnail_path = None
        self._thumb_label.configure(text="No image selected")
        self._toggle_form()
        self._toast("Blog saved as draft.", "success")

    # ------------------------------------------------------------------
    # Table
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        self._run(self._service.list_posts, self._handle_loaded, name="list-blogs")

    def _handle_loaded(self, result: ServiceResult[list[BlogPost]]) -> None:
        if not result.success:
            self._report_failure(result, "Could not load blog posts.")
            return
        self._state.load(result.data or [])
        self._table.render()

    def _handle_filter(self, value: str) -> None:
        self._state.set_filter(_FILTERS[value])
        self._table.render()

    def _row_actions(self, post: BlogPost) -> list[RowAction]:
        role = self._session.role
        actions: list[RowAction] = []
        if role in (Role.ADMIN, Role.VOLUNTEER):
            label = "Unpublish" if post.status is BlogStatus.PUBLISHED else "Publish"
            actions.append((label, lambda: self._handle_toggle(post)))
        if role is Role.ADMIN:
            actions.append(("Delete", lambda: self._handle_delete(post)))
        return actions

    def _handle_toggle(self, post: BlogPost) -> None:
        self._run(lambda: self._service.toggle_status(post), self._handle_toggled, name="toggle-blog")

    def _handle_toggled(self, result: ServiceResult[BlogPost]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not change the blog status.")
            return
        self._state.replace(result.data)
        self._table.render()
        self._toast(f"'{result.data.title}' is now {result.data.status}.", "success")

    def _handle_delete(self, post: BlogPost) -> None:
        if not ask_confirmation(
            self, "Delete blog", f"Delete '{post.title}' permanently?", confirm_text="Delete",
        ):
            return
        self._run(lambda: self._service.delete(post, confirmed=True), self._handle_deleted, name="delete-blog")

    def _handle_deleted(self, result: ServiceResult[str]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not delete the blog.")
            return
        self._state.remove(result.data)
        self._table.render()
        self._toast("Blog deleted.", "success")
