"""Paginated Table Component.

Renders the current page of a ``TableState`` as a grid of labels with
optional per-row action buttons, plus a pager.  Filtering and paging
rules live in ``TableState``; this widget only draws them.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

import customtkinter as ctk

from lifestream.services.list_state import TableState
from lifestream.ui.theme import (
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_LABEL,
    FONT_SMALL,
    PADDING_MD,
    PADDING_SM,
    ROW_ALT_BG,
    TAB_BORDER,
    TAB_HOVER,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

# (header, cell text, relative width)
TableColumn = tuple[str, Callable[[Any], str], int]
RowAction = tuple[str, Callable[[], None]]
RowActions = Callable[[Any], list[RowAction]]


class PagedTable(ctk.CTkFrame):
    """Card with a header row, one row per visible record and a pager.

    Parameters
    ----------
    parent:
        Containing widget.
    state:
        Rows, filter and page.
    columns:
        Column definitions.
    actions:
        Returns the action buttons for a row (may be empty).
    empty_text:
        Shown when the filtered list is empty.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        state: TableState[Any, Any],
        columns: Sequence[TableColumn],
        actions: Optional[RowActions] = None,
        empty_text: str = "Nothing to show yet.",
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        self._state = state
        self._columns = columns
        self._actions = actions
        self._empty_text = empty_text

        self._body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._body.pack(fill="both", expand=True, padx=PADDING_SM, pady=(PADDING_SM, 0))

        pager = ctk.CTkFrame(self, fg_color="transparent")
        pager.pack(fill="x", padx=PADDING_MD, pady=PADDING_SM)
        self._prev_btn = self._pager_button(pager, "‹ Previous", self._previous)
        self._prev_btn.pack(side="left")
        self._next_btn = self._pager_button(pager, "Next ›", self._next)
        self._next_btn.pack(side="right")
        self._page_label = ctk.CTkLabel(pager, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY)
        self._page_label.pack(side="left", expand=True)

        self.render()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def render(self) -> None:
        """Redraw rows and pager from the table state."""
        for child in self._body.winfo_children():
            child.destroy()

        action_col = len(self._columns)
        for col, (_, _, weight) in enumerate(self._columns):
            self._body.grid_columnconfigure(col, weight=weight)
        self._body.grid_columnconfigure(action_col, weight=0)

        for col, (header, _, _) in enumerate(self._columns):
            ctk.CTkLabel(
                self._body,
                text=header.upper(),
                font=FONT_LABEL,
                text_color=TEXT_SECONDARY,
                anchor="w",
            ).grid(row=0, column=col, sticky="ew", padx=PADDING_SM, pady=(0, 4))

        rows = self._state.visible
        if not rows:
            ctk.CTkLabel(
                self._body,
                text=self._empty_text,
                font=FONT_BODY,
                text_color=TEXT_SECONDARY,
            ).grid(row=1, column=0, columnspan=action_col + 1, pady=PADDING_MD)

        for index, record in enumerate(rows, start=1):
            bg = ROW_ALT_BG if index % 2 == 0 else "transparent"
            for col, (_, read, _) in enumerate(self._columns):
                ctk.CTkLabel(
                    self._body,
                    text=read(record),
                    font=FONT_BODY,
                    text_color=TEXT_PRIMARY,
                    fg_color=bg,
                    anchor="w",
                ).grid(row=index, column=col, sticky="ew", padx=0, pady=1, ipadx=PADDING_SM)
            if self._actions is not None:
                cell = ctk.CTkFrame(self._body, fg_color=bg)
                cell.grid(row=index, column=action_col, sticky="e", pady=1)
                for label, command in self._actions(record):
                    ctk.CTkButton(
                        cell,
                        text=label,
                        font=FONT_SMALL,
                        fg_color="transparent",
                        hover_color=TAB_HOVER,
                        text_color=ACCENT_PRIMARY,
                        border_width=1,
                        border_color=TAB_BORDER,
                        width=70,
                        height=26,
                        command=command,
                    ).pack(side="left", padx=2)

        total = len(self._state.filtered)
        self._page_label.configure(
            text=f"Page {self._state.page} of {self._state.page_count}  ·  {total} record(s)"
        )
        self._prev_btn.configure(state="normal" if self._state.page > 1 else "disabled")
        self._next_btn.configure(
            state="normal" if self._state.page < self._state.page_count else "disabled"
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _previous(self) -> None:
        self._state.previous_page()
        self.render()

    def _next(self) -> None:
        self._state.next_page()
        self.render()

    @staticmethod
    def _pager_button(parent: ctk.CTkFrame, text: str, command: Callable[[], None]) -> ctk.CTkButton:
        return ctk.CTkButton(
            parent,
            text=text,
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_PRIMARY,
            width=90,
            height=28,
            command=command,
        )
