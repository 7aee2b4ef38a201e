"""Toast Notification Component.

Transient message shown in the top-right corner of the window and
removed after a few seconds.  Every network failure on every screen is
surfaced this way.
"""

from __future__ import annotations

from typing import Optional

import customtkinter as ctk

from lifestream.ui.theme import (
    CORNER_RADIUS,
    FONT_BODY,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TOAST_ERROR_BG,
    TOAST_INFO_BG,
    TOAST_SUCCESS_BG,
)

_DISPLAY_MS: int = 3_500
_WRAP: int = 320
_STACK_OFFSET: int = 56

_BACKGROUNDS: dict[str, str] = {
    "info": TOAST_INFO_BG,
    "success": TOAST_SUCCESS_BG,
    "error": TOAST_ERROR_BG,
}


class Toast(ctk.CTkFrame):
    """A single self-dismissing notification.

    Parameters
    ----------
    window:
        Top-level window the toast is placed on.
    message:
        Text to show.
    kind:
        ``'info'``, ``'success'`` or ``'error'``.
    slot:
        Position in the stack of visible toasts (0 = top).
    """

    def __init__(self, window: ctk.CTkBaseClass, message: str, kind: str, slot: int) -> None:
        self._dismiss_job: Optional[str] = None
        super().__init__(
            window,
            fg_color=_BACKGROUNDS.get(kind, TOAST_INFO_BG),
            corner_radius=CORNER_RADIUS,
        )
        ctk.CTkLabel(
            self,
            text=message,
            font=FONT_BODY,
            text_color=TEXT_LIGHT,
            wraplength=_WRAP,
            justify="left",
        ).pack(padx=PADDING_MD, pady=PADDING_SM)
        self.place(relx=1.0, rely=0.0, anchor="ne", x=-PADDING_MD, y=PADDING_MD + slot * _STACK_OFFSET)
        self.lift()
        self._dismiss_job = self.after(_DISPLAY_MS, self.destroy)

    def destroy(self) -> None:
        if self._dismiss_job is not None:
            self.after_cancel(self._dismiss_job)
            self._dismiss_job = None
        super().destroy()


def show_toast(widget: ctk.CTkBaseClass, message: str, kind: str = "info") -> Toast:
    """Show *message* on the window that contains *widget*."""
    window = widget.winfo_toplevel()
    visible = sum(1 for child in window.winfo_children() if isinstance(child, Toast))
    return Toast(window, message, kind, slot=visible)
