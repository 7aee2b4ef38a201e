"""Modal Dialogs.

Confirmation prompts for the destructive or privileged actions
(cancel a request, mark it completed, delete a post, promote to admin)
and a simple message box.  The caller's service method receives the
outcome as its ``confirmed`` argument.
"""

from __future__ import annotations

import customtkinter as ctk

from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    FONT_BODY,
    FONT_BUTTON,
    FONT_SUBHEADING,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TAB_HOVER,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class ConfirmDialog(ctk.CTkToplevel):
    """Yes/no dialog; ``confirmed`` is ``True`` only after the confirm click."""

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        title: str,
        message: str,
        confirm_text: str = "Confirm",
    ) -> None:
        super().__init__(parent)
        self.confirmed: bool = False

        self.title(title)
        self.geometry("440x210")
        self.resizable(False, False)
        self.configure(fg_color=CONTENT_CARD_BG)
        self.transient(parent.winfo_toplevel())

        ctk.CTkLabel(
            self,
            text=title,
            font=FONT_SUBHEADING,
            text_color=TEXT_PRIMARY,
        ).pack(padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            self,
            text=message,
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            wraplength=390,
            justify="center",
        ).pack(padx=PADDING_LG, pady=(0, PADDING_MD))

        buttons = ctk.CTkFrame(self, fg_color="transparent")
        buttons.pack(pady=(0, PADDING_LG))
        ctk.CTkButton(
            buttons,
            text="Cancel",
            font=FONT_BUTTON,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_SECONDARY,
            border_width=1,
            border_color=TEXT_SECONDARY,
            width=120,
            command=self.destroy,
        ).pack(side="left", padx=PADDING_SM)
        ctk.CTkButton(
            buttons,
            text=confirm_text,
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            width=120,
            command=self._confirm,
        ).pack(side="left", padx=PADDING_SM)

        self.after(50, self._grab)

    def _grab(self) -> None:
        if self.winfo_exists():
            self.grab_set()
            self.focus_set()

    def _confirm(self) -> None:
        self.confirmed = True
        self.destroy()


def ask_confirmation(
    parent: ctk.CTkBaseClass,
    title: str,
    message: str,
    confirm_text: str = "Confirm",
) -> bool:
    """Block (with the event loop running) until the user answers."""
    dialog = ConfirmDialog(parent, title, message, confirm_text)
    parent.wait_window(dialog)
    return dialog.confirmed


def ask_text(title: str, prompt: str) -> str:
    """Single-line input prompt; returns ``""`` when dismissed."""
    dialog = ctk.CTkInputDialog(text=prompt, title=title)
    value = dialog.get_input()
    return (value or "").strip()
