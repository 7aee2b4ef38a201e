"""Form Field Helpers.

Uppercase label + input pairs in the login-card style, shared by every
form screen.
"""

from __future__ import annotations

from typing import Optional, Sequence

import customtkinter as ctk

from lifestream.models.enums import BloodGroup, RequestStatus
from lifestream.ui.theme import (
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_LABEL,
    FONT_SMALL,
    INPUT_BG,
    INPUT_BORDER,
    INPUT_HEIGHT,
    PADDING_MD,
    STATUS_CANCELED,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    TEXT_PRIMARY,
)

BLOOD_GROUP_PROMPT = "Select blood group"
BLOOD_GROUP_OPTIONS: list[str] = [BLOOD_GROUP_PROMPT, *(g.value for g in BloodGroup)]

STATUS_COLOURS: dict[RequestStatus, str] = {
    RequestStatus.PENDING: STATUS_PENDING,
    RequestStatus.IN_PROGRESS: STATUS_IN_PROGRESS,
    RequestStatus.COMPLETED: STATUS_COMPLETED,
    RequestStatus.CANCELED: STATUS_CANCELED,
}


def field_label(parent: ctk.CTkBaseClass, text: str) -> ctk.CTkLabel:
    label = ctk.CTkLabel(
        parent,
        text=text.upper(),
        font=FONT_LABEL,
        text_color=TEXT_PRIMARY,
        anchor="w",
    )
    label.pack(fill="x", pady=(0, 4))
    return label


def labeled_entry(
    parent: ctk.CTkBaseClass,
    label: str,
    placeholder: str = "",
    show: Optional[str] = None,
) -> ctk.CTkEntry:
    """Pack a label and an entry; returns the entry."""
    field_label(parent, label)
    entry = ctk.CTkEntry(
        parent,
        placeholder_text=placeholder,
        font=FONT_BODY,
        fg_color=INPUT_BG,
        border_color=INPUT_BORDER,
        text_color=TEXT_PRIMARY,
        height=INPUT_HEIGHT,
        corner_radius=CORNER_RADIUS,
        show=show or "",
    )
    entry.pack(fill="x", pady=(0, PADDING_MD))
    return entry


def labeled_option(
    parent: ctk.CTkBaseClass,
    label: str,
    values: Sequence[str],
) -> ctk.CTkOptionMenu:
    field_label(parent, label)
    menu = ctk.CTkOptionMenu(
        parent,
        values=list(values),
        font=FONT_BODY,
        fg_color=INPUT_BG,
        button_color=INPUT_BORDER,
        text_color=TEXT_PRIMARY,
        height=INPUT_HEIGHT,
        corner_radius=CORNER_RADIUS,
        dynamic_resizing=False,
    )
    menu.pack(fill="x", pady=(0, PADDING_MD))
    return menu


def labeled_textbox(parent: ctk.CTkBaseClass, label: str, height: int = 100) -> ctk.CTkTextbox:
    field_label(parent, label)
    box = ctk.CTkTextbox(
        parent,
        font=FONT_BODY,
        fg_color=INPUT_BG,
        border_color=INPUT_BORDER,
        border_width=1,
        text_color=TEXT_PRIMARY,
        height=height,
        corner_radius=CORNER_RADIUS,
    )
    box.pack(fill="x", pady=(0, PADDING_MD))
    return box


def error_label(parent: ctk.CTkBaseClass, wraplength: int = 480) -> ctk.CTkLabel:
    """Hidden inline error label; show with ``show_message``."""
    label = ctk.CTkLabel(
        parent,
        text="",
        font=FONT_SMALL,
        text_color=ERROR_TEXT,
        wraplength=wraplength,
        justify="left",
    )
    label.pack(fill="x")
    label.pack_forget()
    return label


def show_message(label: ctk.CTkLabel, message: str, color: str = ERROR_TEXT) -> None:
    label.configure(text=message, text_color=color)
    label.pack(fill="x")


def hide_message(label: ctk.CTkLabel) -> None:
    label.configure(text="")
    label.pack_forget()


def blood_group_value(menu: ctk.CTkOptionMenu) -> str:
    """Selected blood group, or ``""`` while the prompt is shown."""
    value = menu.get()
    return "" if value == BLOOD_GROUP_PROMPT else value


def set_entry(entry: ctk.CTkEntry, value: str) -> None:
    entry.delete(0, "end")
    if value:
        entry.insert(0, value)
