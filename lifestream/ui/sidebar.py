"""Left-hand navigation for the LifeStream shell.

Shows who is signed in (or that the visitor is a guest), one button per
screen the registry exposes for that visitor, and a sign-in or log-out
button at the bottom.  The sidebar holds no state beyond which button is
highlighted; every click is forwarded to the shell.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

import customtkinter as ctk

from lifestream import __version__
from lifestream.logger import StructuredLogger
from lifestream.models.user import Identity
from lifestream.ui.module_registry import ModuleEntry
from lifestream.ui.theme import (
    ACCENT_PRIMARY,
    FONT_BODY,
    FONT_CAPTION,
    FONT_SIDEBAR,
    FONT_SIDEBAR_ACTIVE,
    FONT_SMALL,
    LOGOUT_HOVER,
    LOGOUT_PRIMARY,
    PADDING_MD,
    PADDING_SM,
    SIDEBAR_ACTIVE,
    SIDEBAR_BG,
    SIDEBAR_HOVER,
    SIDEBAR_TEXT,
    SIDEBAR_WIDTH,
    TEXT_LIGHT,
)

_BADGE_SIZE = 40


def initials(name: str) -> str:
    """First letters of the first and last word, or ``"?"`` for a blank name."""
    words = name.split()
    if not words:
        return "?"
    if len(words) == 1:
        return words[0][0].upper()
    return (words[0][0] + words[-1][0]).upper()


def role_caption(identity: Optional[Identity]) -> str:
    if identity is None:
        return "Browsing as guest"
    if identity.role is None:
        return "Role pending"
    return identity.role.value.capitalize()


class SidebarNav(ctk.CTkFrame):
    """Navigation column.

    ``on_select`` receives a ``module_id``.  ``on_session_action`` is the
    log-out handler for a signed-in user and opens the login screen for a
    guest.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        entries: Iterable[ModuleEntry],
        identity: Optional[Identity],
        on_select: Callable[[str], None],
        on_session_action: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, width=SIDEBAR_WIDTH, fg_color=SIDEBAR_BG)
        self.pack_propagate(False)
        self._identity = identity
        self._on_select = on_select
        self._on_session_action = on_session_action
        self._logger = logger
        self._buttons: dict[str, ctk.CTkButton] = {}
        self._highlighted: Optional[str] = None

        self._build_header()
        self._divider()
        self._build_footer()
        self._nav = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._nav.pack(fill="both", expand=True, pady=PADDING_SM)
        for entry in entries:
            self._add_button(entry)

    @property
    def module_ids(self) -> list[str]:
        return list(self._buttons)

    def set_active(self, module_id: str) -> None:
        """Move the highlight to *module_id*; unknown ids just clear it."""
        previous = self._buttons.get(self._highlighted or "")
        if previous is not None:
            previous.configure(fg_color="transparent", font=FONT_SIDEBAR)
        current = self._buttons.get(module_id)
        if current is not None:
            current.configure(fg_color=SIDEBAR_ACTIVE, font=FONT_SIDEBAR_ACTIVE)
        self._highlighted = module_id

    def _add_button(self, entry: ModuleEntry) -> None:
        module_id = entry.module_id
        button = ctk.CTkButton(
            self._nav,
            text=f"  {entry.icon}   {entry.display_name}",
            anchor="w",
            font=FONT_SIDEBAR,
            text_color=SIDEBAR_TEXT,
            fg_color="transparent",
            hover_color=SIDEBAR_HOVER,
            height=40,
            corner_radius=6,
            command=lambda: self._on_select(module_id),
        )
        button.pack(fill="x", padx=PADDING_SM, pady=2)
        self._buttons[module_id] = button

    def _divider(self, side: str = "top") -> None:
        ctk.CTkFrame(self, height=1, fg_color=SIDEBAR_HOVER).pack(
            fill="x", padx=PADDING_MD, pady=PADDING_SM, side=side,
        )

    def _build_header(self) -> None:
        name = self._identity.name if self._identity is not None else "Guest"

        header = ctk.CTkFrame(self, fg_color="transparent")
        header.pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, PADDING_SM))

        badge = ctk.CTkFrame(
            header,
            width=_BADGE_SIZE,
            height=_BADGE_SIZE,
            corner_radius=_BADGE_SIZE // 2,
            fg_color=ACCENT_PRIMARY,
        )
        badge.pack(side="left", padx=(0, 10))
        badge.pack_propagate(False)
        ctk.CTkLabel(
            badge, text=initials(name), font=FONT_SIDEBAR_ACTIVE, text_color=TEXT_LIGHT,
        ).place(relx=0.5, rely=0.5, anchor="center")

        labels = ctk.CTkFrame(header, fg_color="transparent")
        labels.pack(side="left", fill="x", expand=True)
        ctk.CTkLabel(
            labels, text=name, font=FONT_SIDEBAR_ACTIVE, text_color=TEXT_LIGHT, anchor="w",
        ).pack(fill="x")
        ctk.CTkLabel(
            labels,
            text=role_caption(self._identity),
            font=FONT_SMALL,
            text_color=SIDEBAR_TEXT,
            anchor="w",
        ).pack(fill="x")

    def _build_footer(self) -> None:
        # Packed bottom-up, so the version line sits below the button.
        ctk.CTkLabel(
            self, text=f"LifeStream v{__version__}", font=FONT_CAPTION, text_color=SIDEBAR_TEXT,
        ).pack(side="bottom", pady=(0, PADDING_SM))

        signed_in = self._identity is not None
        ctk.CTkButton(
            self,
            text="  ⏻   Log Out" if signed_in else "  →   Sign In",
            font=FONT_BODY,
            fg_color="transparent",
            hover_color=LOGOUT_HOVER if signed_in else SIDEBAR_HOVER,
            text_color=LOGOUT_PRIMARY if signed_in else SIDEBAR_TEXT,
            anchor="w",
            height=36,
            corner_radius=6,
            command=self._on_session_action,
        ).pack(fill="x", padx=PADDING_SM, pady=PADDING_SM, side="bottom")
        self._divider(side="bottom")
