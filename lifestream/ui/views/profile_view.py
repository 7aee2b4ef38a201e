"""Profile Screen.

Read-only until "Edit" is pressed; saving pushes display metadata to
the identity provider and the profile record to the platform API, then
republishes the identity so the sidebar picks up the new name.

**Thin UI Rule**: validation and the avatar upload live in
``AuthService.update_profile``.
"""

from __future__ import annotations

from tkinter import filedialog
from typing import Optional

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.auth_models import AuthResult
from lifestream.models.service_models import ServiceResult
from lifestream.models.user import ProfileUpdate, UserProfile
from lifestream.services.auth_service import AuthService
from lifestream.services.location_service import LocationService
from lifestream.services.user_service import UserService
from lifestream.ui.components.form_fields import (
    BLOOD_GROUP_OPTIONS,
    BLOOD_GROUP_PROMPT,
    blood_group_value,
    error_label,
    hide_message,
    labeled_entry,
    labeled_option,
    set_entry,
    show_message,
)
from lifestream.ui.components.location_picker import LocationPicker
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    BUTTON_HEIGHT,
    CONTENT_CARD_BG,
    FONT_BUTTON,
    FONT_SMALL,
    PADDING_MD,
    PADDING_SM,
    TAB_HOVER,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)

_FORM_WIDTH: int = 520


class ProfileView(ModuleFrame):
    """Signed-in user's profile with an edit toggle."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        users: UserService,
        auth: AuthService,
        locations: LocationService,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._users = users
        self._auth = auth
        self._profile: Optional[UserProfile] = None
        self._avatar_path: Optional[str] = None
        self._editing = False

        header = self._build_header("My Profile")
        self._edit_btn = ctk.CTkButton(
            header,
            text="Edit",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            width=100,
            command=self._toggle_edit,
        )
        self._edit_btn.pack(side="right")

        scroll = ctk.CTkScrollableFrame(self, fg_color="transparent")
        scroll.pack(fill="both", expand=True)
        card = ctk.CTkFrame(scroll, fg_color=CONTENT_CARD_BG, corner_radius=16, width=_FORM_WIDTH)
        card.pack(pady=PADDING_MD)
        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=36, pady=28)

        self._name_entry = labeled_entry(inner, "Full name")
        self._email_entry = labeled_entry(inner, "Email")
        self._blood_menu = labeled_option(inner, "Blood group", BLOOD_GROUP_OPTIONS)
        self._location = LocationPicker(inner, locations.new_selection())
        self._location.pack(fill="x", pady=(0, PADDING_MD))

        avatar_row = ctk.CTkFrame(inner, fg_color="transparent")
        avatar_row.pack(fill="x", pady=(0, PADDING_MD))
        self._avatar_btn = ctk.CTkButton(
            avatar_row,
            text="Change photo...",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_PRIMARY,
            border_width=1,
            width=140,
            command=self._choose_avatar,
        )
        self._avatar_btn.pack(side="left")
        self._avatar_label = ctk.CTkLabel(avatar_row, text="", font=FONT_SMALL, text_color=TEXT_SECONDARY)
        self._avatar_label.pack(side="left", padx=PADDING_SM)

        self._save_btn = ctk.CTkButton(
            inner,
            text="Save",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            command=self._handle_save,
        )
        self._save_btn.pack(fill="x", pady=(0, PADDING_SM))
        self._error_label = error_label(inner, wraplength=_FORM_WIDTH - 60)

        self._set_editing(False)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        self._run(self._users.get_my_profile, self._handle_loaded, name="get-profile")

    def _handle_loaded(self, result: ServiceResult[UserProfile]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not load your profile.")
            return
        self._profile = result.data
        self._fill(result.data)
        self._set_editing(False)

    def _fill(self, profile: UserProfile) -> None:
        self._email_entry.configure(state="normal")
        set_entry(self._name_entry, profile.name)
        set_entry(self._email_entry, profile.email)
        self._email_entry.configure(state="disabled")
        self._blood_menu.set(str(profile.blood_group) if profile.blood_group else BLOOD_GROUP_PROMPT)
        self._location.set(profile.district, profile.upazila)
        self._avatar_path = None
        self._avatar_label.configure(text="Photo on file" if profile.photo_url else "No photo")

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def _set_editing(self, editing: bool) -> None:
        self._editing = editing
        state = "normal" if editing else "disabled"
        self._name_entry.configure(state=state)
        self._blood_menu.configure(state=state)
        self._avatar_btn.configure(state=state)
        self._save_btn.configure(state=state)
        self._edit_btn.configure(text="Cancel" if editing else "Edit")
        hide_message(self._error_label)

    def _toggle_edit(self) -> None:
        if self._editing and self._profile is not None:
            self._fill(self._profile)
        self._set_editing(not self._editing)

    def _choose_avatar(self) -> None:
        path = filedialog.askopenfilename(
            title="Choose a profile photo",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.gif *.webp")],
        )
        if path:
            self._avatar_path = path
            self._avatar_label.configure(text=path.replace("\\", "/").rsplit("/", 1)[-1])

    def _handle_save(self) -> None:
        if self._profile is None:
            return
        hide_message(self._error_label)
        update = ProfileUpdate(
            name=self._name_entry.get(),
            blood_group=blood_group_value(self._blood_menu),
            district=self._location.district,
            upazila=self._location.upazila,
            photo_url=self._profile.photo_url,
            avatar_path=self._avatar_path,
        )
        self._save_btn.configure(text="Saving...", state="disabled")
        self._run(lambda: self._auth.update_profile(update), self._handle_saved, name="update-profile")

    def _handle_saved(self, result: AuthResult) -> None:
        self._save_btn.configure(text="Save", state="normal")
        if not result.success:
            show_message(self._error_label, result.error_message or "Could not save your profile.")
            return
        self._toast("Profile updated.", "success")
        self.refresh()
