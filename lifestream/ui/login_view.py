"""Sign-in and registration screen.

The card has two tabs.  *Sign In* takes an email and password or starts
the Google flow (browser consent, then a pasted callback code).
*Register* creates a donor account with blood group, district, upazila
and an optional avatar.  Below the card, visitors can skip signing in
and browse the public screens as a guest.

Every network call goes through ``AuthService`` on a worker thread; this
frame only collects input and renders the ``AuthResult``.
"""

from __future__ import annotations

import tkinter as tk
import webbrowser
from pathlib import Path
from tkinter import filedialog
from typing import Callable, Optional

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.auth_models import AuthResult
from lifestream.models.user import RegistrationInput
from lifestream.services.auth_service import AuthService
from lifestream.services.location_service import LocationService
from lifestream.ui.components.dialogs import ask_text
from lifestream.ui.components.form_fields import (
    BLOOD_GROUP_OPTIONS,
    blood_group_value,
)
from lifestream.ui.components.location_picker import LocationPicker
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_BG,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BRAND,
    FONT_BUTTON,
    FONT_CAPTION,
    FONT_ICON_LG,
    FONT_SMALL,
    FONT_SUBTITLE,
    INPUT_BG,
    INPUT_BORDER,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    SUCCESS_TEXT,
    TAB_BORDER,
    TAB_HOVER,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from lifestream.utils.task_scope import TaskScope

_CARD_WIDTH = 440
_TAB_HEIGHT = 42
_INPUT_HEIGHT = 42
_BUTTON_HEIGHT = 46
_REGISTER_HEIGHT = 430
_DROP_BADGE = 56
_FIELD_CAPTION_FONT = ("Segoe UI", 11, "bold")
_TAB_FONT = ("Segoe UI", 13)
_TAB_FONT_ACTIVE = ("Segoe UI", 13, "bold")
_BACK_TO_SIGN_IN_MS = 3000

SIGN_IN = "sign_in"
REGISTER = "register"


class LoginView(ctk.CTkFrame):
    """Full-window frame shown whenever nobody is signed in.

    ``on_login_success`` runs on the Tk thread once the session holds an
    identity with a role.  ``on_browse_as_guest`` opens the workspace with
    the public screens only.
    """

    def __init__(
        self,
        parent: ctk.CTk,
        auth_service: AuthService,
        locations: LocationService,
        on_login_success: Callable[[], None],
        on_browse_as_guest: Callable[[], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, fg_color=CONTENT_BG)
        self._auth = auth_service
        self._locations = locations
        self._on_login_success = on_login_success
        self._on_browse_as_guest = on_browse_as_guest
        self._logger = logger
        self._tasks = TaskScope(lambda callback: self.after(0, callback), logger)
        self._active_tab = SIGN_IN
        self._back_job: Optional[str] = None

        self._email_entry: Optional[ctk.CTkEntry] = None
        self._password_entry: Optional[ctk.CTkEntry] = None
        self._login_button: Optional[ctk.CTkButton] = None
        self._google_button: Optional[ctk.CTkButton] = None
        self._error_label: Optional[ctk.CTkLabel] = None

        self._rg_name_entry: Optional[ctk.CTkEntry] = None
        self._rg_email_entry: Optional[ctk.CTkEntry] = None
        self._rg_password_entry: Optional[ctk.CTkEntry] = None
        self._rg_confirm_entry: Optional[ctk.CTkEntry] = None
        self._rg_blood_menu: Optional[ctk.CTkOptionMenu] = None
        self._rg_location: Optional[LocationPicker] = None
        self._rg_avatar_label: Optional[ctk.CTkLabel] = None
        self._rg_terms_var = tk.BooleanVar(value=False)
        self._rg_avatar_path: Optional[str] = None
        self._rg_create_button: Optional[ctk.CTkButton] = None
        self._rg_error_label: Optional[ctk.CTkLabel] = None
        self._rg_success_label: Optional[ctk.CTkLabel] = None

        self._tabs: dict[str, ctk.CTkButton] = {}
        self._panes: dict[str, ctk.CTkFrame] = {}

        self._build_ui()

    def show_message(self, message: str) -> None:
        """Open the Sign In tab with *message* in the error slot (session expiry etc.)."""
        self._switch_tab(SIGN_IN)
        self._show_error(message)

    def destroy(self) -> None:
        self._tasks.close()
        if self._back_job is not None:
            self.after_cancel(self._back_job)
            self._back_job = None
        super().destroy()

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def _build_ui(self) -> None:
        # Rows 0 and 3 absorb spare height so the card stays centred.
        for row, weight in ((0, 1), (1, 0), (2, 0), (3, 1)):
            self.grid_rowconfigure(row, weight=weight)
        self.grid_columnconfigure(0, weight=1)

        card = ctk.CTkFrame(
            self,
            width=_CARD_WIDTH,
            fg_color=CONTENT_CARD_BG,
            corner_radius=16,
            border_width=1,
            border_color=TAB_BORDER,
        )
        card.grid(row=1, column=0, pady=(0, PADDING_SM))
        body = ctk.CTkFrame(card, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=36, pady=24)

        self._build_brand(body)
        self._build_tab_bar(body)

        sign_in = ctk.CTkFrame(body, fg_color="transparent")
        self._build_sign_in_tab(sign_in)
        register = ctk.CTkScrollableFrame(
            body, fg_color="transparent", width=_CARD_WIDTH - 90, height=_REGISTER_HEIGHT,
        )
        self._build_register_tab(register)
        self._panes = {SIGN_IN: sign_in, REGISTER: register}
        sign_in.pack(fill="both", expand=True)

        ctk.CTkButton(
            self,
            text="Browse as guest  →",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_SECONDARY,
            height=28,
            command=self._on_browse_as_guest,
        ).grid(row=2, column=0, pady=(PADDING_SM, 0))

    def _build_brand(self, parent: ctk.CTkFrame) -> None:
        badge = ctk.CTkFrame(
            parent,
            width=_DROP_BADGE,
            height=_DROP_BADGE,
            corner_radius=14,
            fg_color=ACCENT_PRIMARY,
        )
        badge.pack(pady=(0, 10))
        badge.pack_propagate(False)
        ctk.CTkLabel(
            badge, text="\U0001FA78", font=FONT_ICON_LG, text_color=TEXT_LIGHT,
        ).place(relx=0.5, rely=0.5, anchor="center")

        ctk.CTkLabel(parent, text="LifeStream", font=FONT_BRAND, text_color=TEXT_PRIMARY).pack(
            pady=(0, 2),
        )
        ctk.CTkLabel(
            parent,
            text="Connecting blood donors with those in need",
            font=FONT_SUBTITLE,
            text_color=TEXT_SECONDARY,
        ).pack(pady=(0, PADDING_MD))

    def _build_tab_bar(self, parent: ctk.CTkFrame) -> None:
        bar = ctk.CTkFrame(parent, fg_color="transparent", height=_TAB_HEIGHT)
        bar.pack(fill="x", pady=(0, PADDING_SM))
        bar.pack_propagate(False)
        for column, (name, text) in enumerate(((SIGN_IN, "Sign In"), (REGISTER, "Register"))):
            bar.grid_columnconfigure(column, weight=1)
            selected = name == self._active_tab
            tab = ctk.CTkButton(
                bar,
                text=text,
                font=_TAB_FONT_ACTIVE if selected else _TAB_FONT,
                fg_color="transparent",
                hover_color=TAB_HOVER,
                text_color=ACCENT_PRIMARY if selected else TEXT_SECONDARY,
                height=_TAB_HEIGHT,
                corner_radius=0,
                border_width=2 if selected else 1,
                border_color=ACCENT_PRIMARY if selected else INPUT_BORDER,
                command=lambda target=name: self._switch_tab(target),
            )
            tab.grid(row=0, column=column, sticky="nsew")
            self._tabs[name] = tab

    def _label(self, parent: ctk.CTkBaseClass, text: str, top: int = 0) -> None:
        ctk.CTkLabel(
            parent,
            text=text,
            font=_FIELD_CAPTION_FONT,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(top, 4))

    def _entry(self, parent: ctk.CTkBaseClass, placeholder: str, show: str = "") -> ctk.CTkEntry:
        entry = ctk.CTkEntry(
            parent,
            placeholder_text=placeholder,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            border_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            show=show,
            height=_INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
        )
        entry.pack(fill="x", pady=(0, PADDING_MD))
        return entry

    @staticmethod
    def _message_label(parent: ctk.CTkBaseClass, color: str) -> ctk.CTkLabel:
        """Feedback line, packed only while it has text."""
        return ctk.CTkLabel(
            parent, text="", font=FONT_SMALL, text_color=color, wraplength=_CARD_WIDTH - 110,
        )

    def _build_sign_in_tab(self, parent: ctk.CTkFrame) -> None:
        self._label(parent, "EMAIL ADDRESS", top=PADDING_MD)
        self._email_entry = self._entry(parent, "name@example.com")

        self._label(parent, "PASSWORD")
        self._password_entry = self._entry(parent, "•" * 8, show="*")

        self._login_button = ctk.CTkButton(
            parent,
            text="Sign In  →",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=_BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_login,
        )
        self._login_button.pack(fill="x", pady=(PADDING_SM, PADDING_SM))

        self._google_button = ctk.CTkButton(
            parent,
            text="Continue with Google",
            font=FONT_BUTTON,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_PRIMARY,
            border_width=1,
            border_color=INPUT_BORDER,
            height=_BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_google,
        )
        self._google_button.pack(fill="x", pady=(0, PADDING_SM))

        self._error_label = self._message_label(parent, ERROR_TEXT)

        self._email_entry.bind("<Return>", self._on_enter_key)
        self._password_entry.bind("<Return>", self._on_enter_key)

    def _build_register_tab(self, parent: ctk.CTkScrollableFrame) -> None:
        self._label(parent, "FULL NAME", top=PADDING_SM)
        self._rg_name_entry = self._entry(parent, "e.g. Rahim Uddin")

        self._label(parent, "EMAIL ADDRESS")
        self._rg_email_entry = self._entry(parent, "name@example.com")

        self._label(parent, "PASSWORD")
        self._rg_password_entry = self._entry(parent, "6+ chars, upper and lower case", show="*")

        self._label(parent, "CONFIRM PASSWORD")
        self._rg_confirm_entry = self._entry(parent, "•" * 8, show="*")

        self._label(parent, "BLOOD GROUP")
        self._rg_blood_menu = ctk.CTkOptionMenu(
            parent,
            values=BLOOD_GROUP_OPTIONS,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            button_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            height=_INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
            dynamic_resizing=False,
        )
        self._rg_blood_menu.pack(fill="x", pady=(0, PADDING_MD))

        self._rg_location = LocationPicker(parent, self._locations.new_selection())
        self._rg_location.pack(fill="x", pady=(0, PADDING_MD))

        avatar_row = ctk.CTkFrame(parent, fg_color="transparent")
        avatar_row.pack(fill="x", pady=(0, PADDING_MD))
        ctk.CTkButton(
            avatar_row,
            text="Choose photo...",
            font=FONT_SMALL,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_PRIMARY,
            border_width=1,
            width=130,
            command=self._choose_avatar,
        ).pack(side="left")
        self._rg_avatar_label = ctk.CTkLabel(
            avatar_row, text="Optional", font=FONT_SMALL, text_color=TEXT_SECONDARY,
        )
        self._rg_avatar_label.pack(side="left", padx=PADDING_SM)

        ctk.CTkCheckBox(
            parent,
            text="I accept the terms and conditions",
            font=FONT_SMALL,
            text_color=TEXT_PRIMARY,
            variable=self._rg_terms_var,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
        ).pack(anchor="w", pady=(0, PADDING_MD))

        self._rg_create_button = ctk.CTkButton(
            parent,
            text="Create Account  →",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=_BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_register,
        )
        self._rg_create_button.pack(fill="x", pady=(0, PADDING_SM))

        self._rg_error_label = self._message_label(parent, ERROR_TEXT)
        self._rg_success_label = self._message_label(parent, SUCCESS_TEXT)

        ctk.CTkLabel(
            parent,
            text="New accounts start as donors.",
            font=FONT_CAPTION,
            text_color=TEXT_SECONDARY,
        ).pack(pady=(PADDING_SM, PADDING_LG))


    def _switch_tab(self, tab: str) -> None:
        if tab == self._active_tab:
            return
        self._active_tab = tab
        self._clear_error()
        self._clear_rg_messages()
        for name, pane in self._panes.items():
            selected = name == tab
            if selected:
                pane.pack(fill="both", expand=True)
            else:
                pane.pack_forget()
            self._tabs[name].configure(
                text_color=ACCENT_PRIMARY if selected else TEXT_SECONDARY,
                border_color=ACCENT_PRIMARY if selected else INPUT_BORDER,
                border_width=2 if selected else 1,
                font=_TAB_FONT_ACTIVE if selected else _TAB_FONT,
            )

    # ------------------------------------------------------------------
    # Sign in
    # ------------------------------------------------------------------

    def _on_enter_key(self, event: tk.Event[tk.Misc]) -> None:
        self._handle_login()

    def _handle_login(self) -> None:
        assert self._email_entry is not None and self._password_entry is not None
        email = self._email_entry.get().strip()
        password = self._password_entry.get()
        if not (email and password):
            self._show_error("Enter your email and password.")
            return

        self._clear_error()
        self._set_loading(True)
        self._tasks.submit(
            lambda: self._auth.sign_in(email, password), self._handle_auth_result, name="sign-in",
        )

    def _handle_auth_result(self, result: AuthResult) -> None:
        self._set_loading(False)
        if not result.success:
            self._show_error(result.error_message or "Sign in failed.")
            return
        self._on_login_success()

    def _handle_google(self) -> None:
        self._clear_error()
        self._set_loading(True)
        self._tasks.submit(
            self._auth.sign_in_with_provider, self._handle_provider_started, name="oauth-start",
        )

    def _handle_provider_started(self, result: AuthResult) -> None:
        if not (result.success and result.redirect_url):
            self._set_loading(False)
            self._show_error(result.error_message or "Google sign-in is unavailable.")
            return

        webbrowser.open(result.redirect_url, new=2)
        code = ask_text(
            "Google sign-in",
            "Finish signing in in your browser, then paste the code shown there:",
        )
        if not code:
            self._logger.info("Google sign-in abandoned before the code was entered.")
            self._set_loading(False)
            return
        self._tasks.submit(
            lambda: self._auth.complete_provider_sign_in(code),
            self._handle_auth_result,
            name="oauth-complete",
        )

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def _choose_avatar(self) -> None:
        assert self._rg_avatar_label is not None
        path = filedialog.askopenfilename(
            title="Choose a profile photo",
            filetypes=[("Images", "*.png *.jpg *.jpeg *.gif *.webp")],
        )
        if not path:
            return
        self._rg_avatar_path = path
        self._rg_avatar_label.configure(text=Path(path).name)

    def _collect_registration(self) -> RegistrationInput:
        assert self._rg_name_entry is not None and self._rg_email_entry is not None
        assert self._rg_password_entry is not None and self._rg_confirm_entry is not None
        assert self._rg_blood_menu is not None and self._rg_location is not None
        return RegistrationInput(
            name=self._rg_name_entry.get(),
            email=self._rg_email_entry.get(),
            password=self._rg_password_entry.get(),
            confirm_password=self._rg_confirm_entry.get(),
            blood_group=blood_group_value(self._rg_blood_menu),
            district=self._rg_location.district,
            upazila=self._rg_location.upazila,
            avatar_path=self._rg_avatar_path,
            accepted_terms=self._rg_terms_var.get(),
        )

    def _handle_register(self) -> None:
        self._clear_rg_messages()
        form = self._collect_registration()
        self._set_rg_loading(True)
        self._tasks.submit(
            lambda: self._auth.sign_up(form), self._handle_register_result, name="register",
        )

    def _handle_register_result(self, result: AuthResult) -> None:
        self._set_rg_loading(False)
        if not result.success:
            self._show_rg_error(result.error_message or "Registration failed.")
            return
        if result.role is not None:
            # The provider returned a live session; no e-mail confirmation pending.
            self._on_login_success()
            return

        assert self._rg_success_label is not None
        self._rg_success_label.configure(
            text=result.error_message or "Account created. You can sign in now.",
        )
        self._rg_success_label.pack(fill="x")
        self._reset_registration()
        self._back_job = self.after(_BACK_TO_SIGN_IN_MS, self._back_to_sign_in)

    def _back_to_sign_in(self) -> None:
        self._back_job = None
        self._switch_tab(SIGN_IN)

    def _reset_registration(self) -> None:
        for entry in (
            self._rg_name_entry,
            self._rg_email_entry,
            self._rg_password_entry,
            self._rg_confirm_entry,
        ):
            if entry is not None:
                entry.delete(0, "end")
        if self._rg_location is not None:
            self._rg_location.clear()
        self._rg_terms_var.set(False)
        self._rg_avatar_path = None
        if self._rg_avatar_label is not None:
            self._rg_avatar_label.configure(text="Optional")

    # ------------------------------------------------------------------
    # Feedback
    # ------------------------------------------------------------------

    @staticmethod
    def _reveal(label: Optional[ctk.CTkLabel], text: str) -> None:
        if label is None:
            return
        label.configure(text=text)
        if text:
            label.pack(fill="x")
        else:
            label.pack_forget()

    def _show_error(self, message: str) -> None:
        self._reveal(self._error_label, message)

    def _clear_error(self) -> None:
        self._reveal(self._error_label, "")

    def _show_rg_error(self, message: str) -> None:
        self._reveal(self._rg_error_label, message)

    def _clear_rg_messages(self) -> None:
        self._reveal(self._rg_error_label, "")
        self._reveal(self._rg_success_label, "")

    def _set_loading(self, loading: bool) -> None:
        """Lock both sign-in buttons while a sign-in call is in flight."""
        if self._login_button is None or self._google_button is None:
            return
        state = "disabled" if loading else "normal"
        self._login_button.configure(
            text="Signing in..." if loading else "Sign In  →", state=state,
        )
        self._google_button.configure(state=state)

    def _set_rg_loading(self, loading: bool) -> None:
        if self._rg_create_button is not None:
            self._rg_create_button.configure(
                text="Creating account..." if loading else "Create Account  →",
                state="disabled" if loading else "normal",
            )
