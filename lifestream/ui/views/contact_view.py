"""Contact Screen.

Shows the organisation's address and map position with a button that
opens the interactive map in the browser, next to a contact form that
is validated and acknowledged locally.
"""

from __future__ import annotations

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.service_models import ServiceResult
from lifestream.services.map_service import MapService
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
    BUTTON_HEIGHT,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_BUTTON,
    FONT_SMALL,
    FONT_SUBHEADING,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)


class ContactView(ModuleFrame):
    """Location card and contact form side by side."""

    def __init__(self, parent: ctk.CTkFrame, service: MapService, logger: StructuredLogger) -> None:
        super().__init__(parent, logger)
        self._service = service

        self._build_header("Contact Us")

        body = ctk.CTkFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        body.grid_columnconfigure(0, weight=1, uniform="contact")
        body.grid_columnconfigure(1, weight=1, uniform="contact")

        self._build_location_card(body).grid(row=0, column=0, sticky="nsew", padx=(0, PADDING_SM))
        self._build_form_card(body).grid(row=0, column=1, sticky="nsew", padx=(PADDING_SM, 0))

    def _build_location_card(self, parent: ctk.CTkFrame) -> ctk.CTkFrame:
        card = ctk.CTkFrame(parent, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        ctk.CTkLabel(
            card, text="Find us", font=FONT_SUBHEADING, text_color=TEXT_PRIMARY, anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(PADDING_LG, PADDING_SM))
        ctk.CTkLabel(
            card, text=self._service.address, font=FONT_BODY, text_color=TEXT_PRIMARY,
            anchor="w", justify="left", wraplength=380,
        ).pack(fill="x", padx=PADDING_LG)
        ctk.CTkLabel(
            card, text=f"Coordinates: {self._service.coordinates}", font=FONT_SMALL,
            text_color=TEXT_SECONDARY, anchor="w",
        ).pack(fill="x", padx=PADDING_LG, pady=(PADDING_SM, 0))

        link = ctk.CTkEntry(card, font=FONT_SMALL, text_color=TEXT_SECONDARY)
        link.insert(0, self._service.static_map_url())
        link.configure(state="readonly")
        link.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)

        ctk.CTkButton(
            card,
            text="Open map in browser",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            command=self._handle_open_map,
        ).pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_LG))
        return card

    def _build_form_card(self, parent: ctk.CTkFrame) -> ctk.CTkFrame:
        card = ctk.CTkFrame(parent, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        inner = ctk.CTkFrame(card, fg_color="transparent")
        inner.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)

        self._name_entry = labeled_entry(inner, "Your name")
        self._email_entry = labeled_entry(inner, "Email", "you@example.com")
        self._message_box = labeled_textbox(inner, "Message", height=140)
        ctk.CTkButton(
            inner,
            text="Send message",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            command=self._handle_send,
        ).pack(fill="x", pady=(0, PADDING_SM))
        self._error_label = error_label(inner, wraplength=380)
        return card

    def _handle_open_map(self) -> None:
        result = self._service.open_in_browser()
        if not result.success:
            self._report_failure(result, "Could not open the map.")

    def _handle_send(self) -> None:
        hide_message(self._error_label)
        result: ServiceResult[str] = self._service.acknowledge_contact(
            self._name_entry.get(),
            self._email_entry.get(),
            self._message_box.get("1.0", "end"),
        )
        if not result.success:
            show_message(self._error_label, result.error or "Please check the form.")
            return
        set_entry(self._name_entry, "")
        set_entry(self._email_entry, "")
        self._message_box.delete("1.0", "end")
        self._toast(result.data or "Message received.", "success")
