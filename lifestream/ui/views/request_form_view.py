"""Create Donation Request Screen.

Donor-only form.  Requester name and email come from the session and are
read-only; district and upazila use the cascading picker.  On success
the form clears itself and hands over to the requester's own list.

**Thin UI Rule**: validation (required fields, blood group, location,
date/time formats, blocked accounts) lives in
``DonationRequestService.create``.
"""

from __future__ import annotations

from typing import Callable

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.errors import ErrorKind
from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import DonationRequestInput
from lifestream.models.service_models import RequestCreated, ServiceResult
from lifestream.services.donation_request_service import DonationRequestService
from lifestream.services.location_service import LocationService
from lifestream.ui.components.form_fields import (
    BLOOD_GROUP_OPTIONS,
    BLOOD_GROUP_PROMPT,
    blood_group_value,
    error_label,
    hide_message,
    labeled_entry,
    labeled_option,
    labeled_textbox,
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
    CORNER_RADIUS,
    FONT_BUTTON,
    PADDING_LG,
    TEXT_LIGHT,
)

_FORM_WIDTH: int = 640


class RequestFormView(ModuleFrame):
    """Form that creates a pending donation request.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    service:
        Donation request service.
    locations:
        Reference data for the picker.
    session:
        Provides the read-only requester fields.
    navigate:
        Switches the shell to another module by id.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: DonationRequestService,
        locations: LocationService,
        session: SessionManager,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._session = session
        self._navigate = navigate

        self._build_header("Create Donation Request")

        card = ctk.CTkScrollableFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=16)
        card.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        inner = ctk.CTkFrame(card, fg_color="transparent", width=_FORM_WIDTH)
        inner.pack(fill="x", padx=36, pady=28)

        self._requester_name = labeled_entry(inner, "Requester name")
        self._requester_email = labeled_entry(inner, "Requester email")
        self._recipient_entry = labeled_entry(inner, "Recipient name", "Full name of the patient")
        self._location = LocationPicker(inner, locations.new_selection())
        self._location.pack(fill="x", pady=(0, 16))
        self._street_entry = labeled_entry(inner, "Full address", "e.g. Zahir Raihan Rd, Dhaka")
        self._hospital_entry = labeled_entry(inner, "Hospital", "e.g. Dhaka Medical College Hospital")
        self._date_entry = labeled_entry(inner, "Donation date", "YYYY-MM-DD")
        self._time_entry = labeled_entry(inner, "Donation time", "HH:MM")
        self._blood_menu = labeled_option(inner, "Blood group", BLOOD_GROUP_OPTIONS)
        self._message_box = labeled_textbox(inner, "Request message (optional)")

        self._submit_btn = ctk.CTkButton(
            inner,
            text="Submit Request  →",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_submit,
        )
        self._submit_btn.pack(fill="x", pady=(0, 8))
        self._error_label = error_label(inner, wraplength=_FORM_WIDTH - 40)

    def refresh(self) -> None:
        identity = self._session.identity
        for entry, value in (
            (self._requester_name, identity.name if identity else ""),
            (self._requester_email, identity.email if identity else ""),
        ):
            entry.configure(state="normal")
            set_entry(entry, value)
            entry.configure(state="disabled")

    # ------------------------------------------------------------------
    # Submit
    # ------------------------------------------------------------------

    def _collect(self) -> DonationRequestInput:
        return DonationRequestInput(
            recipient_name=self._recipient_entry.get(),
            recipient_district=self._location.district,
            recipient_upazila=self._location.upazila,
            recipient_street=self._street_entry.get(),
            hospital_name=self._hospital_entry.get(),
            donation_date=self._date_entry.get(),
            donation_time=self._time_entry.get(),
            blood_group=blood_group_value(self._blood_menu),
            request_message=self._message_box.get("1.0", "end").strip(),
        )

    def _handle_submit(self) -> None:
        hide_message(self._error_label)
        form = self._collect()
        self._set_loading(True)
        self._run(lambda: self._service.create(form), self._handle_created, name="create-request")

    def _handle_created(self, result: ServiceResult[RequestCreated]) -> None:
        self._set_loading(False)
        if not result.success or result.data is None:
            if result.error_kind is ErrorKind.VALIDATION:
                show_message(self._error_label, result.error or "Please check the form.")
            else:
                self._report_failure(result, "Could not create the request.")
            return
        self._toast("Donation request created.", "success")
        self._clear_form()
        self._navigate(result.data.navigate_to)

    def _clear_form(self) -> None:
        for entry in (
            self._recipient_entry,
            self._street_entry,
            self._hospital_entry,
            self._date_entry,
            self._time_entry,
        ):
            set_entry(entry, "")
        self._location.clear()
        self._blood_menu.set(BLOOD_GROUP_PROMPT)
        self._message_box.delete("1.0", "end")

    def _set_loading(self, loading: bool) -> None:
        if loading:
            self._submit_btn.configure(text="Submitting...", state="disabled")
        else:
            self._submit_btn.configure(text="Submit Request  →", state="normal")
