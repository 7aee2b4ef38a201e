"""Donation Request Dialogs.

Modal windows opened from every request list:

- ``RequestDetailDialog`` shows one request and lets a signed-in
  visitor volunteer as its donor.
- ``RequestEditDialog`` edits a request.  Owners and admins see the full
  form; volunteers only see the status and donor fields.  The status
  menu offers exactly what ``DonationRequestService.allowed_statuses``
  returns.

**Thin UI Rule**: permissions and validation live in
``DonationRequestService``; the dialogs gather inputs and show results.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import DonationRequest, DonationRequestUpdate
from lifestream.models.enums import RequestStatus, Role
from lifestream.models.service_models import ServiceResult
from lifestream.models.user import UserProfile
from lifestream.services.donation_request_service import DonationRequestService
from lifestream.services.location_service import LocationService
from lifestream.services.request_lifecycle import is_privileged
from lifestream.ui.components.dialogs import ask_confirmation
from lifestream.ui.components.form_fields import (
    BLOOD_GROUP_OPTIONS,
    STATUS_COLOURS,
    blood_group_value,
    error_label,
    field_label,
    hide_message,
    labeled_entry,
    labeled_option,
    labeled_textbox,
    set_entry,
    show_message,
)
from lifestream.ui.components.location_picker import LocationPicker
from lifestream.ui.components.toast import show_toast
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    BUTTON_HEIGHT,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_SMALL,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from lifestream.utils.task_scope import TaskScope

RequestCallback = Callable[[DonationRequest], None]


class _ScopedDialog(ctk.CTkToplevel):
    """Toplevel that owns a ``TaskScope`` closed on destroy."""

    def __init__(self, parent: ctk.CTkBaseClass, title: str, geometry: str, logger: StructuredLogger) -> None:
        super().__init__(parent)
        self._parent = parent
        self._logger = logger
        self._tasks = TaskScope(lambda callback: self.after(0, callback), logger)
        self.title(title)
        self.geometry(geometry)
        self.configure(fg_color=CONTENT_CARD_BG)
        self.transient(parent.winfo_toplevel())

    def destroy(self) -> None:
        self._tasks.close()
        super().destroy()

    def _toast_parent(self, message: str, kind: str) -> None:
        """Toast on the main window; this dialog may be closing."""
        show_toast(self._parent, message, kind)


# ======================================================================
# Details + claim
# ======================================================================

class RequestDetailDialog(_ScopedDialog):
    """Read-only view of one request with a "Donate" action.

    Parameters
    ----------
    parent:
        Screen that opened the dialog.
    service:
        Donation request service.
    session:
        Used to decide whether the claim button is offered.
    request:
        The row that was clicked; re-fetched when signed in.
    on_changed:
        Called with the updated request after a successful claim.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        service: DonationRequestService,
        session: SessionManager,
        request: DonationRequest,
        on_changed: RequestCallback,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, "Donation Request", "520x620", logger)
        self._service = service
        self._session = session
        self._request = request
        self._on_changed = on_changed

        self._body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        self._body.pack(fill="both", expand=True, padx=PADDING_LG, pady=PADDING_LG)
        self._render()

        if session.is_authenticated and request.id:
            self._tasks.submit(
                lambda: service.get_details(request.id or ""),
                self._handle_details,
                name="request-details",
            )

    def _handle_details(self, result: ServiceResult[DonationRequest]) -> None:
        if result.success and result.data is not None:
            self._request = result.data
            self._render()
        else:
            self._logger.info("Showing list copy of request %s: %s", self._request.id, result.error)

    def _render(self) -> None:
        for child in self._body.winfo_children():
            child.destroy()
        r = self._request

        ctk.CTkLabel(
            self._body,
            text=f"{r.blood_group} needed for {r.recipient_name}",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
            wraplength=440,
            justify="left",
        ).pack(fill="x", pady=(0, 4))
        ctk.CTkLabel(
            self._body,
            text=r.status.label,
            font=FONT_LABEL,
            text_color=STATUS_COLOURS[r.status],
            anchor="w",
        ).pack(fill="x", pady=(0, PADDING_MD))

        for label, value in (
            ("Hospital", r.hospital_name),
            ("Address", ", ".join(p for p in (r.recipient_street, r.recipient_upazila, r.recipient_district) if p)),
            ("Date", r.donation_date),
            ("Time", r.donation_time),
            ("Requested by", f"{r.requester_name} ({r.requester_email})"),
            ("Donor", f"{r.donor_name} ({r.donor_email})" if r.has_donor(self._service.donor_placeholder) else r.donor_name),
            ("Message", r.request_message or "—"),
        ):
            field_label(self._body, label)
            ctk.CTkLabel(
                self._body,
                text=value,
                font=FONT_BODY,
                text_color=TEXT_SECONDARY,
                anchor="w",
                wraplength=440,
                justify="left",
            ).pack(fill="x", pady=(0, PADDING_SM))

        identity = self._session.identity
        if r.status is not RequestStatus.PENDING:
            return
        if identity is None:
            ctk.CTkLabel(
                self._body,
                text="Sign in to volunteer as the donor for this request.",
                font=FONT_SMALL,
                text_color=TEXT_SECONDARY,
            ).pack(fill="x", pady=(PADDING_MD, 0))
            return
        if r.is_owned_by(identity):
            return
        self._claim_btn = ctk.CTkButton(
            self._body,
            text="Donate",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_claim,
        )
        self._claim_btn.pack(fill="x", pady=(PADDING_MD, 0))

    def _handle_claim(self) -> None:
        identity = self._session.identity
        if identity is None:
            return
        if not ask_confirmation(
            self,
            "Confirm donation",
            f"You will be listed as the donor:\n{identity.name} ({identity.email})",
            confirm_text="Confirm",
        ):
            return
        self._claim_btn.configure(text="Saving...", state="disabled")
        request = self._request
        self._tasks.submit(lambda: self._service.claim(request), self._handle_claimed, name="claim-request")

    def _handle_claimed(self, result: ServiceResult[DonationRequest]) -> None:
        if result.success and result.data is not None:
            self._on_changed(result.data)
            self._toast_parent("Thank you! You are now the donor for this request.", "success")
            self.destroy()
            return
        self._claim_btn.configure(text="Donate", state="normal")
        show_toast(self, result.error or "Could not claim this request.", "error")


# ======================================================================
# Edit
# ======================================================================

class RequestEditDialog(_ScopedDialog):
    """Edit form for one donation request.

    Parameters
    ----------
    parent:
        Screen that opened the dialog.
    service:
        Donation request service.
    session:
        Used to decide which fields are editable.
    locations:
        Reference data for the district/upazila picker.
    request:
        The request being edited.
    on_saved:
        Called with the updated request after a successful save.
    logger:
        Structured logger instance.
    """

    _NO_DONOR = "No donor assigned"

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        service: DonationRequestService,
        session: SessionManager,
        locations: LocationService,
        request: DonationRequest,
        on_saved: RequestCallback,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, "Edit Donation Request", "560x760", logger)
        self._service = service
        self._request = request
        self._on_saved = on_saved

        identity = session.get_identity()
        self._full_record = request.is_owned_by(identity) or identity.role is Role.ADMIN
        self._statuses: dict[str, RequestStatus] = {
            s.label: s for s in service.allowed_statuses(request)
        }
        self._candidates: dict[str, UserProfile] = {}

        self._recipient_entry: Optional[ctk.CTkEntry] = None
        self._street_entry: Optional[ctk.CTkEntry] = None
        self._hospital_entry: Optional[ctk.CTkEntry] = None
        self._date_entry: Optional[ctk.CTkEntry] = None
        self._time_entry: Optional[ctk.CTkEntry] = None
        self._blood_menu: Optional[ctk.CTkOptionMenu] = None
        self._location: Optional[LocationPicker] = None
        self._message_box: Optional[ctk.CTkTextbox] = None
        self._donor_menu: Optional[ctk.CTkOptionMenu] = None

        self._build_ui(locations)

        if is_privileged(identity):
            self._tasks.submit(service.donor_candidates, self._handle_candidates, name="donor-candidates")

    # ------------------------------------------------------------------
    # UI Construction
    # ------------------------------------------------------------------

    def _build_ui(self, locations: LocationService) -> None:
        body = ctk.CTkScrollableFrame(self, fg_color="transparent")
        body.pack(fill="both", expand=True, padx=PADDING_LG, pady=(PADDING_LG, 0))
        r = self._request

        if self._full_record:
            self._recipient_entry = labeled_entry(body, "Recipient name")
            set_entry(self._recipient_entry, r.recipient_name)
            self._location = LocationPicker(body, locations.new_selection())
            self._location.pack(fill="x", pady=(0, PADDING_MD))
            self._location.set(r.recipient_district, r.recipient_upazila)
            self._street_entry = labeled_entry(body, "Full address")
            set_entry(self._street_entry, r.recipient_street)
            self._hospital_entry = labeled_entry(body, "Hospital")
            set_entry(self._hospital_entry, r.hospital_name)
            self._date_entry = labeled_entry(body, "Donation date", "YYYY-MM-DD")
            set_entry(self._date_entry, r.donation_date)
            self._time_entry = labeled_entry(body, "Donation time", "HH:MM")
            set_entry(self._time_entry, r.donation_time)
            self._blood_menu = labeled_option(body, "Blood group", BLOOD_GROUP_OPTIONS)
            self._blood_menu.set(str(r.blood_group))
            self._message_box = labeled_textbox(body, "Request message", height=80)
            self._message_box.insert("1.0", r.request_message)
        else:
            ctk.CTkLabel(
                body,
                text=f"{r.recipient_name} · {r.blood_group} · {r.hospital_name}",
                font=FONT_BODY,
                text_color=TEXT_SECONDARY,
                anchor="w",
            ).pack(fill="x", pady=(0, PADDING_MD))

        self._status_menu = labeled_option(body, "Status", list(self._statuses) or [r.status.label])
        self._status_menu.set(r.status.label)

        field_label(body, "Donor")
        # Replaced by a donor menu once candidates load (volunteers/admins).
        self._donor_slot = ctk.CTkFrame(body, fg_color="transparent")
        self._donor_slot.pack(fill="x", pady=(0, PADDING_MD))
        self._donor_label = ctk.CTkLabel(
            self._donor_slot,
            text=r.donor_name if not r.donor_email else f"{r.donor_name} ({r.donor_email})",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            anchor="w",
        )
        self._donor_label.pack(fill="x")

        self._error_label = error_label(body, wraplength=480)

        footer = ctk.CTkFrame(self, fg_color="transparent")
        footer.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)
        self._save_btn = ctk.CTkButton(
            footer,
            text="Save Changes",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            corner_radius=CORNER_RADIUS,
            command=self._handle_save,
        )
        self._save_btn.pack(fill="x")

    def _handle_candidates(self, result: ServiceResult[list[UserProfile]]) -> None:
        if not result.success or result.data is None:
            show_toast(self, result.error or "Could not load donors.", "error")
            return
        self._candidates = {f"{u.name or u.email} <{u.email}>": u for u in result.data}
        self._donor_label.destroy()
        self._donor_menu = ctk.CTkOptionMenu(
            self._donor_slot,
            values=[self._NO_DONOR, *self._candidates],
            font=FONT_BODY,
            dynamic_resizing=False,
        )
        self._donor_menu.pack(fill="x")
        current = next(
            (key for key, u in self._candidates.items() if u.email == self._request.donor_email),
            self._NO_DONOR,
        )
        self._donor_menu.set(current)

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    def _collect(self) -> DonationRequestUpdate:
        values: dict[str, object] = {}
        if self._full_record:
            assert self._recipient_entry is not None and self._location is not None
            assert self._street_entry is not None and self._hospital_entry is not None
            assert self._date_entry is not None and self._time_entry is not None
            assert self._blood_menu is not None and self._message_box is not None
            values.update(
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
        values["status"] = self._statuses.get(self._status_menu.get(), self._request.status)
        if self._donor_menu is not None:
            donor = self._candidates.get(self._donor_menu.get())
            if donor is not None:
                values.update(donor_name=donor.name or donor.email, donor_email=donor.email)
        return DonationRequestUpdate.model_validate(values)

    def _handle_save(self) -> None:
        hide_message(self._error_label)
        update = self._collect()
        if not update.changed_fields(self._request):
            self.destroy()
            return
        self._save_btn.configure(text="Saving...", state="disabled")
        request = self._request
        self._tasks.submit(lambda: self._service.edit(request, update), self._handle_saved, name="edit-request")

    def _handle_saved(self, result: ServiceResult[DonationRequest]) -> None:
        if result.success and result.data is not None:
            self._on_saved(result.data)
            self._toast_parent("Donation request updated.", "success")
            self.destroy()
            return
        self._save_btn.configure(text="Save Changes", state="normal")
        show_message(self._error_label, result.error or "Could not save the request.")
