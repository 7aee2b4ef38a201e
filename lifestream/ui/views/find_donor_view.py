"""Public Donor Search Screen.

Blood group is required; district and upazila narrow the search.  The
results table is paginated client-side like every other list.
"""

from __future__ import annotations

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.service_models import ServiceResult
from lifestream.models.user import UserProfile
from lifestream.services.list_state import user_table
from lifestream.services.location_service import LocationService
from lifestream.services.user_service import UserService
from lifestream.ui.components.data_table import PagedTable, TableColumn
from lifestream.ui.components.form_fields import (
    BLOOD_GROUP_OPTIONS,
    blood_group_value,
    error_label,
    hide_message,
    labeled_option,
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
    PADDING_MD,
    TEXT_LIGHT,
)

_COLUMNS: list[TableColumn] = [
    ("Name", lambda u: u.name or "—", 3),
    ("Blood", lambda u: str(u.blood_group) if u.blood_group else "—", 1),
    ("District", lambda u: u.district or "—", 2),
    ("Upazila", lambda u: u.upazila or "—", 2),
    ("Email", lambda u: u.email, 4),
]


class FindDonorView(ModuleFrame):
    """Search form above a results table."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: UserService,
        locations: LocationService,
        page_size: int,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._state = user_table(page_size)

        self._build_header("Find a Donor")

        form = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        form.pack(fill="x", padx=PADDING_LG, pady=(0, PADDING_MD))
        inner = ctk.CTkFrame(form, fg_color="transparent")
        inner.pack(fill="x", padx=PADDING_LG, pady=PADDING_MD)

        self._blood_menu = labeled_option(inner, "Blood group", BLOOD_GROUP_OPTIONS)
        self._location = LocationPicker(inner, locations.new_selection())
        self._location.pack(fill="x", pady=(0, PADDING_MD))

        self._search_btn = ctk.CTkButton(
            inner,
            text="Search",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            height=BUTTON_HEIGHT,
            width=160,
            command=self._handle_search,
        )
        self._search_btn.pack(anchor="e")
        self._error_label = error_label(inner)

        self._table = PagedTable(
            self, self._state, _COLUMNS, empty_text="Search by blood group to see matching donors.",
        )
        self._table.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))
        self._table.render()

    def _handle_search(self) -> None:
        hide_message(self._error_label)
        blood_group = blood_group_value(self._blood_menu)
        district = self._location.district
        upazila = self._location.upazila
        self._search_btn.configure(text="Searching...", state="disabled")
        self._run(
            lambda: self._service.search_donors(blood_group, district or None, upazila or None),
            self._handle_results,
            name="search-donors",
        )

    def _handle_results(self, result: ServiceResult[list[UserProfile]]) -> None:
        self._search_btn.configure(text="Search", state="normal")
        if not result.success:
            show_message(self._error_label, result.error or "The search failed. Please try again.")
            return
        donors = result.data or []
        self._state.load(donors)
        self._table.render()
        if not donors:
            self._toast("No donors matched your search.")
