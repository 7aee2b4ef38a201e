"""District / Upazila Picker.

Two dependent option menus bound to a ``LocationSelection``: choosing a
district repopulates the upazila menu and clears its value, so the pair
never shows an upazila from another district.
"""

from __future__ import annotations

from typing import Callable, Optional

import customtkinter as ctk

from lifestream.errors import ValidationError
from lifestream.services.location_service import LocationSelection
from lifestream.ui.theme import (
    CORNER_RADIUS,
    FONT_BODY,
    FONT_LABEL,
    INPUT_BG,
    INPUT_BORDER,
    INPUT_HEIGHT,
    PADDING_SM,
    TEXT_PRIMARY,
)

_ANY_DISTRICT = "Select district"
_ANY_UPAZILA = "Select upazila"


class LocationPicker(ctk.CTkFrame):
    """Side-by-side district and upazila selectors.

    Parameters
    ----------
    parent:
        Containing widget.
    selection:
        Cascade state (from ``LocationService.new_selection()``).
    on_change:
        Optional callback invoked after either value changes.
    """

    def __init__(
        self,
        parent: ctk.CTkBaseClass,
        selection: LocationSelection,
        on_change: Optional[Callable[[], None]] = None,
    ) -> None:
        super().__init__(parent, fg_color="transparent")
        self._selection = selection
        self._on_change = on_change

        self.grid_columnconfigure(0, weight=1)
        self.grid_columnconfigure(1, weight=1)

        ctk.CTkLabel(
            self, text="DISTRICT", font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).grid(row=0, column=0, sticky="w", pady=(0, 4))
        ctk.CTkLabel(
            self, text="UPAZILA", font=FONT_LABEL, text_color=TEXT_PRIMARY, anchor="w",
        ).grid(row=0, column=1, sticky="w", padx=(PADDING_SM, 0), pady=(0, 4))

        self._district_menu = ctk.CTkOptionMenu(
            self,
            values=[_ANY_DISTRICT, *selection.district_names],
            command=self._handle_district,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            button_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            height=INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
            dynamic_resizing=False,
        )
        self._district_menu.grid(row=1, column=0, sticky="ew")

        self._upazila_menu = ctk.CTkOptionMenu(
            self,
            values=[_ANY_UPAZILA],
            command=self._handle_upazila,
            font=FONT_BODY,
            fg_color=INPUT_BG,
            button_color=INPUT_BORDER,
            text_color=TEXT_PRIMARY,
            height=INPUT_HEIGHT,
            corner_radius=CORNER_RADIUS,
            dynamic_resizing=False,
        )
        self._upazila_menu.grid(row=1, column=1, sticky="ew", padx=(PADDING_SM, 0))
        self._sync_menus()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def district(self) -> str:
        return self._selection.district

    @property
    def upazila(self) -> str:
        return self._selection.upazila

    def set(self, district: str, upazila: str) -> None:
        """Pre-fill both values (e.g. the profile or edit screen).

        Unknown values are ignored, leaving the pair cleared.
        """
        try:
            self._selection.select_district(district)
            self._selection.select_upazila(upazila)
        except ValidationError:
            self._selection.select_district("")
        self._sync_menus()

    def clear(self) -> None:
        self._selection.select_district("")
        self._sync_menus()

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _handle_district(self, value: str) -> None:
        self._selection.select_district("" if value == _ANY_DISTRICT else value)
        self._sync_menus()
        if self._on_change is not None:
            self._on_change()

    def _handle_upazila(self, value: str) -> None:
        self._selection.select_upazila("" if value == _ANY_UPAZILA else value)
        if self._on_change is not None:
            self._on_change()

    def _sync_menus(self) -> None:
        self._district_menu.set(self._selection.district or _ANY_DISTRICT)
        self._upazila_menu.configure(values=[_ANY_UPAZILA, *self._selection.upazila_names])
        self._upazila_menu.set(self._selection.upazila or _ANY_UPAZILA)
        self._upazila_menu.configure(state="normal" if self._selection.district else "disabled")
