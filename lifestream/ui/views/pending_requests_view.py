"""Public Pending Requests Screen.

Lists every request still waiting for a donor.  Reachable without
signing in; the detail dialog offers the "Donate" action to signed-in
visitors.
"""

from __future__ import annotations

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import RequestStatus
from lifestream.models.service_models import ServiceResult
from lifestream.services.donation_request_service import DonationRequestService
from lifestream.services.list_state import request_table
from lifestream.ui.components.data_table import PagedTable, RowAction, TableColumn
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.theme import FONT_BUTTON, PADDING_LG, TAB_HOVER, TEXT_PRIMARY
from lifestream.ui.views.request_dialogs import RequestDetailDialog

_COLUMNS: list[TableColumn] = [
    ("Recipient", lambda r: r.recipient_name, 3),
    ("Location", lambda r: f"{r.recipient_upazila}, {r.recipient_district}", 3),
    ("Blood", lambda r: str(r.blood_group), 1),
    ("Date", lambda r: r.donation_date, 2),
    ("Time", lambda r: r.donation_time, 1),
]


class PendingRequestsView(ModuleFrame):
    """Public table of pending requests."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: DonationRequestService,
        session: SessionManager,
        page_size: int,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._session = session
        self._state = request_table(page_size)

        header = self._build_header("Blood Donation Requests")
        ctk.CTkButton(
            header,
            text="↻ Refresh",
            font=FONT_BUTTON,
            fg_color="transparent",
            hover_color=TAB_HOVER,
            text_color=TEXT_PRIMARY,
            width=100,
            command=self.refresh,
        ).pack(side="right")

        self._table = PagedTable(
            self,
            self._state,
            _COLUMNS,
            actions=self._row_actions,
            empty_text="No one is waiting for a donor right now.",
        )
        self._table.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    def refresh(self) -> None:
        self._run(self._service.list_pending, self._handle_loaded, name="list-pending")

    def _handle_loaded(self, result: ServiceResult[list[DonationRequest]]) -> None:
        if not result.success:
            self._report_failure(result, "Could not load pending requests.")
            return
        self._state.load(result.data or [])
        self._table.render()

    def _row_actions(self, request: DonationRequest) -> list[RowAction]:
        return [("View", lambda: self._open_details(request))]

    def _open_details(self, request: DonationRequest) -> None:
        RequestDetailDialog(
            self, self._service, self._session, request, self._handle_claimed, self._logger,
        )

    def _handle_claimed(self, request: DonationRequest) -> None:
        # Claimed requests leave the public list.
        if request.status is not RequestStatus.PENDING and request.id:
            self._state.remove(request.id)
        else:
            self._state.replace(request)
        self._table.render()
