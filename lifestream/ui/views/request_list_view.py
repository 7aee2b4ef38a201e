"""Donation Request Tables.

``RequestListView`` backs two screens:

- ``my-requests``: the signed-in requester's own requests.
- ``all-requests``: every request on the platform (volunteer/admin).

Both filter by status client-side, paginate ten rows at a time, patch
the local rows after a successful mutation and export the filtered rows
to Excel.

**Thin UI Rule**: all rules live in ``DonationRequestService``.
"""

from __future__ import annotations

from pathlib import Path
from tkinter import filedialog

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import RequestStatus, Role
from lifestream.models.service_models import ServiceResult
from lifestream.services.donation_request_service import DonationRequestService
from lifestream.services.list_state import parse_request_filter, request_table
from lifestream.services.location_service import LocationService
from lifestream.services.report_service import ReportService
from lifestream.ui.components.data_table import PagedTable, RowAction, TableColumn
from lifestream.ui.components.dialogs import ask_confirmation
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    FONT_BUTTON,
    FONT_SMALL,
    PADDING_LG,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_SECONDARY,
)
from lifestream.ui.views.request_dialogs import RequestDetailDialog, RequestEditDialog

_FILTER_OPTIONS: list[str] = ["All", *(s.label for s in RequestStatus)]

REQUEST_COLUMNS: list[TableColumn] = [
    ("Recipient", lambda r: r.recipient_name, 3),
    ("Location", lambda r: f"{r.recipient_upazila}, {r.recipient_district}", 3),
    ("Date", lambda r: r.donation_date, 2),
    ("Time", lambda r: r.donation_time, 1),
    ("Blood", lambda r: str(r.blood_group), 1),
    ("Status", lambda r: r.status.label, 2),
]


class RequestListView(ModuleFrame):
    """Filterable, paginated table of donation requests.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    service:
        Donation request service.
    reports:
        Excel export service.
    locations:
        Reference data for the edit dialog.
    session:
        Used to decide which row actions to show.
    scope:
        ``'mine'`` or ``'all'``.
    page_size:
        Rows per page.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: DonationRequestService,
        reports: ReportService,
        locations: LocationService,
        session: SessionManager,
        scope: str,
        page_size: int,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._reports = reports
        self._locations = locations
        self._session = session
        self._scope = scope
        self._state = request_table(page_size)

        title = "My Donation Requests" if scope == "mine" else "All Blood Donation Requests"
        header = self._build_header(title)

        ctk.CTkButton(
            header,
            text="Export to Excel",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            width=140,
            command=self._handle_export,
        ).pack(side="right")

        self._filter_menu = ctk.CTkOptionMenu(
            header,
            values=_FILTER_OPTIONS,
            command=self._handle_filter,
            width=150,
        )
        self._filter_menu.pack(side="right", padx=PADDING_SM)
        ctk.CTkLabel(header, text="Status", font=FONT_SMALL, text_color=TEXT_SECONDARY).pack(side="right")

        self._table = PagedTable(
            self,
            self._state,
            REQUEST_COLUMNS,
            actions=self._row_actions,
            empty_text="No donation requests found.",
        )
        self._table.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        fetch = self._service.list_mine if self._scope == "mine" else self._service.list_all
        self._run(fetch, self._handle_loaded, name=f"list-requests-{self._scope}")

    def _handle_loaded(self, result: ServiceResult[list[DonationRequest]]) -> None:
        if not result.success:
            self._report_failure(result, "Could not load donation requests.")
            return
        self._state.load(result.data or [])
        self._table.render()

    def _handle_filter(self, value: str) -> None:
        # Menu labels ("In Progress") parse like any legacy spelling.
        self._state.set_filter(parse_request_filter(value))
        self._table.render()

    # ------------------------------------------------------------------
    # Row actions
    # ------------------------------------------------------------------

    def _row_actions(self, request: DonationRequest) -> list[RowAction]:
        identity = self._session.identity
        actions: list[RowAction] = [("View", lambda: self._open_details(request))]
        if identity is None:
            return actions
        owner = request.is_owned_by(identity)
        editable = bool(self._service.allowed_statuses(request))
        if editable and (not request.status.is_terminal or identity.role is Role.ADMIN):
            actions.append(("Edit", lambda: self._open_edit(request)))
        if owner and request.status is RequestStatus.IN_PROGRESS:
            actions.append(("Done", lambda: self._handle_complete(request)))
        if owner or identity.role is Role.ADMIN:
            actions.append(("Delete", lambda: self._handle_cancel(request)))
        return actions

    def _open_details(self, request: DonationRequest) -> None:
        RequestDetailDialog(
            self, self._service, self._session, request, self._replace_row, self._logger,
        )

    def _open_edit(self, request: DonationRequest) -> None:
        RequestEditDialog(
            self, self._service, self._session, self._locations, request, self._replace_row, self._logger,
        )

    def _handle_complete(self, request: DonationRequest) -> None:
        confirmed = ask_confirmation(
            self,
            "Mark as completed",
            f"Confirm that {request.donor_name} donated blood for {request.recipient_name}.",
            confirm_text="Completed",
        )
        if not confirmed:
            return
        self._run(
            lambda: self._service.complete(request, confirmed=True),
            self._handle_mutation,
            name="complete-request",
        )

    def _handle_cancel(self, request: DonationRequest) -> None:
        confirmed = ask_confirmation(
            self,
            "Delete request",
            f"Delete the request for {request.recipient_name}? This cannot be undone.",
            confirm_text="Delete",
        )
        if not confirmed:
            return
        self._run(
            lambda: self._service.cancel(request, confirmed=True),
            self._handle_deleted,
            name="cancel-request",
        )

    def _handle_mutation(self, result: ServiceResult[DonationRequest]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not update the request.")
            return
        self._replace_row(result.data)
        self._toast(f"Request marked {result.data.status.label.lower()}.", "success")

    def _handle_deleted(self, result: ServiceResult[str]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not delete the request.")
            return
        self._state.remove(result.data)
        self._table.render()
        self._toast("Donation request deleted.", "success")

    def _replace_row(self, request: DonationRequest) -> None:
        self._state.replace(request)
        self._table.render()

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _handle_export(self) -> None:
        rows = self._state.filtered
        if not rows:
            self._toast("There is nothing to export.")
            return
        target = filedialog.asksaveasfilename(
            title="Export donation requests",
            defaultextension=".xlsx",
            filetypes=[("Excel workbook", "*.xlsx")],
            initialfile="donation-requests.xlsx",
        )
        if not target:
            return
        self._run(
            lambda: self._reports.export_requests(rows, Path(target)),
            self._handle_exported,
            name="export-requests",
        )

    def _handle_exported(self, result: ServiceResult[Path]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not export the report.")
            return
        self._toast(f"Saved {result.data.name}", "success")
