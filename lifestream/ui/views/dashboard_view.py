"""Dashboard View: default landing page after login.

Admins and volunteers see platform totals (users, funding, requests);
donors see their three most recent requests.  All reads are joined in
``DashboardService.get_stats``: either everything renders or a single
error message does.

**Thin UI Rule**: Zero business logic; it only reads and displays.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Callable, Optional

import customtkinter as ctk

from lifestream.auth import SessionManager
from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import Role
from lifestream.models.service_models import DashboardStats, ServiceResult
from lifestream.services.dashboard_service import DashboardService
from lifestream.services.donation_request_service import DonationRequestService
from lifestream.services.list_state import request_table
from lifestream.ui.components.data_table import PagedTable, RowAction
from lifestream.ui.theme import (
    ACCENT_HOVER,
    ACCENT_PRIMARY,
    CONTENT_CARD_BG,
    CORNER_RADIUS,
    ERROR_TEXT,
    FONT_BODY,
    FONT_BUTTON,
    FONT_HEADING,
    FONT_LABEL,
    FONT_STAT,
    PADDING_LG,
    PADDING_MD,
    PADDING_SM,
    TEXT_LIGHT,
    TEXT_PRIMARY,
    TEXT_SECONDARY,
)
from lifestream.ui.module_frame import ModuleFrame
from lifestream.ui.views.request_dialogs import RequestDetailDialog
from lifestream.ui.views.request_list_view import REQUEST_COLUMNS


class DashboardView(ModuleFrame):
    """Role-specific dashboard.

    Parameters
    ----------
    parent:
        Content container provided by the Host Shell.
    service:
        Dashboard aggregation service.
    requests:
        Used by the donor's recent-request detail dialog.
    session:
        Used to read the current user's identity.
    currency:
        Currency label for the funding total.
    navigate:
        Switches the shell to another module by id.
    logger:
        Structured logger instance.
    """

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: DashboardService,
        requests: DonationRequestService,
        session: SessionManager,
        currency: str,
        navigate: Callable[[str], None],
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._requests = requests
        self._session = session
        self._currency = currency
        self._navigate = navigate
        self._recent = request_table(page_size=3)

        identity = session.get_identity()

        # --- Welcome card ---
        card = ctk.CTkFrame(self, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
        card.pack(padx=PADDING_LG, pady=PADDING_LG, fill="x")
        ctk.CTkLabel(
            card,
            text=f"Welcome, {identity.name}",
            font=FONT_HEADING,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(PADDING_MD, 4))
        ctk.CTkLabel(
            card,
            text=f"Role: {str(identity.role).capitalize()}",
            font=FONT_BODY,
            text_color=TEXT_SECONDARY,
            anchor="w",
        ).pack(fill="x", padx=PADDING_MD, pady=(0, PADDING_MD))

        self._status_label = ctk.CTkLabel(self, text="Loading...", font=FONT_BODY, text_color=TEXT_SECONDARY)
        self._status_label.pack(fill="x", padx=PADDING_LG)

        self._content = ctk.CTkFrame(self, fg_color="transparent")
        self._content.pack(fill="both", expand=True, padx=PADDING_LG, pady=(PADDING_SM, PADDING_LG))

        self._stat_values: dict[str, ctk.CTkLabel] = {}
        self._table: Optional[PagedTable] = None
        if identity.role is Role.DONOR:
            self._build_donor_panel()
        else:
            self._build_stat_cards()

    # ------------------------------------------------------------------
    # Widget creation
    # ------------------------------------------------------------------

    def _build_stat_cards(self) -> None:
        for col, (key, title) in enumerate((
            ("total_users", "Total Donors"),
            ("total_funding", "Total Funding"),
            ("total_requests", "Blood Donation Requests"),
        )):
            self._content.grid_columnconfigure(col, weight=1)
            stat = ctk.CTkFrame(self._content, fg_color=CONTENT_CARD_BG, corner_radius=CORNER_RADIUS)
            stat.grid(row=0, column=col, sticky="nsew", padx=PADDING_SM, pady=PADDING_SM)
            ctk.CTkLabel(
                stat, text=title.upper(), font=FONT_LABEL, text_color=TEXT_SECONDARY,
            ).pack(padx=PADDING_MD, pady=(PADDING_MD, 4))
            value = ctk.CTkLabel(stat, text="—", font=FONT_STAT, text_color=ACCENT_PRIMARY)
            value.pack(padx=PADDING_MD, pady=(0, PADDING_MD))
            self._stat_values[key] = value

    def _build_donor_panel(self) -> None:
        ctk.CTkLabel(
            self._content,
            text="Your recent donation requests",
            font=FONT_BUTTON,
            text_color=TEXT_PRIMARY,
            anchor="w",
        ).pack(fill="x", pady=(0, PADDING_SM))
        self._table = PagedTable(
            self._content,
            self._recent,
            REQUEST_COLUMNS,
            actions=self._row_actions,
            empty_text="You have not created any donation requests yet.",
        )
        self._table.pack(fill="both", expand=True)
        ctk.CTkButton(
            self._content,
            text="View my requests  →",
            font=FONT_BUTTON,
            fg_color=ACCENT_PRIMARY,
            hover_color=ACCENT_HOVER,
            text_color=TEXT_LIGHT,
            command=lambda: self._navigate("my-requests"),
        ).pack(anchor="e", pady=(PADDING_SM, 0))

    # ------------------------------------------------------------------
    # Data
    # ------------------------------------------------------------------

    def refresh(self) -> None:
        self._status_label.configure(text="Loading...", text_color=TEXT_SECONDARY)
        self._status_label.pack(fill="x", padx=PADDING_LG, before=self._content)
        self._run(self._service.get_stats, self._handle_stats, name="dashboard-stats")

    def _handle_stats(self, result: ServiceResult[DashboardStats]) -> None:
        if not result.success or result.data is None:
            self._status_label.configure(
                text=result.error or "Could not load the dashboard.", text_color=ERROR_TEXT,
            )
            self._report_failure(result, "Could not load the dashboard.")
            return
        self._status_label.pack_forget()
        stats = result.data
        if self._table is not None:
            self._recent.load(stats.recent_requests)
            self._table.render()
            return
        self._set_stat("total_users", stats.total_users)
        self._set_stat("total_requests", stats.total_requests)
        funding = stats.total_funding
        self._set_stat(
            "total_funding",
            f"{funding.quantize(Decimal('0.01')):,} {self._currency}" if funding is not None else None,
        )

    def _set_stat(self, key: str, value: object) -> None:
        label = self._stat_values.get(key)
        if label is not None:
            label.configure(text="—" if value is None else f"{value:,}" if isinstance(value, int) else str(value))

    def _row_actions(self, request: DonationRequest) -> list[RowAction]:
        return [("View", lambda: RequestDetailDialog(
            self, self._requests, self._session, request, self._replace_recent, self._logger,
        ))]

    def _replace_recent(self, request: DonationRequest) -> None:
        self._recent.replace(request)
        if self._table is not None:
            self._table.render()
