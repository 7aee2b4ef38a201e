"""User Management Screen (admin).

Lists every account with a client-side status filter and pagination.
Row actions block/unblock a user and change their role; promoting to
admin asks for confirmation first.  The filtered list exports to Excel.

**Thin UI Rule**: permission checks live in ``UserService``.
"""

from __future__ import annotations

from pathlib import Path
from tkinter import filedialog
from typing import Optional

import customtkinter as ctk

from lifestream.logger import StructuredLogger
from lifestream.models.enums import Role, UserStatus
from lifestream.models.service_models import ServiceResult
from lifestream.models.user import UserProfile
from lifestream.services.list_state import user_table
from lifestream.services.report_service import ReportService
from lifestream.services.user_service import UserService
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

_FILTERS: dict[str, Optional[UserStatus]] = {
    "All": None,
    "Active": UserStatus.ACTIVE,
    "Blocked": UserStatus.BLOCKED,
}

_COLUMNS: list[TableColumn] = [
    ("Name", lambda u: u.name or "—", 3),
    ("Email", lambda u: u.email, 4),
    ("Blood", lambda u: str(u.blood_group) if u.blood_group else "—", 1),
    ("Role", lambda u: str(u.role).capitalize(), 2),
    ("Status", lambda u: str(u.status).capitalize(), 2),
]


class UsersView(ModuleFrame):
    """Admin table of all users."""

    def __init__(
        self,
        parent: ctk.CTkFrame,
        service: UserService,
        reports: ReportService,
        page_size: int,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(parent, logger)
        self._service = service
        self._reports = reports
        self._state = user_table(page_size)

        header = self._build_header("All Users")
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
        ctk.CTkOptionMenu(
            header,
            values=list(_FILTERS),
            command=self._handle_filter,
            width=130,
        ).pack(side="right", padx=PADDING_SM)
        ctk.CTkLabel(header, text="Status", font=FONT_SMALL, text_color=TEXT_SECONDARY).pack(side="right")

        self._table = PagedTable(
            self, self._state, _COLUMNS, actions=self._row_actions, empty_text="No users found.",
        )
        self._table.pack(fill="both", expand=True, padx=PADDING_LG, pady=(0, PADDING_LG))

    def refresh(self) -> None:
        self._run(self._service.get_all_users, self._handle_loaded, name="list-users")

    def _handle_loaded(self, result: ServiceResult[list[UserProfile]]) -> None:
        if not result.success:
            self._report_failure(result, "Could not load users.")
            return
        self._state.load(result.data or [])
        self._table.render()

    def _handle_filter(self, value: str) -> None:
        self._state.set_filter(_FILTERS[value])
        self._table.render()

    # ------------------------------------------------------------------
    # Row actions
    # ------------------------------------------------------------------

    def _row_actions(self, user: UserProfile) -> list[RowAction]:
        toggle = "Unblock" if user.is_blocked else "Block"
        actions: list[RowAction] = [(toggle, lambda: self._handle_toggle(user))]
        for role in Role:
            if role is not user.role:
                actions.append((role.capitalize(), lambda r=role: self._handle_role(user, r)))
        return actions

    def _handle_toggle(self, user: UserProfile) -> None:
        self._run(lambda: self._service.toggle_status(user), self._handle_updated, name="toggle-user")

    def _handle_role(self, user: UserProfile, role: Role) -> None:
        confirmed = False
        if role is Role.ADMIN:
            confirmed = ask_confirmation(
                self,
                "Make admin",
                f"Give {user.name or user.email} full administrator rights?",
                confirm_text="Make admin",
            )
            if not confirmed:
                return
        self._run(
            lambda: self._service.update_user_role(user, role, confirmed=confirmed),
            self._handle_updated,
            name="set-user-role",
        )

    def _handle_updated(self, result: ServiceResult[UserProfile]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not update the user.")
            return
        self._state.replace(result.data)
        self._table.render()
        user = result.data
        self._toast(f"{user.name or user.email} is now {user.status} ({user.role}).", "success")

    # ------------------------------------------------------------------
    # Export
    # ------------------------------------------------------------------

    def _handle_export(self) -> None:
        rows = self._state.filtered
        if not rows:
            self._toast("There is nothing to export.")
            return
        target = filedialog.asksaveasfilename(
            title="Export users",
            defaultextension=".xlsx",
            filetypes=[("Excel workbook", "*.xlsx")],
            initialfile="users.xlsx",
        )
        if not target:
            return
        self._run(lambda: self._reports.export_users(rows, Path(target)), self._handle_exported, name="export-users")

    def _handle_exported(self, result: ServiceResult[Path]) -> None:
        if not result.success or result.data is None:
            self._report_failure(result, "Could not export the report.")
            return
        self._toast(f"Saved {result.data.name}", "success")
