"""
Report Export Service.

Writes the currently filtered donation-request or user table to an
``.xlsx`` workbook: a title row, a generated-on row, a bold header row
and one row per record.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Callable, Iterable, Sequence, TypeVar

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.worksheet.worksheet import Worksheet

from lifestream.logger import StructuredLogger
from lifestream.models.donation_request import DonationRequest
from lifestream.models.service_models import ServiceResult
from lifestream.models.user import UserProfile
from lifestream.services.base_service import BaseService

T = TypeVar("T")

Column = tuple[str, Callable[[T], object]]

_HEADER_ROW: int = 4
_MAX_COLUMN_WIDTH: int = 50

REQUEST_COLUMNS: Sequence[Column[DonationRequest]] = (
    ("Recipient", lambda r: r.recipient_name),
    ("Blood Group", lambda r: str(r.blood_group)),
    ("District", lambda r: r.recipient_district),
    ("Upazila", lambda r: r.recipient_upazila),
    ("Hospital", lambda r: r.hospital_name),
    ("Date", lambda r: r.donation_date),
    ("Time", lambda r: r.donation_time),
    ("Status", lambda r: r.status.label),
    ("Requester", lambda r: r.requester_name),
    ("Donor", lambda r: r.donor_name),
    ("Donor Email", lambda r: r.donor_email),
)

USER_COLUMNS: Sequence[Column[UserProfile]] = (
    ("Name", lambda u: u.name),
    ("Email", lambda u: u.email),
    ("Blood Group", lambda u: str(u.blood_group) if u.blood_group else ""),
    ("District", lambda u: u.district),
    ("Upazila", lambda u: u.upazila),
    ("Role", lambda u: str(u.role)),
    ("Status", lambda u: str(u.status)),
)


class ReportService(BaseService):
    """Exports tables to Excel."""

    def __init__(self, logger: StructuredLogger) -> None:
        super().__init__(logger)

    def export_requests(self, requests: Iterable[DonationRequest], path: Path) -> ServiceResult[Path]:
        return self._export("Donation Requests", REQUEST_COLUMNS, list(requests), path)

    def export_users(self, users: Iterable[UserProfile], path: Path) -> ServiceResult[Path]:
        return self._export("Users", USER_COLUMNS, list(users), path)

    def _export(
        self,
        title: str,
        columns: Sequence[Column[T]],
        records: list[T],
        path: Path,
    ) -> ServiceResult[Path]:
        if path.suffix.lower() != ".xlsx":
            path = path.with_suffix(".xlsx")

        workbook = Workbook()
        sheet: Worksheet = workbook.active
        sheet.title = title[:31]

        sheet.cell(row=1, column=1, value=title).font = Font(bold=True, size=14)
        sheet.cell(row=2, column=1, value=f"Generated on {datetime.now():%Y-%m-%d %H:%M}")

        for col_idx, (header, _) in enumerate(columns, start=1):
            sheet.cell(row=_HEADER_ROW, column=col_idx, value=header).font = Font(bold=True)

        for row_idx, record in enumerate(records, start=_HEADER_ROW + 1):
            for col_idx, (_, read) in enumerate(columns, start=1):
                sheet.cell(row=row_idx, column=col_idx, value=read(record))

        self._fit_columns(sheet, len(columns))
        sheet.freeze_panes = sheet.cell(row=_HEADER_ROW + 1, column=1)

        try:
            workbook.save(path)
        except OSError as exc:
            self._logger.error("Could not write report %s: %s", path, exc)
            return ServiceResult[Path](
                success=False,
                error=f"Could not save the report: {exc.strerror or exc}",
                status_code=500,
            )
        finally:
            workbook.close()

        self._logger.info("Exported %d %s rows to %s", len(records), title.lower(), path)
        return ServiceResult[Path].ok(path)

    @staticmethod
    def _fit_columns(sheet: Worksheet, count: int) -> None:
        for col_idx in range(1, count + 1):
            letter = get_column_letter(col_idx)
            longest = max(
                (len(str(cell.value)) for cell in sheet[letter][_HEADER_ROW - 1:] if cell.value is not None),
                default=8,
            )
            sheet.column_dimensions[letter].width = min(longest + 2, _MAX_COLUMN_WIDTH)
