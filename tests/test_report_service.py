from openpyxl import load_workbook

from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import BloodGroup, RequestStatus, Role, UserStatus
from lifestream.models.user import UserProfile
from lifestream.services.report_service import ReportService


def _requests():
    return [
        DonationRequest(
            id="r1",
            recipient_name="Rahim",
            recipient_district="Dhaka",
            recipient_upazila="Savar",
            hospital_name="Enam Medical",
            blood_group=BloodGroup.O_NEG,
            status=RequestStatus.IN_PROGRESS,
            donor_name="Karim Uddin",
        ),
        DonationRequest(
            id="r2",
            recipient_name="Salma",
            recipient_district="Feni",
            recipient_upazila="Sonagazi",
            blood_group=BloodGroup.AB_POS,
        ),
    ]


def test_request_export_round_trips(tmp_path, logger):
    result = ReportService(logger).export_requests(_requests(), tmp_path / "requests.xlsx")

    assert result.success
    sheet = load_workbook(result.data).active
    assert sheet["A1"].value == "Donation Requests"
    assert sheet["A4"].value == "Recipient"
    assert sheet["A4"].font.bold
    assert [c.value for c in sheet[5]][:3] == ["Rahim", "O-", "Dhaka"]
    assert sheet["H5"].value == "In Progress"
    assert sheet["A6"].value == "Salma"
    assert sheet.max_row == 6


def test_suffix_is_forced_to_xlsx(tmp_path, logger):
    result = ReportService(logger).export_users(
        [UserProfile(email="a@example.com", name="Ana", role=Role.ADMIN, status=UserStatus.BLOCKED)],
        tmp_path / "users.csv",
    )

    assert result.data.suffix == ".xlsx"
    sheet = load_workbook(result.data).active
    assert sheet["A4"].value == "Name"
    assert sheet["A5"].value == "Ana"
    assert sheet["F5"].value == "admin"
    assert sheet["G5"].value == "blocked"


def test_unwritable_path_fails_cleanly(tmp_path, logger):
    result = ReportService(logger).export_users([], tmp_path / "missing" / "users.xlsx")

    assert not result.success
    assert result.status_code == 500
