import pytest

from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import BloodGroup, RequestStatus
from lifestream.services.list_state import TableState, parse_request_filter, request_table


def _row(request_id, status=RequestStatus.PENDING):
    return DonationRequest(
        id=request_id,
        recipient_name="R",
        recipient_district="Dhaka",
        recipient_upazila="Savar",
        blood_group=BloodGroup.B_NEG,
        status=status,
    )


def _table(count=25, page_size=10):
    table = request_table(page_size)
    statuses = [RequestStatus.PENDING, RequestStatus.IN_PROGRESS]
    table.load([_row(f"r{i}", statuses[i % 2]) for i in range(count)])
    return table


def test_pagination():
    table = _table()

    assert table.page_count == 3
    assert [r.id for r in table.visible][:2] == ["r0", "r1"]
    table.go_to(3)
    assert [r.id for r in table.visible] == ["r20", "r21", "r22", "r23", "r24"]
    table.next_page()
    assert table.page == 3
    table.go_to(-4)
    assert table.page == 1


def test_filter_resets_to_first_page():
    table = _table()
    table.go_to(2)

    table.set_filter(RequestStatus.IN_PROGRESS)

    assert table.page == 1
    assert len(table.filtered) == 12
    assert all(r.status is RequestStatus.IN_PROGRESS for r in table.visible)


def test_replace_and_remove_patch_rows():
    table = _table(count=3)

    table.replace(_row("r1", RequestStatus.CANCELED))
    table.remove("r0")

    assert [(r.id, r.status) for r in table.rows] == [
        ("r1", RequestStatus.CANCELED), ("r2", RequestStatus.PENDING),
    ]


def test_removing_last_row_on_page_moves_back():
    table = _table(count=11)
    table.go_to(2)

    table.remove("r10")

    assert table.page == 1


def test_empty_table_has_one_page():
    table = request_table()
    assert table.page_count == 1
    assert table.visible == []


def test_parse_request_filter():
    assert parse_request_filter("all") is None
    assert parse_request_filter("") is None
    assert parse_request_filter("cancelled") is RequestStatus.CANCELED


def test_page_size_must_be_positive():
    with pytest.raises(ValueError):
        TableState(key=lambda r: r, matches=lambda r, f: True, page_size=0)
