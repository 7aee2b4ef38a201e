import json

import pytest

from lifestream.errors import ValidationError
from lifestream.models.location import District, Upazila
from lifestream.services.location_service import LocationService, filter_upazilas


def test_bundled_data_loads(locations):
    assert len(locations.districts) == 64
    assert len(locations.upazilas) == 491
    assert "Dhaka" in [d.name for d in locations.districts]


def test_dhaka_offers_savar_and_dhamrai(locations):
    names = [u.name for u in locations.upazilas_for("Dhaka")]

    assert "Savar" in names
    assert "Dhamrai" in names
    assert "Sonagazi" not in names


def test_is_consistent(locations):
    assert locations.is_consistent("Dhaka", "Savar")
    assert locations.is_consistent("Feni", "Sonagazi")
    assert not locations.is_consistent("Feni", "Savar")
    assert not locations.is_consistent("", "Savar")


def test_unknown_or_empty_district_has_no_upazilas(locations):
    assert locations.upazilas_for("") == ()
    assert locations.upazilas_for("Atlantis") == ()


def test_filter_upazilas_is_pure():
    districts = [District(id="1", name="North"), District(id="2", name="South")]
    upazilas = [
        Upazila(id="10", district_id="1", name="Hill"),
        Upazila(id="20", district_id="2", name="Coast"),
        Upazila(id="11", district_id="1", name="Lake"),
    ]

    assert [u.name for u in filter_upazilas("North", districts, upazilas)] == ["Hill", "Lake"]
    assert filter_upazilas("West", districts, upazilas) == ()


def test_changing_district_clears_upazila(locations):
    selection = locations.new_selection()
    selection.select_district("Dhaka")
    selection.select_upazila("Savar")

    selection.select_district("Feni")

    assert selection.upazila == ""
    assert "Sonagazi" in selection.upazila_names
    assert "Savar" not in selection.upazila_names


def test_every_district_cascades_to_its_own_upazilas(locations):
    selection = locations.new_selection()

    for district in locations.districts:
        offered = locations.upazilas_for(district.name)
        assert all(u.district_id == district.id for u in offered), district.name

        # The upazila picked for the previous district must not survive.
        selection.select_district(district.name)
        assert selection.upazila == ""
        assert selection.upazila_names == [u.name for u in offered]
        if offered:
            selection.select_upazila(offered[0].name)
            assert selection.upazila == offered[0].name


def test_upazila_from_another_district_is_rejected(locations):
    selection = locations.new_selection()
    selection.select_district("Feni")

    with pytest.raises(ValidationError):
        selection.select_upazila("Savar")
    assert selection.upazila == ""


def test_unknown_district_is_rejected(locations):
    selection = locations.new_selection()

    with pytest.raises(ValidationError, match="Unknown district"):
        selection.select_district("Atlantis")


def test_clearing_district_empties_options(locations):
    selection = locations.new_selection()
    selection.select_district("Dhaka")

    selection.select_district("")

    assert selection.upazila_options == ()


def _write(path, name, document):
    (path / name).write_text(json.dumps(document), encoding="utf-8")


def test_legacy_array_format_is_read_with_warning(tmp_path, logger, caplog):
    _write(tmp_path, "districts.json", [
        {"type": "header"}, {"type": "database"},
        {"type": "table", "data": [{"id": "1", "name": "North"}]},
    ])
    _write(tmp_path, "upazilas.json", [
        {"type": "header"}, {"type": "database"},
        {"type": "table", "data": [{"id": "5", "district_id": "1", "name": "Hill"}]},
    ])
    service = LocationService(data_dir=tmp_path, logger=logger)

    assert [u.name for u in service.upazilas_for("North")] == ["Hill"]
    assert any("deprecated" in record.getMessage() for record in caplog.records)


def test_unsupported_version_is_rejected(tmp_path, logger):
    _write(tmp_path, "districts.json", {"version": 2, "districts": []})
    _write(tmp_path, "upazilas.json", {"version": 2, "upazilas": []})
    service = LocationService(data_dir=tmp_path, logger=logger)

    with pytest.raises(ValidationError, match="version"):
        service.districts


def test_missing_file_is_reported(tmp_path, logger):
    service = LocationService(data_dir=tmp_path, logger=logger)

    with pytest.raises(ValidationError, match="could not be loaded"):
        service.upazilas_for("Dhaka")
