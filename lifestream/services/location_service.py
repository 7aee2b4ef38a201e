"""
Location Reference Data Service.

Loads the immutable district and upazila lists from the bundled JSON
documents and provides the district -> upazila cascade used by every
location form (registration, profile, request form, donor search).

Document schema (version 1)::

    {"version": 1, "districts": [{"id": "47", "name": "Dhaka"}, ...]}
    {"version": 1, "upazilas": [{"id": "470", "district_id": "47", "name": "Savar"}, ...]}

The older export shape (an outer array whose third element holds the
records under ``data``) is still read, with a deprecation warning.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import Any, Iterable, Optional, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from lifestream.errors import ValidationError
from lifestream.logger import StructuredLogger
from lifestream.models.location import District, Upazila
from lifestream.services.base_service import BaseService

SCHEMA_VERSION: int = 1

_M = TypeVar("_M", bound=BaseModel)


def filter_upazilas(
    district_name: str,
    districts: Iterable[District],
    upazilas: Iterable[Upazila],
) -> tuple[Upazila, ...]:
    """Return the upazilas belonging to the district called *district_name*.

    Pure function: an empty or unknown district name yields an empty
    tuple.  One linear scan per call.
    """
    if not district_name:
        return ()
    district_id: Optional[str] = next(
        (d.id for d in districts if d.name == district_name), None,
    )
    if district_id is None:
        return ()
    return tuple(u for u in upazilas if u.district_id == district_id)


class LocationSelection:
    """Cascade state for one district/upazila selector pair.

    Changing the district always clears the selected upazila, so the
    pair can never hold an upazila from another district.
    """

    def __init__(self, districts: tuple[District, ...], upazilas: tuple[Upazila, ...]) -> None:
        self._districts = districts
        self._upazilas = upazilas
        self.district: str = ""
        self.upazila: str = ""
        self.upazila_options: tuple[Upazila, ...] = ()

    @property
    def district_names(self) -> list[str]:
        return [d.name for d in self._districts]

    @property
    def upazila_names(self) -> list[str]:
        return [u.name for u in self.upazila_options]

    def select_district(self, name: str) -> None:
        """Select *name* (or clear with ``""``) and reset the upazila.

        Raises:
            ValidationError: If *name* is not a known district.
        """
        if name and name not in self.district_names:
            raise ValidationError(f"Unknown district: '{name}'.")
        self.district = name
        self.upazila = ""
        self.upazila_options = filter_upazilas(name, self._districts, self._upazilas)

    def select_upazila(self, name: str) -> None:
        """Select an upazila from the current options (``""`` clears).

        Raises:
            ValidationError: If *name* does not belong to the selected district.
        """
        if name and name not in self.upazila_names:
            raise ValidationError(
                f"'{name}' is not an upazila of {self.district or 'the selected district'}."
            )
        self.upazila = name


class LocationService(BaseService):
    """Reads and caches the district/upazila reference data.

    Parameters
    ----------
    data_dir:
        Directory containing ``districts.json`` and ``upazilas.json``.
    logger:
        Structured logger instance.
    """

    def __init__(self, data_dir: Path, logger: StructuredLogger) -> None:
        super().__init__(logger)
        self._data_dir = data_dir
        self._lock = threading.Lock()
        self._districts: Optional[tuple[District, ...]] = None
        self._upazilas: Optional[tuple[Upazila, ...]] = None

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def districts(self) -> tuple[District, ...]:
        self._ensure_loaded()
        assert self._districts is not None
        return self._districts

    @property
    def upazilas(self) -> tuple[Upazila, ...]:
        self._ensure_loaded()
        assert self._upazilas is not None
        return self._upazilas

    def upazilas_for(self, district_name: str) -> tuple[Upazila, ...]:
        return filter_upazilas(district_name, self.districts, self.upazilas)

    def is_consistent(self, district_name: str, upazila_name: str) -> bool:
        """``True`` when *upazila_name* belongs to *district_name*."""
        return any(u.name == upazila_name for u in self.upazilas_for(district_name))

    def new_selection(self) -> LocationSelection:
        """Fresh cascade state for a form."""
        return LocationSelection(self.districts, self.upazilas)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def _ensure_loaded(self) -> None:
        with self._lock:
            if self._districts is not None:
                return
            districts = self._load("districts.json", "districts", District)
            upazilas = self._load("upazilas.json", "upazilas", Upazila)
            self._districts = districts
            self._upazilas = upazilas
            self._logger.info(
                "Location reference data loaded: %d districts, %d upazilas",
                len(districts),
                len(upazilas),
            )

    def _load(self, filename: str, key: str, model: type[_M]) -> tuple[_M, ...]:
        path = self._data_dir / filename
        try:
            document: Any = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            self._logger.error("Cannot read reference data %s: %s", path, exc)
            raise ValidationError("Location reference data could not be loaded.") from exc

        records = self._extract_records(document, key, filename)
        try:
            return tuple(model.model_validate(record) for record in records)
        except PydanticValidationError as exc:
            self._logger.error("Malformed record in %s: %s", filename, exc)
            raise ValidationError("Location reference data is malformed.") from exc

    def _extract_records(self, document: Any, key: str, filename: str) -> list[Any]:
        if isinstance(document, dict):
            version = document.get("version")
            if version != SCHEMA_VERSION:
                raise ValidationError(
                    f"Unsupported reference data version {version!r} in {filename}."
                )
            records = document.get(key)
            if isinstance(records, list):
                return records
            raise ValidationError(f"'{key}' list missing from {filename}.")

        if (
            isinstance(document, list)
            and len(document) > 2
            and isinstance(document[2], dict)
            and isinstance(document[2].get("data"), list)
        ):
            self._logger.warning(
                "%s uses the deprecated array export format; "
                "convert it to the versioned schema.",
                filename,
            )
            return document[2]["data"]

        raise ValidationError(f"Unrecognised reference data format in {filename}.")
