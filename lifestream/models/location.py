"""
Location Reference Models.

Districts and upazilas are immutable reference data loaded once from the
bundled JSON documents.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class District(BaseModel):
    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    name: str
    bn_name: str = ""


class Upazila(BaseModel):
    """Sub-district; ``district_id`` references the owning ``District``."""

    model_config = ConfigDict(frozen=True, coerce_numbers_to_str=True)

    id: str
    district_id: str
    name: str
    bn_name: str = ""
