"""
Donation Request Repository.

Endpoint wrappers for creating, reading, claiming, editing and deleting
donation requests.  Every read returns validated ``DonationRequest``
models with canonical status values.
"""

from __future__ import annotations

from typing import Any, Optional

from lifestream.models.donation_request import DonationRequest
from lifestream.models.enums import RequestStatus
from lifestream.repositories.base_repository import BaseRepository


class DonationRequestRepository(BaseRepository):
    """Data access for the donation-request routes."""

    def create(self, request: DonationRequest, *, idempotency_key: str) -> Optional[str]:
        """Create *request*; returns the new record id when the API reports one."""
        payload = self._api.post(
            "/create-donation-request",
            json=request.to_payload(),
            idempotency_key=idempotency_key,
        )
        if isinstance(payload, dict):
            new_id = payload.get("insertedId") or payload.get("_id")
            return str(new_id) if new_id else None
        return None

    def get(self, request_id: str) -> DonationRequest:
        payload = self._api.get(f"/donationRequests/{request_id}")
        return self._parse(DonationRequest, payload, operation_name="get")

    def claim(
        self,
        request_id: str,
        donor_name: str,
        donor_email: str,
        *,
        idempotency_key: str,
    ) -> None:
        self._api.put(
            f"/donationRequests/pending/{request_id}",
            json={
                "donorName": donor_name,
                "donorEmail": donor_email,
                "donationStatus": str(RequestStatus.IN_PROGRESS),
            },
            idempotency_key=idempotency_key,
        )

    def edit(self, request_id: str, fields: dict[str, Any], *, idempotency_key: str) -> None:
        self._api.put(
            f"/editDonationRequest/{request_id}",
            json=fields,
            idempotency_key=idempotency_key,
        )

    def delete(self, request_id: str) -> None:
        self._api.delete(f"/donationRequests/{request_id}")

    def list_recent(self, uid: str) -> list[DonationRequest]:
        payload = self._api.get(f"/donationRequests/recent/{uid}")
        return self._parse_list(DonationRequest, payload, operation_name="list_recent")

    def list_mine(self, uid: str) -> list[DonationRequest]:
        payload = self._api.get(f"/my-donation-requests/{uid}")
        return self._parse_list(DonationRequest, payload, operation_name="list_mine")

    def list_all(self) -> list[DonationRequest]:
        payload = self._api.get("/all-donation-requests")
        return self._parse_list(DonationRequest, payload, operation_name="list_all")

    def list_pending(self) -> list[DonationRequest]:
        payload = self._api.get("/pendingRequests", auth=False)
        return self._parse_list(DonationRequest, payload, operation_name="list_pending")

    def count(self) -> int:
        payload = self._api.get("/all-donation-requests-count")
        return self._read_number(payload, "count", int, operation_name="count")
