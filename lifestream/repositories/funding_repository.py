"""
Funding Repository.

Platform-side half of the donation flow: payment-intent creation, the
donation record, and the aggregate totals shown on dashboards.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from lifestream.errors import ServerError
from lifestream.repositories.base_repository import BaseRepository


def _to_decimal(value: Any) -> Decimal:
    return Decimal(str(value))


class FundingRepository(BaseRepository):
    """Data access for payment and funding-total routes."""

    def create_payment_intent(self, amount_minor: int, *, idempotency_key: str) -> str:
        """Ask the API for a payment intent; returns its client secret."""
        payload = self._api.post(
            "/create-payment-intent",
            json={"amount": amount_minor},
            idempotency_key=idempotency_key,
        )
        secret = payload.get("clientSecret") if isinstance(payload, dict) else None
        if not secret:
            raise ServerError("The server did not return a payment reference.")
        return str(secret)

    def save_donation(self, record: dict[str, Any], *, idempotency_key: str) -> None:
        self._api.post("/save-donation", json=record, idempotency_key=idempotency_key)

    def total_funding(self) -> Decimal:
        """Admin total (``GET /total-donations``)."""
        payload = self._api.get("/total-donations")
        return self._read_number(payload, "totalAmount", _to_decimal, operation_name="total_funding")

    def funding_stats(self) -> Decimal:
        """Volunteer total (``GET /admin/stats/donations``)."""
        payload = self._api.get("/admin/stats/donations")
        return self._read_number(payload, "totalAmount", _to_decimal, operation_name="funding_stats")
