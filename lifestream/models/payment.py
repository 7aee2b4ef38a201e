"""
Funding Models.

Card data only ever travels from the donate form straight to the
payment gateway; it is never logged or sent to the platform API.
"""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel, Field, SecretStr


class CardDetails(BaseModel):
    """Card fields collected by the donate form."""

    number: SecretStr
    exp_month: int = Field(ge=1, le=12)
    exp_year: int = Field(ge=2000)
    cvc: SecretStr


class DonationReceipt(BaseModel):
    """Outcome of a confirmed donation.

    ``recorded`` is ``False`` when the payment succeeded but saving the
    donation to the platform failed; the payment itself still stands.
    """

    payment_intent_id: str
    amount: Decimal
    currency: str
    settled_amount: Decimal
    settled_currency: str
    recorded: bool = True
