"""
Funding / Payment Service.

Donation flow:

1. ``POST /create-payment-intent`` with the amount in minor units; the
   platform answers with the intent's client secret.
2. The card is confirmed against the intent directly with the payment
   gateway (``StripeGateway``), using the publishable key.  Card data
   never reaches the platform API.
3. ``POST /save-donation`` records the payment, converted to the
   settlement currency at the configured rate.  A failure here is
   logged and flagged on the receipt, but the payment still stands.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

import requests

from lifestream.api_client import new_idempotency_key
from lifestream.auth import SessionManager
from lifestream.errors import (
    LifeStreamError,
    NetworkError,
    ServerError,
    ValidationError,
)
from lifestream.logger import StructuredLogger
from lifestream.models.payment import CardDetails, DonationReceipt
from lifestream.models.service_models import ServiceResult
from lifestream.repositories.funding_repository import FundingRepository
from lifestream.services.base_service import BaseService
from lifestream.utils.audit import log_audit_event

_CENTS = Decimal("0.01")


def to_minor_units(amount: Decimal) -> int:
    """``Decimal("12.50") -> 1250``."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def convert_amount(amount: Decimal, rate: Decimal) -> Decimal:
    """Convert *amount* at *rate*, rounded to cents."""
    return (amount * rate).quantize(_CENTS, rounding=ROUND_HALF_UP)


class StripeGateway:
    """Confirms card payments against the Stripe REST API.

    Only publishable-key operations are used: creating a card payment
    method and confirming a payment intent with its client secret.

    Parameters
    ----------
    api_base:
        ``https://api.stripe.com/v1``.
    publishable_key:
        The ``pk_...`` key; confirmation is refused when empty.
    timeout_s:
        Request timeout.
    logger:
        Structured logger instance.
    http:
        ``requests.Session`` to send through; tests inject a fake.
    """

    def __init__(
        self,
        api_base: str,
        publishable_key: str,
        timeout_s: float,
        logger: StructuredLogger,
        http: Optional[requests.Session] = None,
    ) -> None:
        self._api_base = api_base.rstrip("/")
        self._key = publishable_key
        self._timeout_s = timeout_s
        self._logger = logger
        self._http: requests.Session = http if http is not None else requests.Session()

    @property
    def is_configured(self) -> bool:
        return bool(self._key)

    def confirm_card_payment(self, client_secret: str, card: CardDetails) -> str:
        """Confirm the intent behind *client_secret*; returns the intent id.

        Raises
        ------
        ValidationError
            The card was declined or the gateway needs further action.
        NetworkError / ServerError
            The gateway could not be reached or failed.
        """
        if not self._key:
            raise ValidationError("Online donations are not configured.")
        intent_id = client_secret.split("_secret_")[0]

        method = self._post("/payment_methods", {
            "type": "card",
            "card[number]": card.number.get_secret_value().replace(" ", ""),
            "card[exp_month]": str(card.exp_month),
            "card[exp_year]": str(card.exp_year),
            "card[cvc]": card.cvc.get_secret_value(),
        })
        intent = self._post(f"/payment_intents/{intent_id}/confirm", {
            "client_secret": client_secret,
            "payment_method": str(method.get("id", "")),
        })

        status = intent.get("status")
        if status != "succeeded":
            self._logger.warning("Payment intent %s ended in status %s", intent_id, status)
            raise ValidationError(
                "The payment needs additional verification that this app cannot complete."
                if status == "requires_action"
                else f"The payment was not completed (status: {status})."
            )
        return str(intent.get("id") or intent_id)

    def _post(self, path: str, form: dict[str, str]) -> dict[str, Any]:
        try:
            response = self._http.request(
                "POST",
                f"{self._api_base}{path}",
                headers={"Authorization": f"Bearer {self._key}"},
                data=form,
                timeout=self._timeout_s,
            )
        except requests.RequestException as exc:
            self._logger.warning("Payment gateway unreachable: %s", exc)
            raise NetworkError("Cannot reach the payment gateway. Please try again.") from exc

        try:
            body: Any = response.json()
        except ValueError as exc:
            raise ServerError("The payment gateway returned an unreadable response.") from exc
        if not isinstance(body, dict):
            raise ServerError("The payment gateway returned an unreadable response.")

        if response.status_code >= 400:
            error = body.get("error") or {}
            message = error.get("message") if isinstance(error, dict) else None
            if response.status_code == 402 or (isinstance(error, dict) and error.get("type") == "card_error"):
                raise ValidationError(message or "Your card was declined.", response.status_code)
            raise ServerError(message or "The payment gateway rejected the request.", response.status_code)
        return body


class PaymentService(BaseService):
    """Runs the donation flow for the signed-in user."""

    def __init__(
        self,
        session: SessionManager,
        funding: FundingRepository,
        gateway: StripeGateway,
        donation_currency: str,
        settlement_currency: str,
        settlement_rate: Decimal,
        min_amount: Decimal,
        logger: StructuredLogger,
    ) -> None:
        super().__init__(logger)
        self._session = session
        self._funding = funding
        self._gateway = gateway
        self._currency = donation_currency
        self._settlement_currency = settlement_currency
        self._rate = settlement_rate
        self._min_amount = min_amount

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def settlement_currency(self) -> str:
        return self._settlement_currency

    @property
    def is_available(self) -> bool:
        return self._gateway.is_configured

    def parse_amount(self, raw: str) -> Decimal:
        """Parse the amount field.

        Raises:
            ValidationError: Not a number, below the minimum, or with
                more than two decimal places.
        """
        try:
            amount = Decimal(raw.strip())
        except (InvalidOperation, AttributeError):
            raise ValidationError("Please enter a valid amount.") from None
        if not amount.is_finite() or amount < self._min_amount:
            raise ValidationError(f"The minimum donation is {self._min_amount} {self._currency}.")
        if amount != amount.quantize(_CENTS):
            raise ValidationError("Amounts can have at most two decimal places.")
        return amount

    def settlement_preview(self, amount: Decimal) -> Decimal:
        return convert_amount(amount, self._rate)

    def donate(self, raw_amount: str, card: CardDetails) -> ServiceResult[DonationReceipt]:
        """Charge *card* and record the donation."""
        try:
            identity = self._session.get_identity()
            if not self._gateway.is_configured:
                raise ValidationError("Online donations are not configured.")
            amount = self.parse_amount(raw_amount)
            client_secret = self._funding.create_payment_intent(
                to_minor_units(amount), idempotency_key=new_idempotency_key(),
            )
            intent_id = self._gateway.confirm_card_payment(client_secret, card)
        except LifeStreamError as exc:
            return self._failure(exc, "donate")

        settled = convert_amount(amount, self._rate)
        receipt = DonationReceipt(
            payment_intent_id=intent_id,
            amount=amount,
            currency=self._currency,
            settled_amount=settled,
            settled_currency=self._settlement_currency,
        )
        try:
            self._funding.save_donation(
                {
                    "paymentIntentId": intent_id,
                    "userId": identity.id,
                    "userEmail": identity.email,
                    "amount": float(settled),
                    "currency": self._settlement_currency,
                },
                idempotency_key=intent_id,
            )
        except LifeStreamError as exc:
            self._logger.error(
                "Payment %s succeeded but could not be recorded: %s", intent_id, exc.message,
                extra={"event": "DONATION_RECORD_FAILED", "user_id": identity.id},
            )
            receipt = receipt.model_copy(update={"recorded": False})

        log_audit_event(
            logger=self._logger,
            action="DONATE",
            entity_type="Donation",
            entity_id=intent_id,
            user_id=identity.id,
            details={
                "amount": str(amount),
                "currency": self._currency,
                "settled_amount": str(settled),
                "settled_currency": self._settlement_currency,
                "recorded": receipt.recorded,
            },
        )
        return ServiceResult[DonationReceipt].ok(receipt)
