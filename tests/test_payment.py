from decimal import Decimal

import pytest

from lifestream.errors import ErrorKind, ValidationError
from lifestream.models.payment import CardDetails
from lifestream.repositories.funding_repository import FundingRepository
from lifestream.services.payment_service import (
    PaymentService,
    StripeGateway,
    convert_amount,
    to_minor_units,
)

CARD = CardDetails(number="4242 4242 4242 4242", exp_month=12, exp_year=2030, cvc="123")


def _service(api, http, session, logger, key="pk_test_123"):
    gateway = StripeGateway(
        api_base="https://api.stripe.test/v1",
        publishable_key=key,
        timeout_s=5,
        logger=logger,
        http=http,
    )
    return PaymentService(
        session=session,
        funding=FundingRepository(api=api, logger=logger),
        gateway=gateway,
        donation_currency="AUD",
        settlement_currency="BDT",
        settlement_rate=Decimal("79"),
        min_amount=Decimal("1"),
        logger=logger,
    )


@pytest.fixture
def service(api, http, session, logger):
    return _service(api, http, session, logger)


def _route_happy_path(http):
    http.route("POST", "/create-payment-intent", body={"clientSecret": "pi_123_secret_abc"})
    http.route("POST", "/v1/payment_methods", body={"id": "pm_1"})
    http.route("POST", "/v1/payment_intents/pi_123/confirm", body={"id": "pi_123", "status": "succeeded"})
    http.route("POST", "/save-donation", body={"insertedId": "d1"})


def test_minor_units_and_conversion():
    assert to_minor_units(Decimal("12.50")) == 1250
    assert to_minor_units(Decimal("1")) == 100
    assert convert_amount(Decimal("10"), Decimal("79")) == Decimal("790.00")
    assert convert_amount(Decimal("0.015"), Decimal("1")) == Decimal("0.02")


@pytest.mark.parametrize("raw", ["abc", "", "0.5", "-3", "10.005", "NaN"])
def test_invalid_amounts_are_rejected(service, raw):
    with pytest.raises(ValidationError):
        service.parse_amount(raw)


def test_settlement_preview(service):
    assert service.settlement_preview(Decimal("25")) == Decimal("1975.00")


def test_donation_is_charged_and_recorded(service, session, http, donor):
    session.publish(donor)
    _route_happy_path(http)

    result = service.donate(" 10 ", CARD)

    assert result.success
    receipt = result.data
    assert receipt.payment_intent_id == "pi_123"
    assert receipt.settled_amount == Decimal("790.00")
    assert receipt.settled_currency == "BDT"
    assert receipt.recorded

    assert http.paths() == [
        "/create-payment-intent",
        "/v1/payment_methods",
        "/v1/payment_intents/pi_123/confirm",
        "/save-donation",
    ]
    assert http.calls[0].json == {"amount": 1000}
    assert http.calls[1].data["card[number]"] == "4242424242424242"
    assert http.calls[1].headers["Authorization"] == "Bearer pk_test_123"
    assert http.calls[3].json["amount"] == 790.0
    assert http.calls[3].json["currency"] == "BDT"
    assert http.calls[3].headers["Idempotency-Key"] == "pi_123"


def test_declined_card_is_a_validation_error(service, session, http, donor):
    session.publish(donor)
    _route_happy_path(http)
    http.route(
        "POST", "/v1/payment_methods", status=402,
        body={"error": {"type": "card_error", "message": "Your card was declined."}},
    )

    result = service.donate("10", CARD)

    assert result.error_kind is ErrorKind.VALIDATION
    assert result.error == "Your card was declined."
    assert "/save-donation" not in http.paths()


def test_unfinished_intent_is_not_recorded(service, session, http, donor):
    session.publish(donor)
    _route_happy_path(http)
    http.route(
        "POST", "/v1/payment_intents/pi_123/confirm",
        body={"id": "pi_123", "status": "requires_action"},
    )

    result = service.donate("10", CARD)

    assert result.error_kind is ErrorKind.VALIDATION
    assert "/save-donation" not in http.paths()


def test_failed_save_still_returns_receipt(service, session, http, donor):
    session.publish(donor)
    _route_happy_path(http)
    http.route("POST", "/save-donation", status=500, body={"message": "insert failed"})

    result = service.donate("10", CARD)

    assert result.success
    assert result.data.recorded is False


def test_unconfigured_gateway_sends_nothing(api, http, session, logger, donor):
    service = _service(api, http, session, logger, key="")
    session.publish(donor)

    result = service.donate("10", CARD)

    assert not service.is_available
    assert result.error_kind is ErrorKind.VALIDATION
    assert http.calls == []


def test_donating_requires_sign_in(service, http):
    assert service.donate("10", CARD).error_kind is ErrorKind.AUTHENTICATION
    assert http.calls == []
