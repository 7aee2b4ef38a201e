import io
import json
from decimal import Decimal

import pydantic
import pytest

from lifestream.config import AppConfig
from lifestream.logger import StructuredLogger
from lifestream.utils.audit import log_audit_event


def test_log_lines_are_json_with_redacted_secrets(tmp_path):
    stream = io.StringIO()
    log = StructuredLogger(
        name="lifestream.tests.redaction", stream=stream, log_file=str(tmp_path / "r.log"),
    )

    log.info("Signed in", extra={"access_token": "abc", "user_id": "u1"})

    entry = json.loads(stream.getvalue().splitlines()[-1])
    assert entry["message"] == "Signed in"
    assert entry["extra"]["access_token"] == "***"
    assert entry["extra"]["user_id"] == "u1"
    assert (tmp_path / "r.log").exists()


def test_audit_event_is_logged(logger, caplog):
    event = log_audit_event(
        logger=logger,
        action="CLAIM",
        entity_type="DonationRequest",
        entity_id="r1",
        user_id="u-other",
        details={"new_status": "inProgress"},
    )

    assert event.action == "CLAIM"
    message = caplog.records[-1].getMessage()
    assert message.startswith("AUDIT: ")
    assert json.loads(message[len("AUDIT: "):])["details"] == {"new_status": "inProgress"}


def test_config_defaults(monkeypatch):
    monkeypatch.delenv("SETTLEMENT_RATE", raising=False)
    config = AppConfig(_env_file=None)

    assert config.SETTLEMENT_RATE == Decimal("79")
    assert config.DONOR_PLACEHOLDER == "No donor yet"
    assert (config.reference_data_path / "districts.json").exists()
    assert not config.payments_enabled


def test_config_reads_environment(monkeypatch):
    monkeypatch.setenv("API_BASE_URL", "https://api.lifestream.test")
    monkeypatch.setenv("STRIPE_PUBLISHABLE_KEY", "pk_live")

    config = AppConfig(_env_file=None)

    assert config.API_BASE_URL == "https://api.lifestream.test"
    assert config.payments_enabled


def test_bearer_tokens_and_client_secrets_are_masked_in_messages(tmp_path):
    stream = io.StringIO()
    log = StructuredLogger(
        name="lifestream.tests.scrub", stream=stream, log_file=str(tmp_path / "s.log"),
    )

    log.warning("Rejected header Bearer eyJ.abc-123 for pi_9Xy_secret_Zq7")

    message = json.loads(stream.getvalue().splitlines()[-1])["message"]
    assert message == "Rejected header Bearer *** for pi_9Xy_secret_***"


def test_disabled_features_lists_missing_integrations(monkeypatch):
    for name in ("SUPABASE_URL", "STRIPE_PUBLISHABLE_KEY", "IMGBB_API_KEY", "MAPS_API_KEY"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SUPABASE_URL", "https://project.supabase.test")

    config = AppConfig(_env_file=None)

    assert config.disabled_features() == [
        "Card donations",
        "Avatar and thumbnail upload",
        "Contact map preview",
    ]


def test_audit_event_rejects_unknown_action(logger):
    with pytest.raises(pydantic.ValidationError):
        log_audit_event(
            logger=logger, action="APPROVE", entity_type="User", entity_id="u1", user_id="u-admin",
        )
