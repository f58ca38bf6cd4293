# ABOUTME: Tests for usage accounting
# ABOUTME: Validates counter increments and that write failures are logged without raising

import logging
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from docgateway.models.database import APIKey, Subscription
from docgateway.services.usage import record_usage
from tests.conftest import TestingSessionLocal, create_tenant


def _counters(tenant):
    db = TestingSessionLocal()
    try:
        api_key = db.get(APIKey, tenant["api_key_id"])
        subscription = db.query(Subscription).filter_by(organization_id=tenant["organization_id"]).first()
        return api_key.calls_count, api_key.last_used_at, subscription.api_calls_used
    finally:
        db.close()


def test_record_usage_increments_key_and_subscription(db_session):
    tenant = create_tenant(db_session, used=5)

    assert record_usage(db_session, tenant["api_key_id"], tenant["organization_id"]) is True
    assert record_usage(db_session, tenant["api_key_id"], tenant["organization_id"]) is True

    calls_count, last_used_at, api_calls_used = _counters(tenant)
    assert calls_count == 2
    assert last_used_at is not None
    assert api_calls_used == 7


def test_key_write_failure_still_charges_subscription(db_session, caplog):
    """A failed key update is logged and the subscription counter is still bumped."""
    tenant = create_tenant(db_session, used=0)

    with patch("docgateway.services.usage.record_key_usage", side_effect=OperationalError("UPDATE", {}, Exception("locked"))):
        with caplog.at_level(logging.ERROR, logger="docgateway.services.usage"):
            ok = record_usage(db_session, tenant["api_key_id"], tenant["organization_id"])

    assert ok is False
    assert "Failed to record API key usage" in caplog.text

    calls_count, _, api_calls_used = _counters(tenant)
    assert calls_count == 0
    assert api_calls_used == 1


def test_subscription_write_failure_is_logged_not_raised(db_session, caplog):
    tenant = create_tenant(db_session)

    with patch("docgateway.services.usage.record_subscription_usage", side_effect=OperationalError("UPDATE", {}, Exception("down"))):
        with caplog.at_level(logging.ERROR, logger="docgateway.services.usage"):
            ok = record_usage(db_session, tenant["api_key_id"], tenant["organization_id"])

    assert ok is False
    assert "Failed to record subscription usage" in caplog.text
