# ABOUTME: Usage accounting for admitted API requests
# ABOUTME: Atomically increments key and subscription counters; failures are logged, never raised

import logging
from datetime import datetime, timezone

from sqlalchemy import update
from sqlalchemy.orm import Session

from docgateway.models.database import APIKey, Subscription

logger = logging.getLogger(__name__)


def record_key_usage(db: Session, api_key_id: str) -> None:
    """Stamp last_used_at and bump calls_count in a single UPDATE."""
    db.execute(
        update(APIKey)
        .where(APIKey.id == api_key_id)
        .values(
            last_used_at=datetime.now(timezone.utc),
            calls_count=APIKey.calls_count + 1,
        )
    )
    db.commit()


def record_subscription_usage(db: Session, organization_id: str) -> None:
    """Bump api_calls_used in a single UPDATE (no read-modify-write)."""
    db.execute(
        update(Subscription)
        .where(Subscription.organization_id == organization_id)
        .values(api_calls_used=Subscription.api_calls_used + 1)
    )
    db.commit()


def record_usage(db: Session, api_key_id: str, organization_id: str) -> bool:
    """
    Charge one API call to the key and to the organization's subscription.

    The two writes are independent: a failure on the key counter does not
    skip the subscription counter. The quota check that precedes this call
    is not atomic with it, so concurrent requests on the same tenant can
    overshoot api_calls_limit slightly.

    Returns True if both writes succeeded.
    """
    ok = True

    try:
        record_key_usage(db, api_key_id)
    except Exception:
        db.rollback()
        ok = False
        logger.exception(
            "Failed to record API key usage",
            extra={"api_key_id": api_key_id, "organization_id": organization_id},
        )

    try:
        record_subscription_usage(db, organization_id)
    except Exception:
        db.rollback()
        ok = False
        logger.exception(
            "Failed to record subscription usage",
            extra={"organization_id": organization_id},
        )

    return ok
