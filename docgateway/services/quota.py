# ABOUTME: Plan-tier and API call budget gate
# ABOUTME: Rejects free-tier tenants and tenants at their monthly call limit before any billable work

from fastapi import HTTPException

from docgateway.config import get_settings
from docgateway.models.database import Subscription

PAID_PLAN = "pro"


def check_plan(subscription: Subscription) -> None:
    """Raise 403 with an upgrade pointer unless the subscription is on the paid tier."""
    if subscription.plan != PAID_PLAN:
        raise HTTPException(
            status_code=403,
            detail={
                "code": "PLAN_UPGRADE_REQUIRED",
                "error": "API access requires Pro plan",
                "upgrade_url": get_settings().upgrade_url,
            }
        )


def check_call_budget(subscription: Subscription) -> None:
    """Raise 429 with current usage when the monthly API call budget is spent."""
    used = subscription.api_calls_used or 0
    limit = subscription.api_calls_limit or 0

    if used >= limit:
        raise HTTPException(
            status_code=429,
            detail={
                "code": "RATE_LIMITED",
                "error": "API rate limit exceeded",
                "used": used,
                "limit": limit,
            }
        )


def enforce_quota(subscription: Subscription) -> None:
    """Plan check, then call budget check."""
    check_plan(subscription)
    check_call_budget(subscription)
