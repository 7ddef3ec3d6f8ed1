"""
Plan limits and utilities for subscription-based restrictions.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from .models import AiUsageLog, Client, Contractor

VALID_PLANS = ("basic", "pro", "business")

# None means unlimited
PLANS = {
    "basic": {
        "display_name": "Basic Plan",
        "price": 29,
        "client_limit": 10,
        "ai_usage_limit": 0,
        "has_ai_cost_analysis": False,
        "has_time_clock": False,
        "has_stripe_integration": False,
        "has_custom_portal": True,
        "has_branded_portal": False,
    },
    "pro": {
        "display_name": "Pro Plan",
        "price": 59,
        "client_limit": 50,
        "ai_usage_limit": 10,
        "has_ai_cost_analysis": True,
        "has_time_clock": True,
        "has_stripe_integration": False,
        "has_custom_portal": True,
        "has_branded_portal": False,
    },
    "business": {
        "display_name": "Business Plan",
        "price": 99,
        "client_limit": None,
        "ai_usage_limit": None,
        "has_ai_cost_analysis": True,
        "has_time_clock": True,
        "has_stripe_integration": True,
        "has_custom_portal": True,
        "has_branded_portal": True,
    },
}

# Public feature names accepted by /api/subscription/check/{feature}
FEATURE_FLAGS = {
    "hasAiCostAnalysis": "has_ai_cost_analysis",
    "hasTimeClock": "has_time_clock",
    "hasStripeIntegration": "has_stripe_integration",
    "hasCustomPortal": "has_custom_portal",
    "hasBrandedPortal": "has_branded_portal",
}


def normalize_plan(plan: Optional[str]) -> str:
    """Unknown or missing plans are treated as basic"""
    if plan and plan.lower() in PLANS:
        return plan.lower()
    return "basic"


def get_plan(plan: Optional[str]) -> dict:
    return PLANS[normalize_plan(plan)]


def has_feature(plan: Optional[str], feature: str) -> bool:
    key = FEATURE_FLAGS.get(feature)
    if key is None:
        return False
    return bool(get_plan(plan)[key])


def current_usage_month(now: Optional[datetime] = None) -> str:
    return (now or datetime.utcnow()).strftime("%Y-%m")


def get_client_count(contractor: Contractor, db: Session) -> int:
    return db.query(Client).filter(Client.contractor_id == contractor.id).count()


def get_ai_usage_count(contractor: Contractor, db: Session, month: Optional[str] = None) -> int:
    return (
        db.query(AiUsageLog)
        .filter(
            AiUsageLog.contractor_id == contractor.id,
            AiUsageLog.usage_month == (month or current_usage_month()),
        )
        .count()
    )


def can_add_client(contractor: Contractor, db: Session) -> tuple:
    """
    Check if the contractor can add another client.
    Returns (can_add, error_message).
    """
    limit = get_plan(contractor.plan)["client_limit"]

    # Unlimited plan
    if limit is None:
        return (True, None)

    if get_client_count(contractor, db) < limit:
        return (True, None)

    return (
        False,
        f"You've reached your plan limit of {limit} clients. Please upgrade to add more clients.",
    )


def can_use_ai(contractor: Contractor, db: Session) -> tuple:
    """
    Check the monthly AI allowance.
    Returns (can_use, error_message).
    """
    limit = get_plan(contractor.plan)["ai_usage_limit"]

    if limit is None:
        return (True, None)

    if limit == 0:
        return (False, "AI features are not included in your plan. Please upgrade to use them.")

    if get_ai_usage_count(contractor, db) < limit:
        return (True, None)

    return (
        False,
        f"You've used all {limit} AI requests for this month. Please upgrade for unlimited usage.",
    )


def record_ai_usage(contractor: Contractor, db: Session, feature: str) -> None:
    db.add(AiUsageLog(contractor_id=contractor.id, feature=feature, usage_month=current_usage_month()))
    db.commit()


def get_usage_stats(contractor: Contractor, db: Session) -> dict:
    """
    Usage figures for the subscription status view.
    Unlimited values are reported as -1 for limits and "unlimited" for remaining counts.
    """
    plan = get_plan(contractor.plan)
    client_count = get_client_count(contractor, db)
    ai_count = get_ai_usage_count(contractor, db)

    client_limit = plan["client_limit"]
    ai_limit = plan["ai_usage_limit"]

    return {
        "currentClientCount": client_count,
        "maxClients": -1 if client_limit is None else client_limit,
        "clientsRemaining": "unlimited"
        if client_limit is None
        else max(0, client_limit - client_count),
        "currentAiUsage": ai_count,
        "maxAiUsage": -1 if ai_limit is None else ai_limit,
        "aiUsageRemaining": "unlimited" if ai_limit is None else max(0, ai_limit - ai_count),
    }
