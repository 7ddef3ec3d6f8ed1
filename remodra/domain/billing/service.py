"""Billing service - subscription status, feature checks and plan changes"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Contractor
from ...plan_limits import (
    PLANS,
    VALID_PLANS,
    get_ai_usage_count,
    get_client_count,
    get_plan,
    get_usage_stats,
    has_feature,
    normalize_plan,
)

logger = logging.getLogger(__name__)

BILLING_PERIOD_DAYS = 30


def plan_card(name: str) -> dict:
    plan = PLANS[name]
    return {
        "name": name,
        "display_name": plan["display_name"],
        "price": str(plan["price"]),
        "client_limit": plan["client_limit"],
        "ai_usage_limit": plan["ai_usage_limit"],
        "has_time_clock_access": plan["has_time_clock"],
        "has_stripe_integration": plan["has_stripe_integration"],
    }


def _unlimited_as_minus_one(value: Optional[int]) -> int:
    return -1 if value is None else value


class BillingService:
    """Service layer for plan and subscription management"""

    def __init__(self, db: Session):
        self.db = db

    def get_subscription_status(self, contractor: Contractor) -> dict:
        plan_name = normalize_plan(contractor.plan)
        plan = get_plan(plan_name)
        return {
            "contractor": {
                "id": contractor.id,
                "email": contractor.email,
                "username": contractor.username,
                "company_name": contractor.company_name,
                "subscription_plan": plan_name,
                "subscription_status": contractor.subscription_status,
            },
            "plan": {
                "plan_name": plan_name,
                "price_monthly": plan["price"],
                "max_clients": _unlimited_as_minus_one(plan["client_limit"]),
                "has_ai_cost_analysis": plan["has_ai_cost_analysis"],
                "has_time_clock": plan["has_time_clock"],
                "has_stripe_integration": plan["has_stripe_integration"],
                "has_custom_portal": plan["has_custom_portal"],
                "has_branded_portal": plan["has_branded_portal"],
                "ai_usage_limit": _unlimited_as_minus_one(plan["ai_usage_limit"]),
            },
            "usage": get_usage_stats(contractor, self.db),
        }

    def check_feature(self, feature: str, contractor: Contractor) -> dict:
        return {
            "has_access": has_feature(contractor.plan, feature),
            "current_plan": normalize_plan(contractor.plan),
        }

    def get_subscription_info(self, contractor: Contractor) -> dict:
        return {
            "current_plan": plan_card(normalize_plan(contractor.plan)),
            "subscription_status": contractor.subscription_status or "trial",
            "plan_start_date": contractor.plan_start_date,
            "plan_end_date": contractor.plan_end_date,
            "stripe_customer_id": contractor.stripe_customer_id,
            "stripe_subscription_id": contractor.stripe_subscription_id,
            "usage": {
                "client_count": get_client_count(contractor, self.db),
                "ai_usage_this_month": get_ai_usage_count(contractor, self.db),
            },
            "available_plans": [plan_card(name) for name in VALID_PLANS],
        }

    def upgrade_plan(self, plan_name: Optional[str], contractor: Contractor) -> Contractor:
        if not plan_name or plan_name not in VALID_PLANS:
            raise HTTPException(status_code=400, detail="Invalid plan name")

        now = datetime.utcnow()
        contractor.plan = plan_name
        contractor.subscription_status = "active"
        contractor.plan_start_date = now
        contractor.plan_end_date = now + timedelta(days=BILLING_PERIOD_DAYS)
        self.db.commit()
        self.db.refresh(contractor)
        logger.info(f"💳 Contractor {contractor.id} moved to plan {plan_name}")
        return contractor

    def cancel_subscription(self, contractor: Contractor) -> Contractor:
        """Cancelled plans stay usable until plan_end_date"""
        contractor.subscription_status = "cancelled"
        self.db.commit()
        self.db.refresh(contractor)
        logger.info(f"🚫 Contractor {contractor.id} cancelled their subscription")
        return contractor

    def admin_update_subscription(self, contractor_id: int, plan: str, status: str) -> Contractor:
        contractor = self.db.query(Contractor).filter(Contractor.id == contractor_id).first()
        if not contractor:
            raise HTTPException(status_code=404, detail="Contractor not found")

        contractor.plan = plan
        contractor.subscription_status = status
        self.db.commit()
        self.db.refresh(contractor)
        logger.info(f"🛠️ Subscription for contractor {contractor_id} set to {plan}/{status}")
        return contractor
