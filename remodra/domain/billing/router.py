"""Billing router - subscription status, plan upgrades and admin overrides"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_contractor, require_super_admin
from ...database import get_db
from ...models import Contractor
from .schemas import (
    AdminSubscriptionResponse,
    AdminSubscriptionUpdate,
    FeatureCheckResponse,
    PlanChangeResponse,
    SubscriptionInfoResponse,
    SubscriptionStatusResponse,
    UpgradeRequest,
)
from .service import BillingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Billing"])


def get_billing_service(db: Session = Depends(get_db)) -> BillingService:
    """Dependency injection for BillingService"""
    return BillingService(db)


# ============================================================================
# SUBSCRIPTION STATUS
# ============================================================================


@router.get("/api/subscription/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    contractor: Contractor = Depends(get_current_contractor),
    service: BillingService = Depends(get_billing_service),
):
    return service.get_subscription_status(contractor)


@router.get("/api/subscription/check/{feature}", response_model=FeatureCheckResponse)
async def check_feature_access(
    feature: str,
    contractor: Contractor = Depends(get_current_contractor),
    service: BillingService = Depends(get_billing_service),
):
    """Unknown feature names never grant access"""
    return service.check_feature(feature, contractor)


# ============================================================================
# BILLING
# ============================================================================


@router.get("/api/billing/subscription-info", response_model=SubscriptionInfoResponse)
async def get_subscription_info(
    contractor: Contractor = Depends(get_current_contractor),
    service: BillingService = Depends(get_billing_service),
):
    return service.get_subscription_info(contractor)


@router.post("/api/billing/upgrade", response_model=PlanChangeResponse)
async def upgrade_plan(
    data: UpgradeRequest,
    contractor: Contractor = Depends(get_current_contractor),
    service: BillingService = Depends(get_billing_service),
):
    contractor = service.upgrade_plan(data.plan_name, contractor)
    return {"message": "Plan updated successfully", "contractor": contractor}


@router.post("/api/billing/cancel", response_model=PlanChangeResponse)
async def cancel_subscription(
    contractor: Contractor = Depends(get_current_contractor),
    service: BillingService = Depends(get_billing_service),
):
    contractor = service.cancel_subscription(contractor)
    return {"message": "Subscription cancelled successfully", "contractor": contractor}


# ============================================================================
# SUPER ADMIN
# ============================================================================


@router.put("/api/super-admin/contractors/{contractor_id}/subscription", response_model=AdminSubscriptionResponse)
async def admin_update_subscription(
    contractor_id: int,
    data: AdminSubscriptionUpdate,
    admin: Contractor = Depends(require_super_admin),
    service: BillingService = Depends(get_billing_service),
):
    contractor = service.admin_update_subscription(contractor_id, data.plan, data.status)
    logger.info(f"🛠️ Super admin {admin.id} updated subscription of contractor {contractor_id}")
    return {"success": True, "message": "Subscription updated successfully", "contractor": contractor}


__all__ = [
    "router",
    "get_subscription_status",
    "check_feature_access",
    "get_subscription_info",
    "upgrade_plan",
    "cancel_subscription",
    "admin_update_subscription",
]
