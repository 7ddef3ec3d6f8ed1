"""Billing domain schemas - plans, usage and subscription changes"""

from datetime import datetime
from typing import Optional, Union

from pydantic import field_validator

from ...plan_limits import VALID_PLANS
from ...shared.schemas import CamelModel

ADMIN_SUBSCRIPTION_STATUSES = ("active", "inactive", "cancelled")


class PlanInfo(CamelModel):
    """Plan card; a None limit means unlimited"""

    name: str
    display_name: str
    price: str
    client_limit: Optional[int] = None
    ai_usage_limit: Optional[int] = None
    has_time_clock_access: bool
    has_stripe_integration: bool


class BillingUsage(CamelModel):
    client_count: int
    ai_usage_this_month: int


class SubscriptionInfoResponse(CamelModel):
    current_plan: PlanInfo
    subscription_status: str
    plan_start_date: Optional[datetime] = None
    plan_end_date: Optional[datetime] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    usage: BillingUsage
    available_plans: list[PlanInfo]


class SubscriptionContractor(CamelModel):
    id: int
    email: str
    username: str
    company_name: str
    subscription_plan: str
    subscription_status: Optional[str] = None


class PlanFeatures(CamelModel):
    """Plan flags; -1 means unlimited"""

    plan_name: str
    price_monthly: int
    max_clients: int
    has_ai_cost_analysis: bool
    has_time_clock: bool
    has_stripe_integration: bool
    has_custom_portal: bool
    has_branded_portal: bool
    ai_usage_limit: int


class UsageStats(CamelModel):
    current_client_count: int
    max_clients: int
    clients_remaining: Union[int, str]
    current_ai_usage: int
    max_ai_usage: int
    ai_usage_remaining: Union[int, str]


class SubscriptionStatusResponse(CamelModel):
    contractor: SubscriptionContractor
    plan: PlanFeatures
    usage: UsageStats


class FeatureCheckResponse(CamelModel):
    has_access: bool
    current_plan: str


class UpgradeRequest(CamelModel):
    plan_name: Optional[str] = None


class PlanChangeContractor(CamelModel):
    id: int
    plan: Optional[str] = None
    subscription_status: Optional[str] = None
    plan_end_date: Optional[datetime] = None


class PlanChangeResponse(CamelModel):
    message: str
    contractor: PlanChangeContractor


class AdminSubscriptionUpdate(CamelModel):
    plan: str
    status: str

    @field_validator("plan")
    @classmethod
    def validate_plan(cls, v):
        if v not in VALID_PLANS:
            raise ValueError("Invalid plan. Must be basic, pro, or business")
        return v

    @field_validator("status")
    @classmethod
    def validate_status(cls, v):
        if v not in ADMIN_SUBSCRIPTION_STATUSES:
            raise ValueError("Invalid status. Must be active, inactive, or cancelled")
        return v


class AdminSubscriptionResponse(CamelModel):
    success: bool
    message: str
    contractor: PlanChangeContractor
