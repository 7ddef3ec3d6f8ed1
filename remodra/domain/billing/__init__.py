"""Billing domain - subscription plans, usage and plan changes"""

from .router import router

__all__ = ["router"]
