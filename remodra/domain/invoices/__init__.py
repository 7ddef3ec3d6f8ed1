"""Invoices domain - billing, line items and payments"""

from .router import router

__all__ = ["router"]
