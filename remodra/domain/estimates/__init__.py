"""Estimates domain - quotes, line items and conversion to invoices"""

from .router import router

__all__ = ["router"]
