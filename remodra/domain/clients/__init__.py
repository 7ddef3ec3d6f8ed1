"""Clients domain - client records, import and export"""

from .router import data_router, router

__all__ = ["router", "data_router"]
