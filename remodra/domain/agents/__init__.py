"""Agents domain - field agents and estimate appointment scheduling"""

from .router import router

__all__ = ["router"]
