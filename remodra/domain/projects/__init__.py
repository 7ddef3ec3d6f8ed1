"""Projects domain - project board, status changes and cancellation"""

from .router import router

__all__ = ["router"]
