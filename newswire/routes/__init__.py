"""
API route modules.
"""

from .analytics import router as analytics_router
from .feeds import router as feeds_router
from .misc import router as misc_router

__all__ = [
    "analytics_router",
    "feeds_router",
    "misc_router",
]
