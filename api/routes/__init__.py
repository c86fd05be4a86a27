"""API route modules."""

from .jobs import router as jobs_router
from .notifications import counts_router
from .notifications import router as notifications_router

__all__ = [
    "counts_router",
    "jobs_router",
    "notifications_router",
]
