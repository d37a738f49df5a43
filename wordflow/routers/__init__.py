"""
API routers - All API endpoints
"""
from wordflow.routers import vocabulary
from wordflow.routers import progress
from wordflow.routers import sync

__all__ = [
    "vocabulary",
    "progress",
    "sync"
]
