"""API routes."""

from .resources import router as resources_router
from .volumes import router as volumes_router

__all__ = [
    "resources_router",
    "volumes_router",
]
