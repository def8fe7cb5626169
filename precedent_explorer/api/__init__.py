"""API routers for the precedent explorer backend."""

from .precedents import router as precedents_router

__all__ = ["precedents_router"]
