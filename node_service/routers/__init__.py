"""API routers package."""

from .node import router as node_router

__all__ = ["node_router"]
