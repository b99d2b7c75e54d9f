"""API v1."""

from staticimp.api.v1.router import api_router

__all__ = ["api_router"]
