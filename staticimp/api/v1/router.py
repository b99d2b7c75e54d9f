"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. Routes get
their services from staticimp.api.v1.dependencies.
"""

from fastapi import APIRouter

from staticimp.api.v1.endpoints import entries, health

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(entries.router, prefix="/entry", tags=["entries"])
