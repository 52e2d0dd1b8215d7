"""
API v1 Router

Aggregates all v1 endpoint routers.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import analytics

router = APIRouter()

# Include analytics routes
router.include_router(analytics.router)
