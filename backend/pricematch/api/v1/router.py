"""
API v1 router aggregation.

WHAT: Combine all v1 endpoint routers
WHY: Single place to register all API routes
HOW: Include routers from endpoints with prefixes
"""

from fastapi import APIRouter

from .endpoints import status, negotiations, dashboard, fees, users, notifications

# Create main v1 router
api_router = APIRouter()

api_router.include_router(
    status.router,
    prefix="/api/v1",
    tags=["status"]
)

api_router.include_router(
    negotiations.router,
    prefix="/api/v1",
    tags=["negotiations"]
)

api_router.include_router(
    dashboard.router,
    prefix="/api/v1",
    tags=["dashboard"]
)

api_router.include_router(
    fees.router,
    prefix="/api/v1",
    tags=["fees"]
)

api_router.include_router(
    users.router,
    prefix="/api/v1",
    tags=["users"]
)

api_router.include_router(
    notifications.router,
    prefix="/api/v1",
    tags=["notifications"]
)
