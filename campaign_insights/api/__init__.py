"""
Campaign Insights API package initialization.

This package contains FastAPI router modules for the dashboard:
- campaigns: Campaign list and per-campaign date-window report
- auth: Login for the self-issued token scheme
- errors: Domain exception to HTTP status mapping
"""

from fastapi import APIRouter

from campaign_insights.api.campaigns import router as campaigns_router
from campaign_insights.api.auth import router as auth_router
from campaign_insights.api.errors import register_exception_handlers

# Create main API router; sub-routers carry their own /api/... prefixes
api_router = APIRouter()
api_router.include_router(campaigns_router, tags=["campaigns"])
api_router.include_router(auth_router, tags=["auth"])

__all__ = [
    "api_router",
    "campaigns_router",
    "auth_router",
    "register_exception_handlers",
]
