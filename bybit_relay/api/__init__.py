"""
PURPOSE: API router initialization and exports for the relay.

This module aggregates the webhook and system routers into a single
api_router that is included in the main FastAPI application.
"""

from fastapi import APIRouter

from bybit_relay.api.routes_system import router as system_router
from bybit_relay.api.routes_webhook import router as webhook_router

# Create the main API router
api_router = APIRouter(prefix="/api", tags=["api"])

# Include all sub-routers
api_router.include_router(webhook_router, tags=["webhook"])
api_router.include_router(system_router, tags=["system"])

__all__ = ["api_router"]
