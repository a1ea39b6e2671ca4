"""Main API router: combines all endpoint routers."""

from fastapi import APIRouter

from progress_guard.api.health import router as health_router
from progress_guard.api.progress import router as progress_router

api_router = APIRouter()

# Health check
api_router.include_router(health_router, tags=["Health"])

# Progress validation and audit
api_router.include_router(progress_router, tags=["Progress"])
