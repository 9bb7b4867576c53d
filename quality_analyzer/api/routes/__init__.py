# Data Quality Analyzer - API Routes Package
"""API route exports."""

from fastapi import APIRouter

from quality_analyzer.api.routes import quality

# Create main router
api_router = APIRouter()

api_router.include_router(quality.router, prefix="/quality", tags=["Data Quality"])

__all__ = [
    "api_router",
    "quality",
]
