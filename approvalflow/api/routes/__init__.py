"""API Routes module"""
from fastapi import APIRouter

from .workflows import router as workflows_router

# Main API router
api_router = APIRouter()

api_router.include_router(workflows_router, prefix="/workflows", tags=["Workflows"])

__all__ = ["api_router"]
