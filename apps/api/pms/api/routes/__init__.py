"""
API routes aggregation.
"""

from fastapi import APIRouter

from .permissions import router as permissions_router

router = APIRouter()

router.include_router(permissions_router, prefix="/permissions", tags=["permissions"])
