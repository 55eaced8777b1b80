"""API routes package."""
from fastapi import APIRouter
from . import analysis, audit, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(analysis.router, prefix="/analyze", tags=["analysis"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
