"""Health check endpoints."""
import time

from fastapi import APIRouter, Request

from ... import __version__

router = APIRouter()


@router.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint."""
    started_at = getattr(request.app.state, "started_at", time.monotonic())
    return {
        "status": "healthy",
        "version": __version__,
        "uptimeSeconds": int(time.monotonic() - started_at),
    }
