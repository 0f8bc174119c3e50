# FILE: quiz_backend/routes/health.py
"""
Health check endpoint
"""
import logging
from fastapi import APIRouter, Request

from quiz_backend import __version__
from quiz_backend.config import get_settings

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def health_check(request: Request):
    """Health check endpoint"""
    sweeper = getattr(request.app.state, "sweeper", None)

    return {
        "status": "healthy",
        "version": __version__,
        "environment": get_settings().environment,
        "deadline_sweeper": bool(sweeper and sweeper.running),
    }
