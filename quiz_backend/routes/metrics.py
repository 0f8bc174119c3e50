# FILE: quiz_backend/routes/metrics.py
"""
Metrics endpoint over the in-memory telemetry tail
"""
import logging
from fastapi import APIRouter

from quiz_backend.services.telemetry import get_telemetry_summary

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("")
async def metrics_summary():
    """Telemetry counters and the most recent events"""
    return get_telemetry_summary()
