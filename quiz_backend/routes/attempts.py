# FILE: quiz_backend/routes/attempts.py
"""
Quiz attempt endpoints
"""
import asyncio
import logging
from fastapi import APIRouter, Depends

from quiz_backend.models.attempts import AutoSaveRequest, EnrollRequest
from quiz_backend.models.identity import Caller
from quiz_backend.routes.deps import envelope, get_caller, services
from quiz_backend.services.container import Services

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/enroll")
async def enroll(
    request: EnrollRequest,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Open (or re-enter) the caller's attempt at a quiz"""
    logger.info(f"Enroll: quiz={request.quiz_id} student={caller.user_id}")
    attempt = await asyncio.to_thread(
        svc.quiz_attempts.enroll, request.quiz_id, caller, request.password
    )
    return envelope(attempt)


@router.put("/{attempt_id}/auto-save")
async def auto_save(
    attempt_id: str,
    request: AutoSaveRequest,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Save one answer (idempotent, last write wins)"""
    result = await asyncio.to_thread(
        svc.quiz_attempts.auto_save, attempt_id, caller, request.question_id, request.answer
    )
    return envelope(result)


@router.put("/{attempt_id}/submit")
async def submit(
    attempt_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Submit and score the attempt"""
    logger.info(f"Submit attempt: {attempt_id}")
    attempt = await asyncio.to_thread(svc.quiz_attempts.submit, attempt_id, caller)
    return envelope(attempt)


@router.put("/{attempt_id}/ban")
async def ban(
    attempt_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Disqualify an in-progress attempt"""
    logger.info(f"Ban attempt: {attempt_id} by {caller.user_id}")
    attempt = await asyncio.to_thread(svc.quiz_attempts.ban, attempt_id, caller)
    return envelope(attempt)


@router.put("/{attempt_id}/re-grade")
async def regrade(
    attempt_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Rescore a submitted attempt against the current snapshot"""
    logger.info(f"Regrade attempt: {attempt_id} by {caller.user_id}")
    attempt = await asyncio.to_thread(svc.quiz_attempts.regrade, attempt_id, caller)
    return envelope(attempt)


@router.get("/{attempt_id}")
async def get_attempt(
    attempt_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Current attempt state (finalized first if the deadline passed)"""
    view = await asyncio.to_thread(svc.quiz_attempts.get_attempt, attempt_id, caller)
    return envelope(view)
