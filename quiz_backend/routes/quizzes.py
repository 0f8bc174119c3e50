# FILE: quiz_backend/routes/quizzes.py
"""
Quiz authoring and reporting endpoints
"""
import asyncio
import logging
from typing import Optional
from fastapi import APIRouter, Depends

from quiz_backend.models.attempts import AttemptStatus
from quiz_backend.models.identity import Caller
from quiz_backend.models.quizzes import CreateQuizRequest, QuizView, UpdateSnapshotRequest
from quiz_backend.routes.deps import envelope, get_caller, services
from quiz_backend.services.container import Services

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("")
async def create_quiz(
    request: CreateQuizRequest,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Create a quiz"""
    logger.info(f"Create quiz: {request.title} (course={request.course_id})")
    quiz = await asyncio.to_thread(svc.quiz_admin.create_quiz, request, caller)
    return envelope(QuizView.from_quiz(quiz))


@router.get("/{quiz_id}")
async def get_quiz(
    quiz_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    view = await asyncio.to_thread(svc.quiz_admin.get_quiz, quiz_id, caller)
    return envelope(view)


@router.post("/{quiz_id}/publish")
async def publish_quiz(
    quiz_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    view = await asyncio.to_thread(svc.quiz_admin.publish, quiz_id, caller)
    return envelope(view)


@router.put("/{quiz_id}/snapshot")
async def update_snapshot(
    quiz_id: str,
    request: UpdateSnapshotRequest,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    """Correct snapshot questions (followed by regrades)"""
    view = await asyncio.to_thread(
        svc.quiz_admin.update_snapshot, quiz_id, request.questions, caller
    )
    return envelope(view)


@router.get("/{quiz_id}/statistics")
async def quiz_statistics(
    quiz_id: str,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    stats = await asyncio.to_thread(svc.quiz_admin.statistics, quiz_id, caller)
    return envelope(stats)


@router.get("/{quiz_id}/attempts")
async def list_attempts(
    quiz_id: str,
    status: Optional[AttemptStatus] = None,
    caller: Caller = Depends(get_caller),
    svc: Services = Depends(services)
):
    attempts = await asyncio.to_thread(
        svc.quiz_attempts.list_attempts, quiz_id, caller, status
    )
    return envelope(attempts)
