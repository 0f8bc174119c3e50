# FILE: quiz_backend/services/deadline.py
"""
Deadline enforcement

An in-progress attempt expires at its quiz's endTime. Expiry is checked
opportunistically before every attempt operation and, optionally, by a
background sweep so abandoned sessions do not stay open.
"""
import asyncio
import logging
from typing import Optional, Tuple

from quiz_backend.errors import QuizError, StorageError
from quiz_backend.models.attempts import AttemptStatus, QuizAttempt
from quiz_backend.models.quizzes import Quiz
from quiz_backend.services.attempt_store import AttemptStore
from quiz_backend.services.clock import Clock, as_utc
from quiz_backend.services.grading import Grader
from quiz_backend.services.quiz_store import QuizStore
from quiz_backend.services.telemetry import record_event

logger = logging.getLogger(__name__)


class DeadlineEnforcer:
    """Forces submission of attempts whose quiz window has closed"""

    def __init__(self, attempts: AttemptStore, quizzes: QuizStore, grader: Grader, clock: Clock):
        self.attempts = attempts
        self.quizzes = quizzes
        self.grader = grader
        self.clock = clock

    def is_expired(self, quiz: Quiz) -> bool:
        return self.clock.now() >= as_utc(quiz.end_time)

    def enforce(self, attempt_id: str) -> QuizAttempt:
        """Finalize the attempt if its deadline has passed; return its current state"""
        attempt, _ = self._enforce(attempt_id)
        return attempt

    def _enforce(self, attempt_id: str) -> Tuple[QuizAttempt, bool]:
        attempt = self.attempts.get(attempt_id)
        if attempt.status is not AttemptStatus.IN_PROGRESS:
            return attempt, False

        quiz = self.quizzes.get(attempt.quiz_id)
        if not self.is_expired(quiz):
            return attempt, False

        attempt, won = self.grader.finalize(attempt_id, forced=True)
        if won:
            logger.info(f"Deadline passed, attempt {attempt_id} force-submitted")
        return attempt, won

    def sweep(self) -> int:
        """Finalize every expired in-progress attempt; returns how many were finalized"""
        finalized = 0
        for attempt in self.attempts.list(status=AttemptStatus.IN_PROGRESS):
            try:
                _, won = self._enforce(attempt.id)
            except QuizError as e:
                logger.warning(f"Sweep skipped attempt {attempt.id}: {e.message}")
                continue
            except StorageError as e:
                logger.error(f"Sweep could not finalize attempt {attempt.id}: {e}", exc_info=True)
                continue

            if won:
                finalized += 1

        if finalized:
            logger.info(f"Deadline sweep finalized {finalized} attempts")
        record_event("deadline_sweep", finalized=finalized)
        return finalized


class DeadlineSweeper:
    """Runs DeadlineEnforcer.sweep periodically on the event loop"""

    def __init__(self, enforcer: DeadlineEnforcer, interval_seconds: float):
        self.enforcer = enforcer
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="deadline-sweeper")
        logger.info(f"Deadline sweeper started (interval={self.interval_seconds}s)")

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        logger.info("Deadline sweeper stopped")

    async def _run(self):
        while True:
            try:
                await asyncio.to_thread(self.enforcer.sweep)
            except Exception as e:
                # A failed iteration is retried on the next tick
                logger.error(f"Deadline sweep failed: {e}", exc_info=True)
            await asyncio.sleep(self.interval_seconds)
