# FILE: quiz_backend/services/access_gate.py
"""
Access gate

Decides whether a student may open an attempt at a quiz and creates the
attempt on first entry. Re-entry returns the existing attempt without
re-checking the password.
"""
import logging
from datetime import timedelta
from typing import Optional

from quiz_backend.errors import Banned, NotFound, Unauthorized, WindowClosed
from quiz_backend.models.attempts import AttemptStatus, QuizAttempt
from quiz_backend.models.identity import Caller
from quiz_backend.models.quizzes import Quiz
from quiz_backend.services.attempt_store import AttemptStore
from quiz_backend.services.clock import Clock, as_utc
from quiz_backend.services.correlation import generate_id
from quiz_backend.services.passwords import verify_password
from quiz_backend.services.quiz_store import QuizStore
from quiz_backend.services.snapshot_builder import SnapshotBuilder
from quiz_backend.services.telemetry import record_event

logger = logging.getLogger(__name__)


class AccessGate:
    """Password- and window-checked enrollment"""

    def __init__(
        self,
        attempts: AttemptStore,
        quizzes: QuizStore,
        snapshots: SnapshotBuilder,
        clock: Clock,
        enroll_cutoff_minutes: Optional[int] = None
    ):
        self.attempts = attempts
        self.quizzes = quizzes
        self.snapshots = snapshots
        self.clock = clock
        self.enroll_cutoff_minutes = enroll_cutoff_minutes

    def _check_window(self, quiz: Quiz):
        now = self.clock.now()
        if now < as_utc(quiz.start_time):
            raise WindowClosed("This quiz has not started yet")
        if now >= as_utc(quiz.end_time):
            raise WindowClosed("This quiz has ended")

    def _check_cutoff(self, quiz: Quiz):
        if self.enroll_cutoff_minutes is None:
            return
        cutoff = as_utc(quiz.start_time) + timedelta(minutes=self.enroll_cutoff_minutes)
        if self.clock.now() > cutoff:
            raise WindowClosed(
                f"Enrollment is only possible within {self.enroll_cutoff_minutes} minutes after the quiz starts"
            )

    def enroll(self, quiz_id: str, caller: Caller, password: str) -> QuizAttempt:
        """Return the caller's attempt at the quiz, creating it if needed"""
        quiz = self.quizzes.get(quiz_id)
        if not quiz.published:
            raise NotFound(f"Quiz {quiz_id} not found")

        existing = self.attempts.find(quiz_id, caller.user_id)
        if existing is not None and existing.status is AttemptStatus.ABANDONED:
            raise Banned("You are banned from taking this quiz")

        self._check_window(quiz)

        if existing is not None:
            logger.debug(f"Re-entry to attempt {existing.id}")
            return existing

        if not verify_password(password, quiz.password_hash):
            logger.warning(f"Enroll rejected: wrong password (quiz={quiz_id}, student={caller.user_id})")
            raise Unauthorized("Invalid password")

        self._check_cutoff(quiz)
        self.snapshots.build(quiz_id)

        def _new_attempt() -> QuizAttempt:
            return QuizAttempt(
                id=generate_id(),
                quiz_id=quiz_id,
                student_id=caller.user_id,
                status=AttemptStatus.IN_PROGRESS,
                started_at=self.clock.now(),
                ip_address=caller.ip_address,
                user_agent=caller.user_agent,
            )

        attempt, created = self.attempts.get_or_create(quiz_id, caller.user_id, _new_attempt)
        if not created and attempt.status is AttemptStatus.ABANDONED:
            raise Banned("You are banned from taking this quiz")

        if created:
            record_event("attempt_enrolled", attempt_id=attempt.id, quiz_id=quiz_id, student_id=caller.user_id)
        return attempt
